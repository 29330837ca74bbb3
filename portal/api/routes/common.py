"""Helpers shared by the entity routers."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from portal.adapters.data_access.in_memory import field_errors_from
from portal.core.errors import ValidationError
from portal.schemas.batch import BatchResultResponse, BatchUpdateRequest
from portal.services.batch import dedupe

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_payloads(
    schema: type[SchemaT],
    payloads: Iterable[Mapping[str, Any]],
    *,
    partial: bool = False,
) -> list[dict[str, Any]]:
    """Validate raw batch payloads against ``schema``.

    Args:
        schema: Pydantic model each payload must satisfy.
        payloads: Raw dicts from the request body.
        partial: Keep only the fields the caller actually sent (updates).

    Returns:
        The validated payloads as plain dicts.

    Raises:
        ValidationError: With field errors prefixed by the item index.
    """
    validated: list[dict[str, Any]] = []
    field_errors: dict[str, list[str]] = {}

    for index, payload in enumerate(payloads):
        try:
            model = schema.model_validate(payload)
        except PydanticValidationError as exc:
            for field, messages in field_errors_from(exc).items():
                field_errors[f"{index}.{field}"] = messages
            continue
        validated.append(model.model_dump(exclude_unset=partial))

    if field_errors:
        raise ValidationError("Invalid batch payload", field_errors=field_errors)
    return validated


def validated_updates(schema: type[BaseModel], body: BatchUpdateRequest) -> list[dict[str, Any]]:
    """Turn a batch update body into ``{id, data}`` pairs with validated data."""
    data = validate_payloads(schema, (update.data for update in body.updates), partial=True)
    return [{"id": update.id, "data": fields} for update, fields in zip(body.updates, data)]


def batch_response(requested_ids: Iterable[str], found: Mapping[str, Any]) -> BatchResultResponse:
    return BatchResultResponse(
        items=dict(found),
        missing=[id for id in dedupe(requested_ids) if id not in found],
    )
