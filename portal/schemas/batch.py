"""Request/response bodies of the batch endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class BatchGetRequest(BaseModel):
    ids: list[str] = Field(..., description="Identifiers to fetch; duplicates are ignored.")


class BatchCreateRequest(BaseModel):
    items: list[dict[str, Any]] = Field(..., description="Payloads to create.")


class BatchUpdateItem(BaseModel):
    id: str = Field(..., min_length=1)
    data: dict[str, Any]


class BatchUpdateRequest(BaseModel):
    updates: list[BatchUpdateItem]


class BatchResultResponse(BaseModel):
    """Outcome of a best-effort batch.

    ``missing`` lists the requested ids that did not resolve: they either do
    not exist or their individual operation failed.
    """

    items: dict[str, Any]
    missing: list[str] = Field(default_factory=list)
