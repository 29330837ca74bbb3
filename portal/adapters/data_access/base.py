"""Data-access contract shared by every entity store.

Routes and the batch helpers depend on this interface only, so a store can be
backed by the in-memory dict, the remote data API, or anything else that
speaks the same verbs.

Stores may additionally expose the optional batch capabilities below. They
are detected by attribute presence (see ``supports``), not declared on the
ABC, so a store that only implements the single-item verbs still works with
``portal.services.batch``.

- ``get_all_by_ids(ids) -> list[T]``
- ``batch_create(items) -> list[T]``
- ``batch_update(updates) -> list[T]``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, TypedDict, TypeVar

T = TypeVar("T")

OPTIONAL_CAPABILITIES = ("get_all_by_ids", "batch_create", "batch_update")


class BatchUpdate(TypedDict):
    """One ``{id, data}`` pair of a batch update."""

    id: str
    data: dict[str, Any]


class AbstractDataAccess(ABC, Generic[T]):
    """Uniform async CRUD interface for an entity store."""

    entity_name: str = "Entity"

    @abstractmethod
    async def get_by_id(self, id: str) -> T:
        """Return the record with ``id``.

        Raises:
            NotFoundError: If no record matches. Implementations never
                return None for a missing id.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_all(self) -> list[T]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, data: Mapping[str, Any]) -> T:
        raise NotImplementedError

    @abstractmethod
    async def update(self, id: str, data: Mapping[str, Any]) -> T:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, id: str) -> None:
        raise NotImplementedError


def supports(store: object, capability: str) -> bool:
    """Whether ``store`` exposes the optional ``capability`` as a callable."""
    return callable(getattr(store, capability, None))


def item_id(item: Any) -> str:
    """Read the ``id`` of a record that is either a mapping or an object."""
    if isinstance(item, Mapping):
        return str(item["id"])
    return str(getattr(item, "id"))
