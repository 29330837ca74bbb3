"""Batch helpers over the data-access contract.

These functions fan a list of ids or payloads out to an entity store. When
the store implements the matching optional batch capability
(``get_all_by_ids``, ``batch_create``, ``batch_update``) the helper hands
the whole batch to it in one call; otherwise it issues one single-item call
per element, all in flight at once via ``asyncio.gather``.

Results are keyed by identifier (except for creation, which has no ids up
front), so callers never depend on the order in which calls complete.

Failure handling is an explicit ``FailurePolicy`` per call:
- ``BEST_EFFORT``: a failing element is logged and left out of the result
- ``FAIL_FAST``: a failing element is logged and its exception propagates

Defaults: reads and updates are best-effort, creation is fail-fast. A key
missing from a best-effort result means "this one failed or does not exist",
never "this one was skipped".
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Iterable, Mapping, Sequence, TypeVar

from portal.adapters.data_access.base import BatchUpdate, item_id, supports

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FAILED = object()


class FailurePolicy(str, Enum):
    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


def _entity_name(store: object) -> str:
    return getattr(store, "entity_name", type(store).__name__)


async def _guarded(
    operation: Awaitable[T],
    *,
    event: str,
    policy: FailurePolicy,
    log_extra: Mapping[str, Any],
) -> T | object:
    """Await ``operation`` and apply ``policy`` if it raises."""
    try:
        return await operation
    except Exception as exc:
        logger.warning(
            event,
            extra={
                **log_extra,
                "error_type": type(exc).__name__,
                "error_msg": str(exc),
                "policy": policy.value,
            },
        )
        if policy is FailurePolicy.FAIL_FAST:
            raise
        return _FAILED


def dedupe(ids: Iterable[str]) -> list[str]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


async def batch_get_by_ids(
    store: Any,
    ids: Sequence[str],
    *,
    policy: FailurePolicy = FailurePolicy.BEST_EFFORT,
) -> dict[str, Any]:
    """Fetch many records by id.

    Args:
        store: Any object implementing the data-access contract.
        ids: Identifiers to fetch; duplicates are collapsed before any call.
        policy: What to do when a single ``get_by_id`` fails.

    Returns:
        Mapping of id to record for every id that resolved. Empty input
        returns ``{}`` without touching the store.
    """

    if not ids:
        return {}

    unique_ids = dedupe(ids)

    if supports(store, "get_all_by_ids"):
        items = await store.get_all_by_ids(unique_ids)
        return {item_id(item): item for item in items}

    entity = _entity_name(store)
    results = await asyncio.gather(
        *(
            _guarded(
                store.get_by_id(id),
                event="batch.get_failed",
                policy=policy,
                log_extra={"entity": entity, "entity_id": id},
            )
            for id in unique_ids
        )
    )

    found = {id: item for id, item in zip(unique_ids, results) if item is not _FAILED}
    if len(found) < len(unique_ids):
        logger.info(
            "batch.get_partial",
            extra={"entity": entity, "requested": len(unique_ids), "resolved": len(found)},
        )
    return found


async def batch_create(
    store: Any,
    items: Sequence[Mapping[str, Any]],
    *,
    policy: FailurePolicy = FailurePolicy.FAIL_FAST,
) -> list[Any]:
    """Create many records.

    Args:
        store: Any object implementing the data-access contract.
        items: Payloads to create.
        policy: ``FAIL_FAST`` (default) re-raises the first failing create.

    Returns:
        Created records, in input order. With ``BEST_EFFORT`` the failed
        payloads are simply absent. Empty input returns ``[]`` without
        touching the store.

    Raises:
        Exception: Whatever the failing ``create`` raised, under ``FAIL_FAST``.
    """

    if not items:
        return []

    if supports(store, "batch_create"):
        return list(await store.batch_create(list(items)))

    entity = _entity_name(store)
    results = await asyncio.gather(
        *(
            _guarded(
                store.create(item),
                event="batch.create_failed",
                policy=policy,
                log_extra={"entity": entity, "index": index},
            )
            for index, item in enumerate(items)
        )
    )
    return [item for item in results if item is not _FAILED]


async def batch_update(
    store: Any,
    updates: Sequence[BatchUpdate],
    *,
    policy: FailurePolicy = FailurePolicy.BEST_EFFORT,
) -> dict[str, Any]:
    """Apply many ``{id, data}`` updates.

    Args:
        store: Any object implementing the data-access contract.
        updates: Pairs of target id and partial data.
        policy: What to do when a single ``update`` fails.

    Returns:
        Mapping of id to updated record for every update that succeeded.
        On the native path the keys are the returned records' own ids.
        Empty input returns ``{}`` without touching the store.
    """

    if not updates:
        return {}

    if supports(store, "batch_update"):
        updated = await store.batch_update(list(updates))
        return {item_id(item): item for item in updated}

    entity = _entity_name(store)
    results = await asyncio.gather(
        *(
            _guarded(
                store.update(update["id"], update["data"]),
                event="batch.update_failed",
                policy=policy,
                log_extra={"entity": entity, "entity_id": update["id"]},
            )
            for update in updates
        )
    )
    return {
        update["id"]: item
        for update, item in zip(updates, results)
        if item is not _FAILED
    }
