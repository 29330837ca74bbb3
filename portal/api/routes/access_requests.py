from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status

from portal.adapters.data_access.factory import get_access_request_data_access
from portal.core.auth import verify_api_key
from portal.schemas.access_request import (
    AccessRequest,
    AccessRequestAction,
    AccessRequestCreate,
    AccessRequestReview,
    AccessRequestStatus,
)

router = APIRouter(prefix="/access-requests", tags=["Access Requests"])

AccessRequestStore = Annotated[Any, Depends(get_access_request_data_access)]


@router.post("", response_model=AccessRequest, status_code=status.HTTP_201_CREATED)
async def submit_access_request(
    body: AccessRequestCreate, store: AccessRequestStore
) -> AccessRequest:
    """Public form submission; the request enters the queue as ``pending``."""
    return await store.create(body.model_dump())


@router.get(
    "",
    response_model=list[AccessRequest],
    dependencies=[Depends(verify_api_key)],
)
async def list_access_requests(
    store: AccessRequestStore,
    status_filter: Annotated[AccessRequestStatus | None, Query(alias="status")] = None,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[AccessRequest]:
    return await store.list_requests(status=status_filter, limit=limit, offset=offset)


@router.get(
    "/{request_id}",
    response_model=AccessRequest,
    dependencies=[Depends(verify_api_key)],
)
async def get_access_request(request_id: str, store: AccessRequestStore) -> AccessRequest:
    return await store.get_by_id(request_id)


@router.post(
    "/{request_id}/{action}",
    response_model=AccessRequest,
    dependencies=[Depends(verify_api_key)],
)
async def review_access_request(
    request_id: str,
    action: AccessRequestAction,
    store: AccessRequestStore,
    review: Annotated[AccessRequestReview | None, Body()] = None,
) -> AccessRequest:
    """Approve or reject a pending request."""
    review = review or AccessRequestReview()
    if action is AccessRequestAction.APPROVE:
        return await store.approve(request_id, review.notes, review.reviewed_by)
    return await store.reject(request_id, review.notes, review.reviewed_by)
