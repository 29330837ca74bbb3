from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from portal.adapters.data_access.base import AbstractDataAccess
from portal.adapters.data_access.factory import get_post_data_access
from portal.api.routes.common import batch_response, validate_payloads, validated_updates
from portal.core.auth import verify_api_key
from portal.schemas.batch import (
    BatchCreateRequest,
    BatchGetRequest,
    BatchResultResponse,
    BatchUpdateRequest,
)
from portal.schemas.post import Post, PostCreate, PostUpdate
from portal.services.batch import batch_create, batch_get_by_ids, batch_update

router = APIRouter(prefix="/posts", tags=["Posts"])

PostStore = Annotated[AbstractDataAccess[Post], Depends(get_post_data_access)]


@router.get("", response_model=list[Post])
async def list_posts(store: PostStore, published: bool = False) -> list[Post]:
    """List posts; ``?published=true`` returns only published ones, newest first."""
    if published:
        return await store.get_published()
    return await store.get_all()


@router.get("/slug/{slug}", response_model=Post)
async def get_post_by_slug(slug: str, store: PostStore) -> Post:
    return await store.get_by_slug(slug)


@router.get("/{post_id}", response_model=Post)
async def get_post(post_id: str, store: PostStore) -> Post:
    return await store.get_by_id(post_id)


@router.post(
    "",
    response_model=Post,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_api_key)],
)
async def create_post(body: PostCreate, store: PostStore) -> Post:
    return await store.create(body.model_dump())


@router.put("/{post_id}", response_model=Post, dependencies=[Depends(verify_api_key)])
async def update_post(post_id: str, body: PostUpdate, store: PostStore) -> Post:
    return await store.update(post_id, body.model_dump(exclude_unset=True))


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(verify_api_key)],
)
async def delete_post(post_id: str, store: PostStore) -> Response:
    await store.delete(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/batch/get", response_model=BatchResultResponse)
async def batch_get_posts(body: BatchGetRequest, store: PostStore) -> BatchResultResponse:
    """Fetch several posts at once; unknown or failing ids are listed in ``missing``."""
    found = await batch_get_by_ids(store, body.ids)
    return batch_response(body.ids, found)


@router.post(
    "/batch",
    response_model=list[Post],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_api_key)],
)
async def batch_create_posts(body: BatchCreateRequest, store: PostStore) -> list[Post]:
    """Create several posts; any failure fails the whole request."""
    return await batch_create(store, validate_payloads(PostCreate, body.items))


@router.patch(
    "/batch",
    response_model=BatchResultResponse,
    dependencies=[Depends(verify_api_key)],
)
async def batch_update_posts(body: BatchUpdateRequest, store: PostStore) -> BatchResultResponse:
    updates = validated_updates(PostUpdate, body)
    updated = await batch_update(store, updates)
    return batch_response((update["id"] for update in updates), updated)
