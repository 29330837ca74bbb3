from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from portal.adapters.data_access.base import AbstractDataAccess
from portal.adapters.data_access.factory import get_user_profile_data_access
from portal.api.routes.common import batch_response
from portal.core.auth import verify_api_key
from portal.schemas.batch import BatchGetRequest, BatchResultResponse
from portal.schemas.user_profile import UserProfile, UserProfileCreate, UserProfileUpdate
from portal.services.batch import batch_get_by_ids

router = APIRouter(
    prefix="/user-profiles",
    tags=["User Profiles"],
    dependencies=[Depends(verify_api_key)],
)

UserProfileStore = Annotated[AbstractDataAccess[UserProfile], Depends(get_user_profile_data_access)]


@router.get("", response_model=list[UserProfile])
async def list_user_profiles(store: UserProfileStore) -> list[UserProfile]:
    return await store.get_all()


@router.get("/{profile_id}", response_model=UserProfile)
async def get_user_profile(profile_id: str, store: UserProfileStore) -> UserProfile:
    return await store.get_by_id(profile_id)


@router.post("", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def create_user_profile(body: UserProfileCreate, store: UserProfileStore) -> UserProfile:
    return await store.create(body.model_dump())


@router.put("/{profile_id}", response_model=UserProfile)
async def update_user_profile(
    profile_id: str, body: UserProfileUpdate, store: UserProfileStore
) -> UserProfile:
    return await store.update(profile_id, body.model_dump(exclude_unset=True))


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_profile(profile_id: str, store: UserProfileStore) -> Response:
    await store.delete(profile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/batch/get", response_model=BatchResultResponse)
async def batch_get_user_profiles(body: BatchGetRequest, store: UserProfileStore) -> BatchResultResponse:
    found = await batch_get_by_ids(store, body.ids)
    return batch_response(body.ids, found)
