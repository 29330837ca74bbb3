from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from portal.adapters.data_access.base import AbstractDataAccess
from portal.adapters.data_access.factory import get_project_data_access
from portal.api.routes.common import batch_response, validate_payloads, validated_updates
from portal.core.auth import verify_api_key
from portal.schemas.batch import (
    BatchCreateRequest,
    BatchGetRequest,
    BatchResultResponse,
    BatchUpdateRequest,
)
from portal.schemas.project import Project, ProjectCreate, ProjectUpdate
from portal.services.batch import batch_create, batch_get_by_ids, batch_update

router = APIRouter(
    prefix="/projects",
    tags=["Projects"],
    dependencies=[Depends(verify_api_key)],
)

ProjectStore = Annotated[AbstractDataAccess[Project], Depends(get_project_data_access)]


@router.get("", response_model=list[Project])
async def list_projects(store: ProjectStore) -> list[Project]:
    return await store.get_all()


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: str, store: ProjectStore) -> Project:
    return await store.get_by_id(project_id)


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectCreate, store: ProjectStore) -> Project:
    return await store.create(body.model_dump())


@router.put("/{project_id}", response_model=Project)
async def update_project(project_id: str, body: ProjectUpdate, store: ProjectStore) -> Project:
    return await store.update(project_id, body.model_dump(exclude_unset=True))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, store: ProjectStore) -> Response:
    await store.delete(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/batch/get", response_model=BatchResultResponse)
async def batch_get_projects(body: BatchGetRequest, store: ProjectStore) -> BatchResultResponse:
    found = await batch_get_by_ids(store, body.ids)
    return batch_response(body.ids, found)


@router.post("/batch", response_model=list[Project], status_code=status.HTTP_201_CREATED)
async def batch_create_projects(body: BatchCreateRequest, store: ProjectStore) -> list[Project]:
    return await batch_create(store, validate_payloads(ProjectCreate, body.items))


@router.patch("/batch", response_model=BatchResultResponse)
async def batch_update_projects(body: BatchUpdateRequest, store: ProjectStore) -> BatchResultResponse:
    updates = validated_updates(ProjectUpdate, body)
    updated = await batch_update(store, updates)
    return batch_response((update["id"] for update in updates), updated)
