"""Pydantic schemas for projects."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    PENDING = "pending"


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    status: ProjectStatus = ProjectStatus.PENDING
    user_id: str = Field(..., min_length=1, description="Owner of the project.")
    organization_id: str | None = None


class ProjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    status: ProjectStatus | None = None
    organization_id: str | None = None


class Project(ProjectCreate):
    id: str
    created_at: datetime
    updated_at: datetime
