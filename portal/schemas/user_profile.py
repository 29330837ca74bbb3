"""Pydantic schemas for user profiles."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from portal.schemas.access_request import EMAIL_PATTERN


class UserProfileCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    organization_name: str | None = Field(None, max_length=200)


class UserProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, pattern=EMAIL_PATTERN, max_length=254)
    organization_name: str | None = Field(None, max_length=200)


class UserProfile(UserProfileCreate):
    id: str
    created_at: datetime
    updated_at: datetime
