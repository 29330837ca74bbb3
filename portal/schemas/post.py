"""Pydantic schemas for blog posts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PostCreate(BaseModel):
    """Body of ``POST /v1/posts``."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    slug: str | None = Field(None, description="URL slug; generated when omitted.")
    excerpt: str | None = None
    tags: list[str] = Field(default_factory=list)
    is_premium: bool = False
    is_published: bool = False
    published_at: datetime | None = None
    author_id: str | None = None
    author_name: str | None = None
    featured_image: str | None = None
    reading_time: int | None = Field(None, ge=0, description="Estimated minutes to read.")


class PostUpdate(BaseModel):
    """Body of ``PUT /v1/posts/{id}``; only provided fields change."""

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    slug: str | None = None
    excerpt: str | None = None
    tags: list[str] | None = None
    is_premium: bool | None = None
    is_published: bool | None = None
    published_at: datetime | None = None
    featured_image: str | None = None
    reading_time: int | None = Field(None, ge=0)


class Post(PostCreate):
    """A stored post."""

    id: str
    slug: str
    created_at: datetime
    updated_at: datetime
