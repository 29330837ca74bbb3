"""Pydantic schemas for product access requests.

Prospective customers submit an access request; global admins approve or
reject it from the review queue.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AccessRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TeamSize(str, Enum):
    XS = "1-5"
    S = "6-25"
    M = "26-100"
    L = "100+"


class AccessRequestAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class AccessRequestCreate(BaseModel):
    """Body of ``POST /v1/access-requests``."""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    company_name: str = Field(..., min_length=1, max_length=100)
    job_title: str = Field(..., min_length=1, max_length=100)
    use_case: str = Field(
        ...,
        min_length=10,
        max_length=1000,
        description="Detailed description of the intended use (10+ characters).",
    )
    team_size: TeamSize
    industry: str = Field(..., min_length=1, max_length=100)
    expected_start_date: str = Field(..., min_length=1)
    additional_info: str | None = Field(None, max_length=500)


class AccessRequestReview(BaseModel):
    """Body of ``POST /v1/access-requests/{id}/{action}``."""

    notes: str | None = Field(None, max_length=500)
    reviewed_by: str | None = None


class AccessRequest(AccessRequestCreate):
    id: str
    status: AccessRequestStatus = AccessRequestStatus.PENDING
    submitted_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    admin_notes: str | None = None
