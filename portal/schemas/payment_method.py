"""Pydantic schemas for stored payment methods.

Only a processor-side reference and display hints are kept; card data never
passes through this service.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PaymentMethodCreate(BaseModel):
    user_id: str = Field(..., min_length=1, description="Owner of the payment method.")
    stripe_payment_method_id: str = Field(
        ..., min_length=1, description="Reference held by the payment processor."
    )
    type: str | None = Field(None, max_length=50, examples=["card"])
    last4: str | None = Field(None, pattern=r"^\d{4}$")


class PaymentMethodUpdate(BaseModel):
    type: str | None = Field(None, max_length=50)
    last4: str | None = Field(None, pattern=r"^\d{4}$")


class PaymentMethod(PaymentMethodCreate):
    id: str
    created_at: datetime
    updated_at: datetime
