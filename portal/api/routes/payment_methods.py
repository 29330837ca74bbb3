"""Stored payment method references.

Charging and card handling live with the payment processor; these routes
only keep the processor's reference and display hints per user.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response, status

from portal.adapters.data_access.factory import get_payment_method_data_access
from portal.core.auth import verify_api_key
from portal.schemas.payment_method import (
    PaymentMethod,
    PaymentMethodCreate,
    PaymentMethodUpdate,
)

router = APIRouter(
    prefix="/payment-methods",
    tags=["Payment Methods"],
    dependencies=[Depends(verify_api_key)],
)

PaymentMethodStore = Annotated[Any, Depends(get_payment_method_data_access)]


@router.get("", response_model=list[PaymentMethod])
async def list_payment_methods(
    store: PaymentMethodStore,
    user_id: Annotated[str | None, Query(min_length=1)] = None,
) -> list[PaymentMethod]:
    if user_id is not None:
        return await store.get_by_user(user_id)
    return await store.get_all()


@router.get("/{payment_method_id}", response_model=PaymentMethod)
async def get_payment_method(payment_method_id: str, store: PaymentMethodStore) -> PaymentMethod:
    return await store.get_by_id(payment_method_id)


@router.post("", response_model=PaymentMethod, status_code=status.HTTP_201_CREATED)
async def create_payment_method(body: PaymentMethodCreate, store: PaymentMethodStore) -> PaymentMethod:
    return await store.create(body.model_dump())


@router.put("/{payment_method_id}", response_model=PaymentMethod)
async def update_payment_method(
    payment_method_id: str, body: PaymentMethodUpdate, store: PaymentMethodStore
) -> PaymentMethod:
    return await store.update(payment_method_id, body.model_dump(exclude_unset=True))


@router.delete("/{payment_method_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment_method(payment_method_id: str, store: PaymentMethodStore) -> Response:
    await store.delete(payment_method_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
