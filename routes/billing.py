from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.billing.errors import SettlementError
from app.billing.service import billing_rows, courier_earnings, update_price_tiers
from app.orders.errors import OrderError
from app.orders.model import Actor, OrderStatus, Role
from app.orders.state_machine import available_transitions
from app.store.base import Store
from deps.auth import require_roles
from deps.store import get_store
from schemas import (
    BillingItem,
    BillingListResponse,
    CourierEarningsResponse,
    OrderItem,
    PriceTierItem,
    PriceTierListRequest,
    PriceTierListResponse,
    SettlementResponse,
)
from services.observability import log_context
from services.order_errors import raise_http_from_core_error
from settings import settings

logger = logging.getLogger("jelantah.billing.http")
router = APIRouter(prefix="/v1", tags=["billing"])


@router.get("/billing", response_model=BillingListResponse)
def list_billing(
    status: Optional[Literal["VERIFIED", "PAID"]] = Query(default=None),
    q: Optional[str] = Query(default=None, max_length=100),
    actor: Actor = Depends(require_roles(Role.ADMIN)),
    store: Store = Depends(get_store),
):
    try:
        rows = billing_rows(store, status=OrderStatus(status) if status else None, search=q)
    except (OrderError, SettlementError) as exc:
        raise_http_from_core_error(exc)

    return BillingListResponse(
        items=[
            BillingItem(
                order_id=row.order.id,
                customer_name=row.order.customer_name,
                status=row.order.status,
                settlement=SettlementResponse.from_settlement(row.settlement) if row.settlement else None,
                error=row.error,
            )
            for row in rows
        ]
    )


@router.get("/couriers/me/earnings", response_model=CourierEarningsResponse)
def my_earnings(
    actor: Actor = Depends(require_roles(Role.COURIER)),
    store: Store = Depends(get_store),
):
    earnings = courier_earnings(store, actor.actor_id)
    return CourierEarningsResponse(
        courier_id=earnings.courier_id,
        total_liters=earnings.total_liters,
        total_earnings=earnings.total_earnings,
        orders=[OrderItem.from_order(o, available_transitions(o, actor)) for o in earnings.orders],
    )


def _tier_response(store: Store) -> PriceTierListResponse:
    return PriceTierListResponse(
        tiers=[PriceTierItem.from_tier(t) for t in store.get_price_tiers()],
        courier_fee_per_liter=settings.COURIER_FEE_PER_LITER,
        affiliate_fee_per_liter=settings.AFFILIATE_FEE_PER_LITER,
    )


@router.get("/settings/price-tiers", response_model=PriceTierListResponse)
def get_price_tiers(
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.WAREHOUSE, Role.COURIER, Role.CUSTOMER)),
    store: Store = Depends(get_store),
):
    return _tier_response(store)


@router.put("/settings/price-tiers", response_model=PriceTierListResponse)
def put_price_tiers(
    body: PriceTierListRequest,
    actor: Actor = Depends(require_roles(Role.ADMIN)),
    store: Store = Depends(get_store),
):
    try:
        tiers = update_price_tiers(store, [t.to_tier() for t in body.tiers])
    except OrderError as exc:
        raise_http_from_core_error(exc)
    logger.info("%s price tiers replaced count=%s", log_context(), len(tiers))
    return _tier_response(store)
