# app/billing/service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.billing.errors import SettlementError
from app.billing.pricing import PriceTier, PricingTable, validate_tiers
from app.billing.settlement import Settlement, SettlementPolicy, compute_settlement
from app.customers.referrals import ReferralGraph
from app.orders.errors import ValidationError
from app.orders.model import BILLABLE_STATUSES, LITERS_RECORDED_STATUSES, Order, OrderStatus
from app.store.base import Store
from services.observability import log_context
from settings import settings

logger = logging.getLogger("jelantah.billing")


@dataclass(frozen=True)
class BillingRow:
    order: Order
    settlement: Optional[Settlement] = None
    # set instead of settlement when this order cannot be priced
    error: Optional[str] = None


@dataclass(frozen=True)
class CourierEarnings:
    courier_id: str
    orders: list[Order]
    total_liters: int
    total_earnings: int


@dataclass(frozen=True)
class CustomerSummary:
    customer_id: str
    total_liters: int
    open_orders: int
    total_orders: int


def settlement_policy(store: Store) -> SettlementPolicy:
    """Built per call so a tier edit is seen by the next settlement."""
    return SettlementPolicy(
        pricing=PricingTable(store.get_price_tiers()),
        courier_fee_per_liter=settings.COURIER_FEE_PER_LITER,
        affiliate_fee_per_liter=settings.AFFILIATE_FEE_PER_LITER,
    )


def referral_graph(store: Store) -> ReferralGraph:
    return ReferralGraph.from_customers(store.list_customers())


def settle_order(store: Store, order: Order) -> Settlement:
    return compute_settlement(order, settlement_policy(store), referral_graph(store))


def billing_rows(store: Store, *, status: Optional[OrderStatus] = None, search: Optional[str] = None) -> list[BillingRow]:
    if status is not None and status not in BILLABLE_STATUSES:
        raise ValidationError(f"billing status filter must be VERIFIED or PAID, got {status.value}")

    statuses = [status] if status is not None else sorted(BILLABLE_STATUSES, key=lambda s: s.value)
    orders = store.list_orders(statuses=statuses, search=search)
    policy = settlement_policy(store)
    graph = referral_graph(store)
    return [_billing_row(o, policy, graph) for o in orders]


def _billing_row(order: Order, policy: SettlementPolicy, graph: ReferralGraph) -> BillingRow:
    try:
        return BillingRow(order=order, settlement=compute_settlement(order, policy, graph))
    except SettlementError as exc:
        if exc.fatal:
            raise
        logger.warning("%s billing row unsettled order_id=%s error=%s", log_context(), order.id, exc.code)
        return BillingRow(order=order, error=exc.code)


def courier_earnings(store: Store, courier_id: str) -> CourierEarnings:
    orders = store.list_orders(statuses=LITERS_RECORDED_STATUSES, courier_id=courier_id)
    total_liters = sum(o.actual_liters or 0 for o in orders)
    return CourierEarnings(
        courier_id=courier_id,
        orders=orders,
        total_liters=total_liters,
        total_earnings=total_liters * settings.COURIER_FEE_PER_LITER,
    )


def customer_summary(store: Store, customer_id: str) -> CustomerSummary:
    orders = store.list_orders(customer_id=customer_id)
    billable = [o for o in orders if o.status in BILLABLE_STATUSES]
    return CustomerSummary(
        customer_id=customer_id,
        total_liters=sum(o.actual_liters or 0 for o in billable),
        open_orders=len(orders) - len(billable),
        total_orders=len(orders),
    )


def update_price_tiers(store: Store, tiers: list[PriceTier]) -> list[PriceTier]:
    if not tiers:
        raise ValidationError("at least one price tier is required")
    problems = validate_tiers(tiers)
    if problems:
        raise ValidationError("; ".join(problems))
    store.replace_price_tiers(tiers)
    return store.get_price_tiers()
