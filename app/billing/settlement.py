# app/billing/settlement.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.billing.errors import BrokenInvariant, NotSettleable, SettlementError
from app.billing.pricing import PricingTable
from app.customers.referrals import ReferralGraph
from app.orders.model import LITERS_RECORDED_STATUSES, Order

COURIER_FEE_PER_LITER = 500
AFFILIATE_FEE_PER_LITER = 200


@dataclass(frozen=True)
class SettlementPolicy:
    pricing: PricingTable
    courier_fee_per_liter: int = COURIER_FEE_PER_LITER
    affiliate_fee_per_liter: int = AFFILIATE_FEE_PER_LITER

    def __post_init__(self) -> None:
        if self.courier_fee_per_liter < 0 or self.affiliate_fee_per_liter < 0:
            raise SettlementError("fee rates must be non-negative")


@dataclass(frozen=True)
class Settlement:
    order_id: str
    customer_id: str
    courier_id: Optional[str]
    liters: int
    unit_price: int
    customer_payout: int
    courier_fee: int
    affiliate_fee: int
    affiliate_recipient: Optional[str] = None
    affiliate_name: Optional[str] = None


def compute_settlement(order: Order, policy: SettlementPolicy, referrals: ReferralGraph) -> Settlement:
    """
    Monetary breakdown for a completed-or-later order.

    The three amounts are computed independently from actual liters. Only
    the customer's direct referrer earns the affiliate fee; ancestors
    above it receive nothing. Nothing is mutated and the same inputs always
    give the same result.
    """
    if order.status not in LITERS_RECORDED_STATUSES:
        raise NotSettleable(f"order {order.id} is {order.status.value}; settlement needs COMPLETED or later")

    liters = order.actual_liters
    if liters is None:
        raise BrokenInvariant(f"order {order.id} is {order.status.value} without actual_liters")

    unit_price = policy.pricing.rate_for(liters)

    affiliate_fee = 0
    recipient = None
    recipient_name = None
    referrer = referrals.referrer_of(order.customer_id)
    if referrer is not None:
        affiliate_fee = liters * policy.affiliate_fee_per_liter
        recipient = referrer.id
        recipient_name = referrer.name

    return Settlement(
        order_id=order.id,
        customer_id=order.customer_id,
        courier_id=order.courier_id,
        liters=liters,
        unit_price=unit_price,
        customer_payout=liters * unit_price,
        courier_fee=liters * policy.courier_fee_per_liter,
        affiliate_fee=affiliate_fee,
        affiliate_recipient=recipient,
        affiliate_name=recipient_name,
    )
