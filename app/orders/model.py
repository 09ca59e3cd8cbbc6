from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    VERIFIED = "VERIFIED"
    PAID = "PAID"


# forward-only chain, index = progress
STATUS_CHAIN: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.ASSIGNED,
    OrderStatus.IN_PROGRESS,
    OrderStatus.COMPLETED,
    OrderStatus.VERIFIED,
    OrderStatus.PAID,
)

LITERS_RECORDED_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.VERIFIED, OrderStatus.PAID})
BILLABLE_STATUSES = frozenset({OrderStatus.VERIFIED, OrderStatus.PAID})


class Role(str, Enum):
    ADMIN = "ADMIN"
    COURIER = "COURIER"
    WAREHOUSE = "WAREHOUSE"
    CUSTOMER = "CUSTOMER"


class Transition(str, Enum):
    ASSIGN = "ASSIGN"
    START = "START"
    COMPLETE = "COMPLETE"
    VERIFY = "VERIFY"
    MARK_PAID = "MARK_PAID"


def status_rank(status: OrderStatus) -> int:
    return STATUS_CHAIN.index(status)


@dataclass(frozen=True)
class Actor:
    actor_id: str
    role: Role
    customer_id: Optional[str] = None


@dataclass(frozen=True)
class CustomerSnapshot:
    """
    Contact/location copy taken when the order is created.
    Later edits to the customer record are not reflected here.
    """

    customer_id: str
    name: str
    phone: str
    district: str
    city: str


@dataclass(frozen=True)
class TransitionPayload:
    courier_id: Optional[str] = None
    actual_liters: Optional[int] = None
    pickup_evidence_ref: Optional[str] = None
    payment_evidence_ref: Optional[str] = None


@dataclass(frozen=True)
class Order:
    id: str
    customer_id: str
    customer_name: str
    customer_phone: str
    customer_district: str
    customer_city: str
    estimated_liters: int
    status: OrderStatus
    created_at: datetime
    actual_liters: Optional[int] = None
    courier_id: Optional[str] = None
    pickup_evidence_ref: Optional[str] = None
    payment_evidence_ref: Optional[str] = None


@dataclass(frozen=True)
class OrderEvent:
    order_id: str
    transition: Transition
    from_status: OrderStatus
    to_status: OrderStatus
    actor_id: str
    actor_role: Role
    created_at: datetime


def assert_order_invariants(order: Order) -> None:
    """
    Invariant: actual_liters is set iff the pickup has been completed,
    and courier_id is set iff the order has been assigned.
    """
    has_liters = order.actual_liters is not None
    if has_liters != (order.status in LITERS_RECORDED_STATUSES):
        raise ValueError(
            f"Invariant violation: status={order.status.value} actual_liters={order.actual_liters}"
        )

    assigned = status_rank(order.status) >= status_rank(OrderStatus.ASSIGNED)
    if (order.courier_id is not None) != assigned:
        raise ValueError(
            f"Invariant violation: status={order.status.value} courier_id={order.courier_id}"
        )
