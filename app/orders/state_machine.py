# app/orders/state_machine.py
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from app.orders.authorization import Grant, grant_for
from app.orders.errors import PayloadInvalid, RoleDenied, StateMismatch, ValidationError
from app.orders.model import (
    Actor,
    CustomerSnapshot,
    Order,
    OrderStatus,
    Role,
    Transition,
    TransitionPayload,
    assert_order_invariants,
    status_rank,
)


# transition -> (required source status, resulting status)
TRANSITIONS: dict[Transition, tuple[OrderStatus, OrderStatus]] = {
    Transition.ASSIGN: (OrderStatus.PENDING, OrderStatus.ASSIGNED),
    Transition.START: (OrderStatus.ASSIGNED, OrderStatus.IN_PROGRESS),
    Transition.COMPLETE: (OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED),
    Transition.VERIFY: (OrderStatus.COMPLETED, OrderStatus.VERIFIED),
    Transition.MARK_PAID: (OrderStatus.VERIFIED, OrderStatus.PAID),
}


def new_order_id() -> str:
    return f"ORD-{uuid4().hex[:10].upper()}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _clean_ref(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def assert_status_advance(old: OrderStatus, new: OrderStatus) -> None:
    """Status moves exactly one step forward along the chain."""
    if status_rank(new) != status_rank(old) + 1:
        raise StateMismatch(f"Illegal order status change: {old.value} -> {new.value}")


def create_order(
    snapshot: CustomerSnapshot,
    estimated_liters: int,
    *,
    order_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Order:
    if not _is_positive_int(estimated_liters):
        raise ValidationError("estimated_liters must be a positive integer")

    missing = [
        name
        for name in ("customer_id", "name", "phone", "district", "city")
        if not (getattr(snapshot, name) or "").strip()
    ]
    if missing:
        raise ValidationError(f"customer snapshot missing fields: {', '.join(missing)}")

    order = Order(
        id=order_id or new_order_id(),
        customer_id=snapshot.customer_id.strip(),
        customer_name=snapshot.name.strip(),
        customer_phone=snapshot.phone.strip(),
        customer_district=snapshot.district.strip(),
        customer_city=snapshot.city.strip(),
        estimated_liters=estimated_liters,
        status=OrderStatus.PENDING,
        created_at=created_at or _utcnow(),
    )
    assert_order_invariants(order)
    return order


def _check_ownership(order: Order, transition: Transition, actor: Actor, grant: Grant, payload: TransitionPayload) -> None:
    if grant == Grant.OWNER and actor.actor_id != order.courier_id:
        raise RoleDenied(
            f"{transition.value} is reserved for the assigned courier",
            order_id=order.id,
            transition=transition.value,
        )
    if grant == Grant.SELF:
        target = _clean_ref(payload.courier_id) or actor.actor_id
        if target != actor.actor_id:
            raise RoleDenied(
                "couriers may only claim orders for themselves",
                order_id=order.id,
                transition=transition.value,
            )


def _payload_changes(order: Order, transition: Transition, actor: Actor, payload: TransitionPayload) -> dict[str, Any]:
    def invalid(message: str) -> PayloadInvalid:
        return PayloadInvalid(message, order_id=order.id, transition=transition.value)

    if transition == Transition.ASSIGN:
        courier_id = _clean_ref(payload.courier_id)
        if courier_id is None and actor.role == Role.COURIER:
            courier_id = actor.actor_id
        if courier_id is None:
            raise invalid("courier_id is required")
        return {"courier_id": courier_id}

    if transition == Transition.COMPLETE:
        if not _is_positive_int(payload.actual_liters):
            raise invalid("actual_liters must be a positive integer")
        evidence = _clean_ref(payload.pickup_evidence_ref)
        if evidence is None:
            raise invalid("pickup_evidence_ref is required")
        return {"actual_liters": payload.actual_liters, "pickup_evidence_ref": evidence}

    if transition == Transition.MARK_PAID:
        evidence = _clean_ref(payload.payment_evidence_ref)
        if evidence is None:
            raise invalid("payment_evidence_ref is required")
        return {"payment_evidence_ref": evidence}

    return {}


def apply_transition(
    order: Order,
    transition: Transition | str,
    actor: Actor,
    payload: Optional[TransitionPayload] = None,
) -> Order:
    """
    Compute the order that results from `transition`, or raise a
    TransitionRejected subclass naming the failed check.

    Checks run role table -> source status -> ownership -> payload, so an
    ungranted role is reported as RoleDenied regardless of order status.
    The input order is never mutated.
    """
    try:
        transition = Transition(transition)
    except ValueError:
        raise ValidationError(f"Unknown transition: {transition}") from None
    payload = payload or TransitionPayload()

    grant = grant_for(actor.role, transition)
    if grant == Grant.DENY:
        raise RoleDenied(
            f"role {actor.role.value} may not {transition.value}",
            order_id=order.id,
            transition=transition.value,
        )

    source, target = TRANSITIONS[transition]
    if order.status != source:
        raise StateMismatch(
            f"{transition.value} requires status {source.value}, order is {order.status.value}",
            order_id=order.id,
            transition=transition.value,
        )

    _check_ownership(order, transition, actor, grant, payload)
    changes = _payload_changes(order, transition, actor, payload)

    assert_status_advance(order.status, target)
    updated = replace(order, status=target, **changes)
    assert_order_invariants(updated)
    return updated


def available_transitions(order: Order, actor: Actor) -> list[Transition]:
    """Transitions this actor could attempt on the order right now (payload aside)."""
    out: list[Transition] = []
    for transition, (source, _) in TRANSITIONS.items():
        if order.status != source:
            continue
        grant = grant_for(actor.role, transition)
        if grant == Grant.DENY:
            continue
        if grant == Grant.OWNER and actor.actor_id != order.courier_id:
            continue
        out.append(transition)
    return out
