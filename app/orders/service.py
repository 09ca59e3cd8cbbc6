# app/orders/service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from app.customers.model import Customer
from app.orders.errors import CustomerNotFound, OrderNotFound, RoleDenied, StateMismatch, TransitionRejected, ValidationError
from app.orders.model import Actor, Order, OrderEvent, Role, Transition, TransitionPayload
from app.orders.state_machine import apply_transition, create_order
from app.store.base import Store
from services.metrics import increment_order_transition, increment_orders_created
from services.notifications import notify_payment_confirmed
from services.observability import log_context
from services.redaction import mask_phone

logger = logging.getLogger("jelantah.orders")

Notifier = Callable[[Order, Optional[Customer]], bool]


def _require_order(store: Store, order_id: str) -> Order:
    order = store.get_order(order_id)
    if order is None:
        raise OrderNotFound(f"order {order_id} not found")
    return order


def get_order_for_actor(store: Store, order_id: str, actor: Actor) -> Order:
    """
    Customers only see their own orders. Couriers see the open pool plus
    the orders assigned to them.
    """
    order = _require_order(store, order_id)
    if actor.role == Role.CUSTOMER and order.customer_id != actor.customer_id:
        raise OrderNotFound(f"order {order_id} not found")
    if actor.role == Role.COURIER and order.courier_id not in (None, actor.actor_id):
        raise OrderNotFound(f"order {order_id} not found")
    return order


def create_order_for_customer(
    store: Store,
    *,
    customer_id: str,
    estimated_liters: int,
    actor: Actor,
    source: str = "portal",
) -> Order:
    if actor.role == Role.CUSTOMER:
        if not actor.customer_id or actor.customer_id != customer_id:
            raise RoleDenied("customers may only request pickups for their own account")
    elif actor.role != Role.ADMIN:
        raise RoleDenied(f"role {actor.role.value} may not create orders")

    customer = store.get_customer(customer_id)
    if customer is None:
        raise CustomerNotFound(f"customer {customer_id} not found")

    order = create_order(customer.snapshot(), estimated_liters)
    store.insert_order(order)
    increment_orders_created(source)
    logger.info(
        "%s order created order_id=%s customer_id=%s phone=%s estimated_liters=%s source=%s",
        log_context(),
        order.id,
        order.customer_id,
        mask_phone(order.customer_phone),
        order.estimated_liters,
        source,
    )
    return order


def transition_order(
    store: Store,
    order_id: str,
    transition: Transition | str,
    actor: Actor,
    payload: Optional[TransitionPayload] = None,
    *,
    notifier: Notifier = notify_payment_confirmed,
) -> Order:
    try:
        transition = Transition(transition)
    except ValueError:
        raise ValidationError(f"Unknown transition: {transition}") from None

    order = _require_order(store, order_id)

    try:
        updated = apply_transition(order, transition, actor, payload)
    except TransitionRejected as exc:
        increment_order_transition(transition.value, exc.code.lower())
        logger.info(
            "%s transition rejected order_id=%s transition=%s check=%s reason=%s",
            log_context(),
            order.id,
            transition.value,
            exc.check,
            exc,
        )
        raise

    event = OrderEvent(
        order_id=order.id,
        transition=transition,
        from_status=order.status,
        to_status=updated.status,
        actor_id=actor.actor_id,
        actor_role=actor.role,
        created_at=datetime.now(timezone.utc),
    )
    credit = updated.actual_liters if transition == Transition.VERIFY else 0

    if not store.commit_transition(updated, from_status=order.status, event=event, credit_liters=credit or 0):
        increment_order_transition(transition.value, StateMismatch.code.lower())
        logger.info(
            "%s transition lost race order_id=%s transition=%s expected=%s",
            log_context(),
            order.id,
            transition.value,
            order.status.value,
        )
        raise StateMismatch(
            "order changed while the transition was being applied; refresh and retry",
            order_id=order.id,
            transition=transition.value,
        )

    increment_order_transition(transition.value, "applied")
    logger.info(
        "%s transition applied order_id=%s transition=%s %s->%s",
        log_context(),
        order.id,
        transition.value,
        order.status.value,
        updated.status.value,
    )

    if transition == Transition.MARK_PAID:
        try:
            notifier(updated, store.get_customer(updated.customer_id))
        except Exception as exc:
            logger.warning("payment notifier raised order_id=%s error=%s", updated.id, exc)

    return updated
