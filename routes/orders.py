# routes/orders.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.billing.errors import SettlementError
from app.billing.service import settle_order
from app.orders.errors import OrderError
from app.orders.model import Actor, OrderStatus, Role, TransitionPayload
from app.orders.service import create_order_for_customer, get_order_for_actor, transition_order
from app.orders.state_machine import available_transitions
from app.store.base import Store
from deps.auth import get_current_actor, require_roles
from deps.store import get_store
from schemas import (
    CreateOrderRequest,
    OrderEventItem,
    OrderEventListResponse,
    OrderItem,
    OrderListResponse,
    SettlementResponse,
    TransitionRequest,
)
from services.order_errors import raise_http_from_core_error

router = APIRouter(prefix="/v1/orders", tags=["orders"])


def _item(order, actor: Actor) -> OrderItem:
    return OrderItem.from_order(order, available_transitions(order, actor))


@router.post("", response_model=OrderItem, status_code=201)
def create_order_route(
    body: CreateOrderRequest,
    actor: Actor = Depends(get_current_actor),
    store: Store = Depends(get_store),
):
    try:
        order = create_order_for_customer(
            store,
            customer_id=body.customer_id,
            estimated_liters=body.estimated_liters,
            actor=actor,
            source="office" if actor.role == Role.ADMIN else "portal",
        )
    except OrderError as exc:
        raise_http_from_core_error(exc)
    return _item(order, actor)


@router.get("", response_model=OrderListResponse)
def list_orders(
    status: Optional[OrderStatus] = Query(default=None),
    courier_id: Optional[str] = Query(default=None),
    customer_id: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None, max_length=100),
    actor: Actor = Depends(get_current_actor),
    store: Store = Depends(get_store),
):
    statuses = [status] if status else None

    if actor.role == Role.CUSTOMER:
        customer_id = actor.customer_id
    elif actor.role == Role.COURIER:
        # own orders, or the open pool when asking for PENDING
        if status != OrderStatus.PENDING:
            courier_id = actor.actor_id

    orders = store.list_orders(statuses=statuses, courier_id=courier_id, customer_id=customer_id, search=q)
    return OrderListResponse(items=[_item(o, actor) for o in orders])


@router.get("/{order_id}", response_model=OrderItem)
def get_order(
    order_id: str,
    actor: Actor = Depends(get_current_actor),
    store: Store = Depends(get_store),
):
    try:
        order = get_order_for_actor(store, order_id, actor)
    except OrderError as exc:
        raise_http_from_core_error(exc)
    return _item(order, actor)


@router.post("/{order_id}/transitions", response_model=OrderItem)
def apply_order_transition(
    order_id: str,
    body: TransitionRequest,
    actor: Actor = Depends(get_current_actor),
    store: Store = Depends(get_store),
):
    payload = TransitionPayload(
        courier_id=body.courier_id,
        actual_liters=body.actual_liters,
        pickup_evidence_ref=body.pickup_evidence_ref,
        payment_evidence_ref=body.payment_evidence_ref,
    )
    try:
        order = transition_order(store, order_id, body.transition, actor, payload)
    except OrderError as exc:
        raise_http_from_core_error(exc)
    return _item(order, actor)


@router.get("/{order_id}/events", response_model=OrderEventListResponse)
def list_order_events(
    order_id: str,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.WAREHOUSE)),
    store: Store = Depends(get_store),
):
    try:
        get_order_for_actor(store, order_id, actor)
    except OrderError as exc:
        raise_http_from_core_error(exc)
    events = store.list_events(order_id)
    return OrderEventListResponse(order_id=order_id, items=[OrderEventItem.from_event(e) for e in events])


@router.get("/{order_id}/settlement", response_model=SettlementResponse)
def get_order_settlement(
    order_id: str,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.WAREHOUSE)),
    store: Store = Depends(get_store),
):
    try:
        order = get_order_for_actor(store, order_id, actor)
        settlement = settle_order(store, order)
    except (OrderError, SettlementError) as exc:
        raise_http_from_core_error(exc)
    return SettlementResponse.from_settlement(settlement)
