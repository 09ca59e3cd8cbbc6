from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.billing.service import customer_summary
from app.customers.service import (
    Registration,
    get_customer_for_actor,
    normalize_phone,
    quick_pickup,
    register_customer,
    update_customer_profile,
)
from app.orders.errors import OrderError
from app.orders.model import Actor, Role
from app.orders.state_machine import available_transitions
from app.store.base import Store
from deps.auth import get_current_actor, require_roles
from deps.store import get_store
from schemas import (
    CustomerItem,
    CustomerListResponse,
    CustomerSummaryResponse,
    OrderItem,
    QuickPickupRequest,
    QuickPickupResponse,
    RegisterCustomerRequest,
    UpdateCustomerRequest,
)
from services.order_errors import raise_http_from_core_error

router = APIRouter(prefix="/v1", tags=["customers"])


def _registration(body: RegisterCustomerRequest, *, phone: Optional[str] = None) -> Registration:
    return Registration(
        name=body.name,
        phone=phone or body.phone,
        address=body.address,
        district=body.district,
        city=body.city,
        bank_account=body.bank_account,
        share_location=body.share_location,
        referred_by=body.referred_by,
    )


@router.get("/customers", response_model=CustomerListResponse)
def list_customers(
    phone: Optional[str] = Query(default=None, max_length=20),
    q: Optional[str] = Query(default=None, max_length=100),
    actor: Actor = Depends(require_roles(Role.ADMIN)),
    store: Store = Depends(get_store),
):
    if phone:
        found = store.find_customer_by_phone(normalize_phone(phone))
        customers = [found] if found else []
    else:
        customers = store.list_customers(search=q)
    return CustomerListResponse(items=[CustomerItem.from_customer(c) for c in customers])


@router.post("/customers", response_model=CustomerItem, status_code=201)
def create_customer(
    body: RegisterCustomerRequest,
    actor: Actor = Depends(require_roles(Role.ADMIN)),
    store: Store = Depends(get_store),
):
    try:
        customer = register_customer(store, _registration(body))
    except OrderError as exc:
        raise_http_from_core_error(exc)
    return CustomerItem.from_customer(customer)


@router.get("/customers/{customer_id}", response_model=CustomerItem)
def get_customer(
    customer_id: str,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.CUSTOMER)),
    store: Store = Depends(get_store),
):
    try:
        customer = get_customer_for_actor(store, customer_id, actor)
    except OrderError as exc:
        raise_http_from_core_error(exc)
    return CustomerItem.from_customer(customer)


@router.patch("/customers/{customer_id}", response_model=CustomerItem)
def patch_customer(
    customer_id: str,
    body: UpdateCustomerRequest,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.CUSTOMER)),
    store: Store = Depends(get_store),
):
    try:
        customer = update_customer_profile(store, customer_id, body.model_dump(exclude_unset=True), actor)
    except OrderError as exc:
        raise_http_from_core_error(exc)
    return CustomerItem.from_customer(customer)


@router.get("/customers/{customer_id}/summary", response_model=CustomerSummaryResponse)
def get_customer_summary(
    customer_id: str,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.CUSTOMER)),
    store: Store = Depends(get_store),
):
    try:
        get_customer_for_actor(store, customer_id, actor)
    except OrderError as exc:
        raise_http_from_core_error(exc)
    summary = customer_summary(store, customer_id)
    return CustomerSummaryResponse(
        customer_id=summary.customer_id,
        total_liters=summary.total_liters,
        open_orders=summary.open_orders,
        total_orders=summary.total_orders,
    )


@router.post("/quick-pickup", response_model=QuickPickupResponse, status_code=201)
def create_quick_pickup(
    body: QuickPickupRequest,
    actor: Actor = Depends(get_current_actor),
    store: Store = Depends(get_store),
):
    registration = _registration(body.registration, phone=body.phone) if body.registration else None
    try:
        result = quick_pickup(
            store,
            phone=body.phone,
            estimated_liters=body.estimated_liters,
            actor=actor,
            registration=registration,
        )
    except OrderError as exc:
        raise_http_from_core_error(exc)
    return QuickPickupResponse(
        customer=CustomerItem.from_customer(result.customer),
        order=OrderItem.from_order(result.order, available_transitions(result.order, actor)),
        customer_created=result.customer_created,
    )
