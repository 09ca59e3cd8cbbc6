from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional
from uuid import uuid4

from app.customers.model import PROFILE_FIELDS, Customer
from app.customers.referrals import ReferralGraph
from app.orders.errors import CustomerNotFound, RoleDenied, ValidationError
from app.orders.model import Actor, Order, Role
from app.orders.service import create_order_for_customer
from app.store.base import Store
from services.observability import log_context
from services.redaction import mask_phone

logger = logging.getLogger("jelantah.customers")

REQUIRED_FIELDS = ("name", "phone", "address", "district", "city", "bank_account")


@dataclass(frozen=True)
class Registration:
    name: str
    phone: str
    address: str
    district: str
    city: str
    bank_account: str
    share_location: str = ""
    referred_by: Optional[str] = None


@dataclass(frozen=True)
class QuickPickupResult:
    customer: Customer
    order: Order
    customer_created: bool


def normalize_phone(phone: str) -> str:
    return "".join(ch for ch in (phone or "") if ch.isdigit() or ch == "+")


def new_customer_id() -> str:
    return f"cust-{uuid4().hex[:12]}"


def get_customer_for_actor(store: Store, customer_id: str, actor: Actor) -> Customer:
    if actor.role == Role.CUSTOMER and actor.customer_id != customer_id:
        raise CustomerNotFound(f"customer {customer_id} not found")
    customer = store.get_customer(customer_id)
    if customer is None:
        raise CustomerNotFound(f"customer {customer_id} not found")
    return customer


def register_customer(store: Store, reg: Registration) -> Customer:
    """
    Creates the customer and, when `referred_by` is given, links it under
    that referrer. Self-referral, unknown referrers and cycles are refused.
    """
    missing = [name for name in REQUIRED_FIELDS if not (getattr(reg, name) or "").strip()]
    if missing:
        raise ValidationError(f"missing required fields: {', '.join(missing)}")

    phone = normalize_phone(reg.phone)
    if store.find_customer_by_phone(phone) is not None:
        raise ValidationError("phone already registered")

    customer_id = new_customer_id()
    referred_by = (reg.referred_by or "").strip() or None
    if referred_by is not None:
        graph = ReferralGraph.from_customers(store.list_customers())
        if graph.get(referred_by) is None:
            raise ValidationError(f"unknown referrer {referred_by}")
        if graph.would_create_cycle(customer_id, referred_by):
            raise ValidationError("referral would create a cycle")

    customer = Customer(
        id=customer_id,
        name=reg.name.strip(),
        phone=phone,
        address=reg.address.strip(),
        district=reg.district.strip(),
        city=reg.city.strip(),
        bank_account=reg.bank_account.strip(),
        share_location=(reg.share_location or "").strip(),
        referred_by=referred_by,
    )
    store.insert_customer(customer)
    logger.info(
        "%s customer registered customer_id=%s phone=%s referred_by=%s",
        log_context(),
        customer.id,
        mask_phone(customer.phone),
        referred_by,
    )
    return store.get_customer(customer.id) or customer


def update_customer_profile(store: Store, customer_id: str, changes: dict[str, Any], actor: Actor) -> Customer:
    """
    Admins may edit any customer, customers only themselves. Collected
    liters and referral links are not editable here. Orders keep the
    snapshot taken at creation, so edits only affect new orders.
    """
    if actor.role not in (Role.ADMIN, Role.CUSTOMER):
        raise RoleDenied(f"role {actor.role.value} may not edit customers")
    current = get_customer_for_actor(store, customer_id, actor)

    unknown = sorted(set(changes) - set(PROFILE_FIELDS))
    if unknown:
        raise ValidationError(f"fields not editable: {', '.join(unknown)}")

    cleaned: dict[str, str] = {}
    for name, value in changes.items():
        value = (value or "").strip()
        if not value and name in REQUIRED_FIELDS:
            raise ValidationError(f"{name} cannot be empty")
        cleaned[name] = value

    if "phone" in cleaned:
        cleaned["phone"] = normalize_phone(cleaned["phone"])
        if not cleaned["phone"]:
            raise ValidationError("phone cannot be empty")
        owner = store.find_customer_by_phone(cleaned["phone"])
        if owner is not None and owner.id != current.id:
            raise ValidationError("phone already registered")

    if not store.update_customer(replace(current, **cleaned)):
        raise CustomerNotFound(f"customer {customer_id} not found")
    logger.info(
        "%s customer updated customer_id=%s fields=%s",
        log_context(),
        current.id,
        ",".join(sorted(cleaned)),
    )
    return store.get_customer(current.id) or current


def quick_pickup(
    store: Store,
    *,
    phone: str,
    estimated_liters: int,
    actor: Actor,
    registration: Optional[Registration] = None,
) -> QuickPickupResult:
    """Office flow: find the customer by phone, registering them first if unknown."""
    if actor.role != Role.ADMIN:
        raise RoleDenied("quick pickup is an office operation")
    if not isinstance(estimated_liters, int) or isinstance(estimated_liters, bool) or estimated_liters <= 0:
        raise ValidationError("estimated_liters must be a positive integer")

    created = False
    customer = store.find_customer_by_phone(normalize_phone(phone))
    if customer is None:
        if registration is None:
            raise CustomerNotFound(f"no customer with phone {mask_phone(phone)}")
        customer = register_customer(store, registration)
        created = True

    order = create_order_for_customer(
        store,
        customer_id=customer.id,
        estimated_liters=estimated_liters,
        actor=actor,
        source="quick_pickup",
    )
    return QuickPickupResult(customer=customer, order=order, customer_created=created)
