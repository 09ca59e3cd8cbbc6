from __future__ import annotations

from dataclasses import replace
from threading import Lock
from typing import Iterable, Optional

from app.billing.pricing import DEFAULT_PRICE_TIERS, PriceTier
from app.customers.model import PROFILE_FIELDS, Customer
from app.orders.model import Order, OrderEvent, OrderStatus
from app.store.base import Store


class MemoryStore(Store):
    def __init__(self, *, price_tiers: Iterable[PriceTier] = DEFAULT_PRICE_TIERS):
        self._lock = Lock()
        self._orders: dict[str, Order] = {}
        self._events: list[OrderEvent] = []
        self._customers: dict[str, Customer] = {}
        self._tiers: list[PriceTier] = list(price_tiers)

    # -----------------------
    # orders
    # -----------------------
    def insert_order(self, order: Order) -> None:
        with self._lock:
            if order.id in self._orders:
                raise KeyError(f"duplicate order id {order.id}")
            self._orders[order.id] = order

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def list_orders(
        self,
        *,
        statuses: Optional[Iterable[OrderStatus]] = None,
        courier_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Order]:
        wanted = set(statuses or [])
        needle = (search or "").strip().lower()
        with self._lock:
            orders = list(self._orders.values())

        out = [
            o
            for o in orders
            if (not wanted or o.status in wanted)
            and (not courier_id or o.courier_id == courier_id)
            and (not customer_id or o.customer_id == customer_id)
            and (not needle or needle in o.id.lower() or needle in o.customer_name.lower())
        ]
        out.sort(key=lambda o: (o.created_at, o.id), reverse=True)
        return out

    def commit_transition(
        self,
        order: Order,
        *,
        from_status: OrderStatus,
        event: OrderEvent,
        credit_liters: int = 0,
    ) -> bool:
        with self._lock:
            current = self._orders.get(order.id)
            if current is None or current.status != from_status:
                return False
            customer = self._customers.get(order.customer_id)
            if credit_liters and customer is None:
                raise KeyError(f"unknown customer {order.customer_id}")

            self._orders[order.id] = order
            self._events.append(event)
            if credit_liters:
                self._customers[customer.id] = customer.with_collected_liters(credit_liters)
            return True

    def list_events(self, order_id: str) -> list[OrderEvent]:
        with self._lock:
            return [e for e in self._events if e.order_id == order_id]

    # -----------------------
    # customers
    # -----------------------
    def insert_customer(self, customer: Customer) -> None:
        with self._lock:
            if customer.id in self._customers:
                raise KeyError(f"duplicate customer id {customer.id}")
            self._customers[customer.id] = replace(customer, downline=())
            referrer = self._customers.get(customer.referred_by or "")
            if referrer is not None and customer.id not in referrer.downline:
                self._customers[referrer.id] = replace(referrer, downline=referrer.downline + (customer.id,))

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        with self._lock:
            return self._customers.get(customer_id)

    def find_customer_by_phone(self, phone: str) -> Optional[Customer]:
        with self._lock:
            for customer in self._customers.values():
                if customer.phone == phone:
                    return customer
        return None

    def list_customers(self, *, search: Optional[str] = None) -> list[Customer]:
        needle = (search or "").strip().lower()
        with self._lock:
            customers = list(self._customers.values())
        if needle:
            customers = [c for c in customers if needle in c.name.lower() or needle in c.phone]
        return customers

    def update_customer(self, customer: Customer) -> bool:
        with self._lock:
            current = self._customers.get(customer.id)
            if current is None:
                return False
            self._customers[customer.id] = replace(
                current,
                **{name: getattr(customer, name) for name in PROFILE_FIELDS},
            )
            return True

    # -----------------------
    # pricing
    # -----------------------
    def get_price_tiers(self) -> list[PriceTier]:
        with self._lock:
            return list(self._tiers)

    def replace_price_tiers(self, tiers: Iterable[PriceTier]) -> None:
        with self._lock:
            self._tiers = list(tiers)
