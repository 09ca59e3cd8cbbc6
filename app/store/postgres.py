from __future__ import annotations

from typing import Iterable, Optional

from app.billing import repository as pricing_repo
from app.billing.pricing import PriceTier
from app.customers import repository as customers_repo
from app.customers.model import Customer
from app.orders import repository as orders_repo
from app.orders.model import Order, OrderEvent, OrderStatus
from app.store.base import Store
import db
from db import get_conn


class PostgresStore(Store):
    """Every call runs in its own get_conn() transaction."""

    def insert_order(self, order: Order) -> None:
        with get_conn() as conn:
            orders_repo.insert_order(conn, order)

    def get_order(self, order_id: str) -> Optional[Order]:
        with get_conn() as conn:
            return orders_repo.get_order(conn, order_id)

    def list_orders(
        self,
        *,
        statuses: Optional[Iterable[OrderStatus]] = None,
        courier_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Order]:
        with get_conn() as conn:
            return orders_repo.list_orders(
                conn,
                statuses=statuses,
                courier_id=courier_id,
                customer_id=customer_id,
                search=search,
            )

    def commit_transition(
        self,
        order: Order,
        *,
        from_status: OrderStatus,
        event: OrderEvent,
        credit_liters: int = 0,
    ) -> bool:
        with get_conn() as conn:
            if not orders_repo.update_order(conn, order, from_status=from_status):
                conn.rollback()
                return False
            orders_repo.insert_order_event(conn, event)
            if credit_liters and not customers_repo.add_collected_liters(conn, order.customer_id, credit_liters):
                raise KeyError(f"unknown customer {order.customer_id}")
            return True

    def list_events(self, order_id: str) -> list[OrderEvent]:
        with get_conn() as conn:
            return orders_repo.list_order_events(conn, order_id)

    def insert_customer(self, customer: Customer) -> None:
        with get_conn() as conn:
            customers_repo.insert_customer(conn, customer)

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        with get_conn() as conn:
            return customers_repo.get_customer(conn, customer_id)

    def find_customer_by_phone(self, phone: str) -> Optional[Customer]:
        with get_conn() as conn:
            return customers_repo.find_customer_by_phone(conn, phone)

    def list_customers(self, *, search: Optional[str] = None) -> list[Customer]:
        with get_conn() as conn:
            return customers_repo.list_customers(conn, search=search)

    def update_customer(self, customer: Customer) -> bool:
        with get_conn() as conn:
            return customers_repo.update_customer_profile(conn, customer)

    def get_price_tiers(self) -> list[PriceTier]:
        with get_conn() as conn:
            return pricing_repo.get_price_tiers(conn)

    def replace_price_tiers(self, tiers: Iterable[PriceTier]) -> None:
        with get_conn() as conn:
            pricing_repo.replace_price_tiers(conn, tiers)

    def ping(self) -> tuple[bool, Optional[str]]:
        try:
            db.ping()
            return True, None
        except Exception as exc:
            return False, f"{type(exc).__name__}: {exc}"
