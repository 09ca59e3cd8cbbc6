from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from app.billing.pricing import PriceTier
from app.customers.model import Customer
from app.orders.model import Order, OrderEvent, OrderStatus


class Store(ABC):
    """
    Durable record store as seen by the service layer. Each method is
    atomic; `commit_transition` writes the order, its audit event and any
    customer liter credit together or not at all.
    """

    # orders
    @abstractmethod
    def insert_order(self, order: Order) -> None: ...

    @abstractmethod
    def get_order(self, order_id: str) -> Optional[Order]: ...

    @abstractmethod
    def list_orders(
        self,
        *,
        statuses: Optional[Iterable[OrderStatus]] = None,
        courier_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Order]: ...

    @abstractmethod
    def commit_transition(
        self,
        order: Order,
        *,
        from_status: OrderStatus,
        event: OrderEvent,
        credit_liters: int = 0,
    ) -> bool:
        """False when the stored status no longer equals `from_status`."""

    @abstractmethod
    def list_events(self, order_id: str) -> list[OrderEvent]: ...

    # customers
    @abstractmethod
    def insert_customer(self, customer: Customer) -> None: ...

    @abstractmethod
    def get_customer(self, customer_id: str) -> Optional[Customer]: ...

    @abstractmethod
    def find_customer_by_phone(self, phone: str) -> Optional[Customer]: ...

    @abstractmethod
    def list_customers(self, *, search: Optional[str] = None) -> list[Customer]: ...

    @abstractmethod
    def update_customer(self, customer: Customer) -> bool:
        """Writes the profile fields only; liters and referral links are left as stored."""

    # pricing
    @abstractmethod
    def get_price_tiers(self) -> list[PriceTier]: ...

    @abstractmethod
    def replace_price_tiers(self, tiers: Iterable[PriceTier]) -> None: ...

    def ping(self) -> tuple[bool, Optional[str]]:
        return True, None
