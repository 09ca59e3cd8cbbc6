from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.customers.model import Customer
from app.orders.model import Order, OrderStatus
from app.store.base import Store

DEMO_CUSTOMERS: tuple[Customer, ...] = (
    Customer(
        id="cust-1",
        name="Warung Bu Siti",
        phone="081234567890",
        address="Jl. Merdeka No. 1",
        district="Coblong",
        city="Bandung",
        share_location="https://maps.google.com/123",
        bank_account="BCA 1234567890",
        total_liters=120,
    ),
    Customer(
        id="cust-2",
        name="Restoran Padang Jaya",
        phone="089876543210",
        address="Jl. Sudirman No. 10",
        district="Andir",
        city="Bandung",
        share_location="https://maps.google.com/456",
        bank_account="Mandiri 0987654321",
        total_liters=450,
    ),
    Customer(
        id="cust-3",
        name="Katering Sehat",
        phone="081122334455",
        address="Jl. Asia Afrika No. 5",
        district="Sumur Bandung",
        city="Bandung",
        share_location="https://maps.google.com/789",
        bank_account="BNI 1122334455",
        total_liters=80,
        referred_by="cust-2",
    ),
)


def demo_orders(now: datetime | None = None) -> list[Order]:
    now = now or datetime.now(timezone.utc)
    by_id = {c.id: c for c in DEMO_CUSTOMERS}

    def order(order_id: str, customer_id: str, estimated: int, status: OrderStatus, age_days: int, **extra) -> Order:
        c = by_id[customer_id]
        return Order(
            id=order_id,
            customer_id=c.id,
            customer_name=c.name,
            customer_phone=c.phone,
            customer_district=c.district,
            customer_city=c.city,
            estimated_liters=estimated,
            status=status,
            created_at=now - timedelta(days=age_days),
            **extra,
        )

    return [
        order(
            "ORD-001", "cust-1", 20, OrderStatus.PAID, 3,
            actual_liters=22,
            courier_id="user-2",
            pickup_evidence_ref="evidence/pickup1.jpg",
            payment_evidence_ref="evidence/payment1.jpg",
        ),
        order(
            "ORD-002", "cust-2", 50, OrderStatus.VERIFIED, 2,
            actual_liters=48,
            courier_id="user-3",
            pickup_evidence_ref="evidence/pickup2.jpg",
        ),
        order(
            "ORD-003", "cust-3", 15, OrderStatus.COMPLETED, 1,
            actual_liters=15,
            courier_id="user-2",
            pickup_evidence_ref="evidence/pickup3.jpg",
        ),
        order("ORD-004", "cust-1", 25, OrderStatus.ASSIGNED, 0, courier_id="user-3"),
        order("ORD-005", "cust-2", 60, OrderStatus.PENDING, 0),
    ]


def seed_demo_data(store: Store) -> None:
    for customer in DEMO_CUSTOMERS:
        store.insert_customer(customer)
    for o in demo_orders():
        store.insert_order(o)
