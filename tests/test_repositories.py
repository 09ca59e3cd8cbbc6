from datetime import datetime, timezone

import pytest

from app.billing import repository as pricing_repo
from app.billing.pricing import PriceTier
from app.customers import repository as customers_repo
from app.customers.repository import row_to_customer
from app.orders import repository as orders_repo
from app.orders.model import OrderStatus


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = conn.rowcount
        self.description = [(c,) for c in conn.columns]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, sql, params=None):
        self.conn.executed.append((" ".join(sql.split()), params))

    def fetchall(self):
        return list(self.conn.rows)


class FakeConn:
    def __init__(self, *, rows=(), columns=(), rowcount=1):
        self.rows = rows
        self.columns = columns
        self.rowcount = rowcount
        self.executed = []

    def cursor(self):
        return FakeCursor(self)


def _row(**overrides):
    row = {
        "id": "ORD-001",
        "customer_id": "cust-1",
        "customer_name": "Warung Bu Siti",
        "customer_phone": "081234567890",
        "customer_district": "Coblong",
        "customer_city": "Bandung",
        "estimated_liters": 20,
        "status": "COMPLETED",
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "actual_liters": 22,
        "courier_id": "user-2",
        "pickup_evidence_ref": "evidence/p.jpg",
        "payment_evidence_ref": None,
    }
    row.update(overrides)
    return row


def test_row_to_order():
    order = orders_repo.row_to_order(_row())
    assert order.status == OrderStatus.COMPLETED
    assert order.actual_liters == 22
    assert order.payment_evidence_ref is None


def test_row_to_order_rejects_inconsistent_rows():
    with pytest.raises(ValueError):
        orders_repo.row_to_order(_row(actual_liters=None))
    with pytest.raises(ValueError):
        orders_repo.row_to_order(_row(status="PENDING"))


def test_update_order_is_compare_and_set():
    order = orders_repo.row_to_order(_row(status="VERIFIED"))
    conn = FakeConn(rowcount=1)
    assert orders_repo.update_order(conn, order, from_status=OrderStatus.COMPLETED) is True
    sql, params = conn.executed[0]
    assert "WHERE id = %s AND status = %s" in sql
    assert params[0] == "VERIFIED"
    assert params[-2:] == ("ORD-001", "COMPLETED")

    lost = FakeConn(rowcount=0)
    assert orders_repo.update_order(lost, order, from_status=OrderStatus.COMPLETED) is False


def test_list_orders_builds_filters():
    columns = list(orders_repo.ORDER_COLUMNS)
    row = _row()
    conn = FakeConn(rows=[tuple(row[c] for c in columns)], columns=columns)
    orders = orders_repo.list_orders(conn, statuses=[OrderStatus.COMPLETED], courier_id="user-2", search="siti")
    assert [o.id for o in orders] == ["ORD-001"]
    sql, params = conn.executed[0]
    assert "status = ANY(%s)" in sql
    assert "ILIKE" in sql
    assert params[-1] == 500


def test_row_to_customer_defaults():
    customer = row_to_customer(
        {
            "id": "cust-9",
            "name": "Warung",
            "phone": "0811",
            "address": None,
            "district": "Coblong",
            "city": "Bandung",
            "bank_account": None,
            "share_location": None,
            "total_liters": None,
            "referred_by": None,
            "downline": None,
        }
    )
    assert customer.address == ""
    assert customer.total_liters == 0
    assert customer.downline == ()


def test_replace_price_tiers_keeps_order():
    conn = FakeConn()
    pricing_repo.replace_price_tiers(conn, [PriceTier(0, 50, 7000), PriceTier(51, None, 8000)])
    assert conn.executed[0][0] == "DELETE FROM app.price_tiers"
    assert [p for _, p in conn.executed[1:]] == [(0, 0, 50, 7000), (1, 51, None, 8000)]


def test_get_price_tiers():
    conn = FakeConn(rows=[(0, 50, 7000), (51, None, 8000)])
    tiers = pricing_repo.get_price_tiers(conn)
    assert tiers == [PriceTier(0, 50, 7000), PriceTier(51, None, 8000)]


def test_update_customer_profile_leaves_liters_and_referrals():
    customer = row_to_customer(
        {
            "id": "cust-1",
            "name": "Warung Bu Siti",
            "phone": "081234567890",
            "address": "Jl. Dago",
            "district": "Coblong",
            "city": "Bandung",
            "bank_account": "BCA 1234",
            "share_location": "",
            "total_liters": 40,
            "referred_by": "cust-2",
        }
    )
    conn = FakeConn(rowcount=1)
    assert customers_repo.update_customer_profile(conn, customer) is True
    sql, params = conn.executed[0]
    assert sql.startswith("UPDATE app.customers SET name = %s")
    assert "total_liters" not in sql
    assert "referred_by" not in sql
    assert params[-1] == "cust-1"

    assert customers_repo.update_customer_profile(FakeConn(rowcount=0), customer) is False
