# app/customers/repository.py
from __future__ import annotations

from typing import Any, Optional

from app.customers.model import PROFILE_FIELDS, Customer

CUSTOMER_COLUMNS = (
    "id",
    "name",
    "phone",
    "address",
    "district",
    "city",
    "bank_account",
    "share_location",
    "total_liters",
    "referred_by",
)

_SELECT_CUSTOMERS = f"""
    SELECT {', '.join('c.' + col for col in CUSTOMER_COLUMNS)},
      COALESCE(
        (SELECT array_agg(d.id ORDER BY d.created_at, d.id) FROM app.customers d WHERE d.referred_by = c.id),
        ARRAY[]::text[]
      ) AS downline
    FROM app.customers c
"""


def row_to_customer(row: dict[str, Any]) -> Customer:
    return Customer(
        id=str(row["id"]),
        name=str(row["name"]),
        phone=str(row["phone"]),
        address=str(row["address"] or ""),
        district=str(row["district"]),
        city=str(row["city"]),
        bank_account=str(row["bank_account"] or ""),
        share_location=str(row.get("share_location") or ""),
        total_liters=int(row.get("total_liters") or 0),
        referred_by=(str(row["referred_by"]) if row.get("referred_by") else None),
        downline=tuple(str(x) for x in (row.get("downline") or [])),
    )


def _fetch_dicts(cur) -> list[dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def insert_customer(conn, customer: Customer) -> None:
    with conn.cursor() as cur:
        cur.execute(
            f"""
            INSERT INTO app.customers ({', '.join(CUSTOMER_COLUMNS)})
            VALUES ({', '.join(['%s'] * len(CUSTOMER_COLUMNS))})
            """,
            tuple(getattr(customer, col) for col in CUSTOMER_COLUMNS),
        )


def get_customer(conn, customer_id: str) -> Optional[Customer]:
    with conn.cursor() as cur:
        cur.execute(f"{_SELECT_CUSTOMERS} WHERE c.id = %s LIMIT 1", (customer_id,))
        rows = _fetch_dicts(cur)
    return row_to_customer(rows[0]) if rows else None


def find_customer_by_phone(conn, phone: str) -> Optional[Customer]:
    with conn.cursor() as cur:
        cur.execute(f"{_SELECT_CUSTOMERS} WHERE c.phone = %s LIMIT 1", (phone,))
        rows = _fetch_dicts(cur)
    return row_to_customer(rows[0]) if rows else None


def list_customers(conn, *, search: Optional[str] = None) -> list[Customer]:
    sql = _SELECT_CUSTOMERS
    params: tuple[Any, ...] = ()
    if search:
        sql += " WHERE c.name ILIKE %s OR c.phone ILIKE %s"
        like = f"%{search.strip()}%"
        params = (like, like)
    sql += " ORDER BY c.created_at, c.id"
    with conn.cursor() as cur:
        cur.execute(sql, params)
        rows = _fetch_dicts(cur)
    return [row_to_customer(r) for r in rows]


def add_collected_liters(conn, customer_id: str, liters: int) -> bool:
    with conn.cursor() as cur:
        cur.execute(
            """
            UPDATE app.customers
            SET total_liters = total_liters + %s, updated_at = now()
            WHERE id = %s
            """,
            (int(liters), customer_id),
        )
        return cur.rowcount == 1


def update_customer_profile(conn, customer: Customer) -> bool:
    with conn.cursor() as cur:
        cur.execute(
            f"""
            UPDATE app.customers
            SET {', '.join(f'{col} = %s' for col in PROFILE_FIELDS)}, updated_at = now()
            WHERE id = %s
            """,
            tuple(getattr(customer, col) for col in PROFILE_FIELDS) + (customer.id,),
        )
        return cur.rowcount == 1
