# app/orders/repository.py
from __future__ import annotations

from typing import Any, Iterable, Optional

from app.orders.model import Order, OrderEvent, OrderStatus, Role, Transition, assert_order_invariants

ORDER_COLUMNS = (
    "id",
    "customer_id",
    "customer_name",
    "customer_phone",
    "customer_district",
    "customer_city",
    "estimated_liters",
    "status",
    "created_at",
    "actual_liters",
    "courier_id",
    "pickup_evidence_ref",
    "payment_evidence_ref",
)

_SELECT_ORDERS = f"SELECT {', '.join(ORDER_COLUMNS)} FROM app.orders"


def row_to_order(row: dict[str, Any]) -> Order:
    order = Order(
        id=str(row["id"]),
        customer_id=str(row["customer_id"]),
        customer_name=str(row["customer_name"]),
        customer_phone=str(row["customer_phone"]),
        customer_district=str(row["customer_district"]),
        customer_city=str(row["customer_city"]),
        estimated_liters=int(row["estimated_liters"]),
        status=OrderStatus(str(row["status"])),
        created_at=row["created_at"],
        actual_liters=(int(row["actual_liters"]) if row.get("actual_liters") is not None else None),
        courier_id=(str(row["courier_id"]) if row.get("courier_id") else None),
        pickup_evidence_ref=row.get("pickup_evidence_ref") or None,
        payment_evidence_ref=row.get("payment_evidence_ref") or None,
    )
    # rows written outside the state machine still have to hold
    assert_order_invariants(order)
    return order


def _fetch_dicts(cur) -> list[dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def insert_order(conn, order: Order) -> None:
    with conn.cursor() as cur:
        cur.execute(
            f"""
            INSERT INTO app.orders ({', '.join(ORDER_COLUMNS)})
            VALUES ({', '.join(['%s'] * len(ORDER_COLUMNS))})
            """,
            tuple(
                getattr(order, col).value if col == "status" else getattr(order, col)
                for col in ORDER_COLUMNS
            ),
        )


def get_order(conn, order_id: str) -> Optional[Order]:
    with conn.cursor() as cur:
        cur.execute(f"{_SELECT_ORDERS} WHERE id = %s LIMIT 1", (order_id,))
        rows = _fetch_dicts(cur)
    return row_to_order(rows[0]) if rows else None


def list_orders(
    conn,
    *,
    statuses: Optional[Iterable[OrderStatus]] = None,
    courier_id: Optional[str] = None,
    customer_id: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 500,
) -> list[Order]:
    where: list[str] = []
    params: list[Any] = []

    status_values = [s.value for s in (statuses or [])]
    if status_values:
        where.append("status = ANY(%s)")
        params.append(status_values)
    if courier_id:
        where.append("courier_id = %s")
        params.append(courier_id)
    if customer_id:
        where.append("customer_id = %s")
        params.append(customer_id)
    if search:
        where.append("(id ILIKE %s OR customer_name ILIKE %s)")
        like = f"%{search.strip()}%"
        params.extend([like, like])

    sql = _SELECT_ORDERS
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY created_at DESC, id DESC LIMIT %s"
    params.append(limit)

    with conn.cursor() as cur:
        cur.execute(sql, tuple(params))
        rows = _fetch_dicts(cur)
    return [row_to_order(r) for r in rows]


def update_order(conn, order: Order, *, from_status: OrderStatus) -> bool:
    """
    Compare-and-set on status. Returns False when another writer moved the
    order first.
    """
    with conn.cursor() as cur:
        cur.execute(
            """
            UPDATE app.orders
            SET
              status = %s,
              courier_id = %s,
              actual_liters = %s,
              pickup_evidence_ref = %s,
              payment_evidence_ref = %s,
              updated_at = now()
            WHERE id = %s
              AND status = %s
            """,
            (
                order.status.value,
                order.courier_id,
                order.actual_liters,
                order.pickup_evidence_ref,
                order.payment_evidence_ref,
                order.id,
                from_status.value,
            ),
        )
        return cur.rowcount == 1


def insert_order_event(conn, event: OrderEvent) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO app.order_events
              (order_id, transition, from_status, to_status, actor_id, actor_role, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (
                event.order_id,
                event.transition.value,
                event.from_status.value,
                event.to_status.value,
                event.actor_id,
                event.actor_role.value,
                event.created_at,
            ),
        )


def list_order_events(conn, order_id: str) -> list[OrderEvent]:
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT order_id, transition, from_status, to_status, actor_id, actor_role, created_at
            FROM app.order_events
            WHERE order_id = %s
            ORDER BY created_at ASC, id ASC
            """,
            (order_id,),
        )
        rows = _fetch_dicts(cur)
    return [
        OrderEvent(
            order_id=str(r["order_id"]),
            transition=Transition(r["transition"]),
            from_status=OrderStatus(r["from_status"]),
            to_status=OrderStatus(r["to_status"]),
            actor_id=str(r["actor_id"]),
            actor_role=Role(r["actor_role"]),
            created_at=r["created_at"],
        )
        for r in rows
    ]
