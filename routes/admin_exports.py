# routes/admin_exports.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from app.orders.model import Actor, OrderStatus, Role
from app.store.base import Store
from deps.auth import require_roles
from deps.store import get_store
from services.exports import ORDER_EXPORT_HEADERS, csv_stream, order_export_row

router = APIRouter(prefix="/v1/admin/exports", tags=["admin-exports"])


@router.get("/orders.csv")
def export_orders_csv(
    status: Optional[OrderStatus] = Query(default=None),
    admin: Actor = Depends(require_roles(Role.ADMIN)),
    store: Store = Depends(get_store),
):
    orders = store.list_orders(statuses=[status] if status else None)
    # spreadsheet rows read oldest first
    orders.sort(key=lambda o: (o.created_at, o.id))

    return StreamingResponse(
        csv_stream(ORDER_EXPORT_HEADERS, (order_export_row(o) for o in orders)),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="orders.csv"'},
    )
