from __future__ import annotations

import csv
import io
from typing import Iterable

from app.orders.model import Order

# column layout of the operations spreadsheet
ORDER_EXPORT_HEADERS = [
    "Order ID",
    "Customer Name",
    "Phone",
    "Kecamatan",
    "Kota",
    "Estimated Liters",
    "Actual Liters",
    "Status",
    "Created At",
    "Courier ID",
]


def order_export_row(order: Order) -> list[str]:
    return [
        order.id,
        order.customer_name,
        order.customer_phone,
        order.customer_district,
        order.customer_city,
        str(order.estimated_liters),
        str(order.actual_liters) if order.actual_liters is not None else "N/A",
        order.status.value,
        order.created_at.isoformat(),
        order.courier_id or "N/A",
    ]


def csv_stream(headers: list[str], rows: Iterable[list[str]]) -> Iterable[str]:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    yield buffer.getvalue()
    buffer.seek(0)
    buffer.truncate(0)

    for row in rows:
        writer.writerow(row)
        yield buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)
