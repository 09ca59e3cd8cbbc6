# services/notifications.py
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.customers.model import Customer
from app.orders.model import Order
from services.metrics import increment_notification
from services.redaction import redact_dict
from settings import settings

logger = logging.getLogger("jelantah.notifications")


def payment_confirmed_message(order: Order, customer: Optional[Customer]) -> dict[str, Any]:
    name = customer.name if customer else order.customer_name
    return {
        "event": "order_paid",
        "order_id": order.id,
        "customer_id": order.customer_id,
        "customer_phone": customer.phone if customer else order.customer_phone,
        "actual_liters": order.actual_liters,
        "message": f"Pembayaran untuk order {order.id} telah dikonfirmasi untuk {name}.",
    }


def notify_payment_confirmed(order: Order, customer: Optional[Customer]) -> bool:
    """
    Best effort. Returns False on any delivery problem; the paid order is
    already committed and is never affected by this call.
    """
    payload = payment_confirmed_message(order, customer)
    url = (settings.NOTIFY_WEBHOOK_URL or "").strip()
    if not url:
        logger.info("payment notification skipped (no webhook) payload=%s", redact_dict(payload))
        increment_notification("skipped")
        return False

    try:
        resp = httpx.post(url, json=payload, timeout=settings.NOTIFY_HTTP_TIMEOUT_S)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("payment notification failed order_id=%s error=%s", order.id, type(exc).__name__)
        increment_notification("failed")
        return False

    logger.info("payment notification sent order_id=%s status=%s", order.id, resp.status_code)
    increment_notification("sent")
    return True
