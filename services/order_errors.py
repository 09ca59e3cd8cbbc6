# services/order_errors.py
from __future__ import annotations

import logging

from fastapi import HTTPException

from app.billing.errors import BrokenInvariant, NoTierMatched, NotSettleable, SettlementError
from app.orders.errors import (
    CustomerNotFound,
    OrderError,
    OrderNotFound,
    PayloadInvalid,
    RoleDenied,
    StateMismatch,
    TransitionRejected,
    ValidationError,
)

logger = logging.getLogger("jelantah.errors")

# most specific first; PayloadInvalid is also a ValidationError
ERROR_HTTP_MAP: list[tuple[type[Exception], int]] = [
    (StateMismatch, 409),
    (RoleDenied, 403),
    (PayloadInvalid, 422),
    (ValidationError, 422),
    (OrderNotFound, 404),
    (CustomerNotFound, 404),
    (NoTierMatched, 422),
    (NotSettleable, 409),
    (BrokenInvariant, 500),
]


def http_status_for(exc: Exception) -> int:
    for exc_type, status in ERROR_HTTP_MAP:
        if isinstance(exc, exc_type):
            return status
    return 500


def error_detail(exc: Exception) -> dict:
    detail = {
        "error": getattr(exc, "code", "INTERNAL_ERROR"),
        "message": str(exc),
        "retryable": bool(getattr(exc, "retryable", False)),
    }
    if isinstance(exc, TransitionRejected):
        detail["check"] = exc.check
        if exc.transition:
            detail["transition"] = exc.transition
    return detail


def raise_http_from_core_error(exc: Exception) -> None:
    """
    Convert a core error into an HTTP response. Broken invariants are
    logged and returned without internals; unknown errors fail closed.
    """
    if isinstance(exc, BrokenInvariant):
        logger.error("broken invariant: %s", exc)
        raise HTTPException(
            status_code=500,
            detail={"error": exc.code, "message": "Order record is inconsistent", "retryable": False},
        )

    if isinstance(exc, (OrderError, SettlementError)):
        raise HTTPException(status_code=http_status_for(exc), detail=error_detail(exc))

    raise HTTPException(status_code=500, detail="Internal server error")
