# app/orders/errors.py
from __future__ import annotations

from typing import Optional


class OrderError(Exception):
    code = "ORDER_ERROR"
    retryable = False


class ValidationError(OrderError):
    code = "VALIDATION_ERROR"


class TransitionRejected(OrderError):
    """
    Base for every refused transition. `check` names the failed check so
    callers can pick user-facing wording without parsing messages.
    """

    code = "TRANSITION_REJECTED"
    check = "unknown"

    def __init__(self, message: str, *, order_id: Optional[str] = None, transition: Optional[str] = None):
        super().__init__(message)
        self.order_id = order_id
        self.transition = transition


class StateMismatch(TransitionRejected):
    # stale view or lost race; re-fetch and retry
    code = "STATE_MISMATCH"
    check = "state"
    retryable = True


class RoleDenied(TransitionRejected):
    code = "ROLE_DENIED"
    check = "role"


class PayloadInvalid(TransitionRejected, ValidationError):
    code = "PAYLOAD_INVALID"
    check = "payload"


class OrderNotFound(OrderError):
    code = "ORDER_NOT_FOUND"


class CustomerNotFound(OrderError):
    code = "CUSTOMER_NOT_FOUND"
