from __future__ import annotations

import re
from typing import Any


# local (08xx...) and international (+62...) Indonesian numbers
_PHONE_RE = re.compile(r"(?<![\w])(?:\+62|62|0)8\d{7,12}\b")

# any key containing one of these is dropped entirely
_SECRET_MARKERS = ("token", "authorization", "secret", "password", "bank_account")
# free text mentioning these is treated as a credential dump
_SECRET_TEXT_MARKERS = ("access_token", "bearer")
# keys whose value is a phone number
_PHONE_KEYS = frozenset({"phone", "customer_phone"})

REDACTED = "[REDACTED]"


def mask_phone(value: str) -> str:
    """0812****90 style; short values are left alone."""
    if len(value) <= 6:
        return value
    return f"{value[:4]}****{value[-2:]}"


def redact_text(value: str) -> str:
    lowered = value.lower()
    if any(marker in lowered for marker in _SECRET_TEXT_MARKERS):
        return REDACTED
    return _PHONE_RE.sub(lambda m: mask_phone(m.group(0)), value)


def _redact_entry(key: str, value: Any) -> Any:
    key_l = (key or "").lower()
    if any(marker in key_l for marker in _SECRET_MARKERS):
        return REDACTED
    if key_l in _PHONE_KEYS and isinstance(value, str):
        return mask_phone(value)
    return redact_value(value)


def redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, dict):
        return redact_dict(value)
    if isinstance(value, (list, tuple)):
        return [redact_value(v) for v in value]
    return value


def redact_dict(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: _redact_entry(k, v) for k, v in payload.items()}
