from __future__ import annotations

from threading import Lock
from typing import Optional, Tuple

LabelKey = Tuple[Tuple[str, str], ...]

_HELP = {
    "http_requests_total": "HTTP requests by route template and status code.",
    "order_transitions_total": "Order transition attempts by transition and result.",
    "orders_created_total": "Pickup orders created by source.",
    "payment_notifications_total": "Payment-confirmed notifications by delivery result.",
}

_lock = Lock()
_counters: dict[str, dict[LabelKey, int]] = {}


def _key(labels: Optional[dict[str, str]]) -> LabelKey:
    return tuple(sorted((labels or {}).items()))


def _inc(name: str, labels: Optional[dict[str, str]] = None) -> None:
    with _lock:
        series = _counters.setdefault(name, {})
        key = _key(labels)
        series[key] = series.get(key, 0) + 1


def counter_value(name: str, labels: Optional[dict[str, str]] = None) -> int:
    with _lock:
        return _counters.get(name, {}).get(_key(labels), 0)


def reset_metrics() -> None:
    with _lock:
        _counters.clear()


def increment_http_requests(route: str, status: int) -> None:
    _inc("http_requests_total", {"route": route, "status": str(status)})


def increment_order_transition(transition: str, result: str) -> None:
    # result is "applied" or the lower-cased rejection code
    _inc("order_transitions_total", {"transition": transition, "result": result})


def increment_orders_created(source: str) -> None:
    _inc("orders_created_total", {"source": source})


def increment_notification(result: str) -> None:
    _inc("payment_notifications_total", {"result": result})


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def render_prometheus() -> str:
    """Text exposition format, one block per counter family."""
    out: list[str] = []
    with _lock:
        snapshot = {name: dict(series) for name, series in _counters.items()}

    for name in sorted(snapshot):
        if name in _HELP:
            out.append(f"# HELP {name} {_HELP[name]}")
        out.append(f"# TYPE {name} counter")
        for labels, value in sorted(snapshot[name].items()):
            if not labels:
                out.append(f"{name} {value}")
                continue
            rendered = ",".join(f'{k}="{_escape(v)}"' for k, v in labels)
            out.append(f"{name}{{{rendered}}} {value}")

    return "\n".join(out) + "\n" if out else ""
