from __future__ import annotations

from contextvars import ContextVar


_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_actor: ContextVar[str | None] = ContextVar("actor", default=None)


def set_request_id(value: str | None) -> None:
    _request_id.set(value)


def get_request_id() -> str | None:
    return _request_id.get()


def set_actor(actor_id: str | None, role: str | None = None) -> None:
    _actor.set(f"{role}:{actor_id}" if actor_id and role else actor_id)


def get_actor() -> str | None:
    return _actor.get()


def log_context() -> str:
    """Prefix for log lines emitted inside a request."""
    return f"request_id={get_request_id() or '-'} actor={get_actor() or '-'}"
