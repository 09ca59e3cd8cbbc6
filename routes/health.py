from __future__ import annotations

import os

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.store.base import Store
from deps.store import get_store
from services.metrics import render_prometheus
from settings import settings

router = APIRouter(tags=["health"])


def _resolve_git_sha() -> str | None:
    return (os.getenv("GIT_SHA") or "").strip() or None


@router.get("/health")
def health():
    return {
        "ok": True,
        "env": settings.ENV,
        "store": settings.STORE_BACKEND,
        "version": os.getenv("APP_VERSION", "1.0.0"),
        "git_sha": _resolve_git_sha(),
    }


@router.get("/readyz")
def readyz(store: Store = Depends(get_store)):
    store_ok, store_error = store.ping()
    return {
        "ready": bool(store_ok),
        "version": os.getenv("APP_VERSION", "1.0.0"),
        "git_sha": _resolve_git_sha(),
        "store": settings.STORE_BACKEND,
        "store_ok": store_ok,
        "store_error": store_error,
    }


@router.get("/metrics")
def metrics():
    body = render_prometheus()
    return Response(content=body, media_type="text/plain; version=0.0.4")
