from __future__ import annotations

import logging

from app.store.base import Store
from app.store.memory import MemoryStore
from app.store.seed import seed_demo_data
from settings import settings

logger = logging.getLogger("jelantah.store")

_store: Store | None = None


def build_store() -> Store:
    if settings.STORE_BACKEND == "postgres":
        from app.store.postgres import PostgresStore

        return PostgresStore()

    store = MemoryStore()
    if settings.SEED_DEMO_DATA:
        seed_demo_data(store)
    logger.info("memory store initialised seeded=%s", settings.SEED_DEMO_DATA)
    return store


def get_store() -> Store:
    global _store
    if _store is None:
        _store = build_store()
    return _store
