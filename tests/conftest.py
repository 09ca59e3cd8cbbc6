# tests/conftest.py

from dataclasses import dataclass
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.orders.model import Actor, Role
from app.store.memory import MemoryStore
from app.store.seed import seed_demo_data
from deps.store import get_store
from main import create_app
from services.metrics import reset_metrics
from settings import settings


@dataclass
class AuthedActor:
    actor_id: str
    role: Role
    token: str
    customer_id: Optional[str] = None

    @property
    def actor(self) -> Actor:
        return Actor(actor_id=self.actor_id, role=self.role, customer_id=self.customer_id)


# ---------------------------
# Client + Auth Helpers
# ---------------------------

def _mint_token(sub: str, role: str, customer_id: Optional[str] = None) -> str:
    claims = {"sub": sub, "role": role}
    if customer_id:
        claims["customer_id"] = customer_id
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def _auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _authed(actor_id: str, role: Role, customer_id: Optional[str] = None) -> AuthedActor:
    return AuthedActor(
        actor_id=actor_id,
        role=role,
        token=_mint_token(actor_id, role.value, customer_id),
        customer_id=customer_id,
    )


@pytest.fixture(autouse=True)
def _clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture(autouse=True)
def _no_webhook(monkeypatch):
    # never reach the network from tests unless a test opts in
    monkeypatch.setattr(settings, "NOTIFY_WEBHOOK_URL", "", raising=False)


@pytest.fixture()
def store() -> MemoryStore:
    s = MemoryStore()
    seed_demo_data(s)
    return s


@pytest.fixture()
def empty_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def client(store: MemoryStore) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    # Needed so tests can assert 500s instead of pytest re-raising server exceptions
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def admin() -> AuthedActor:
    return _authed("user-1", Role.ADMIN)


@pytest.fixture()
def courier() -> AuthedActor:
    return _authed("user-2", Role.COURIER)


@pytest.fixture()
def courier2() -> AuthedActor:
    return _authed("user-3", Role.COURIER)


@pytest.fixture()
def warehouse() -> AuthedActor:
    return _authed("user-4", Role.WAREHOUSE)


@pytest.fixture()
def customer1() -> AuthedActor:
    return _authed("user-5", Role.CUSTOMER, customer_id="cust-1")
