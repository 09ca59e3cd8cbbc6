import httpx

import services.notifications as notifications
from services.metrics import counter_value
from settings import settings


class FakeResponse:
    def __init__(self, status_code: int):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("POST", "https://hooks.example/paid")
            raise httpx.HTTPStatusError("bad status", request=request, response=httpx.Response(self.status_code, request=request))


def test_message_contents(store):
    order = store.get_order("ORD-001")
    msg = notifications.payment_confirmed_message(order, store.get_customer("cust-1"))
    assert msg["event"] == "order_paid"
    assert msg["order_id"] == "ORD-001"
    assert msg["actual_liters"] == 22
    assert "Warung Bu Siti" in msg["message"]


def test_skipped_without_webhook(store):
    assert notifications.notify_payment_confirmed(store.get_order("ORD-001"), None) is False
    assert counter_value("payment_notifications_total", {"result": "skipped"}) == 1


def test_sent(store, monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json, timeout))
        return FakeResponse(202)

    monkeypatch.setattr(settings, "NOTIFY_WEBHOOK_URL", "https://hooks.example/paid", raising=False)
    monkeypatch.setattr(notifications.httpx, "post", fake_post)

    assert notifications.notify_payment_confirmed(store.get_order("ORD-001"), store.get_customer("cust-1")) is True
    assert calls[0][0] == "https://hooks.example/paid"
    assert calls[0][1]["order_id"] == "ORD-001"
    assert calls[0][2] == settings.NOTIFY_HTTP_TIMEOUT_S
    assert counter_value("payment_notifications_total", {"result": "sent"}) == 1


def test_failure_is_reported_not_raised(store, monkeypatch):
    monkeypatch.setattr(settings, "NOTIFY_WEBHOOK_URL", "https://hooks.example/paid", raising=False)
    monkeypatch.setattr(notifications.httpx, "post", lambda *a, **kw: FakeResponse(500))
    assert notifications.notify_payment_confirmed(store.get_order("ORD-001"), None) is False

    def refuse(*args, **kwargs):
        raise httpx.ConnectError("refused")

    monkeypatch.setattr(notifications.httpx, "post", refuse)
    assert notifications.notify_payment_confirmed(store.get_order("ORD-001"), None) is False
    assert counter_value("payment_notifications_total", {"result": "failed"}) == 2
