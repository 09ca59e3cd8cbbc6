from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import _auth_headers


def test_billing_list_admin_only(client: TestClient, admin, warehouse):
    r = client.get("/v1/billing", headers=_auth_headers(warehouse.token))
    assert r.status_code == 403, r.text

    r = client.get("/v1/billing", headers=_auth_headers(admin.token))
    assert r.status_code == 200, r.text
    items = {i["order_id"]: i for i in r.json()["items"]}
    assert set(items) == {"ORD-001", "ORD-002"}
    assert items["ORD-001"]["settlement"]["customer_payout"] == 154000
    assert items["ORD-002"]["settlement"]["courier_fee"] == 48 * 500


def test_billing_status_filter(client: TestClient, admin):
    r = client.get("/v1/billing", params={"status": "VERIFIED"}, headers=_auth_headers(admin.token))
    assert r.status_code == 200, r.text
    assert [i["order_id"] for i in r.json()["items"]] == ["ORD-002"]

    r = client.get("/v1/billing", params={"status": "PENDING"}, headers=_auth_headers(admin.token))
    assert r.status_code == 422, r.text


def test_courier_earnings(client: TestClient, courier, admin):
    r = client.get("/v1/couriers/me/earnings", headers=_auth_headers(courier.token))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["courier_id"] == "user-2"
    assert body["total_liters"] == 37
    assert body["total_earnings"] == 18500

    r = client.get("/v1/couriers/me/earnings", headers=_auth_headers(admin.token))
    assert r.status_code == 403, r.text


def test_price_tiers_read_and_replace(client: TestClient, admin, courier):
    r = client.get("/v1/settings/price-tiers", headers=_auth_headers(courier.token))
    assert r.status_code == 200, r.text
    body = r.json()
    assert [t["price_per_liter"] for t in body["tiers"]] == [7000, 7500, 8000]
    assert body["tiers"][-1]["max_liter"] is None
    assert body["courier_fee_per_liter"] == 500
    assert body["affiliate_fee_per_liter"] == 200

    new_tiers = {"tiers": [{"min_liter": 0, "max_liter": 30, "price_per_liter": 6500}, {"min_liter": 31, "price_per_liter": 9000}]}
    r = client.put("/v1/settings/price-tiers", json=new_tiers, headers=_auth_headers(courier.token))
    assert r.status_code == 403, r.text

    r = client.put("/v1/settings/price-tiers", json=new_tiers, headers=_auth_headers(admin.token))
    assert r.status_code == 200, r.text
    assert [t["price_per_liter"] for t in r.json()["tiers"]] == [6500, 9000]

    # the next settlement uses the new table
    r = client.get("/v1/orders/ORD-001/settlement", headers=_auth_headers(admin.token))
    assert r.json()["unit_price"] == 6500


def test_price_tiers_rejects_invalid(client: TestClient, admin):
    r = client.put("/v1/settings/price-tiers", json={"tiers": []}, headers=_auth_headers(admin.token))
    assert r.status_code == 422, r.text

    bad = {"tiers": [{"min_liter": 10, "max_liter": 5, "price_per_liter": 1000}]}
    r = client.put("/v1/settings/price-tiers", json=bad, headers=_auth_headers(admin.token))
    assert r.status_code == 422, r.text
    assert r.json()["detail"]["error"] == "VALIDATION_ERROR"


def test_billing_lists_order_with_no_matching_tier(client: TestClient, admin):
    r = client.put(
        "/v1/settings/price-tiers",
        json={
            "tiers": [
                {"min_liter": 0, "max_liter": 20, "price_per_liter": 7000},
                {"min_liter": 31, "max_liter": None, "price_per_liter": 7500},
            ]
        },
        headers=_auth_headers(admin.token),
    )
    assert r.status_code == 200, r.text

    r = client.get("/v1/billing", headers=_auth_headers(admin.token))
    assert r.status_code == 200, r.text
    items = {i["order_id"]: i for i in r.json()["items"]}
    assert items["ORD-001"]["settlement"] is None
    assert items["ORD-001"]["error"] == "NO_TIER_MATCHED"
    assert items["ORD-002"]["settlement"]["unit_price"] == 7500
    assert items["ORD-002"]["error"] is None
