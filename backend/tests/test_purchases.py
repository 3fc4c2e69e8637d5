from decimal import Decimal

from fuelstation.services.purchase_service import weighted_average_cost


def _purchase(client, tank_id, litres, unit_cost):
    resp = client.post(
        "/api/purchases",
        json={"tank_id": tank_id, "litres": litres, "unit_cost": unit_cost, "purchase_date": "2026-10-01"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_weighted_average_cost():
    assert weighted_average_cost(Decimal("7"), Decimal("450"), Decimal("8"), Decimal("200")) == Decimal("7.3077")
    assert weighted_average_cost(Decimal("0"), Decimal("0"), Decimal("8"), Decimal("200")) == Decimal("8.0000")


def test_purchase_is_pending_until_unloaded(client, seed, tank_level):
    purchase = _purchase(client, seed["petrol_tank"], 200, 8)
    assert purchase["status"] == "pending"
    assert float(purchase["total_cost"]) == 1600.0
    assert tank_level(seed["petrol_tank"]) == 500.0


def test_unload_applies_once(client, seed, tank_level):
    purchase = _purchase(client, seed["petrol_tank"], 200, 8)

    resp = client.put(f"/api/purchases/{purchase['purchase_id']}/unload")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert float(body["old_level"]) == 500.0
    assert float(body["new_level"]) == 700.0
    # (7 * 500 + 8 * 200) / 700
    assert float(body["avg_unit_cost"]) == 7.2857

    again = client.put(f"/api/purchases/{purchase['purchase_id']}/unload")
    assert again.status_code == 409
    assert again.json()["detail"]["error"] == "AlreadyProcessed"
    assert tank_level(seed["petrol_tank"]) == 700.0

    listed = client.get("/api/purchases", params={"purchase_status": "unloaded"}).json()
    assert [p["purchase_id"] for p in listed] == [purchase["purchase_id"]]
    assert listed[0]["unloaded_at"] is not None


def test_purchase_larger_than_free_space_is_rejected(client, seed):
    resp = client.post(
        "/api/purchases",
        json={"tank_id": seed["petrol_tank"], "litres": 600, "unit_cost": 8},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "InsufficientCapacity"


def test_unload_rechecks_space_at_unload_time(client, seed, tank_level):
    purchase = _purchase(client, seed["petrol_tank"], 400, 8)
    resp = client.put(f"/api/tanks/{seed['petrol_tank']}", json={"current_level": 900, "reason": "dip check"})
    assert resp.status_code == 200, resp.text

    resp = client.put(f"/api/purchases/{purchase['purchase_id']}/unload")
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "InsufficientCapacity"
    assert tank_level(seed["petrol_tank"]) == 900.0

    pending = client.get("/api/purchases", params={"purchase_status": "pending"}).json()
    assert [p["purchase_id"] for p in pending] == [purchase["purchase_id"]]


def test_unload_unknown_purchase(client, seed):
    resp = client.put("/api/purchases/999/unload")
    assert resp.status_code == 404


def test_purchase_prices(client, seed):
    resp = client.post(
        "/api/purchase-prices",
        json={"prices": {str(seed["petrol_tank"]): 8.25, str(seed["diesel_tank"]): 7.5}},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["count"] == 2

    client.post("/api/purchase-prices", json={"prices": {str(seed["petrol_tank"]): 8.4}})
    latest = client.get("/api/purchase-prices").json()
    assert float(latest[str(seed["petrol_tank"])]) == 8.4
    assert float(latest[str(seed["diesel_tank"])]) == 7.5


def test_purchase_price_must_be_positive(client, seed):
    resp = client.post("/api/purchase-prices", json={"prices": {str(seed["petrol_tank"]): 0}})
    assert resp.status_code == 400
