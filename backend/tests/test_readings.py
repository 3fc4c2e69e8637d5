from datetime import date

from fuelstation.core.config import settings

DAY = date(2026, 10, 1).isoformat()


def _reading(pump_id, closing, opening=0, day=DAY, price=None):
    body = {"pump_id": pump_id, "reading_date": day, "opening_litres": opening, "closing_litres": closing}
    if price is not None:
        body["price_per_litre"] = price
    return body


def test_reading_reduces_tank_and_prices_revenue(client, seed, tank_level):
    resp = client.post("/api/readings", json=_reading(seed["petrol_pump"], 50))
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert float(body["fuel_sold"]) == 50.0
    assert float(body["reading"]["revenue"]) == 500.0
    assert float(body["reading"]["price_per_litre"]) == 10.0
    assert float(body["tank_level"]) == 450.0
    assert body["updated"] is False
    assert tank_level(seed["petrol_tank"]) == 450.0


def test_explicit_price_overrides_active_price(client, seed):
    resp = client.post("/api/readings", json=_reading(seed["diesel_pump"], 10, price=8.5))
    assert resp.status_code == 201, resp.text
    assert float(resp.json()["reading"]["revenue"]) == 85.0


def test_correction_only_moves_tank_by_difference(client, seed, tank_level):
    client.post("/api/readings", json=_reading(seed["petrol_pump"], 50))

    resp = client.post("/api/readings", json=_reading(seed["petrol_pump"], 80))
    assert resp.status_code == 201, resp.text
    assert resp.json()["updated"] is True
    assert float(resp.json()["net_delta"]) == 30.0
    assert tank_level(seed["petrol_tank"]) == 420.0

    resp = client.post("/api/readings", json=_reading(seed["petrol_pump"], 20))
    assert float(resp.json()["net_delta"]) == -60.0
    assert tank_level(seed["petrol_tank"]) == 480.0

    listed = client.get("/api/readings", params={"date": DAY}).json()
    assert len(listed) == 1
    assert float(listed[0]["closing_litres"]) == 20.0


def test_closing_below_opening_is_rejected(client, seed, tank_level):
    resp = client.post("/api/readings", json=_reading(seed["petrol_pump"], 10, opening=20))
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "InvalidInput"
    assert tank_level(seed["petrol_tank"]) == 500.0


def test_reading_beyond_stock_is_rejected(client, seed, tank_level):
    resp = client.post("/api/readings", json=_reading(seed["petrol_pump"], 600))
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["error"] == "InsufficientStock"
    assert detail["details"]["available_fuel"] == 500.0
    assert tank_level(seed["petrol_tank"]) == 500.0
    assert client.get("/api/readings", params={"date": DAY}).json() == []


def test_reading_for_unknown_pump(client, seed):
    resp = client.post("/api/readings", json=_reading(999, 10))
    assert resp.status_code == 404
    assert resp.json()["detail"]["error"] == "NotFound"


def test_reading_without_active_tank(client, seed):
    client.delete(f"/api/tanks/{seed['premium_tank']}")
    resp = client.post("/api/readings", json=_reading(seed["premium_pump"], 10))
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "NoActiveTank"


def test_bulk_readings_apply_one_change_per_fuel_type(client, seed, tank_level):
    resp = client.post(
        "/api/readings/bulk",
        json={
            "readings": [
                _reading(seed["petrol_pump"], 30),
                _reading(seed["diesel_pump"], 100),
                _reading(seed["petrol_pump"], 20, day="2026-10-02"),
            ]
        },
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["count"] == 3
    deltas = {item["tank_id"]: float(item["net_delta"]) for item in body["tank_adjustments"]}
    assert deltas == {seed["petrol_tank"]: 50.0, seed["diesel_tank"]: 100.0}
    assert tank_level(seed["petrol_tank"]) == 450.0
    assert tank_level(seed["diesel_tank"]) == 1400.0


def test_bulk_readings_are_all_or_nothing(client, seed, tank_level):
    resp = client.post(
        "/api/readings/bulk",
        json={"readings": [_reading(seed["petrol_pump"], 30), _reading(999, 10)]},
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["details"]["index"] == 1
    assert tank_level(seed["petrol_tank"]) == 500.0
    assert client.get("/api/readings", params={"date": DAY}).json() == []


def test_bulk_readings_rejects_duplicates(client, seed):
    resp = client.post(
        "/api/readings/bulk",
        json={"readings": [_reading(seed["petrol_pump"], 30), _reading(seed["petrol_pump"], 40)]},
    )
    assert resp.status_code == 400
    assert "Duplicate" in resp.json()["detail"]["message"]


def test_bulk_readings_combined_stock_check(client, seed, tank_level):
    # Each day fits on its own, together they exceed the tank.
    resp = client.post(
        "/api/readings/bulk",
        json={
            "readings": [
                _reading(seed["petrol_pump"], 300),
                _reading(seed["petrol_pump"], 300, day="2026-10-02"),
            ]
        },
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "InsufficientStock"
    assert tank_level(seed["petrol_tank"]) == 500.0


def test_bulk_readings_limit(client, seed):
    readings = [
        _reading(seed["diesel_pump"], 1, day=date.fromordinal(date(2026, 1, 1).toordinal() + i).isoformat())
        for i in range(settings.MAX_BULK_READINGS + 1)
    ]
    resp = client.post("/api/readings/bulk", json={"readings": readings})
    assert resp.status_code == 400
    assert resp.json()["detail"]["details"]["max"] == settings.MAX_BULK_READINGS


def test_upload_reading_sheet(client, seed, tank_level):
    csv = (
        "Pump,Date,Opening,Closing,Rate\n"
        "Pump 1,2026-10-01,100,140,\n"
        f"{seed['diesel_pump']},2026-10-01,0,10,9.5\n"
    )
    resp = client.post(
        "/api/readings/upload-excel",
        files={"file": ("readings.csv", csv.encode(), "text/csv")},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["count"] == 2
    assert tank_level(seed["petrol_tank"]) == 460.0
    assert tank_level(seed["diesel_tank"]) == 1490.0

    revenue = {r["pump_id"]: float(r["revenue"]) for r in resp.json()["readings"]}
    assert revenue[seed["petrol_pump"]] == 400.0
    assert revenue[seed["diesel_pump"]] == 95.0


def test_upload_rejects_unknown_pump_and_bad_files(client, seed):
    csv = "Pump,Date,Opening,Closing\nPump 9,2026-10-01,0,10\n"
    resp = client.post(
        "/api/readings/upload-excel",
        files={"file": ("readings.csv", csv.encode(), "text/csv")},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["details"]["row"] == 2

    resp = client.post(
        "/api/readings/upload-excel",
        files={"file": ("readings.txt", b"anything", "text/plain")},
    )
    assert resp.status_code == 400


def test_day_summary(client, seed):
    client.post("/api/readings", json=_reading(seed["petrol_pump"], 50))
    client.post("/api/readings", json=_reading(seed["diesel_pump"], 20))

    resp = client.get("/api/readings/summary", params={"date": DAY})
    assert resp.status_code == 200
    body = resp.json()
    assert body["readings"] == 2
    assert float(body["litres"]) == 70.0
    assert float(body["revenue"]) == 680.0
