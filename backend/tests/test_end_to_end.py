def test_reading_then_unload(client, seed, tank_level):
    tank_id = seed["petrol_tank"]
    assert tank_level(tank_id) == 500.0

    resp = client.post(
        "/api/readings",
        json={
            "pump_id": seed["petrol_pump"],
            "reading_date": "2026-10-01",
            "opening_litres": 0,
            "closing_litres": 50,
            "price_per_litre": 10,
        },
    )
    assert resp.status_code == 201, resp.text
    assert float(resp.json()["reading"]["revenue"]) == 500.0
    assert tank_level(tank_id) == 450.0

    purchase = client.post(
        "/api/purchases",
        json={"tank_id": tank_id, "litres": 200, "unit_cost": 8},
    ).json()
    resp = client.put(f"/api/purchases/{purchase['purchase_id']}/unload")
    assert resp.status_code == 200, resp.text
    assert float(resp.json()["new_level"]) == 650.0
    # (7 * 450 + 8 * 200) / 650
    assert float(resp.json()["avg_unit_cost"]) == 7.3077

    tank = next(t for t in client.get("/api/tanks").json() if t["tank_id"] == tank_id)
    assert float(tank["current_level"]) == 650.0
    assert float(tank["avg_unit_cost"]) == 7.3077
