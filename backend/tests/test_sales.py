def test_cash_sale_draws_from_tank(client, seed, tank_level):
    resp = client.post(
        "/api/sales",
        json={"tank_id": seed["petrol_tank"], "pump_id": seed["petrol_pump"], "litres": 20, "sale_date": "2026-10-01"},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["method"] == "CASH"
    assert float(body["total_amount"]) == 200.0
    assert float(body["cost_per_litre"]) == 7.0
    assert float(body["profit"]) == 60.0
    assert tank_level(seed["petrol_tank"]) == 480.0

    assert len(client.get("/api/sales").json()) == 1


def test_sale_beyond_stock_is_rejected(client, seed, tank_level):
    resp = client.post("/api/sales", json={"tank_id": seed["petrol_tank"], "litres": 501})
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "InsufficientStock"
    assert tank_level(seed["petrol_tank"]) == 500.0


def test_sale_pump_must_match_tank_fuel(client, seed):
    resp = client.post(
        "/api/sales",
        json={"tank_id": seed["petrol_tank"], "pump_id": seed["diesel_pump"], "litres": 5},
    )
    assert resp.status_code == 400


def test_credit_sale_charges_client(client, seed, make_client, tank_level):
    account = make_client(credit_limit=300)
    resp = client.post(
        "/api/sales",
        json={"tank_id": seed["petrol_tank"], "litres": 25, "method": "CREDIT", "client_id": account["client_id"]},
    )
    assert resp.status_code == 201, resp.text
    assert tank_level(seed["petrol_tank"]) == 475.0

    clients = client.get("/api/clients").json()
    assert float(clients[0]["balance"]) == 250.0

    over = client.post(
        "/api/sales",
        json={"tank_id": seed["petrol_tank"], "litres": 10, "method": "CREDIT", "client_id": account["client_id"]},
    )
    assert over.status_code == 400
    assert over.json()["detail"]["error"] == "CreditLimitExceeded"
    assert tank_level(seed["petrol_tank"]) == 475.0


def test_credit_sale_needs_client(client, seed):
    resp = client.post("/api/sales", json={"tank_id": seed["petrol_tank"], "litres": 5, "method": "CREDIT"})
    assert resp.status_code == 400


def test_unknown_sale_method_is_a_validation_error(client, seed):
    resp = client.post("/api/sales", json={"tank_id": seed["petrol_tank"], "litres": 5, "method": "BARTER"})
    assert resp.status_code == 422
