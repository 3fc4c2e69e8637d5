from datetime import date, datetime, timezone

import pytest

from fuelstation.core.errors import InvalidInput
from fuelstation.models.enums import ReportPeriod
from fuelstation.services.report_service import period_window


def _today():
    return datetime.now(timezone.utc).date().isoformat()


def _balanced_day(client, seed, make_client, day):
    client.post(
        "/api/readings",
        json={"pump_id": seed["petrol_pump"], "reading_date": day, "opening_litres": 0, "closing_litres": 100},
    )
    client.post("/api/cash-receipts", json={"pump_id": seed["petrol_pump"], "receipt_date": day, "amount": 400})
    client.post("/api/online-payments", json={"payment_date": day, "amount": 200, "method": "UPI"})
    account = make_client(credit_limit=1000)
    credit = client.post(
        f"/api/clients/{account['client_id']}/credit",
        json={"fuel_type_id": seed["petrol"], "litres": 40, "price_per_litre": 10, "credit_date": day},
    )
    assert credit.status_code == 201, credit.text
    return credit.json()


def test_balanced_day(client, seed, make_client):
    day = _today()
    _balanced_day(client, seed, make_client, day)

    resp = client.get("/api/validation", params={"date": day})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert float(body["gross_sales"]) == 1000.0
    assert float(body["cash_receipts"]) == 400.0
    assert float(body["online_payments"]) == 200.0
    assert float(body["credit_payments"]) == 0.0
    assert float(body["credit_sales"]) == 400.0
    assert float(body["expected_total"]) == 1000.0
    assert float(body["difference"]) == 0.0
    assert body["is_balanced"] is True


def test_unbalanced_day(client, seed):
    day = _today()
    client.post(
        "/api/readings",
        json={"pump_id": seed["petrol_pump"], "reading_date": day, "opening_litres": 0, "closing_litres": 100},
    )
    client.post("/api/cash-receipts", json={"pump_id": seed["petrol_pump"], "receipt_date": day, "amount": 999})

    body = client.get("/api/validation", params={"date": day}).json()
    assert float(body["difference"]) == -1.0
    assert body["is_balanced"] is False


def test_cash_receipt_resubmission_replaces_amount(client, seed):
    day = _today()
    client.post("/api/cash-receipts", json={"pump_id": seed["petrol_pump"], "receipt_date": day, "amount": 100})
    client.post(
        "/api/cash-receipts/bulk",
        json={
            "receipts": [
                {"pump_id": seed["petrol_pump"], "receipt_date": day, "amount": 250},
                {"pump_id": seed["diesel_pump"], "receipt_date": day, "amount": 50},
            ]
        },
    )
    receipts = client.get("/api/cash-receipts", params={"date": day}).json()
    assert {r["pump_id"]: float(r["amount"]) for r in receipts} == {
        seed["petrol_pump"]: 250.0,
        seed["diesel_pump"]: 50.0,
    }
    body = client.get("/api/validation", params={"date": day}).json()
    assert float(body["cash_receipts"]) == 300.0


def test_settled_credit_counts_by_payment_method(client, seed, make_client):
    day = _today()
    credit = _balanced_day(client, seed, make_client, day)

    resp = client.put(f"/api/credits/{credit['credit_id']}/mark-paid", json={"payment_method": "Owner"})
    assert resp.status_code == 200
    body = client.get("/api/validation", params={"date": day}).json()
    assert float(body["owner_settled"]) == 400.0
    assert float(body["credit_payments"]) == 0.0
    assert float(body["total_received"]) == 600.0


def test_worker_settlement_is_received(client, seed, make_client):
    day = _today()
    credit = _balanced_day(client, seed, make_client, day)
    client.put(f"/api/credits/{credit['credit_id']}/mark-paid", json={"payment_method": "Worker"})

    body = client.get("/api/validation", params={"date": day}).json()
    assert float(body["credit_payments"]) == 400.0
    assert float(body["total_received"]) == 1000.0
    assert float(body["expected_total"]) == 1400.0


def test_summary_report_uses_default_margin_without_purchase_price(client, seed):
    client.post(
        "/api/readings",
        json={"pump_id": seed["petrol_pump"], "reading_date": "2026-10-01", "opening_litres": 0, "closing_litres": 100},
    )
    resp = client.get("/api/reports/summary", params={"period": "daily", "date": "2026-10-01"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    petrol = body["fuel_types"][0]
    assert petrol["fuel_type"] == "Petrol"
    assert petrol["cost_source"] == "default_margin"
    assert float(petrol["cost_per_litre"]) == 9.0
    assert float(petrol["profit"]) == 100.0
    assert float(body["totals"]["revenue"]) == 1000.0


def test_summary_report_uses_latest_purchase_price(client, seed):
    client.post(
        "/api/readings",
        json={"pump_id": seed["petrol_pump"], "reading_date": "2026-10-01", "opening_litres": 0, "closing_litres": 100},
    )
    client.post("/api/purchase-prices", json={"prices": {str(seed["petrol_tank"]): 8}})

    body = client.get(
        "/api/reports/summary", params={"period": "monthly", "date": "2026-10-15"}
    ).json()
    assert body["start"] == "2026-10-01"
    assert body["end"] == "2026-10-31"
    petrol = body["fuel_types"][0]
    assert petrol["cost_source"] == "purchase_price"
    assert float(petrol["profit"]) == 200.0


def test_custom_period_requires_ordered_bounds(client, seed):
    resp = client.get(
        "/api/reports/summary",
        params={"period": "custom", "start": "2026-10-10", "end": "2026-10-01"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "InvalidInput"


@pytest.mark.parametrize(
    "period, anchor, expected",
    [
        (ReportPeriod.DAILY, date(2026, 10, 14), (date(2026, 10, 14), date(2026, 10, 14))),
        (ReportPeriod.WEEKLY, date(2026, 10, 14), (date(2026, 10, 12), date(2026, 10, 18))),
        (ReportPeriod.MONTHLY, date(2024, 2, 10), (date(2024, 2, 1), date(2024, 2, 29))),
        (ReportPeriod.YEARLY, date(2026, 6, 30), (date(2026, 1, 1), date(2026, 12, 31))),
    ],
)
def test_period_window(period, anchor, expected):
    assert period_window(period, anchor) == expected


def test_custom_period_window():
    assert period_window(ReportPeriod.CUSTOM, start=date(2026, 1, 1), end=date(2026, 1, 31)) == (
        date(2026, 1, 1),
        date(2026, 1, 31),
    )
    with pytest.raises(InvalidInput):
        period_window(ReportPeriod.CUSTOM, start=date(2026, 1, 1))


def test_payment_on_account_counts_as_received(client, seed, make_client):
    day = _today()
    credit = _balanced_day(client, seed, make_client, day)

    resp = client.post(
        f"/api/clients/{credit['client_id']}/payment",
        json={"amount": 150, "payment_method": "UPI"},
    )
    assert resp.status_code == 200, resp.text
    client.put(f"/api/credits/{credit['credit_id']}/mark-paid", json={"payment_method": "Owner"})

    body = client.get("/api/validation", params={"date": day}).json()
    assert float(body["credit_payments"]) == 150.0
    assert float(body["owner_settled"]) == 250.0
    assert float(body["total_received"]) == 750.0
