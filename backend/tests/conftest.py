"""
Pytest fixtures: every test gets its own in-memory SQLite database, seeded
with three fuel types, one tank and one pump each, and an active price.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import fuelstation.models  # noqa: F401
from fuelstation.core.database import create_session_factory
from fuelstation.main import create_app
from fuelstation.models.base import Base
from fuelstation.models.station import FuelType, Price, Pump, Tank


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    """IDs of the seeded station, keyed by a short name."""
    petrol = FuelType(name="Petrol")
    diesel = FuelType(name="Diesel")
    premium = FuelType(name="Premium Petrol")
    db.add_all([petrol, diesel, premium])
    db.flush()

    petrol_tank = Tank(
        name="Petrol Tank",
        fuel_type_id=petrol.fuel_type_id,
        capacity_lit=Decimal("1000"),
        current_level=Decimal("500"),
        avg_unit_cost=Decimal("7"),
        is_active=True,
    )
    diesel_tank = Tank(
        name="Diesel Tank",
        fuel_type_id=diesel.fuel_type_id,
        capacity_lit=Decimal("2000"),
        current_level=Decimal("1500"),
        avg_unit_cost=Decimal("6"),
        is_active=True,
    )
    premium_tank = Tank(
        name="Premium Tank",
        fuel_type_id=premium.fuel_type_id,
        capacity_lit=Decimal("1000"),
        current_level=Decimal("950"),
        avg_unit_cost=Decimal("9"),
        is_active=True,
    )
    db.add_all([petrol_tank, diesel_tank, premium_tank])

    pumps = [
        Pump(name="Pump 1", fuel_type_id=petrol.fuel_type_id, is_active=True),
        Pump(name="Pump 2", fuel_type_id=diesel.fuel_type_id, is_active=True),
        Pump(name="Pump 3", fuel_type_id=premium.fuel_type_id, is_active=True),
    ]
    db.add_all(pumps)

    db.add_all(
        [
            Price(fuel_type_id=petrol.fuel_type_id, per_litre=Decimal("10"), is_active=True),
            Price(fuel_type_id=diesel.fuel_type_id, per_litre=Decimal("9"), is_active=True),
            Price(fuel_type_id=premium.fuel_type_id, per_litre=Decimal("12"), is_active=True),
        ]
    )
    db.commit()

    return {
        "petrol": petrol.fuel_type_id,
        "diesel": diesel.fuel_type_id,
        "premium": premium.fuel_type_id,
        "petrol_tank": petrol_tank.tank_id,
        "diesel_tank": diesel_tank.tank_id,
        "premium_tank": premium_tank.tank_id,
        "petrol_pump": pumps[0].pump_id,
        "diesel_pump": pumps[1].pump_id,
        "premium_pump": pumps[2].pump_id,
    }


@pytest.fixture
def client(session_factory, seed):
    app = create_app(session_factory=session_factory)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_client(client):
    """Register a credit client through the API and return its JSON."""

    def _make(phone="9000000001", credit_limit=1000, name="Sharma Transport"):
        resp = client.post(
            "/api/clients",
            json={
                "name": name,
                "owner_name": "R. Sharma",
                "phone": phone,
                "credit_limit": credit_limit,
            },
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def tank_level(client):
    def _level(tank_id) -> float:
        resp = client.get(f"/api/tanks/{tank_id}/status")
        assert resp.status_code == 200, resp.text
        return float(resp.json()["current_level"])

    return _level
