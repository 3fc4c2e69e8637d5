from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from fuelstation.models.base import Base


class FuelType(Base):
    __tablename__ = "fuel_types"

    fuel_type_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    tanks = relationship("Tank", back_populates="fuel_type")
    pumps = relationship("Pump", back_populates="fuel_type")


class Tank(Base):
    __tablename__ = "tanks"

    tank_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    fuel_type_id = Column(Integer, ForeignKey("fuel_types.fuel_type_id"), nullable=False)

    capacity_lit = Column(Numeric(12, 2), nullable=False)
    current_level = Column(Numeric(12, 2), nullable=False, default=0)
    # Volume-weighted cost of the fuel on hand; only moves on unload
    avg_unit_cost = Column(Numeric(12, 4), nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    fuel_type = relationship("FuelType", back_populates="tanks")


class Pump(Base):
    __tablename__ = "pumps"

    pump_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    fuel_type_id = Column(Integer, ForeignKey("fuel_types.fuel_type_id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    fuel_type = relationship("FuelType", back_populates="pumps")


class Price(Base):
    __tablename__ = "prices"

    price_id = Column(Integer, primary_key=True, index=True)
    fuel_type_id = Column(Integer, ForeignKey("fuel_types.fuel_type_id"), nullable=False, index=True)
    per_litre = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    fuel_type = relationship("FuelType")


class PurchasePrice(Base):
    __tablename__ = "purchase_prices"

    purchase_price_id = Column(Integer, primary_key=True, index=True)
    tank_id = Column(Integer, ForeignKey("tanks.tank_id"), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    tank = relationship("Tank")
