from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from fuelstation.models.base import Base


class DailyReading(Base):
    __tablename__ = "daily_readings"
    __table_args__ = (
        UniqueConstraint("pump_id", "reading_date", name="uq_daily_readings_pump_date"),
    )

    reading_id = Column(Integer, primary_key=True, index=True)
    pump_id = Column(Integer, ForeignKey("pumps.pump_id"), nullable=False)
    reading_date = Column(Date, nullable=False, index=True)

    opening_litres = Column(Numeric(12, 2), nullable=False)
    closing_litres = Column(Numeric(12, 2), nullable=False)
    price_per_litre = Column(Numeric(10, 2), nullable=False)
    revenue = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    pump = relationship("Pump")


class Sale(Base):
    __tablename__ = "sales"

    sale_id = Column(Integer, primary_key=True, index=True)
    tank_id = Column(Integer, ForeignKey("tanks.tank_id"), nullable=False)
    pump_id = Column(Integer, ForeignKey("pumps.pump_id"), nullable=True)
    client_id = Column(Integer, ForeignKey("clients.client_id"), nullable=True)

    litres = Column(Numeric(12, 2), nullable=False)
    price_per_litre = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    cost_per_litre = Column(Numeric(12, 4), nullable=False, default=0)
    profit = Column(Numeric(12, 2), nullable=False, default=0)
    method = Column(String(20), nullable=False)  # CASH/ONLINE/CREDIT
    sale_date = Column(Date, nullable=False, index=True)
    note = Column(String(255))

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Purchase(Base):
    __tablename__ = "purchases"

    purchase_id = Column(Integer, primary_key=True, index=True)
    tank_id = Column(Integer, ForeignKey("tanks.tank_id"), nullable=False)

    litres = Column(Numeric(12, 2), nullable=False)
    unit_cost = Column(Numeric(10, 4), nullable=False)
    total_cost = Column(Numeric(14, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending/unloaded
    purchase_date = Column(Date, nullable=False)
    unloaded_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tank = relationship("Tank")


class CashReceipt(Base):
    __tablename__ = "cash_receipts"
    __table_args__ = (
        UniqueConstraint("pump_id", "receipt_date", name="uq_cash_receipts_pump_date"),
    )

    receipt_id = Column(Integer, primary_key=True, index=True)
    pump_id = Column(Integer, ForeignKey("pumps.pump_id"), nullable=False)
    receipt_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    pump = relationship("Pump")


class OnlinePayment(Base):
    __tablename__ = "online_payments"

    payment_id = Column(Integer, primary_key=True, index=True)
    payment_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(50), nullable=False)
    reference = Column(String(150))
    description = Column(String(255))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
