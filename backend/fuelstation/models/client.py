from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from fuelstation.models.base import Base


class Client(Base):
    __tablename__ = "clients"

    client_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    owner_name = Column(String(150), nullable=False)
    phone = Column(String(20), unique=True, nullable=False)
    email = Column(String(150), unique=True)
    address = Column(String(255))

    credit_limit = Column(Numeric(12, 2), nullable=False, default=0)
    # Running total of unpaid credit
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    credits = relationship("ClientCredit", back_populates="client")
    ledger_entries = relationship("LedgerEntry", back_populates="client")


class ClientCredit(Base):
    __tablename__ = "client_credits"

    credit_id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.client_id"), nullable=False, index=True)
    fuel_type_id = Column(Integer, ForeignKey("fuel_types.fuel_type_id"), nullable=False)

    litres = Column(Numeric(12, 2), nullable=False)
    price_per_litre = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    credit_date = Column(Date, nullable=False, index=True)
    note = Column(String(255))

    status = Column(String(20), nullable=False, default="unpaid")  # unpaid/paid
    payment_method = Column(String(20))  # UPI/Worker/Owner
    paid_date = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    client = relationship("Client", back_populates="credits")
    fuel_type = relationship("FuelType")


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    entry_id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.client_id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)  # +credit extended / -payment
    memo = Column(String(255))
    payment_method = Column(String(20))  # set on payments only
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    client = relationship("Client", back_populates="ledger_entries")
