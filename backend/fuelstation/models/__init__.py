from .base import Base
from .station import FuelType, Tank, Pump, Price, PurchasePrice
from .operations import DailyReading, Sale, Purchase, CashReceipt, OnlinePayment
from .client import Client, ClientCredit, LedgerEntry
from .audit import AuditLog
