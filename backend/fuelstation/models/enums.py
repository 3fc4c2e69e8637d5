from enum import Enum


class PaymentMethod(str, Enum):
    UPI = "UPI"
    WORKER = "Worker"
    OWNER = "Owner"


# Settlements that put money in the till; Owner settlements were already held by the owner.
RECEIVED_PAYMENT_METHODS = (PaymentMethod.UPI.value, PaymentMethod.WORKER.value)


class CreditStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class PurchaseStatus(str, Enum):
    PENDING = "pending"
    UNLOADED = "unloaded"


class SaleMethod(str, Enum):
    CASH = "CASH"
    ONLINE = "ONLINE"
    CREDIT = "CREDIT"


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class AuditAction(str, Enum):
    TANK_UPDATE = "TANK_UPDATE"
    TANK_CAPACITY_UPDATE = "TANK_CAPACITY_UPDATE"
    TANK_DEACTIVATE = "TANK_DEACTIVATE"
    PRICE_SET = "PRICE_SET"
