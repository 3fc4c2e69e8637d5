"""Initial fuel station schema

Revision ID: 3c1e9a7d2b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1e9a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "fuel_types",
        sa.Column("fuel_type_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("fuel_type_id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_fuel_types_fuel_type_id"), "fuel_types", ["fuel_type_id"], unique=False)

    op.create_table(
        "tanks",
        sa.Column("tank_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("fuel_type_id", sa.Integer(), nullable=False),
        sa.Column("capacity_lit", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("current_level", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("avg_unit_cost", sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["fuel_type_id"], ["fuel_types.fuel_type_id"]),
        sa.PrimaryKeyConstraint("tank_id"),
    )
    op.create_index(op.f("ix_tanks_tank_id"), "tanks", ["tank_id"], unique=False)

    op.create_table(
        "pumps",
        sa.Column("pump_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("fuel_type_id", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["fuel_type_id"], ["fuel_types.fuel_type_id"]),
        sa.PrimaryKeyConstraint("pump_id"),
    )
    op.create_index(op.f("ix_pumps_pump_id"), "pumps", ["pump_id"], unique=False)

    op.create_table(
        "prices",
        sa.Column("price_id", sa.Integer(), nullable=False),
        sa.Column("fuel_type_id", sa.Integer(), nullable=False),
        sa.Column("per_litre", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["fuel_type_id"], ["fuel_types.fuel_type_id"]),
        sa.PrimaryKeyConstraint("price_id"),
    )
    op.create_index(op.f("ix_prices_price_id"), "prices", ["price_id"], unique=False)
    op.create_index(op.f("ix_prices_fuel_type_id"), "prices", ["fuel_type_id"], unique=False)

    op.create_table(
        "purchase_prices",
        sa.Column("purchase_price_id", sa.Integer(), nullable=False),
        sa.Column("tank_id", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["tank_id"], ["tanks.tank_id"]),
        sa.PrimaryKeyConstraint("purchase_price_id"),
    )
    op.create_index(op.f("ix_purchase_prices_purchase_price_id"), "purchase_prices", ["purchase_price_id"], unique=False)
    op.create_index(op.f("ix_purchase_prices_tank_id"), "purchase_prices", ["tank_id"], unique=False)

    op.create_table(
        "clients",
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("owner_name", sa.String(length=150), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=150), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("credit_limit", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("balance", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("client_id"),
        sa.UniqueConstraint("phone"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_clients_client_id"), "clients", ["client_id"], unique=False)

    op.create_table(
        "daily_readings",
        sa.Column("reading_id", sa.Integer(), nullable=False),
        sa.Column("pump_id", sa.Integer(), nullable=False),
        sa.Column("reading_date", sa.Date(), nullable=False),
        sa.Column("opening_litres", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("closing_litres", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("price_per_litre", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("revenue", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["pump_id"], ["pumps.pump_id"]),
        sa.PrimaryKeyConstraint("reading_id"),
        sa.UniqueConstraint("pump_id", "reading_date", name="uq_daily_readings_pump_date"),
    )
    op.create_index(op.f("ix_daily_readings_reading_id"), "daily_readings", ["reading_id"], unique=False)
    op.create_index(op.f("ix_daily_readings_reading_date"), "daily_readings", ["reading_date"], unique=False)

    op.create_table(
        "sales",
        sa.Column("sale_id", sa.Integer(), nullable=False),
        sa.Column("tank_id", sa.Integer(), nullable=False),
        sa.Column("pump_id", sa.Integer(), nullable=True),
        sa.Column("client_id", sa.Integer(), nullable=True),
        sa.Column("litres", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("price_per_litre", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("total_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("cost_per_litre", sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column("profit", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("method", sa.String(length=20), nullable=False),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("note", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["tank_id"], ["tanks.tank_id"]),
        sa.ForeignKeyConstraint(["pump_id"], ["pumps.pump_id"]),
        sa.ForeignKeyConstraint(["client_id"], ["clients.client_id"]),
        sa.PrimaryKeyConstraint("sale_id"),
    )
    op.create_index(op.f("ix_sales_sale_id"), "sales", ["sale_id"], unique=False)
    op.create_index(op.f("ix_sales_sale_date"), "sales", ["sale_date"], unique=False)

    op.create_table(
        "purchases",
        sa.Column("purchase_id", sa.Integer(), nullable=False),
        sa.Column("tank_id", sa.Integer(), nullable=False),
        sa.Column("litres", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("unit_cost", sa.Numeric(precision=10, scale=4), nullable=False),
        sa.Column("total_cost", sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("unloaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["tank_id"], ["tanks.tank_id"]),
        sa.PrimaryKeyConstraint("purchase_id"),
    )
    op.create_index(op.f("ix_purchases_purchase_id"), "purchases", ["purchase_id"], unique=False)

    op.create_table(
        "cash_receipts",
        sa.Column("receipt_id", sa.Integer(), nullable=False),
        sa.Column("pump_id", sa.Integer(), nullable=False),
        sa.Column("receipt_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["pump_id"], ["pumps.pump_id"]),
        sa.PrimaryKeyConstraint("receipt_id"),
        sa.UniqueConstraint("pump_id", "receipt_date", name="uq_cash_receipts_pump_date"),
    )
    op.create_index(op.f("ix_cash_receipts_receipt_id"), "cash_receipts", ["receipt_id"], unique=False)
    op.create_index(op.f("ix_cash_receipts_receipt_date"), "cash_receipts", ["receipt_date"], unique=False)

    op.create_table(
        "online_payments",
        sa.Column("payment_id", sa.Integer(), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("method", sa.String(length=50), nullable=False),
        sa.Column("reference", sa.String(length=150), nullable=True),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("payment_id"),
    )
    op.create_index(op.f("ix_online_payments_payment_id"), "online_payments", ["payment_id"], unique=False)
    op.create_index(op.f("ix_online_payments_payment_date"), "online_payments", ["payment_date"], unique=False)

    op.create_table(
        "client_credits",
        sa.Column("credit_id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("fuel_type_id", sa.Integer(), nullable=False),
        sa.Column("litres", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("price_per_litre", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("total_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("credit_date", sa.Date(), nullable=False),
        sa.Column("note", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("payment_method", sa.String(length=20), nullable=True),
        sa.Column("paid_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["client_id"], ["clients.client_id"]),
        sa.ForeignKeyConstraint(["fuel_type_id"], ["fuel_types.fuel_type_id"]),
        sa.PrimaryKeyConstraint("credit_id"),
    )
    op.create_index(op.f("ix_client_credits_credit_id"), "client_credits", ["credit_id"], unique=False)
    op.create_index(op.f("ix_client_credits_client_id"), "client_credits", ["client_id"], unique=False)
    op.create_index(op.f("ix_client_credits_credit_date"), "client_credits", ["credit_date"], unique=False)

    op.create_table(
        "ledger_entries",
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("memo", sa.String(length=255), nullable=True),
        sa.Column("payment_method", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["client_id"], ["clients.client_id"]),
        sa.PrimaryKeyConstraint("entry_id"),
    )
    op.create_index(op.f("ix_ledger_entries_entry_id"), "ledger_entries", ["entry_id"], unique=False)
    op.create_index(op.f("ix_ledger_entries_client_id"), "ledger_entries", ["client_id"], unique=False)
    op.create_index(op.f("ix_ledger_entries_created_at"), "ledger_entries", ["created_at"], unique=False)

    op.create_table(
        "audit_log",
        sa.Column("log_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("log_id"),
    )
    op.create_index(op.f("ix_audit_log_log_id"), "audit_log", ["log_id"], unique=False)
    op.create_index(op.f("ix_audit_log_action"), "audit_log", ["action"], unique=False)
    op.create_index(op.f("ix_audit_log_created_at"), "audit_log", ["created_at"], unique=False)
    op.create_index("ix_audit_log_entity", "audit_log", ["entity_type", "entity_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_audit_log_entity", table_name="audit_log")
    op.drop_index(op.f("ix_audit_log_created_at"), table_name="audit_log")
    op.drop_index(op.f("ix_audit_log_action"), table_name="audit_log")
    op.drop_index(op.f("ix_audit_log_log_id"), table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_table("ledger_entries")
    op.drop_table("client_credits")
    op.drop_table("online_payments")
    op.drop_table("cash_receipts")
    op.drop_table("purchases")
    op.drop_table("sales")
    op.drop_table("daily_readings")
    op.drop_table("clients")
    op.drop_table("purchase_prices")
    op.drop_table("prices")
    op.drop_table("pumps")
    op.drop_table("tanks")
    op.drop_table("fuel_types")
