from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

FILING_STATUS = ("draft", "filed")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_table(
        "business",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False, unique=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("tax_id", sa.String(length=12), nullable=False),
        sa.Column("giro", sa.String(length=200), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("commune", sa.String(length=100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_business_tax_id", "business", ["tax_id"])

    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id"), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("unit_of_measure", sa.String(length=20), server_default="unit", nullable=True),
        sa.Column("purchase_price", sa.BigInteger(), nullable=True),
        sa.Column("sale_price", sa.BigInteger(), nullable=True),
        sa.Column("current_stock", sa.Integer(), server_default="0", nullable=False),
        sa.Column("minimum_stock", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="1", nullable=True),
        *_timestamps(),
        sa.CheckConstraint("current_stock >= 0", name="ck_product_stock_non_negative"),
    )
    op.create_index("ix_product_business_id", "product", ["business_id"])
    op.create_index("ix_product_business_name", "product", ["business_id", "name"])

    op.create_table(
        "stock_movement",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("kind", sa.Enum("entry", "exit", "adjustment", name="stockmovementkind"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("stock_before", sa.Integer(), nullable=False),
        sa.Column("stock_after", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=True),
        # No foreign key: movements outlive reversed transactions
        sa.Column("transaction_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_stock_movement_product_id", "stock_movement", ["product_id"])
    op.create_index("ix_stock_movement_kind", "stock_movement", ["kind"])
    op.create_index("ix_stock_movement_transaction_id", "stock_movement", ["transaction_id"])
    op.create_index("ix_stock_movement_product_date", "stock_movement", ["product_id", "created_at"])

    op.create_table(
        "accounting_transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id"), nullable=False),
        sa.Column("kind", sa.Enum("sale", "purchase", name="transactionkind"), nullable=False),
        sa.Column("document_type", sa.Enum("receipt", "invoice", name="documenttype"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("gross_amount", sa.BigInteger(), nullable=False),
        sa.Column("net_amount", sa.BigInteger(), nullable=False),
        sa.Column("tax_amount", sa.BigInteger(), nullable=False),
        sa.Column("is_exempt", sa.Boolean(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("supplier", sa.String(length=200), nullable=True),
        sa.Column("client", sa.String(length=200), nullable=True),
        sa.Column("document_number", sa.String(length=50), nullable=True),
        sa.Column("payment_method", sa.String(length=30), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_accounting_transaction_business_id", "accounting_transaction", ["business_id"])
    op.create_index("ix_accounting_transaction_kind", "accounting_transaction", ["kind"])
    op.create_index("ix_transaction_business_date", "accounting_transaction", ["business_id", "date"])

    op.create_table(
        "transaction_line",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "transaction_id",
            sa.Integer(),
            sa.ForeignKey("accounting_transaction.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("item_name", sa.String(length=200), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.BigInteger(), nullable=False),
        sa.Column("subtotal", sa.BigInteger(), nullable=False),
        sa.Column("tax_amount", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_transaction_line_transaction_id", "transaction_line", ["transaction_id"])
    op.create_index("ix_transaction_line_product_id", "transaction_line", ["product_id"])

    op.create_table(
        "f29_filing",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id"), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        *[
            sa.Column(name, sa.BigInteger(), nullable=False)
            for name in (
                "taxable_sales",
                "exempt_sales",
                "total_sales",
                "taxable_purchases",
                "exempt_purchases",
                "total_purchases",
                "vat_debit",
                "vat_credit",
                "vat_determined",
                "ppm_base",
            )
        ],
        sa.Column("ppm_rate", sa.Integer(), nullable=False),
        sa.Column("ppm_amount", sa.BigInteger(), nullable=False),
        sa.Column("total_due", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.Enum(*FILING_STATUS, name="filingstatus", native_enum=False), nullable=False),
        sa.Column("filed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("folio", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("business_id", "month", "year", name="uq_f29_business_period"),
    )
    op.create_index("ix_f29_filing_business_id", "f29_filing", ["business_id"])
    op.create_index("ix_f29_filing_status", "f29_filing", ["status"])

    op.create_table(
        "f22_filing",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        *[
            sa.Column(name, sa.BigInteger(), nullable=False)
            for name in (
                "total_income",
                "total_purchases",
                "deductible_expenses",
                "taxable_base",
                "tax_determined",
                "ppm_paid",
                "balance",
            )
        ],
        sa.Column("result", sa.Enum("payment", "refund", "zero", name="balanceresult"), nullable=False),
        sa.Column("result_amount", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.Enum(*FILING_STATUS, name="filingstatus", native_enum=False), nullable=False),
        sa.Column("filed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("folio", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("business_id", "year", name="uq_f22_business_year"),
    )
    op.create_index("ix_f22_filing_business_id", "f22_filing", ["business_id"])
    op.create_index("ix_f22_filing_status", "f22_filing", ["status"])

    op.create_table(
        "worker",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id"), nullable=False),
        sa.Column("tax_id", sa.String(length=12), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("paternal_surname", sa.String(length=100), nullable=False),
        sa.Column("maternal_surname", sa.String(length=100), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("position", sa.String(length=100), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("base_salary", sa.BigInteger(), nullable=False),
        sa.Column("pension_fund", sa.String(length=50), nullable=True),
        sa.Column("health_system", sa.Enum("fonasa", "isapre", name="healthsystem"), nullable=False),
        sa.Column("private_health_insurer", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="1", nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_worker_business_id", "worker", ["business_id"])

    op.create_table(
        "settlement",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("worker_id", sa.Integer(), sa.ForeignKey("worker.id"), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("base_salary", sa.BigInteger(), nullable=False),
        sa.Column("overtime_hours", sa.Numeric(6, 2), nullable=False),
        sa.Column("overtime_amount", sa.BigInteger(), nullable=False),
        sa.Column("bonuses", sa.BigInteger(), nullable=False),
        sa.Column("gross_pay", sa.BigInteger(), nullable=False),
        sa.Column("pension_deduction", sa.BigInteger(), nullable=False),
        sa.Column("health_public", sa.BigInteger(), nullable=True),
        sa.Column("health_private", sa.BigInteger(), nullable=True),
        sa.Column("unemployment_deduction", sa.BigInteger(), nullable=False),
        sa.Column("taxable_base", sa.BigInteger(), nullable=False),
        sa.Column("income_tax_withheld", sa.BigInteger(), nullable=False),
        sa.Column("other_deductions", sa.BigInteger(), nullable=False),
        sa.Column("total_deductions", sa.BigInteger(), nullable=False),
        sa.Column("net_pay", sa.BigInteger(), nullable=False),
        sa.Column("employer_unemployment", sa.BigInteger(), nullable=False),
        sa.Column("work_injury_insurance", sa.BigInteger(), nullable=False),
        sa.Column("employer_cost", sa.BigInteger(), nullable=False),
        sa.Column("is_paid", sa.Boolean(), server_default="0", nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint("worker_id", "month", "year", name="uq_settlement_worker_period"),
    )
    op.create_index("ix_settlement_worker_id", "settlement", ["worker_id"])

    op.create_table(
        "alert",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("business.id"), nullable=False),
        sa.Column("kind", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", sa.Enum("low", "medium", "high", "urgent", name="alertpriority"), nullable=False),
        sa.Column("is_read", sa.Boolean(), server_default="0", nullable=True),
        sa.Column("is_resolved", sa.Boolean(), server_default="0", nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_alert_business_id", "alert", ["business_id"])
    op.create_index("ix_alert_kind", "alert", ["kind"])
    op.create_index("ix_alert_business_read", "alert", ["business_id", "is_read"])


def downgrade() -> None:
    for table in (
        "alert",
        "settlement",
        "worker",
        "f22_filing",
        "f29_filing",
        "transaction_line",
        "accounting_transaction",
        "stock_movement",
        "product",
        "business",
        "user",
    ):
        op.drop_table(table)
