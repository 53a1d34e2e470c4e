"""Sales and purchase records.

A Transaction is immutable once recorded; the only way to change one is to
reverse (delete) it, which undoes its stock effects first.
"""
from __future__ import annotations

import datetime as dt
import enum
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from contapyme.db.base_class import Base

if TYPE_CHECKING:
    from contapyme.models.inventory_models import Product
    from contapyme.models.models import Business


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class TransactionKind(str, enum.Enum):
    SALE = "sale"
    PURCHASE = "purchase"


class DocumentType(str, enum.Enum):
    RECEIPT = "receipt"  # boleta
    INVOICE = "invoice"  # factura


class Transaction(Base):
    __tablename__ = "accounting_transaction"
    __table_args__ = (
        Index("ix_transaction_business_date", "business_id", "date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("business.id"), nullable=False, index=True)
    kind: Mapped[TransactionKind] = mapped_column(
        Enum(TransactionKind, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        index=True,
    )
    document_type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType, values_callable=lambda x: [e.value for e in x]),
        default=DocumentType.RECEIPT,
        nullable=False,
    )
    date: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)

    # Whole pesos; gross = net + tax, exempt => tax = 0
    gross_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    net_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    tax_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    is_exempt: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(200), nullable=True)
    client: Mapped[str | None] = mapped_column(String(200), nullable=True)
    document_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    business: Mapped[Business] = relationship("Business", back_populates="transactions")
    lines: Mapped[list[TransactionLine]] = relationship(
        "TransactionLine",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionLine.id",
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, kind='{self.kind}', gross={self.gross_amount})>"

    @property
    def is_sale(self) -> bool:
        return self.kind == TransactionKind.SALE


class TransactionLine(Base):
    __tablename__ = "transaction_line"

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("accounting_transaction.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(ForeignKey("product.id"), nullable=False, index=True)
    item_name: Mapped[str] = mapped_column(String(200), nullable=False)  # product name at the time of sale
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    subtotal: Mapped[int] = mapped_column(BigInteger, nullable=False)
    tax_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    transaction: Mapped[Transaction] = relationship("Transaction", back_populates="lines")
    product: Mapped[Product] = relationship("Product")
