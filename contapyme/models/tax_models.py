"""
Statutory filings.

- F29: monthly VAT return plus provisional monthly payment (PPM)
- F22: annual income-tax return built from the year's F29s

Both move draft -> filed. Once filed, amounts are frozen; only the folio can
still be recorded.
"""
from __future__ import annotations

import datetime as dt
import enum
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from contapyme.db.base_class import Base

if TYPE_CHECKING:
    from contapyme.models.models import Business


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class FilingStatus(str, enum.Enum):
    DRAFT = "draft"
    FILED = "filed"


class BalanceResult(str, enum.Enum):
    PAYMENT = "payment"
    REFUND = "refund"
    ZERO = "zero"


def _status_column() -> Mapped[FilingStatus]:
    return mapped_column(
        Enum(FilingStatus, values_callable=lambda x: [e.value for e in x]),
        default=FilingStatus.DRAFT,
        nullable=False,
        index=True,
    )


class F29Filing(Base):
    __tablename__ = "f29_filing"
    __table_args__ = (
        UniqueConstraint("business_id", "month", "year", name="uq_f29_business_period"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("business.id"), nullable=False, index=True)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Sales: taxable at net, exempt at gross
    taxable_sales: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    exempt_sales: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    total_sales: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    taxable_purchases: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    exempt_purchases: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    total_purchases: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    vat_debit: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    vat_credit: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    vat_determined: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)  # negative = credit carried

    ppm_base: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    ppm_rate: Mapped[int] = mapped_column(Integer, default=25, nullable=False)  # basis points
    ppm_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    total_due: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    status: Mapped[FilingStatus] = _status_column()
    filed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    folio: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=utcnow, nullable=True)

    business: Mapped[Business] = relationship("Business", back_populates="f29_filings")

    form = "F29"

    def __repr__(self) -> str:
        return f"<F29Filing(id={self.id}, period={self.month:02d}/{self.year}, status='{self.status}')>"

    @property
    def is_filed(self) -> bool:
        return self.status == FilingStatus.FILED


class F22Filing(Base):
    __tablename__ = "f22_filing"
    __table_args__ = (
        UniqueConstraint("business_id", "year", name="uq_f22_business_year"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("business.id"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    total_income: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    total_purchases: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)  # informational
    deductible_expenses: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    taxable_base: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    tax_determined: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    ppm_paid: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)  # positive = owed
    result: Mapped[BalanceResult] = mapped_column(
        Enum(BalanceResult, values_callable=lambda x: [e.value for e in x]),
        default=BalanceResult.ZERO,
        nullable=False,
    )
    result_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    status: Mapped[FilingStatus] = _status_column()
    filed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    folio: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=utcnow, nullable=True)

    business: Mapped[Business] = relationship("Business", back_populates="f22_filings")

    form = "F22"

    def __repr__(self) -> str:
        return f"<F22Filing(id={self.id}, year={self.year}, status='{self.status}')>"

    @property
    def is_filed(self) -> bool:
        return self.status == FilingStatus.FILED
