from __future__ import annotations

import datetime as dt
import enum
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from contapyme.db.base_class import Base

if TYPE_CHECKING:
    from contapyme.models.models import Business


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class HealthSystem(str, enum.Enum):
    FONASA = "fonasa"  # public
    ISAPRE = "isapre"  # private


class Worker(Base):
    """Employment record. Deactivated on termination, never deleted."""

    __tablename__ = "worker"

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("business.id"), nullable=False, index=True)
    tax_id: Mapped[str] = mapped_column(String(12), unique=True, nullable=False)  # RUT
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    paternal_surname: Mapped[str] = mapped_column(String(100), nullable=False)
    maternal_surname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    birth_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    base_salary: Mapped[int] = mapped_column(BigInteger, nullable=False)
    pension_fund: Mapped[str | None] = mapped_column(String(50), nullable=True)  # AFP name
    health_system: Mapped[HealthSystem] = mapped_column(
        Enum(HealthSystem, values_callable=lambda x: [e.value for e in x]),
        default=HealthSystem.FONASA,
        nullable=False,
    )
    private_health_insurer: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="1")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    business: Mapped[Business] = relationship("Business", back_populates="workers")
    settlements: Mapped[list[Settlement]] = relationship(
        "Settlement",
        back_populates="worker",
        order_by=lambda: [Settlement.year.desc(), Settlement.month.desc()],
    )

    def __repr__(self) -> str:
        return f"<Worker(id={self.id}, tax_id='{self.tax_id}')>"

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.paternal_surname, self.maternal_surname]
        return " ".join(p for p in parts if p)

    @property
    def has_private_health(self) -> bool:
        return bool(self.private_health_insurer)

    def deactivate(self, end_date: dt.date | None = None) -> None:
        self.is_active = False
        self.end_date = end_date or self.end_date or dt.date.today()


class Settlement(Base):
    """One worker's payroll for one month. Created once, then only marked paid."""

    __tablename__ = "settlement"
    __table_args__ = (
        UniqueConstraint("worker_id", "month", "year", name="uq_settlement_worker_period"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    worker_id: Mapped[int] = mapped_column(ForeignKey("worker.id"), nullable=False, index=True)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Earnings
    base_salary: Mapped[int] = mapped_column(BigInteger, nullable=False)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), default=0, nullable=False)
    overtime_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    bonuses: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    gross_pay: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Worker deductions; exactly one of the health columns is set
    pension_deduction: Mapped[int] = mapped_column(BigInteger, nullable=False)
    health_public: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    health_private: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    unemployment_deduction: Mapped[int] = mapped_column(BigInteger, nullable=False)
    taxable_base: Mapped[int] = mapped_column(BigInteger, nullable=False)
    income_tax_withheld: Mapped[int] = mapped_column(BigInteger, nullable=False)
    other_deductions: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    total_deductions: Mapped[int] = mapped_column(BigInteger, nullable=False)
    net_pay: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Employer contributions
    employer_unemployment: Mapped[int] = mapped_column(BigInteger, nullable=False)
    work_injury_insurance: Mapped[int] = mapped_column(BigInteger, nullable=False)
    employer_cost: Mapped[int] = mapped_column(BigInteger, nullable=False)

    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    paid_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    worker: Mapped[Worker] = relationship("Worker", back_populates="settlements")

    def __repr__(self) -> str:
        return f"<Settlement(id={self.id}, worker_id={self.worker_id}, period={self.month:02d}/{self.year})>"

    @property
    def health_deduction(self) -> int:
        return (self.health_public or 0) + (self.health_private or 0)
