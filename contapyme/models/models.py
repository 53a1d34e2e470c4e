from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from contapyme.db.base_class import Base

if TYPE_CHECKING:
    from contapyme.models.accounting_models import Transaction
    from contapyme.models.alert_models import Alert
    from contapyme.models.inventory_models import Product
    from contapyme.models.payroll_models import Worker
    from contapyme.models.tax_models import F22Filing, F29Filing
else:
    # Import at runtime for SQLAlchemy relationship resolution
    from contapyme.models import accounting_models  # noqa: F401
    from contapyme.models import alert_models  # noqa: F401
    from contapyme.models import inventory_models  # noqa: F401
    from contapyme.models import payroll_models  # noqa: F401
    from contapyme.models import tax_models  # noqa: F401
    Transaction = "Transaction"
    Alert = "Alert"
    Product = "Product"
    Worker = "Worker"
    F29Filing = "F29Filing"
    F22Filing = "F22Filing"


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class User(Base):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    business: Mapped[Business | None] = relationship("Business", back_populates="user", uselist=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class Business(Base):
    """The company a user keeps books for. Exactly one per user."""

    __tablename__ = "business"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    tax_id: Mapped[str] = mapped_column(String(12), nullable=False, index=True)  # RUT, normalized "12345678-5"
    giro: Mapped[str | None] = mapped_column(String(200), nullable=True)  # registered business activity
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    commune: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=utcnow, nullable=True)

    user: Mapped[User] = relationship("User", back_populates="business")
    transactions: Mapped[list[Transaction]] = relationship("Transaction", back_populates="business")
    products: Mapped[list[Product]] = relationship("Product", back_populates="business")
    workers: Mapped[list[Worker]] = relationship("Worker", back_populates="business")
    f29_filings: Mapped[list[F29Filing]] = relationship("F29Filing", back_populates="business")
    f22_filings: Mapped[list[F22Filing]] = relationship("F22Filing", back_populates="business")
    alerts: Mapped[list[Alert]] = relationship("Alert", back_populates="business")

    def __repr__(self) -> str:
        return f"<Business(id={self.id}, tax_id='{self.tax_id}')>"
