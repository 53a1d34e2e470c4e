from __future__ import annotations

import datetime as dt
import enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from contapyme.db.base_class import Base

if TYPE_CHECKING:
    from contapyme.models.models import Business


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class AlertPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class AlertKind:
    LOW_STOCK = "low_stock"
    MANUAL = "manual"


class Alert(Base):
    """Notice shown to a business owner.

    ``details`` carries the structured context (e.g. product and stock
    levels for a low-stock alert). The column is named ``metadata`` in the
    table; the attribute cannot be, since declarative classes reserve it.
    """
    __tablename__ = "alert"
    __table_args__ = (
        Index("ix_alert_business_read", "business_id", "is_read"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("business.id"), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[AlertPriority] = mapped_column(
        Enum(AlertPriority, values_callable=lambda x: [e.value for e in x]),
        default=AlertPriority.MEDIUM,
        nullable=False,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    details: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    business: Mapped[Business] = relationship("Business", back_populates="alerts")

    def __repr__(self) -> str:
        return f"<Alert(id={self.id}, kind='{self.kind}', priority='{self.priority}')>"
