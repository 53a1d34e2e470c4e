"""
Inventory models: products and their stock movement ledger.

Product stock is only ever changed together with a StockMovement row that
records the level before and after, so the ledger replays to the current
stock.
"""
from __future__ import annotations

import datetime as dt
import enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from contapyme.core.exceptions import InsufficientStockError
from contapyme.db.base_class import Base

if TYPE_CHECKING:
    from contapyme.models.models import Business


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class StockMovementKind(str, enum.Enum):
    """Types of inventory stock movements."""
    ENTRY = "entry"            # Purchase received
    EXIT = "exit"              # Sale
    ADJUSTMENT = "adjustment"  # Reversal or manual correction


class Product(Base):
    """
    Product tracked in inventory.

    Lifecycle is active -> inactive (one way). Inactive products keep their
    history but can no longer be sold.
    """
    __tablename__ = "product"
    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_product_stock_non_negative"),
        Index("ix_product_business_name", "business_id", "name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("business.id"), nullable=False, index=True)

    code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    unit_of_measure: Mapped[str] = mapped_column(String(20), default="unit", server_default="unit")

    # Pricing, whole pesos
    purchase_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    sale_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)  # VAT included

    # Stock management
    current_stock: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    minimum_stock: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="1")
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=utcnow,
        nullable=True,
    )

    business: Mapped[Business] = relationship("Business", back_populates="products")
    stock_movements: Mapped[list[StockMovement]] = relationship(
        "StockMovement",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="StockMovement.created_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, code='{self.code}', name='{self.name}')>"

    @property
    def is_low_stock(self) -> bool:
        """Check if current stock is at or below the minimum."""
        return self.current_stock <= self.minimum_stock

    def adjust_stock(self, quantity_change: int) -> None:
        """
        Adjust stock quantity. Positive adds, negative removes.

        Note: This only updates the quantity. The caller should also
        create a StockMovement record for audit trail.
        """
        new_quantity = self.current_stock + quantity_change
        if new_quantity < 0:
            raise InsufficientStockError(self.name, self.current_stock, -quantity_change)
        self.current_stock = new_quantity

    def deactivate(self) -> None:
        self.is_active = False


class StockMovement(Base):
    """
    Record of every stock change.

    ``transaction_id`` is a plain column rather than a foreign key so the
    movements of a reversed transaction outlive it.
    """
    __tablename__ = "stock_movement"
    __table_args__ = (
        Index("ix_stock_movement_product_date", "product_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("product.id"), nullable=False, index=True)
    kind: Mapped[StockMovementKind] = mapped_column(
        Enum(StockMovementKind, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        index=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)  # always positive, direction from before/after
    stock_before: Mapped[int] = mapped_column(Integer, nullable=False)
    stock_after: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    transaction_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    product: Mapped[Product] = relationship("Product", back_populates="stock_movements")

    def __repr__(self) -> str:
        return (
            f"<StockMovement(id={self.id}, kind='{self.kind}', "
            f"{self.stock_before}->{self.stock_after})>"
        )
