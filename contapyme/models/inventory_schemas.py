"""
Pydantic schemas for the inventory and transaction API.

Following the same patterns as schemas.py for consistency.
"""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from contapyme.models.accounting_models import DocumentType, TransactionKind
from contapyme.models.inventory_models import StockMovementKind

# ============================================================================
# Product Schemas
# ============================================================================

class ProductCreate(BaseModel):
    """Schema for creating a product."""
    code: str | None = Field(None, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    category: str | None = Field(None, max_length=100)
    unit_of_measure: str = Field(default="unit", max_length=20)

    # Pricing, whole pesos
    purchase_price: int | None = Field(None, ge=0)
    sale_price: int | None = Field(None, gt=0)

    # Stock
    current_stock: int = Field(default=0, ge=0)
    minimum_stock: int = Field(default=0, ge=0)


class ProductOut(BaseModel):
    """Schema for product API response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str | None = None
    name: str
    category: str | None = None
    unit_of_measure: str
    purchase_price: int | None = None
    sale_price: int | None = None
    current_stock: int
    minimum_stock: int
    is_active: bool
    is_low_stock: bool


class StockMovementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    kind: StockMovementKind
    quantity: int
    stock_before: int
    stock_after: int
    reason: str | None = None
    transaction_id: int | None = None
    created_at: dt.datetime | None = None


# ============================================================================
# Transaction Schemas
# ============================================================================

class TransactionLineIn(BaseModel):
    product_id: int
    quantity: int
    unit_price: int | None = None  # required for purchases; sales use the product price


class TransactionCreate(BaseModel):
    kind: TransactionKind
    date: dt.datetime | None = None  # defaults to now
    document_type: DocumentType = DocumentType.RECEIPT
    is_exempt: bool = False
    description: str | None = None
    supplier: str | None = Field(None, max_length=200)
    client: str | None = Field(None, max_length=200)
    document_number: str | None = Field(None, max_length=50)
    payment_method: str | None = Field(None, max_length=30)
    lines: list[TransactionLineIn]


class TransactionLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    item_name: str
    quantity: int
    unit_price: int
    subtotal: int
    tax_amount: int


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    kind: TransactionKind
    document_type: DocumentType
    date: dt.datetime
    gross_amount: int
    net_amount: int
    tax_amount: int
    is_exempt: bool
    description: str | None = None
    supplier: str | None = None
    client: str | None = None
    document_number: str | None = None
    payment_method: str | None = None
    lines: list[TransactionLineOut] = []


class TransactionListFilter(BaseModel):
    kind: TransactionKind | None = None
    date_from: dt.datetime | None = None
    date_to: dt.datetime | None = None
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)


class MovementListFilter(BaseModel):
    product_id: int | None = None
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)
