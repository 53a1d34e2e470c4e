"""
Inventory Service Module.

The InventoryService class is a facade composing the product catalog and
the transaction processor for a single business.

Usage:
    from contapyme.services.inventory import InventoryService, build_inventory_service

    service = build_inventory_service(db, business_id)

    # Product operations
    product = service.create_product(data)
    products = service.list_products()

    # Transactions (stock, movements and alerts follow automatically)
    tx = service.record_transaction(data)
    service.reverse_transaction(tx.id)
"""
from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session

from contapyme.models.accounting_models import Transaction
from contapyme.models.inventory_models import Product, StockMovement
from contapyme.models.inventory_schemas import (
    MovementListFilter,
    ProductCreate,
    TransactionCreate,
    TransactionListFilter,
)

from .product_service import ProductService
from .transaction_service import TransactionService


class InventoryService:
    """Facade for inventory and transaction operations."""

    def __init__(self, db: Session, business_id: int):
        self._db = db
        self._business_id = business_id
        self._products = ProductService(db, business_id)
        self._transactions = TransactionService(db, business_id)

    # ========================================================================
    # Product Operations (delegated to ProductService)
    # ========================================================================

    def create_product(self, data: ProductCreate) -> Product:
        return self._products.create_product(data)

    def get_product(self, product_id: int) -> Product:
        return self._products.get_product(product_id)

    def list_products(self, include_inactive: bool = False) -> Sequence[Product]:
        return self._products.list_products(include_inactive)

    def deactivate_product(self, product_id: int) -> Product:
        return self._products.deactivate_product(product_id)

    def list_movements(self, filters: MovementListFilter) -> Sequence[StockMovement]:
        return self._products.list_movements(filters)

    # ========================================================================
    # Transaction Operations (delegated to TransactionService)
    # ========================================================================

    def record_transaction(self, data: TransactionCreate) -> Transaction:
        return self._transactions.record(data)

    def reverse_transaction(self, transaction_id: int) -> None:
        self._transactions.reverse(transaction_id)

    def get_transaction(self, transaction_id: int) -> Transaction:
        return self._transactions.get(transaction_id)

    def list_transactions(self, filters: TransactionListFilter) -> Sequence[Transaction]:
        return self._transactions.list_transactions(filters)


def build_inventory_service(db: Session, business_id: int) -> InventoryService:
    """Factory function to create an InventoryService instance."""
    return InventoryService(db=db, business_id=business_id)


__all__ = [
    "InventoryService",
    "build_inventory_service",
    "ProductService",
    "TransactionService",
]
