"""
Product Service - catalog operations.

Products are never deleted; deactivation hides them from listings and
blocks new sales while their history stays intact.
"""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select

from contapyme.db.queries import active_only
from contapyme.db.session import unit_of_work
from contapyme.models.inventory_models import Product, StockMovement, StockMovementKind
from contapyme.models.inventory_schemas import MovementListFilter, ProductCreate
from contapyme.services.inventory.base import BaseInventoryService

logger = logging.getLogger(__name__)


class ProductService(BaseInventoryService):
    """Service for product operations."""

    def create_product(self, data: ProductCreate) -> Product:
        """
        Create a new product.

        If initial stock is provided, also creates an opening entry movement.
        """
        with unit_of_work(self._db):
            product = Product(business_id=self._business_id, **data.model_dump())
            self._db.add(product)
            self._db.flush()  # Get the product ID

            if data.current_stock > 0:
                self._create_movement(
                    product,
                    StockMovementKind.ENTRY,
                    quantity=data.current_stock,
                    stock_before=0,
                    reason="Opening stock",
                )

        logger.info("Created product %s '%s' for business %s", product.id, product.name, self._business_id)
        return product

    def get_product(self, product_id: int) -> Product:
        return self._get_owned(Product, product_id, "Product")

    def list_products(self, include_inactive: bool = False) -> Sequence[Product]:
        stmt = select(Product).where(Product.business_id == self._business_id)
        if not include_inactive:
            stmt = active_only(stmt, Product)
        return self._db.scalars(stmt.order_by(Product.name)).all()

    def deactivate_product(self, product_id: int) -> Product:
        product = self.get_product(product_id)
        if product.is_active:
            with unit_of_work(self._db):
                product.deactivate()
            logger.info("Deactivated product %s", product.id)
        return product

    def list_movements(self, filters: MovementListFilter) -> Sequence[StockMovement]:
        stmt = select(StockMovement).join(Product).where(Product.business_id == self._business_id)
        if filters.product_id is not None:
            stmt = stmt.where(StockMovement.product_id == filters.product_id)
        stmt = stmt.order_by(StockMovement.id.desc()).limit(filters.limit).offset(filters.offset)
        return self._db.scalars(stmt).all()
