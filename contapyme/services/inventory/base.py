"""
Base inventory service with shared functionality.

Every inventory service is bound to one business and shares its session.
"""
from __future__ import annotations

import logging

from sqlalchemy import select

from contapyme.core.exceptions import NotFoundError
from contapyme.db.session import lock_for_update
from contapyme.models.inventory_models import Product, StockMovement, StockMovementKind
from contapyme.services.base_service import BusinessScopedService

logger = logging.getLogger(__name__)


class BaseInventoryService(BusinessScopedService):
    """
    Base service class with shared inventory functionality.

    Product lookups here are scoped to the business: a product belonging to
    someone else is reported as not found.
    """

    def _lock_product(self, product_id: int) -> Product:
        """Load a product with a row lock held until the unit of work ends."""
        product = self._db.scalars(
            lock_for_update(
                select(Product).where(Product.id == product_id, Product.business_id == self._business_id)
            )
        ).first()
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def _create_movement(
        self,
        product: Product,
        kind: StockMovementKind,
        quantity: int,
        stock_before: int,
        reason: str | None = None,
        transaction_id: int | None = None,
    ) -> StockMovement:
        movement = StockMovement(
            product_id=product.id,
            kind=kind,
            quantity=quantity,
            stock_before=stock_before,
            stock_after=product.current_stock,
            reason=reason,
            transaction_id=transaction_id,
        )
        self._db.add(movement)
        return movement
