from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import func, select

from contapyme.db.session import unit_of_work
from contapyme.models.alert_models import Alert, AlertKind, AlertPriority
from contapyme.models.inventory_models import Product
from contapyme.models.schemas import AlertCreate, AlertListFilter
from contapyme.services.base_service import BusinessScopedService

logger = logging.getLogger(__name__)


class AlertService(BusinessScopedService):
    def list_alerts(self, filters: AlertListFilter) -> tuple[Sequence[Alert], int]:
        """Alerts matching ``filters``, newest first, plus the business's unread count."""
        stmt = select(Alert).where(Alert.business_id == self.business_id)
        if filters.is_read is not None:
            stmt = stmt.where(Alert.is_read.is_(filters.is_read))
        if filters.priority is not None:
            stmt = stmt.where(Alert.priority == filters.priority)
        stmt = stmt.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(filters.limit).offset(filters.offset)
        return self.db.scalars(stmt).all(), self.unread_count()

    def unread_count(self) -> int:
        unread = self.db.scalar(
            select(func.count(Alert.id)).where(Alert.business_id == self.business_id, Alert.is_read.is_(False))
        )
        return unread or 0

    def create(self, payload: AlertCreate) -> Alert:
        alert = Alert(business_id=self.business_id, **payload.model_dump())
        with unit_of_work(self.db):
            self.db.add(alert)
        logger.info(
            "Created %s alert %s",
            alert.kind,
            alert.id,
            extra={"business_id": self.business_id, "entity_id": alert.id},
        )
        return alert

    def delete(self, alert_id: int) -> None:
        alert = self._get_owned(Alert, alert_id, "Alert")
        with unit_of_work(self.db):
            self.db.delete(alert)
        logger.info("Deleted alert %s", alert_id, extra={"business_id": self.business_id, "entity_id": alert_id})

    def mark_read(self, alert_id: int) -> Alert:
        alert = self._get_owned(Alert, alert_id, "Alert")
        with unit_of_work(self.db):
            alert.is_read = True
        return alert

    def mark_resolved(self, alert_id: int) -> Alert:
        alert = self._get_owned(Alert, alert_id, "Alert")
        with unit_of_work(self.db):
            alert.is_read = True
            alert.is_resolved = True
        return alert

    def add_low_stock_alert(self, product: Product, stock_before: int) -> Alert:
        """Queue a low-stock alert in the current unit of work.

        Nothing is committed or counted here; the caller owns the transaction
        and bumps the low-stock metric once it commits.
        """
        alert = Alert(
            business_id=self.business_id,
            kind=AlertKind.LOW_STOCK,
            title=f"Low stock: {product.name}",
            message=(
                f"{product.name} has {product.current_stock} {product.unit_of_measure} left "
                f"(minimum {product.minimum_stock})"
            ),
            priority=AlertPriority.HIGH,
            details={
                "product_id": product.id,
                "product_name": product.name,
                "stock_before": stock_before,
                "current_stock": product.current_stock,
                "minimum_stock": product.minimum_stock,
            },
        )
        self.db.add(alert)
        logger.info(
            "Low stock alert for product %s (%s left)",
            product.id,
            product.current_stock,
            extra={"business_id": self.business_id, "entity_id": product.id},
        )
        return alert
