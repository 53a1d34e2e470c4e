"""
Inventory-linked transaction processing.

Recording a transaction is one unit of work: the transaction, its lines,
stock updates, stock movements and low-stock alerts commit together or not
at all. Product rows are locked (SELECT ... FOR UPDATE) before stock is
checked, so concurrent sales of the same product serialize on the row and
cannot both pass the sufficiency check.
"""
from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from contapyme import metrics
from contapyme.core.config import settings
from contapyme.core.exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidAmountError,
    NotFoundError,
    ValidationError,
)
from contapyme.db.session import unit_of_work
from contapyme.models.accounting_models import Transaction, TransactionKind, TransactionLine
from contapyme.models.alert_models import Alert
from contapyme.models.inventory_models import Product, StockMovementKind
from contapyme.models.inventory_schemas import TransactionCreate, TransactionListFilter
from contapyme.services.alert_service import AlertService
from contapyme.services.inventory.base import BaseInventoryService
from contapyme.services.tax_engine.computations import split_gross_amount
from contapyme.utils.validators import validate_amount

logger = logging.getLogger(__name__)


class TransactionService(BaseInventoryService):
    """Records and reverses sales and purchases together with their stock effects."""

    def __init__(self, db: Session, business_id: int, vat_rate: Decimal | None = None):
        super().__init__(db, business_id)
        self.vat_rate = settings.VAT_RATE if vat_rate is None else vat_rate
        self.alerts = AlertService(db, business_id)

    # ========================================================================
    # Recording
    # ========================================================================

    def _validate_lines(self, data: TransactionCreate) -> None:
        if not data.lines:
            raise ValidationError("A transaction needs at least one line", details={"field": "lines"})
        for line in data.lines:
            if line.quantity <= 0:
                raise InvalidAmountError("quantity", line.quantity, "must be greater than 0")

    def _price_line(self, product: Product, quantity: int, unit_price: int | None, is_sale: bool) -> int:
        if not is_sale:
            return validate_amount(unit_price, "unit_price")
        if not product.is_active:
            raise NotFoundError("Product", product.id)
        if not product.sale_price or product.sale_price <= 0:
            raise ValidationError(
                f"Product {product.name} has no sale price",
                details={"field": "sale_price", "product_id": product.id},
            )
        if product.current_stock < quantity:
            raise InsufficientStockError(product.name, product.current_stock, quantity)
        return product.sale_price

    def record(self, data: TransactionCreate) -> Transaction:
        self._validate_lines(data)
        is_sale = data.kind == TransactionKind.SALE
        when = data.date.replace(tzinfo=None) if data.date else dt.datetime.now()

        with unit_of_work(self._db):
            priced: list[tuple[Product, int, int]] = []
            raised: list[Alert] = []
            for line in data.lines:
                product = self._lock_product(line.product_id)
                unit_price = self._price_line(product, line.quantity, line.unit_price, is_sale)
                priced.append((product, line.quantity, unit_price))

            gross = sum(quantity * price for _, quantity, price in priced)
            net, tax = split_gross_amount(gross, data.is_exempt, self.vat_rate)
            tx = Transaction(
                business_id=self._business_id,
                kind=data.kind,
                document_type=data.document_type,
                date=when,
                gross_amount=gross,
                net_amount=net,
                tax_amount=tax,
                is_exempt=data.is_exempt,
                description=data.description,
                supplier=data.supplier,
                client=data.client,
                document_number=data.document_number,
                payment_method=data.payment_method,
            )
            self._db.add(tx)
            self._db.flush()  # Get the transaction ID for movements

            for product, quantity, unit_price in priced:
                subtotal = quantity * unit_price
                tx.lines.append(
                    TransactionLine(
                        product_id=product.id,
                        item_name=product.name,
                        quantity=quantity,
                        unit_price=unit_price,
                        subtotal=subtotal,
                        tax_amount=split_gross_amount(subtotal, data.is_exempt, self.vat_rate)[1],
                    )
                )
                alert = self._apply_stock(tx, product, quantity, unit_price, is_sale)
                if alert is not None:
                    raised.append(alert)

        metrics.transaction_recorded(tx.kind.value)
        for _ in raised:
            metrics.low_stock_alert()
        logger.info(
            "Recorded %s %s for business %s: gross %s (%d lines)",
            tx.kind.value,
            tx.id,
            self._business_id,
            tx.gross_amount,
            len(tx.lines),
            extra={"business_id": self._business_id, "entity_id": tx.id},
        )
        return tx

    def _apply_stock(
        self, tx: Transaction, product: Product, quantity: int, unit_price: int, is_sale: bool
    ) -> Alert | None:
        """Move stock for one line; returns the low-stock alert it queued, if any."""
        stock_before = product.current_stock
        if is_sale:
            product.adjust_stock(-quantity)
            self._create_movement(
                product, StockMovementKind.EXIT, quantity, stock_before, reason=f"Sale #{tx.id}", transaction_id=tx.id
            )
            if product.is_low_stock:
                return self.alerts.add_low_stock_alert(product, stock_before)
        else:
            product.adjust_stock(quantity)
            product.purchase_price = unit_price
            self._create_movement(
                product, StockMovementKind.ENTRY, quantity, stock_before, reason=f"Purchase #{tx.id}", transaction_id=tx.id
            )
        return None

    # ========================================================================
    # Reversal
    # ========================================================================

    def reverse(self, transaction_id: int) -> None:
        """Undo a transaction's stock effects, then delete it with its lines."""
        tx = self.get(transaction_id)
        kind = tx.kind.value

        with unit_of_work(self._db):
            for line in tx.lines:
                product = self._lock_product(line.product_id)
                stock_before = product.current_stock
                if tx.kind == TransactionKind.SALE:
                    product.adjust_stock(line.quantity)
                else:
                    if product.current_stock < line.quantity:
                        raise ConflictError(
                            f"Cannot reverse purchase {tx.id}: only {product.current_stock} of "
                            f"{line.quantity} {product.name} left in stock",
                            code="CON006",
                            details={
                                "transaction_id": tx.id,
                                "product_id": product.id,
                                "available": product.current_stock,
                                "required": line.quantity,
                            },
                        )
                    product.adjust_stock(-line.quantity)
                self._create_movement(
                    product,
                    StockMovementKind.ADJUSTMENT,
                    line.quantity,
                    stock_before,
                    reason=f"Reversal of {kind} #{tx.id}",
                    transaction_id=tx.id,
                )
            self._db.delete(tx)

        metrics.transaction_reversed()
        logger.info("Reversed %s %s for business %s", kind, transaction_id, self._business_id)

    # ========================================================================
    # Queries
    # ========================================================================

    def get(self, transaction_id: int) -> Transaction:
        return self._get_owned(Transaction, transaction_id, "Transaction")

    def list_transactions(self, filters: TransactionListFilter) -> Sequence[Transaction]:
        stmt = select(Transaction).where(Transaction.business_id == self._business_id)
        if filters.kind is not None:
            stmt = stmt.where(Transaction.kind == filters.kind)
        if filters.date_from is not None:
            stmt = stmt.where(Transaction.date >= filters.date_from.replace(tzinfo=None))
        if filters.date_to is not None:
            stmt = stmt.where(Transaction.date <= filters.date_to.replace(tzinfo=None))
        stmt = stmt.order_by(Transaction.date.desc(), Transaction.id.desc()).limit(filters.limit).offset(filters.offset)
        return self._db.scalars(stmt).all()
