"""
Monthly VAT return (F29) service.

Handles:
- Lazy creation of a period's filing from its transactions
- Listing and manual amendment of draft filings
- Filing (draft -> filed)
- Unpersisted monthly summaries

A filing, once stored, is returned as-is on later requests; it is only
recomputed through an explicit amendment while still a draft.
"""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contapyme import metrics
from contapyme.core.config import settings
from contapyme.db.session import unit_of_work
from contapyme.models.accounting_models import Transaction, TransactionKind
from contapyme.models.tax_models import F29Filing, FilingStatus
from contapyme.models.tax_schemas import F29Amend, F29ListFilter
from contapyme.services import filing_lifecycle
from contapyme.services.base_service import BusinessScopedService
from contapyme.services.tax_engine.computations import F29Calculator
from contapyme.utils.validators import month_bounds, validate_period

logger = logging.getLogger(__name__)


class F29Service(BusinessScopedService):
    def __init__(self, db: Session, business_id: int, calculator: F29Calculator | None = None):
        super().__init__(db, business_id)
        self.calculator = calculator or F29Calculator.from_settings(settings)

    def _find(self, month: int, year: int) -> F29Filing | None:
        return self.db.scalars(
            select(F29Filing).where(
                F29Filing.business_id == self.business_id,
                F29Filing.month == month,
                F29Filing.year == year,
            )
        ).first()

    def period_transactions(self, month: int, year: int) -> Sequence[Transaction]:
        start, end = month_bounds(month, year)
        return self.db.scalars(
            select(Transaction).where(
                Transaction.business_id == self.business_id,
                Transaction.date >= start,
                Transaction.date <= end,
            )
        ).all()

    def get_or_create(self, month: int, year: int) -> F29Filing:
        """Stored filing for the period, computing and saving it on first request."""
        validate_period(month, year)
        existing = self._find(month, year)
        if existing is not None:
            return existing

        amounts = self.calculator.from_transactions(self.period_transactions(month, year))
        filing = F29Filing(
            business_id=self.business_id,
            month=month,
            year=year,
            status=FilingStatus.DRAFT,
            **amounts.as_dict(),
        )
        try:
            with unit_of_work(self.db):
                self.db.add(filing)
        except IntegrityError:
            # Lost a concurrent create for the same period; serve the stored row
            winner = self._find(month, year)
            if winner is None:
                raise
            logger.info("F29 %02d/%s created concurrently, returning filing %s", month, year, winner.id)
            return winner

        metrics.f29_computed()
        logger.info(
            "Created F29 %s for business %s period %02d/%s (total due %s)",
            filing.id,
            self.business_id,
            month,
            year,
            filing.total_due,
            extra={"business_id": self.business_id, "entity_id": filing.id},
        )
        return filing

    def list_filings(self, filters: F29ListFilter) -> Sequence[F29Filing]:
        stmt = select(F29Filing).where(F29Filing.business_id == self.business_id)
        if filters.year is not None:
            stmt = stmt.where(F29Filing.year == filters.year)
        stmt = stmt.order_by(F29Filing.year.desc(), F29Filing.month.desc())
        return self.db.scalars(stmt).all()

    def get(self, filing_id: int) -> F29Filing:
        return self._get_owned(F29Filing, filing_id, "F29")

    def amend(self, filing_id: int, payload: F29Amend) -> F29Filing:
        """Replace a draft's net totals and recompute VAT, PPM and total due."""
        filing = self.get(filing_id)
        filing_lifecycle.ensure_mutable(filing)

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        amounts = self.calculator.from_net_totals(
            taxable_sales=changes.get("taxable_sales", filing.taxable_sales),
            exempt_sales=changes.get("exempt_sales", filing.exempt_sales),
            taxable_purchases=changes.get("taxable_purchases", filing.taxable_purchases),
            exempt_purchases=changes.get("exempt_purchases", filing.exempt_purchases),
        )
        with unit_of_work(self.db):
            for field, value in amounts.as_dict().items():
                setattr(filing, field, value)

        metrics.f29_computed()
        logger.info("Amended F29 %s: %s", filing.id, sorted(changes))
        return filing

    def file(self, filing_id: int, folio: str | None = None) -> F29Filing:
        filing = self.get(filing_id)
        with unit_of_work(self.db):
            filing_lifecycle.mark_filed(filing, folio)
        return filing

    def monthly_summary(self, month: int, year: int) -> dict:
        """F29 aggregates and transaction counts for a month, without saving anything."""
        validate_period(month, year)
        transactions = self.period_transactions(month, year)
        amounts = self.calculator.from_transactions(transactions)
        sales = [t for t in transactions if t.kind == TransactionKind.SALE]
        purchases = [t for t in transactions if t.kind == TransactionKind.PURCHASE]
        gross_sales = sum(t.gross_amount for t in sales)
        gross_purchases = sum(t.gross_amount for t in purchases)
        return {
            "month": month,
            "year": year,
            "sales_count": len(sales),
            "purchases_count": len(purchases),
            "gross_sales": gross_sales,
            "gross_purchases": gross_purchases,
            "balance": gross_sales - gross_purchases,
            "taxable_sales": amounts.taxable_sales,
            "exempt_sales": amounts.exempt_sales,
            "taxable_purchases": amounts.taxable_purchases,
            "exempt_purchases": amounts.exempt_purchases,
            "vat_debit": amounts.vat_debit,
            "vat_credit": amounts.vat_credit,
            "vat_determined": amounts.vat_determined,
            "ppm_amount": amounts.ppm_amount,
            "total_due": amounts.total_due,
        }
