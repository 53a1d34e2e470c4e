"""
Annual income-tax return (F22) service.

The F22 aggregates whatever F29 filings exist for the year; it does not
wait for all twelve. ``validate_year`` reports which months still lack a
filed F29 so the caller can decide whether the result is authoritative.
"""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contapyme import metrics
from contapyme.core.exceptions import NotFoundError
from contapyme.db.session import unit_of_work
from contapyme.models.tax_models import BalanceResult, F22Filing, F29Filing, FilingStatus
from contapyme.services import filing_lifecycle
from contapyme.services.base_service import BusinessScopedService
from contapyme.services.tax_engine.computations import IncomeTaxCalculator
from contapyme.services.tax_engine.tables import get_tax_tables
from contapyme.utils.validators import validate_period

logger = logging.getLogger(__name__)


class F22Service(BusinessScopedService):
    def __init__(self, db: Session, business_id: int, calculator: IncomeTaxCalculator | None = None):
        super().__init__(db, business_id)
        self.calculator = calculator or IncomeTaxCalculator(get_tax_tables())

    def _find(self, year: int) -> F22Filing | None:
        return self.db.scalars(
            select(F22Filing).where(F22Filing.business_id == self.business_id, F22Filing.year == year)
        ).first()

    def monthly_filings(self, year: int) -> Sequence[F29Filing]:
        return self.db.scalars(
            select(F29Filing)
            .where(F29Filing.business_id == self.business_id, F29Filing.year == year)
            .order_by(F29Filing.month)
        ).all()

    def get_or_create(self, year: int) -> F22Filing:
        validate_period(None, year)
        existing = self._find(year)
        if existing is not None:
            return existing

        monthly = self.monthly_filings(year)
        if not monthly:
            raise NotFoundError("F29 filings for year", year)

        amounts = self.calculator.compute(year, monthly)
        values = amounts.as_dict()
        values.pop("months_included")
        values["result"] = BalanceResult(values["result"])
        filing = F22Filing(business_id=self.business_id, year=year, status=FilingStatus.DRAFT, **values)
        try:
            with unit_of_work(self.db):
                self.db.add(filing)
        except IntegrityError:
            winner = self._find(year)
            if winner is None:
                raise
            logger.info("F22 %s created concurrently, returning filing %s", year, winner.id)
            return winner

        metrics.f22_computed()
        logger.info(
            "Created F22 %s for business %s year %s from %d monthly filings (%s %s)",
            filing.id,
            self.business_id,
            year,
            amounts.months_included,
            amounts.result,
            amounts.result_amount,
            extra={"business_id": self.business_id, "entity_id": filing.id},
        )
        return filing

    def list_filings(self) -> Sequence[F22Filing]:
        return self.db.scalars(
            select(F22Filing).where(F22Filing.business_id == self.business_id).order_by(F22Filing.year.desc())
        ).all()

    def get(self, filing_id: int) -> F22Filing:
        return self._get_owned(F22Filing, filing_id, "F22")

    def file(self, filing_id: int, folio: str | None = None) -> F22Filing:
        filing = self.get(filing_id)
        with unit_of_work(self.db):
            filing_lifecycle.mark_filed(filing, folio)
        return filing

    def validate_year(self, year: int) -> dict:
        """Which months of ``year`` still lack a filed F29."""
        validate_period(None, year)
        monthly = self.monthly_filings(year)
        filed_months = {f.month for f in monthly if f.status == FilingStatus.FILED}
        draft_count = sum(1 for f in monthly if f.status == FilingStatus.DRAFT)
        missing = [m for m in range(1, 13) if m not in filed_months]
        if missing:
            message = f"{len(missing)} month(s) without a filed F29: {', '.join(str(m) for m in missing)}"
        else:
            message = "All monthly F29 filings are filed"
        return {
            "year": year,
            "valid": not missing,
            "filed_count": len(filed_months),
            "draft_count": draft_count,
            "missing_months": missing,
            "message": message,
        }
