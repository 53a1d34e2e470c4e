from __future__ import annotations

import datetime as dt
import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contapyme import metrics
from contapyme.core.config import settings
from contapyme.core.exceptions import DuplicateRutError, DuplicateSettlementError, NotFoundError
from contapyme.db.queries import active_only
from contapyme.db.session import unit_of_work
from contapyme.models import payroll_schemas as schemas
from contapyme.models.payroll_models import Settlement, Worker
from contapyme.services import filing_lifecycle
from contapyme.services.base_service import BusinessScopedService
from contapyme.services.tax_engine.computations import PayrollCalculator, PayrollRates
from contapyme.services.tax_engine.tables import get_tax_tables
from contapyme.utils.rut import normalize_rut
from contapyme.utils.validators import validate_period

logger = logging.getLogger(__name__)


class PayrollService(BusinessScopedService):
    def __init__(self, db: Session, business_id: int, calculator: PayrollCalculator | None = None):
        super().__init__(db, business_id)
        self.calculator = calculator or PayrollCalculator(get_tax_tables(), PayrollRates.from_settings(settings))

    # ------------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------------

    def list_workers(self, include_inactive: bool = False) -> Sequence[Worker]:
        """Get the business's workers, active ones only unless asked otherwise."""
        stmt = select(Worker).where(Worker.business_id == self.business_id)
        if not include_inactive:
            stmt = active_only(stmt, Worker)
        return self.db.scalars(stmt.order_by(Worker.paternal_surname, Worker.first_name)).all()

    def get_worker(self, worker_id: int) -> Worker:
        return self._get_owned(Worker, worker_id, "Worker")

    def add_worker(self, payload: schemas.WorkerCreate) -> Worker:
        tax_id = normalize_rut(payload.tax_id)
        if self.db.scalars(select(Worker.id).where(Worker.tax_id == tax_id)).first() is not None:
            raise DuplicateRutError(tax_id)

        worker = Worker(business_id=self.business_id, **payload.model_dump(exclude={"tax_id"}), tax_id=tax_id)
        try:
            with unit_of_work(self.db):
                self.db.add(worker)
        except IntegrityError as exc:
            raise DuplicateRutError(tax_id) from exc
        logger.info("Added worker %s (%s) to business %s", worker.id, tax_id, self.business_id)
        return worker

    def deactivate_worker(self, worker_id: int, end_date: dt.date | None = None) -> Worker:
        worker = self.get_worker(worker_id)
        if not worker.is_active:
            return worker
        with unit_of_work(self.db):
            worker.deactivate(end_date)
        logger.info("Deactivated worker %s", worker.id)
        return worker

    def update_worker(self, worker_id: int, payload: schemas.WorkerUpdate) -> Worker:
        """Apply the fields present in ``payload``; later settlements use the new values."""
        worker = self.get_worker(worker_id)
        changes = payload.model_dump(exclude_unset=True)
        with unit_of_work(self.db):
            for field, value in changes.items():
                setattr(worker, field, value)
        logger.info(
            "Updated worker %s: %s",
            worker.id,
            ", ".join(sorted(changes)) or "no changes",
            extra={"business_id": self.business_id, "entity_id": worker.id},
        )
        return worker

    # ------------------------------------------------------------------
    # Settlements
    # ------------------------------------------------------------------

    def _find_settlement(self, worker_id: int, month: int, year: int) -> Settlement | None:
        return self.db.scalars(
            select(Settlement).where(
                Settlement.worker_id == worker_id,
                Settlement.month == month,
                Settlement.year == year,
            )
        ).first()

    def create_settlement(self, payload: schemas.SettlementCreate) -> Settlement:
        """Compute and store one worker's settlement. Create-once per period."""
        validate_period(payload.month, payload.year)
        worker = self.get_worker(payload.worker_id)
        if self._find_settlement(worker.id, payload.month, payload.year) is not None:
            raise DuplicateSettlementError(worker.id, payload.month, payload.year)

        amounts = self.calculator.compute(
            base_salary=worker.base_salary,
            year=payload.year,
            overtime_hours=payload.overtime_hours,
            bonuses=payload.bonuses,
            other_deductions=payload.other_deductions,
            private_health=worker.has_private_health,
        )
        values = amounts.as_dict()
        values.pop("overtime_hourly_rate")
        settlement = Settlement(worker_id=worker.id, month=payload.month, year=payload.year, **values)
        try:
            with unit_of_work(self.db):
                self.db.add(settlement)
        except IntegrityError as exc:
            raise DuplicateSettlementError(worker.id, payload.month, payload.year) from exc

        metrics.settlement_generated()
        logger.info(
            "Settlement %s for worker %s %02d/%s: gross %s net %s",
            settlement.id,
            worker.id,
            payload.month,
            payload.year,
            settlement.gross_pay,
            settlement.net_pay,
            extra={"business_id": self.business_id, "entity_id": settlement.id},
        )
        return settlement

    def list_settlements(self, filters: schemas.SettlementListFilter) -> Sequence[Settlement]:
        stmt = select(Settlement).join(Worker).where(Worker.business_id == self.business_id)
        if filters.month is not None:
            stmt = stmt.where(Settlement.month == filters.month)
        if filters.year is not None:
            stmt = stmt.where(Settlement.year == filters.year)
        if filters.worker_id is not None:
            stmt = stmt.where(Settlement.worker_id == filters.worker_id)
        stmt = (
            stmt.order_by(Settlement.year.desc(), Settlement.month.desc(), Settlement.id)
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return self.db.scalars(stmt).all()

    def get_settlement(self, settlement_id: int) -> Settlement:
        settlement = self.db.get(Settlement, settlement_id)
        if settlement is None:
            raise NotFoundError("Settlement", settlement_id)
        self._check_owner(settlement, settlement.worker.business_id, "Settlement")
        return settlement

    def pay_settlement(self, settlement_id: int, paid_at: dt.datetime | None = None) -> Settlement:
        settlement = self.get_settlement(settlement_id)
        with unit_of_work(self.db):
            filing_lifecycle.mark_paid(settlement, paid_at)
        return settlement

    def period_settlements(self, month: int, year: int, active_workers_only: bool = True) -> Sequence[Settlement]:
        stmt = (
            select(Settlement)
            .join(Worker)
            .where(
                Worker.business_id == self.business_id,
                Settlement.month == month,
                Settlement.year == year,
            )
        )
        if active_workers_only:
            stmt = active_only(stmt, Worker)
        return self.db.scalars(stmt.order_by(Worker.paternal_surname, Worker.first_name)).all()
