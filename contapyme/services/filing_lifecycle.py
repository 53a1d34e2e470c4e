"""State transitions for filings and settlements.

F29/F22: draft -> filed. Filing is one-way; a filed record keeps its
amounts forever and only accepts a folio afterwards.

Settlement: unpaid -> paid, terminal.

These helpers only mutate the in-memory record and write the audit trail.
Callers check ownership first and commit inside their own unit of work.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Union

from contapyme import metrics
from contapyme.core.audit import log_audit_event
from contapyme.core.exceptions import FilingAlreadyFiledError, SettlementAlreadyPaidError
from contapyme.models.payroll_models import Settlement
from contapyme.models.tax_models import F22Filing, F29Filing, FilingStatus

logger = logging.getLogger(__name__)

Filing = Union[F29Filing, F22Filing]


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def ensure_mutable(filing: Filing) -> None:
    """Raise ConflictError if the filing's amounts are frozen."""
    if filing.is_filed:
        raise FilingAlreadyFiledError(filing.form, filing.id)


def mark_filed(filing: Filing, folio: str | None = None) -> Filing:
    """Move a draft to filed, or record the folio of an already filed one."""
    action = f"{filing.form.lower()}.filed"
    if filing.is_filed:
        if folio:
            filing.folio = folio
        log_audit_event(
            f"{filing.form.lower()}.folio_recorded",
            business_id=filing.business_id,
            filing_id=filing.id,
            folio=filing.folio,
        )
        return filing

    filing.status = FilingStatus.FILED
    filing.filed_at = _now()
    if folio:
        filing.folio = folio
    metrics.filing_filed(filing.form)
    logger.info("%s %s filed (folio=%s)", filing.form, filing.id, filing.folio)
    log_audit_event(action, business_id=filing.business_id, filing_id=filing.id, folio=filing.folio)
    return filing


def mark_paid(settlement: Settlement, paid_at: dt.datetime | None = None) -> Settlement:
    if settlement.is_paid:
        raise SettlementAlreadyPaidError(settlement.id)
    settlement.is_paid = True
    settlement.paid_at = paid_at or _now()
    logger.info("Settlement %s paid at %s", settlement.id, settlement.paid_at.isoformat())
    log_audit_event(
        "settlement.paid",
        business_id=settlement.worker.business_id,
        settlement_id=settlement.id,
        worker_id=settlement.worker_id,
        net_pay=settlement.net_pay,
    )
    return settlement
