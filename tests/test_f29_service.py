"""F29 service: lazy creation, amendment and filing."""
import datetime as dt
import json

import pytest

from contapyme.core.config import settings
from contapyme.core.exceptions import (
    ConflictError,
    InvalidPeriodError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from contapyme.db.session import SessionLocal
from contapyme.models.accounting_models import Transaction, TransactionKind
from contapyme.models.tax_models import F29Filing, FilingStatus
from contapyme.models.tax_schemas import F29Amend, F29ListFilter
from contapyme.services.f29_service import F29Service


def _record(db, business, kind, gross, net, tax, when, exempt=False):
    tx = Transaction(
        business_id=business.id,
        kind=kind,
        date=when,
        gross_amount=gross,
        net_amount=net,
        tax_amount=tax,
        is_exempt=exempt,
    )
    db.add(tx)
    db.commit()
    return tx


@pytest.fixture
def march_activity(db_session, business):
    _record(db_session, business, TransactionKind.SALE, 119_000, 100_000, 19_000, dt.datetime(2026, 3, 15, 10))
    _record(db_session, business, TransactionKind.PURCHASE, 59_500, 50_000, 9_500, dt.datetime(2026, 3, 20, 9))
    # Outside the period
    _record(db_session, business, TransactionKind.SALE, 11_900, 10_000, 1_900, dt.datetime(2026, 4, 1, 0))
    _record(db_session, business, TransactionKind.SALE, 11_900, 10_000, 1_900, dt.datetime(2026, 2, 28, 23, 59))


def test_creates_filing_from_period_transactions(db_session, business, march_activity):
    filing = F29Service(db_session, business.id).get_or_create(3, 2026)

    assert filing.status == FilingStatus.DRAFT
    assert filing.taxable_sales == 100_000
    assert filing.vat_debit == 19_000
    assert filing.taxable_purchases == 50_000
    assert filing.vat_credit == 9_500
    assert filing.vat_determined == 9_500
    assert filing.ppm_base == 100_000
    assert filing.ppm_rate == 25
    assert filing.ppm_amount == 250
    assert filing.total_due == 9_750


def test_last_second_of_month_is_included(db_session, business):
    _record(db_session, business, TransactionKind.SALE, 119_000, 100_000, 19_000, dt.datetime(2026, 3, 31, 23, 59, 59))
    filing = F29Service(db_session, business.id).get_or_create(3, 2026)
    assert filing.taxable_sales == 100_000


def test_empty_period_yields_zero_filing(db_session, business):
    filing = F29Service(db_session, business.id).get_or_create(1, 2026)
    assert filing.total_sales == 0
    assert filing.total_due == 0


def test_stored_filing_is_returned_unchanged(db_session, business, march_activity):
    service = F29Service(db_session, business.id)
    first = service.get_or_create(3, 2026)
    _record(db_session, business, TransactionKind.SALE, 119_000, 100_000, 19_000, dt.datetime(2026, 3, 25))

    second = service.get_or_create(3, 2026)
    assert second.id == first.id
    assert second.taxable_sales == 100_000
    assert len(service.list_filings(F29ListFilter())) == 1



def test_concurrent_create_returns_the_stored_filing(db_session, business, march_activity, monkeypatch):
    other = SessionLocal()
    try:
        winner = F29Filing(business_id=business.id, month=3, year=2026, taxable_sales=1, total_due=42)
        other.add(winner)
        other.commit()
        winner_id = winner.id
    finally:
        other.close()

    service = F29Service(db_session, business.id)
    real_find = service._find
    calls = []

    def find_after_race(month, year):
        # The first lookup runs before the other request commits
        calls.append((month, year))
        return None if len(calls) == 1 else real_find(month, year)

    monkeypatch.setattr(service, "_find", find_after_race)

    filing = service.get_or_create(3, 2026)

    assert filing.id == winner_id
    assert filing.total_due == 42
    assert len(calls) == 2
    assert len(service.list_filings(F29ListFilter())) == 1

@pytest.mark.parametrize("month,year", [(0, 2026), (13, 2026), (3, 2019)])
def test_invalid_period(db_session, business, month, year):
    with pytest.raises(InvalidPeriodError) as exc_info:
        F29Service(db_session, business.id).get_or_create(month, year)
    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.code == "VAL001"


def test_amend_recomputes_draft(db_session, business, march_activity):
    service = F29Service(db_session, business.id)
    filing = service.get_or_create(3, 2026)

    amended = service.amend(filing.id, F29Amend(taxable_sales=200_000))

    assert amended.taxable_sales == 200_000
    assert amended.taxable_purchases == 50_000
    assert amended.vat_debit == 38_000
    assert amended.vat_credit == 9_500
    assert amended.vat_determined == 28_500
    assert amended.ppm_amount == 500
    assert amended.total_due == 29_000


def test_filing_freezes_amounts(db_session, business, march_activity):
    service = F29Service(db_session, business.id)
    filing = service.get_or_create(3, 2026)

    filed = service.file(filing.id, folio="123456")
    assert filed.status == FilingStatus.FILED
    assert filed.filed_at is not None
    assert filed.folio == "123456"

    with pytest.raises(ConflictError) as exc_info:
        service.amend(filing.id, F29Amend(taxable_sales=1))
    assert exc_info.value.code == "CON002"
    assert service.get(filing.id).taxable_sales == 100_000


def test_refiling_only_records_folio(db_session, business, march_activity):
    service = F29Service(db_session, business.id)
    filing = service.file(service.get_or_create(3, 2026).id)
    filed_at = filing.filed_at

    again = service.file(filing.id, folio="999")
    assert again.status == FilingStatus.FILED
    assert again.filed_at == filed_at
    assert again.folio == "999"

    events = [json.loads(line)["action"] for line in open(settings.AUDIT_LOG_FILE)]
    assert events == ["f29.filed", "f29.folio_recorded"]


def test_list_orders_newest_first_and_filters_year(db_session, business):
    service = F29Service(db_session, business.id)
    for month, year in [(1, 2025), (12, 2025), (2, 2026), (1, 2026)]:
        service.get_or_create(month, year)

    periods = [(f.year, f.month) for f in service.list_filings(F29ListFilter())]
    assert periods == [(2026, 2), (2026, 1), (2025, 12), (2025, 1)]
    assert [f.month for f in service.list_filings(F29ListFilter(year=2025))] == [12, 1]


def test_foreign_and_missing_filings(db_session, business, other_business):
    foreign = F29Service(db_session, other_business.id).get_or_create(3, 2026)
    service = F29Service(db_session, business.id)

    with pytest.raises(PermissionDeniedError):
        service.get(foreign.id)
    with pytest.raises(PermissionDeniedError):
        service.file(foreign.id)
    with pytest.raises(NotFoundError):
        service.get(9999)


def test_filings_are_scoped_per_business(db_session, business, other_business, march_activity):
    mine = F29Service(db_session, business.id).get_or_create(3, 2026)
    theirs = F29Service(db_session, other_business.id).get_or_create(3, 2026)
    assert mine.id != theirs.id
    assert theirs.total_sales == 0


def test_monthly_summary_is_not_persisted(db_session, business, march_activity):
    service = F29Service(db_session, business.id)
    summary = service.monthly_summary(3, 2026)

    assert summary["sales_count"] == 1
    assert summary["purchases_count"] == 1
    assert summary["gross_sales"] == 119_000
    assert summary["gross_purchases"] == 59_500
    assert summary["balance"] == 59_500
    assert summary["total_due"] == 9_750
    assert service.list_filings(F29ListFilter()) == []
