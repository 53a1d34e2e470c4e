"""F22 service: aggregation of the year's F29 filings."""
import pytest

from contapyme.core.exceptions import ConflictError, NotFoundError, ValidationError
from contapyme.db.session import SessionLocal
from contapyme.models.tax_models import BalanceResult, F22Filing, F29Filing, FilingStatus
from contapyme.services.f22_service import F22Service


@pytest.fixture
def add_f29(db_session, business):
    def _add(month, taxable_sales, ppm_amount, status=FilingStatus.DRAFT, year=2026, total_purchases=0):
        filing = F29Filing(
            business_id=business.id,
            month=month,
            year=year,
            taxable_sales=taxable_sales,
            total_sales=taxable_sales,
            total_purchases=total_purchases,
            taxable_purchases=total_purchases,
            ppm_amount=ppm_amount,
            status=status,
        )
        db_session.add(filing)
        db_session.commit()
        return filing

    return _add


def test_requires_monthly_filings(db_session, business):
    with pytest.raises(NotFoundError):
        F22Service(db_session, business.id).get_or_create(2026)


def test_payment_balance(db_session, business, add_f29):
    add_f29(1, 10_000_000, 25_000, total_purchases=3_000_000)
    add_f29(2, 10_000_000, 25_000)

    filing = F22Service(db_session, business.id).get_or_create(2026)

    assert filing.total_income == 20_000_000
    assert filing.total_purchases == 3_000_000
    assert filing.deductible_expenses == 0
    assert filing.taxable_base == 20_000_000
    assert filing.tax_determined == 6_835_004
    assert filing.ppm_paid == 50_000
    assert filing.balance == 6_785_004
    assert filing.result == BalanceResult.PAYMENT
    assert filing.result_amount == 6_785_004
    assert filing.status == FilingStatus.DRAFT


def test_refund_balance(db_session, business, add_f29):
    add_f29(1, 100_000, 250)
    add_f29(2, 100_000, 250)

    filing = F22Service(db_session, business.id).get_or_create(2026)

    assert filing.tax_determined == 0
    assert filing.balance == -500
    assert filing.result == BalanceResult.REFUND
    assert filing.result_amount == 500


def test_only_the_requested_year_counts(db_session, business, add_f29):
    add_f29(1, 100_000, 250)
    add_f29(12, 5_000_000, 12_500, year=2025)

    filing = F22Service(db_session, business.id).get_or_create(2026)
    assert filing.total_income == 100_000
    assert filing.ppm_paid == 250


def test_stored_filing_is_returned_unchanged(db_session, business, add_f29):
    add_f29(1, 100_000, 250)
    service = F22Service(db_session, business.id)
    first = service.get_or_create(2026)
    add_f29(2, 100_000, 250)

    second = service.get_or_create(2026)
    assert second.id == first.id
    assert second.total_income == 100_000



def test_concurrent_create_returns_the_stored_filing(db_session, business, add_f29, monkeypatch):
    add_f29(1, 10_000_000, 25_000)
    other = SessionLocal()
    try:
        winner = F22Filing(business_id=business.id, year=2026, total_income=7, balance=-3)
        other.add(winner)
        other.commit()
        winner_id = winner.id
    finally:
        other.close()

    service = F22Service(db_session, business.id)
    real_find = service._find
    calls = []

    def find_after_race(year):
        # The first lookup runs before the other request commits
        calls.append(year)
        return None if len(calls) == 1 else real_find(year)

    monkeypatch.setattr(service, "_find", find_after_race)

    filing = service.get_or_create(2026)

    assert filing.id == winner_id
    assert filing.total_income == 7
    assert calls == [2026, 2026]

def test_invalid_year(db_session, business):
    with pytest.raises(ValidationError):
        F22Service(db_session, business.id).get_or_create(1999)


def test_file_then_refile(db_session, business, add_f29):
    add_f29(1, 100_000, 250)
    service = F22Service(db_session, business.id)
    filing = service.file(service.get_or_create(2026).id, folio="F22-1")
    assert filing.status == FilingStatus.FILED

    again = service.file(filing.id, folio="F22-2")
    assert again.folio == "F22-2"
    assert [f.id for f in service.list_filings()] == [filing.id]


def test_validate_year_reports_missing_months(db_session, business, add_f29):
    for month in (1, 2, 3):
        add_f29(month, 100_000, 250, status=FilingStatus.FILED)
    add_f29(4, 100_000, 250)

    report = F22Service(db_session, business.id).validate_year(2026)

    assert report["valid"] is False
    assert report["filed_count"] == 3
    assert report["draft_count"] == 1
    assert report["missing_months"] == list(range(4, 13))


def test_validate_year_complete(db_session, business, add_f29):
    for month in range(1, 13):
        add_f29(month, 100_000, 250, status=FilingStatus.FILED, year=2025)

    report = F22Service(db_session, business.id).validate_year(2025)
    assert report["valid"] is True
    assert report["missing_months"] == []


def test_monthly_filings_stay_frozen_once_filed(db_session, business, add_f29):
    from contapyme.models.tax_schemas import F29Amend
    from contapyme.services.f29_service import F29Service

    filed = add_f29(1, 100_000, 250, status=FilingStatus.FILED)
    with pytest.raises(ConflictError):
        F29Service(db_session, business.id).amend(filed.id, F29Amend(exempt_sales=10))
