"""Previred file rendering and export."""
from decimal import Decimal

import pytest

from contapyme.core.exceptions import NotFoundError
from contapyme.models.payroll_schemas import SettlementCreate
from contapyme.services.payroll_service import PayrollService
from contapyme.services.previred_export import export_previred, previred_filename


@pytest.fixture
def march_payroll(db_session, business, make_worker):
    service = PayrollService(db_session, business.id)
    ana = make_worker()
    luis = make_worker(
        tax_id="22222222-2",
        first_name="Luis",
        paternal_surname="Perez",
        maternal_surname=None,
        base_salary=500_000,
        private_insurer="Banmedica",
    )
    service.create_settlement(
        SettlementCreate(worker_id=ana.id, month=3, year=2026, overtime_hours=Decimal("10"), bonuses=50_000)
    )
    service.create_settlement(SettlementCreate(worker_id=luis.id, month=3, year=2026))
    return service, ana, luis


def test_renders_header_detail_and_totals(business, march_payroll):
    service, _, _ = march_payroll

    content = export_previred(service, business, 3, 2026)

    assert content == (
        "1|76086428-5|3|2026|\n"
        "2|22222222-2|Luis|Perez||500000|50000|35000|3000|0\n"
        "2|12345678-5|Ana|Rojas|Soto|1133330|113333|79333|6800|2255\n"
        "3|2|1633330|163333|114333|\n"
    )


def test_inactive_workers_are_excluded(business, march_payroll):
    service, _, luis = march_payroll
    service.deactivate_worker(luis.id)

    lines = export_previred(service, business, 3, 2026).splitlines()
    assert len(lines) == 3
    assert lines[-1] == "3|1|1133330|113333|79333|"


def test_empty_period_has_nothing_to_export(db_session, business):
    with pytest.raises(NotFoundError):
        export_previred(PayrollService(db_session, business.id), business, 4, 2026)


def test_filename():
    assert previred_filename(3, 2026) == "previred_3_2026.txt"
