"""Calculator tests without a database."""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from contapyme.core.config import settings
from contapyme.core.exceptions import InvalidAmountError
from contapyme.services.tax_engine.computations import (
    F29Calculator,
    IncomeTaxCalculator,
    PayrollCalculator,
    PayrollRates,
    split_gross_amount,
)
from contapyme.services.tax_engine.tables import load_tax_tables

VAT = Decimal("0.19")


def _tx(kind, gross, exempt=False):
    net, tax = split_gross_amount(gross, exempt, VAT)
    return SimpleNamespace(kind=kind, is_exempt=exempt, gross_amount=gross, net_amount=net, tax_amount=tax)


@pytest.fixture
def payroll():
    return PayrollCalculator(load_tax_tables(), PayrollRates.from_settings(settings))


def test_split_gross_amount():
    assert split_gross_amount(119_000, False, VAT) == (100_000, 19_000)
    assert split_gross_amount(50_000, True, VAT) == (50_000, 0)
    net, tax = split_gross_amount(1_001, False, VAT)
    assert net + tax == 1_001
    assert net == 841


def test_f29_from_transactions():
    calc = F29Calculator(VAT, Decimal("0.0025"))
    amounts = calc.from_transactions([_tx("sale", 119_000), _tx("purchase", 59_500)])

    assert amounts.taxable_sales == 100_000
    assert amounts.vat_debit == 19_000
    assert amounts.taxable_purchases == 50_000
    assert amounts.vat_credit == 9_500
    assert amounts.vat_determined == 9_500
    assert amounts.ppm_base == 100_000
    assert amounts.ppm_rate == 25
    assert amounts.ppm_amount == 250
    assert amounts.total_due == 9_750


def test_f29_exempt_sales_feed_ppm_but_not_vat():
    calc = F29Calculator(VAT, Decimal("0.0025"))
    amounts = calc.from_transactions([_tx("sale", 119_000), _tx("sale", 40_000, exempt=True)])
    assert amounts.exempt_sales == 40_000
    assert amounts.total_sales == 140_000
    assert amounts.vat_debit == 19_000
    assert amounts.ppm_base == 140_000
    assert amounts.ppm_amount == 350


def test_f29_credit_month_still_pays_ppm():
    calc = F29Calculator(VAT, Decimal("0.0025"))
    amounts = calc.from_transactions([_tx("sale", 11_900), _tx("purchase", 119_000)])
    assert amounts.vat_determined == 1_900 - 19_000
    assert amounts.total_due == amounts.ppm_amount == 25


def test_f29_from_net_totals_rejects_negatives():
    calc = F29Calculator(VAT, Decimal("0.0025"))
    amounts = calc.from_net_totals(200_000, 0, 100_000, 0)
    assert amounts.vat_debit == 38_000
    assert amounts.vat_credit == 19_000
    assert amounts.total_due == 19_000 + 500
    with pytest.raises(InvalidAmountError):
        calc.from_net_totals(-1, 0, 0, 0)


def test_payroll_full_settlement(payroll):
    amounts = payroll.compute(1_000_000, 2026, overtime_hours=10, bonuses=50_000)

    assert amounts.overtime_hourly_rate == 8_333
    assert amounts.overtime_amount == 83_330
    assert amounts.gross_pay == 1_133_330
    assert amounts.pension_deduction == 113_333
    assert amounts.health_public == 79_333
    assert amounts.health_private is None
    assert amounts.unemployment_deduction == 6_800
    assert amounts.taxable_base == 933_864
    assert amounts.income_tax_withheld == 2_255
    assert amounts.total_deductions == 201_721
    assert amounts.net_pay == 931_609
    assert amounts.employer_unemployment == 27_200
    assert amounts.work_injury_insurance == 8_727
    assert amounts.employer_cost == 1_169_257


def test_payroll_amounts_are_conserved(payroll):
    amounts = payroll.compute(750_000, 2026, overtime_hours=Decimal("2.5"), bonuses=10_000, other_deductions=5_000)
    assert amounts.gross_pay == amounts.base_salary + amounts.overtime_amount + amounts.bonuses
    assert amounts.total_deductions == (
        amounts.pension_deduction
        + amounts.health_deduction
        + amounts.unemployment_deduction
        + amounts.income_tax_withheld
        + amounts.other_deductions
    )
    assert amounts.net_pay == amounts.gross_pay - amounts.total_deductions


def test_payroll_below_taxable_threshold(payroll):
    amounts = payroll.compute(500_000, 2026)
    assert amounts.taxable_base == 412_000
    assert amounts.income_tax_withheld == 0
    assert amounts.net_pay == 412_000


def test_payroll_private_health_goes_to_private_column(payroll):
    amounts = payroll.compute(500_000, 2026, private_health=True)
    assert amounts.health_public is None
    assert amounts.health_private == 35_000


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_salary": 0},
        {"base_salary": 500_000, "overtime_hours": -1},
        {"base_salary": 500_000, "bonuses": -1},
        {"base_salary": 500_000, "other_deductions": -1},
    ],
)
def test_payroll_rejects_invalid_inputs(payroll, kwargs):
    with pytest.raises(InvalidAmountError):
        payroll.compute(year=2026, **kwargs)


def _month(taxable_sales, ppm_amount, month=1):
    return SimpleNamespace(
        month=month, taxable_sales=taxable_sales, exempt_sales=0, total_purchases=0, ppm_amount=ppm_amount
    )


def test_income_tax_payment():
    calc = IncomeTaxCalculator(load_tax_tables())
    amounts = calc.compute(2026, [_month(10_000_000, 25_000, 1), _month(10_000_000, 25_000, 2)])
    assert amounts.total_income == 20_000_000
    assert amounts.deductible_expenses == 0
    assert amounts.tax_determined == 6_835_004
    assert amounts.ppm_paid == 50_000
    assert amounts.balance == 6_785_004
    assert amounts.result == "payment"
    assert amounts.result_amount == 6_785_004
    assert amounts.months_included == 2


def test_income_tax_refund():
    calc = IncomeTaxCalculator(load_tax_tables())
    amounts = calc.compute(2026, [_month(100_000, 250, 1), _month(100_000, 250, 2)])
    assert amounts.tax_determined == 0
    assert amounts.balance == -500
    assert amounts.result == "refund"
    assert amounts.result_amount == 500
