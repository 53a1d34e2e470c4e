"""Tax and payroll computation functions.

Pure computation logic for the monthly VAT form (F29), the annual
income-tax form (F22) and monthly payroll settlements. No database access:
callers pass plain records in and persist what comes out.

All amounts are whole pesos. Rates are Decimals and every rounding step is
half away from zero via ``round_clp``.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Iterable, Protocol

from contapyme.core.config import BaseAppSettings
from contapyme.core.exceptions import InvalidAmountError

from .brackets import round_clp
from .tables import TaxTableRegistry

logger = logging.getLogger(__name__)

SALE = "sale"
PURCHASE = "purchase"


class TransactionRecord(Protocol):
    kind: Any
    is_exempt: bool
    gross_amount: int
    net_amount: int
    tax_amount: int


class MonthlyFilingRecord(Protocol):
    month: int
    taxable_sales: int
    exempt_sales: int
    total_purchases: int
    ppm_amount: int


# ============================================================================
# VAT helpers
# ============================================================================

def split_gross_amount(gross: int, is_exempt: bool, vat_rate: Decimal) -> tuple[int, int]:
    """Split a VAT-inclusive amount into (net, tax).

    The net amount is rounded and tax takes the remainder, so
    ``net + tax == gross`` always holds.
    """
    if is_exempt:
        return gross, 0
    net = round_clp(Decimal(gross) / (1 + vat_rate))
    return net, gross - net


def vat_on_net(net: int, vat_rate: Decimal) -> int:
    """VAT charged on a net amount."""
    return round_clp(Decimal(net) * vat_rate)


# ============================================================================
# F29 (monthly VAT + PPM)
# ============================================================================

@dataclass(frozen=True)
class F29Amounts:
    taxable_sales: int
    exempt_sales: int
    total_sales: int
    taxable_purchases: int
    exempt_purchases: int
    total_purchases: int
    vat_debit: int
    vat_credit: int
    vat_determined: int
    ppm_base: int
    ppm_rate: int  # basis points, 25 == 0.25%
    ppm_amount: int
    total_due: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class F29Calculator:
    """Derives monthly VAT and provisional payment figures."""

    def __init__(self, vat_rate: Decimal, ppm_rate: Decimal):
        self.vat_rate = vat_rate
        self.ppm_rate = ppm_rate

    @classmethod
    def from_settings(cls, cfg: BaseAppSettings) -> F29Calculator:
        return cls(vat_rate=cfg.VAT_RATE, ppm_rate=cfg.PPM_RATE)

    def from_transactions(self, transactions: Iterable[TransactionRecord]) -> F29Amounts:
        """Aggregate a period's transactions using their stored tax amounts."""
        taxable_sales = exempt_sales = vat_debit = 0
        taxable_purchases = exempt_purchases = vat_credit = 0

        for tx in transactions:
            if tx.kind == SALE:
                if tx.is_exempt:
                    exempt_sales += tx.gross_amount
                else:
                    taxable_sales += tx.net_amount
                    vat_debit += tx.tax_amount
            elif tx.kind == PURCHASE:
                if tx.is_exempt:
                    exempt_purchases += tx.gross_amount
                else:
                    taxable_purchases += tx.net_amount
                    vat_credit += tx.tax_amount
            else:
                logger.warning("Ignoring transaction with unknown kind %r", tx.kind)

        return self._finish(
            taxable_sales, exempt_sales, taxable_purchases, exempt_purchases, vat_debit, vat_credit
        )

    def from_net_totals(
        self,
        taxable_sales: int,
        exempt_sales: int,
        taxable_purchases: int,
        exempt_purchases: int,
    ) -> F29Amounts:
        """Recompute a filing from manually entered net totals."""
        for field, value in (
            ("taxable_sales", taxable_sales),
            ("exempt_sales", exempt_sales),
            ("taxable_purchases", taxable_purchases),
            ("exempt_purchases", exempt_purchases),
        ):
            if value < 0:
                raise InvalidAmountError(field, value, "must not be negative")
        return self._finish(
            taxable_sales,
            exempt_sales,
            taxable_purchases,
            exempt_purchases,
            vat_on_net(taxable_sales, self.vat_rate),
            vat_on_net(taxable_purchases, self.vat_rate),
        )

    def _finish(
        self,
        taxable_sales: int,
        exempt_sales: int,
        taxable_purchases: int,
        exempt_purchases: int,
        vat_debit: int,
        vat_credit: int,
    ) -> F29Amounts:
        vat_determined = vat_debit - vat_credit
        ppm_base = taxable_sales + exempt_sales
        ppm_amount = round_clp(Decimal(ppm_base) * self.ppm_rate)
        return F29Amounts(
            taxable_sales=taxable_sales,
            exempt_sales=exempt_sales,
            total_sales=taxable_sales + exempt_sales,
            taxable_purchases=taxable_purchases,
            exempt_purchases=exempt_purchases,
            total_purchases=taxable_purchases + exempt_purchases,
            vat_debit=vat_debit,
            vat_credit=vat_credit,
            vat_determined=vat_determined,
            ppm_base=ppm_base,
            ppm_rate=int(self.ppm_rate * 10_000),
            ppm_amount=ppm_amount,
            total_due=max(0, vat_determined) + ppm_amount,
        )


# ============================================================================
# F22 (annual income tax)
# ============================================================================

@dataclass(frozen=True)
class F22Amounts:
    total_income: int
    total_purchases: int
    deductible_expenses: int
    taxable_base: int
    tax_determined: int
    ppm_paid: int
    balance: int
    result: str
    result_amount: int
    months_included: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def balance_label(balance: int) -> str:
    if balance > 0:
        return "payment"
    if balance < 0:
        return "refund"
    return "zero"


class IncomeTaxCalculator:
    """Aggregates a year of F29 filings into the annual income-tax figures.

    Deductible expenses are always zero under the simplified regime; total
    purchases are reported for reference only.
    """

    def __init__(self, tables: TaxTableRegistry):
        self.tables = tables

    def compute(self, year: int, monthly_filings: Iterable[MonthlyFilingRecord]) -> F22Amounts:
        filings = list(monthly_filings)
        total_income = sum(f.taxable_sales + f.exempt_sales for f in filings)
        total_purchases = sum(f.total_purchases for f in filings)
        ppm_paid = sum(f.ppm_amount for f in filings)
        deductible_expenses = 0
        taxable_base = total_income - deductible_expenses
        tax_determined = self.tables.income_tax_table(year).evaluate(taxable_base)
        balance = tax_determined - ppm_paid
        return F22Amounts(
            total_income=total_income,
            total_purchases=total_purchases,
            deductible_expenses=deductible_expenses,
            taxable_base=taxable_base,
            tax_determined=tax_determined,
            ppm_paid=ppm_paid,
            balance=balance,
            result=balance_label(balance),
            result_amount=abs(balance),
            months_included=len(filings),
        )


# ============================================================================
# Payroll settlements
# ============================================================================

@dataclass(frozen=True)
class PayrollRates:
    pension: Decimal
    health: Decimal
    unemployment_employee: Decimal
    unemployment_employer: Decimal
    work_injury: Decimal
    standard_monthly_hours: int
    overtime_premium: Decimal

    @classmethod
    def from_settings(cls, cfg: BaseAppSettings) -> PayrollRates:
        return cls(
            pension=cfg.PENSION_RATE,
            health=cfg.HEALTH_RATE,
            unemployment_employee=cfg.UNEMPLOYMENT_EMPLOYEE_RATE,
            unemployment_employer=cfg.UNEMPLOYMENT_EMPLOYER_RATE,
            work_injury=cfg.WORK_INJURY_RATE,
            standard_monthly_hours=cfg.STANDARD_MONTHLY_HOURS,
            overtime_premium=cfg.OVERTIME_PREMIUM,
        )


@dataclass(frozen=True)
class SettlementAmounts:
    base_salary: int
    overtime_hours: Decimal
    overtime_hourly_rate: int
    overtime_amount: int
    bonuses: int
    gross_pay: int
    pension_deduction: int
    health_public: int | None
    health_private: int | None
    unemployment_deduction: int
    taxable_base: int
    income_tax_withheld: int
    other_deductions: int
    total_deductions: int
    net_pay: int
    employer_unemployment: int
    work_injury_insurance: int
    employer_cost: int

    @property
    def health_deduction(self) -> int:
        return (self.health_public or 0) + (self.health_private or 0)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class PayrollCalculator:
    """Gross-to-net settlement arithmetic for one worker and month."""

    def __init__(self, tables: TaxTableRegistry, rates: PayrollRates):
        self.tables = tables
        self.rates = rates

    def compute(
        self,
        base_salary: int,
        year: int,
        overtime_hours: Decimal | int = 0,
        bonuses: int = 0,
        other_deductions: int = 0,
        private_health: bool = False,
    ) -> SettlementAmounts:
        if base_salary <= 0:
            raise InvalidAmountError("base_salary", base_salary, "must be greater than 0")
        for field, value in (
            ("overtime_hours", overtime_hours),
            ("bonuses", bonuses),
            ("other_deductions", other_deductions),
        ):
            if value < 0:
                raise InvalidAmountError(field, value, "must not be negative")

        r = self.rates
        hours = Decimal(overtime_hours)
        hourly_rate = round_clp(Decimal(base_salary) / r.standard_monthly_hours * r.overtime_premium)
        overtime_amount = round_clp(hours * hourly_rate)
        gross = base_salary + overtime_amount + bonuses

        pension = round_clp(gross * r.pension)
        health = round_clp(gross * r.health)
        unemployment = round_clp(gross * r.unemployment_employee)
        taxable_base = gross - pension - health - unemployment
        income_tax = self.tables.payroll_tax_table(year).evaluate(taxable_base)

        total_deductions = pension + health + unemployment + income_tax + other_deductions
        employer_unemployment = round_clp(gross * r.unemployment_employer)
        work_injury = round_clp(gross * r.work_injury)

        return SettlementAmounts(
            base_salary=base_salary,
            overtime_hours=hours,
            overtime_hourly_rate=hourly_rate,
            overtime_amount=overtime_amount,
            bonuses=bonuses,
            gross_pay=gross,
            pension_deduction=pension,
            health_public=None if private_health else health,
            health_private=health if private_health else None,
            unemployment_deduction=unemployment,
            taxable_base=taxable_base,
            income_tax_withheld=income_tax,
            other_deductions=other_deductions,
            total_deductions=total_deductions,
            net_pay=gross - total_deductions,
            employer_unemployment=employer_unemployment,
            work_injury_insurance=work_injury,
            employer_cost=gross + employer_unemployment + work_injury,
        )
