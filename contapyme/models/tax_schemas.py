"""
Pydantic schemas for the F29 and F22 API.

Amounts are whole pesos (int).
"""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, computed_field

from contapyme.models.tax_models import BalanceResult, FilingStatus

# ============================================================================
# F29
# ============================================================================

class F29ListFilter(BaseModel):
    year: int | None = Field(None, ge=1990, le=2100)


class F29Amend(BaseModel):
    """Manual net totals for a draft F29. Omitted fields keep their value."""
    taxable_sales: int | None = Field(None, ge=0)
    exempt_sales: int | None = Field(None, ge=0)
    taxable_purchases: int | None = Field(None, ge=0)
    exempt_purchases: int | None = Field(None, ge=0)


class FileRequest(BaseModel):
    folio: str | None = Field(None, max_length=50, description="Receipt number issued by the tax authority")


class SalesBlock(BaseModel):
    taxable: int
    exempt: int
    total: int


class VatBlock(BaseModel):
    debit: int
    credit: int
    determined: int
    result: str  # "payable" or "credit"


class F29Summary(BaseModel):
    sales: SalesBlock
    purchases: SalesBlock
    vat: VatBlock
    ppm: int
    total_due: int


class F29Out(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    month: int
    year: int
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
    ppm_rate: int
    ppm_amount: int
    total_due: int
    status: FilingStatus
    filed_at: dt.datetime | None = None
    folio: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def summary(self) -> F29Summary:
        return F29Summary(
            sales=SalesBlock(taxable=self.taxable_sales, exempt=self.exempt_sales, total=self.total_sales),
            purchases=SalesBlock(
                taxable=self.taxable_purchases, exempt=self.exempt_purchases, total=self.total_purchases
            ),
            vat=VatBlock(
                debit=self.vat_debit,
                credit=self.vat_credit,
                determined=self.vat_determined,
                result="payable" if self.vat_determined > 0 else "credit",
            ),
            ppm=self.ppm_amount,
            total_due=self.total_due,
        )


class MonthlySummaryOut(BaseModel):
    """Unpersisted F29 aggregates for a month, with transaction counts."""
    month: int
    year: int
    sales_count: int
    purchases_count: int
    gross_sales: int
    gross_purchases: int
    balance: int
    taxable_sales: int
    exempt_sales: int
    taxable_purchases: int
    exempt_purchases: int
    vat_debit: int
    vat_credit: int
    vat_determined: int
    ppm_amount: int
    total_due: int


# ============================================================================
# F22
# ============================================================================

class F22Out(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    year: int
    total_income: int
    total_purchases: int
    deductible_expenses: int
    taxable_base: int
    tax_determined: int
    ppm_paid: int
    balance: int
    result: BalanceResult
    result_amount: int
    status: FilingStatus
    filed_at: dt.datetime | None = None
    folio: str | None = None


class F22ValidationOut(BaseModel):
    year: int
    valid: bool
    filed_count: int
    draft_count: int
    missing_months: list[int]
    message: str
