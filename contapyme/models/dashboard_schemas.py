"""Dashboard and monthly report schemas."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel

from contapyme.models.inventory_schemas import ProductOut
from contapyme.models.tax_models import FilingStatus


class PeriodTotals(BaseModel):
    """Gross amount and number of transactions of one kind in a window."""
    total: int
    count: int


class MonthSales(PeriodTotals):
    daily_average: int  # over the days elapsed so far
    projection: int  # month-end total at the current daily average
    trend: str  # "positive" or "review"


class LowStockSummary(BaseModel):
    count: int
    products: list[ProductOut]  # lowest stock first, at most five


class TopProduct(BaseModel):
    product_id: int
    name: str
    quantity: int
    total: int


class F29Snapshot(BaseModel):
    month: int
    year: int
    status: FilingStatus
    total_due: int
    filed: bool


class Dashboard(BaseModel):
    """Current-month overview for the business owner."""
    as_of: dt.datetime
    today: PeriodTotals
    week: PeriodTotals  # the last seven calendar days, today included
    month: MonthSales
    low_stock: LowStockSummary
    unread_alerts: int
    current_f29: F29Snapshot | None = None
    top_products: list[TopProduct]


class ReportSales(PeriodTotals):
    daily_average: int  # over every day of the month


class Margin(BaseModel):
    gross: int
    percentage: int  # of sales, rounded; 0 without sales


class MonthlyReport(BaseModel):
    month: int
    year: int
    sales: ReportSales
    purchases: PeriodTotals
    margin: Margin
    f29: F29Snapshot | None = None
