"""Dashboard figures and the monthly report, computed on read and never stored."""
from __future__ import annotations

import calendar
import datetime as dt
from decimal import Decimal

from sqlalchemy import func, select

from contapyme.db.queries import active_only
from contapyme.models.accounting_models import Transaction, TransactionKind, TransactionLine
from contapyme.models.dashboard_schemas import (
    Dashboard,
    F29Snapshot,
    LowStockSummary,
    Margin,
    MonthlyReport,
    MonthSales,
    PeriodTotals,
    ReportSales,
    TopProduct,
)
from contapyme.models.inventory_models import Product
from contapyme.models.inventory_schemas import ProductOut
from contapyme.models.tax_models import F29Filing
from contapyme.services.alert_service import AlertService
from contapyme.services.base_service import BusinessScopedService
from contapyme.services.tax_engine.brackets import round_clp
from contapyme.utils.validators import month_bounds, validate_period

SHORT_LIST_SIZE = 5
TREND_THRESHOLD = Decimal("0.8")


class DashboardService(BusinessScopedService):
    def totals(self, kind: TransactionKind, start: dt.datetime, end: dt.datetime) -> PeriodTotals:
        """Gross total and count of ``kind`` transactions dated within [start, end]."""
        total, count = self.db.execute(
            select(func.coalesce(func.sum(Transaction.gross_amount), 0), func.count(Transaction.id)).where(
                Transaction.business_id == self.business_id,
                Transaction.kind == kind,
                Transaction.date >= start,
                Transaction.date <= end,
            )
        ).one()
        return PeriodTotals(total=total, count=count)

    def _f29_snapshot(self, month: int, year: int) -> F29Snapshot | None:
        # Read only: the dashboard never creates a filing
        filing = self.db.scalars(
            select(F29Filing).where(
                F29Filing.business_id == self.business_id,
                F29Filing.month == month,
                F29Filing.year == year,
            )
        ).first()
        if filing is None:
            return None
        return F29Snapshot(
            month=filing.month,
            year=filing.year,
            status=filing.status,
            total_due=filing.total_due,
            filed=filing.is_filed,
        )

    def low_stock(self) -> LowStockSummary:
        # Same rule as Product.is_low_stock
        condition = (Product.business_id == self.business_id, Product.current_stock <= Product.minimum_stock)
        count = self.db.scalar(active_only(select(func.count(Product.id)).where(*condition), Product))
        products = self.db.scalars(
            active_only(select(Product).where(*condition), Product)
            .order_by(Product.current_stock, Product.id)
            .limit(SHORT_LIST_SIZE)
        ).all()
        return LowStockSummary(count=count or 0, products=[ProductOut.model_validate(p) for p in products])

    def top_products(self, start: dt.datetime, end: dt.datetime) -> list[TopProduct]:
        """Best sellers by units sold in [start, end]."""
        quantity = func.sum(TransactionLine.quantity).label("quantity")
        rows = self.db.execute(
            select(
                TransactionLine.product_id,
                func.max(TransactionLine.item_name),
                quantity,
                func.sum(TransactionLine.subtotal),
            )
            .join(Transaction, TransactionLine.transaction_id == Transaction.id)
            .where(
                Transaction.business_id == self.business_id,
                Transaction.kind == TransactionKind.SALE,
                Transaction.date >= start,
                Transaction.date <= end,
            )
            .group_by(TransactionLine.product_id)
            .order_by(quantity.desc(), TransactionLine.product_id)
            .limit(SHORT_LIST_SIZE)
        ).all()
        return [
            TopProduct(product_id=product_id, name=name, quantity=units, total=total)
            for product_id, name, units, total in rows
        ]

    def overview(self, now: dt.datetime | None = None) -> Dashboard:
        now = now or dt.datetime.now()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end_of_today = today + dt.timedelta(days=1) - dt.timedelta(seconds=1)
        month_start, month_end = month_bounds(now.month, now.year)
        days_in_month = calendar.monthrange(now.year, now.month)[1]

        month = self.totals(TransactionKind.SALE, month_start, month_end)
        # Days elapsed includes today
        daily_average = Decimal(month.total) / now.day
        projection = round_clp(daily_average * days_in_month)

        return Dashboard(
            as_of=now,
            today=self.totals(TransactionKind.SALE, today, end_of_today),
            week=self.totals(TransactionKind.SALE, today - dt.timedelta(days=6), end_of_today),
            month=MonthSales(
                total=month.total,
                count=month.count,
                daily_average=round_clp(daily_average),
                projection=projection,
                trend="positive" if month.total > projection * TREND_THRESHOLD else "review",
            ),
            low_stock=self.low_stock(),
            unread_alerts=AlertService(self.db, self.business_id).unread_count(),
            current_f29=self._f29_snapshot(now.month, now.year),
            top_products=self.top_products(month_start, month_end),
        )

    def monthly_report(self, month: int, year: int) -> MonthlyReport:
        validate_period(month, year)
        start, end = month_bounds(month, year)
        sales = self.totals(TransactionKind.SALE, start, end)
        purchases = self.totals(TransactionKind.PURCHASE, start, end)
        gross_margin = sales.total - purchases.total
        percentage = round_clp(Decimal(gross_margin) * 100 / sales.total) if sales.total > 0 else 0

        return MonthlyReport(
            month=month,
            year=year,
            sales=ReportSales(
                total=sales.total,
                count=sales.count,
                daily_average=round_clp(Decimal(sales.total) / calendar.monthrange(year, month)[1]),
            ),
            purchases=purchases,
            margin=Margin(gross=gross_margin, percentage=percentage),
            f29=self._f29_snapshot(month, year),
        )
