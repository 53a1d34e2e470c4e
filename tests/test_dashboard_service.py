"""Dashboard overview and monthly report."""
import datetime as dt

import pytest

from contapyme.core.exceptions import InvalidPeriodError
from contapyme.models.accounting_models import TransactionKind
from contapyme.models.inventory_schemas import TransactionCreate, TransactionLineIn
from contapyme.models.schemas import AlertListFilter
from contapyme.services.alert_service import AlertService
from contapyme.services.dashboard_service import DashboardService
from contapyme.services.f29_service import F29Service
from contapyme.services.inventory import build_inventory_service

NOW = dt.datetime(2026, 3, 10, 15, 0)


def _tx(kind, when, product_id, quantity, unit_price=None):
    return TransactionCreate(
        kind=kind,
        date=when,
        lines=[TransactionLineIn(product_id=product_id, quantity=quantity, unit_price=unit_price)],
    )


@pytest.fixture
def march(db_session, business, make_product):
    """Coffee sells steadily; tea ends the month below its minimum."""
    coffee = make_product(name="Cafe 250g", stock=100, minimum=2, sale_price=1190)
    tea = make_product(name="Te verde", stock=10, minimum=6, sale_price=2000)
    inventory = build_inventory_service(db_session, business.id)
    inventory.record_transaction(_tx(TransactionKind.SALE, dt.datetime(2026, 2, 28, 10), coffee.id, 1))
    inventory.record_transaction(_tx(TransactionKind.SALE, dt.datetime(2026, 3, 1, 10), tea.id, 4))
    inventory.record_transaction(_tx(TransactionKind.PURCHASE, dt.datetime(2026, 3, 2, 9), coffee.id, 20, 500))
    inventory.record_transaction(_tx(TransactionKind.SALE, dt.datetime(2026, 3, 5, 12), coffee.id, 5))
    inventory.record_transaction(_tx(TransactionKind.SALE, dt.datetime(2026, 3, 10, 9), coffee.id, 10))
    inventory.record_transaction(_tx(TransactionKind.SALE, dt.datetime(2026, 3, 10, 11), tea.id, 2))
    return coffee, tea


@pytest.fixture
def dashboard(db_session, business):
    return DashboardService(db_session, business.id)


def test_sales_windows(dashboard, march):
    overview = dashboard.overview(now=NOW)

    assert (overview.today.total, overview.today.count) == (15_900, 2)
    # March 4 to March 10
    assert (overview.week.total, overview.week.count) == (21_850, 3)
    assert (overview.month.total, overview.month.count) == (29_850, 4)
    assert overview.as_of == NOW


def test_month_projection_and_trend(dashboard, march):
    month = dashboard.overview(now=NOW).month
    assert month.daily_average == 2_985
    assert month.projection == 92_535
    assert month.trend == "review"

    last_day = dashboard.overview(now=dt.datetime(2026, 3, 31, 23)).month
    assert last_day.projection == 29_850
    assert last_day.trend == "positive"


def test_top_products_by_units(dashboard, march):
    coffee, tea = march
    top = dashboard.overview(now=NOW).top_products
    assert [(p.product_id, p.name, p.quantity, p.total) for p in top] == [
        (coffee.id, "Cafe 250g", 15, 17_850),
        (tea.id, "Te verde", 6, 12_000),
    ]


def test_low_stock_lists_active_own_products(dashboard, march, make_product, other_business):
    _, tea = march
    make_product(name="Retirado", stock=0, minimum=1, is_active=False)
    make_product(name="Ajeno", stock=0, minimum=1, owner=other_business)

    low_stock = dashboard.overview(now=NOW).low_stock

    assert low_stock.count == 1
    assert [(p.id, p.current_stock, p.is_low_stock) for p in low_stock.products] == [(tea.id, 4, True)]


def test_unread_alerts_and_current_f29(db_session, business, dashboard, march):
    overview = dashboard.overview(now=NOW)
    # Tea went low twice: 10 -> 6 and 6 -> 4
    assert overview.unread_alerts == 2
    assert overview.current_f29 is None

    alerts = AlertService(db_session, business.id)
    items, _ = alerts.list_alerts(AlertListFilter())
    alerts.mark_read(items[0].id)
    F29Service(db_session, business.id).get_or_create(3, 2026)

    overview = dashboard.overview(now=NOW)
    assert overview.unread_alerts == 1
    assert overview.current_f29.month == 3
    assert overview.current_f29.filed is False


def test_empty_business(dashboard):
    overview = dashboard.overview(now=NOW)
    assert overview.month.total == 0
    assert overview.month.projection == 0
    assert overview.month.trend == "review"
    assert overview.top_products == []
    assert overview.low_stock.count == 0


def test_monthly_report(dashboard, march):
    report = dashboard.monthly_report(3, 2026)

    assert (report.sales.total, report.sales.count) == (29_850, 4)
    assert report.sales.daily_average == 963
    assert (report.purchases.total, report.purchases.count) == (10_000, 1)
    assert report.margin.gross == 19_850
    assert report.margin.percentage == 66
    assert report.f29 is None


def test_monthly_report_rounds_and_handles_empty_months(dashboard, march):
    february = dashboard.monthly_report(2, 2026)
    assert february.sales.daily_average == 43  # 1190 / 28 = 42.5
    assert february.margin.percentage == 100

    april = dashboard.monthly_report(4, 2026)
    assert april.sales.total == 0
    assert april.margin.percentage == 0


def test_monthly_report_shows_stored_f29(db_session, business, dashboard, march):
    F29Service(db_session, business.id).get_or_create(3, 2026)
    f29 = dashboard.monthly_report(3, 2026).f29
    assert f29.status == "draft"
    assert f29.filed is False


def test_monthly_report_rejects_bad_period(dashboard):
    with pytest.raises(InvalidPeriodError):
        dashboard.monthly_report(13, 2026)
