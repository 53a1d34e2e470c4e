from fastapi import APIRouter

from contapyme.api.dependencies import DashboardServiceDep
from contapyme.models import dashboard_schemas as schemas

router = APIRouter()


@router.get("", response_model=schemas.Dashboard)
def get_dashboard(svc: DashboardServiceDep):
    """Sales, stock, alerts and the current F29 at a glance."""
    return svc.overview()


@router.get("/reports/{year}/{month}", response_model=schemas.MonthlyReport)
def monthly_report(year: int, month: int, svc: DashboardServiceDep):
    return svc.monthly_report(month, year)
