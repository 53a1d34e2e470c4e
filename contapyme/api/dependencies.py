"""Common request dependencies: auth, business resolution and service factories."""
from typing import Annotated, TypeAlias

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from contapyme.core.audit import log_denied
from contapyme.core.security import TokenExpiredError, TokenValidationError, decode_token
from contapyme.db.session import get_db
from contapyme.models.models import Business
from contapyme.services.alert_service import AlertService
from contapyme.services.business_service import BusinessService
from contapyme.services.dashboard_service import DashboardService
from contapyme.services.f22_service import F22Service
from contapyme.services.f29_service import F29Service
from contapyme.services.inventory import InventoryService, build_inventory_service
from contapyme.services.payroll_service import PayrollService


def get_current_user_id(authorization: str = Header(None)) -> int:
    if not authorization or not authorization.lower().startswith("bearer "):
        log_denied("auth.token.parse", reason="missing_token")
        raise HTTPException(status_code=401, detail="Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_token(token)
        return int(payload["sub"])
    except TokenExpiredError as exc:
        log_denied("auth.token.expired", reason="expired")
        raise HTTPException(status_code=401, detail="Token expired") from exc
    except (TokenValidationError, KeyError, ValueError) as exc:
        log_denied("auth.token.invalid", reason="invalid")
        raise HTTPException(status_code=401, detail="Invalid token") from exc


CurrentUserDep: TypeAlias = Annotated[int, Depends(get_current_user_id)]
DbDep: TypeAlias = Annotated[Session, Depends(get_db)]


def get_current_business(current_user_id: CurrentUserDep, db: DbDep) -> Business:
    """The caller's business; 404 until the profile has been created."""
    return BusinessService(db).get_for_user(current_user_id)


BusinessDep: TypeAlias = Annotated[Business, Depends(get_current_business)]


def get_f29_service(business: BusinessDep, db: DbDep) -> F29Service:
    return F29Service(db, business.id)


def get_f22_service(business: BusinessDep, db: DbDep) -> F22Service:
    return F22Service(db, business.id)


def get_payroll_service(business: BusinessDep, db: DbDep) -> PayrollService:
    return PayrollService(db, business.id)


def get_inventory_service(business: BusinessDep, db: DbDep) -> InventoryService:
    return build_inventory_service(db, business.id)


def get_alert_service(business: BusinessDep, db: DbDep) -> AlertService:
    return AlertService(db, business.id)


def get_dashboard_service(business: BusinessDep, db: DbDep) -> DashboardService:
    return DashboardService(db, business.id)


F29ServiceDep: TypeAlias = Annotated[F29Service, Depends(get_f29_service)]
F22ServiceDep: TypeAlias = Annotated[F22Service, Depends(get_f22_service)]
PayrollServiceDep: TypeAlias = Annotated[PayrollService, Depends(get_payroll_service)]
InventoryServiceDep: TypeAlias = Annotated[InventoryService, Depends(get_inventory_service)]
AlertServiceDep: TypeAlias = Annotated[AlertService, Depends(get_alert_service)]
DashboardServiceDep: TypeAlias = Annotated[DashboardService, Depends(get_dashboard_service)]
