from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse

from contapyme.api.dependencies import BusinessDep, PayrollServiceDep
from contapyme.models import payroll_schemas as schemas
from contapyme.services.previred_export import export_previred, previred_filename

router = APIRouter()


@router.get("/workers", response_model=list[schemas.WorkerOut])
def list_workers(svc: PayrollServiceDep, include_inactive: bool = False):
    """Get the business's workers."""
    return svc.list_workers(include_inactive)


@router.post("/workers", response_model=schemas.WorkerOut, status_code=201)
def add_worker(payload: schemas.WorkerCreate, svc: PayrollServiceDep):
    return svc.add_worker(payload)


@router.get("/workers/{id}", response_model=schemas.WorkerOut)
def get_worker(id: int, svc: PayrollServiceDep):
    return svc.get_worker(id)


@router.patch("/workers/{id}", response_model=schemas.WorkerOut)
def update_worker(id: int, payload: schemas.WorkerUpdate, svc: PayrollServiceDep):
    return svc.update_worker(id, payload)


@router.delete("/workers/{id}", response_model=schemas.WorkerOut)
def deactivate_worker(id: int, svc: PayrollServiceDep):
    """Workers are deactivated, never removed."""
    return svc.deactivate_worker(id)


@router.get("/settlements", response_model=list[schemas.SettlementOut])
def list_settlements(filters: Annotated[schemas.SettlementListFilter, Query()], svc: PayrollServiceDep):
    return svc.list_settlements(filters)


@router.post("/settlements", response_model=schemas.SettlementOut, status_code=201)
def create_settlement(payload: schemas.SettlementCreate, svc: PayrollServiceDep):
    return svc.create_settlement(payload)


@router.post("/settlements/{id}/pay", response_model=schemas.SettlementOut)
def pay_settlement(id: int, payload: schemas.SettlementPay, svc: PayrollServiceDep):
    return svc.pay_settlement(id, payload.paid_at)


@router.post("/previred", response_class=PlainTextResponse)
def previred_file(payload: schemas.PreviredRequest, business: BusinessDep, svc: PayrollServiceDep):
    content = export_previred(svc, business, payload.month, payload.year)
    filename = previred_filename(payload.month, payload.year)
    return PlainTextResponse(content, headers={"Content-Disposition": f'attachment; filename="{filename}"'})
