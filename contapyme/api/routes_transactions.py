"""
Sales and purchases.

Recording and reversing a transaction updates stock, writes movements and
raises low-stock alerts in the same commit.
"""
from typing import Annotated

from fastapi import APIRouter, Query, Response

from contapyme.api.dependencies import F29ServiceDep, InventoryServiceDep
from contapyme.models import inventory_schemas as schemas
from contapyme.models.tax_schemas import MonthlySummaryOut

router = APIRouter()


@router.get("", response_model=list[schemas.TransactionOut])
def list_transactions(filters: Annotated[schemas.TransactionListFilter, Query()], service: InventoryServiceDep):
    return service.list_transactions(filters)


@router.post("", response_model=schemas.TransactionOut, status_code=201)
def record_transaction(data: schemas.TransactionCreate, service: InventoryServiceDep):
    return service.record_transaction(data)


@router.get("/summary", response_model=MonthlySummaryOut)
def monthly_summary(
    svc: F29ServiceDep,
    month: Annotated[int, Query()],
    year: Annotated[int, Query()],
):
    """Counts, totals and F29 figures for a month, without saving a filing."""
    return svc.monthly_summary(month, year)


@router.get("/{id}", response_model=schemas.TransactionOut)
def get_transaction(id: int, service: InventoryServiceDep):
    return service.get_transaction(id)


@router.delete("/{id}", status_code=204)
def reverse_transaction(id: int, service: InventoryServiceDep):
    service.reverse_transaction(id)
    return Response(status_code=204)
