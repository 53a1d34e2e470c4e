"""
Monthly VAT return (F29) endpoints.

GET on a period computes the filing the first time and returns the stored
one afterwards.
"""
from typing import Annotated

from fastapi import APIRouter, Query

from contapyme.api.dependencies import F29ServiceDep
from contapyme.models import tax_schemas as schemas

router = APIRouter()


@router.get("", response_model=list[schemas.F29Out])
def list_f29(filters: Annotated[schemas.F29ListFilter, Query()], svc: F29ServiceDep):
    return svc.list_filings(filters)


@router.get("/{year}/{month}", response_model=schemas.F29Out)
def get_f29(year: int, month: int, svc: F29ServiceDep):
    return svc.get_or_create(month, year)


@router.patch("/{id}", response_model=schemas.F29Out)
def amend_f29(id: int, payload: schemas.F29Amend, svc: F29ServiceDep):
    """Replace net totals of a draft; filed returns are rejected with 409."""
    return svc.amend(id, payload)


@router.post("/{id}/file", response_model=schemas.F29Out)
def file_f29(id: int, payload: schemas.FileRequest, svc: F29ServiceDep):
    return svc.file(id, payload.folio)
