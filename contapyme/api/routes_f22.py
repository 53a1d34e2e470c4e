from fastapi import APIRouter

from contapyme.api.dependencies import F22ServiceDep
from contapyme.models import tax_schemas as schemas

router = APIRouter()


@router.get("", response_model=list[schemas.F22Out])
def list_f22(svc: F22ServiceDep):
    return svc.list_filings()


@router.get("/{year}", response_model=schemas.F22Out)
def get_f22(year: int, svc: F22ServiceDep):
    return svc.get_or_create(year)


@router.get("/{year}/validation", response_model=schemas.F22ValidationOut)
def validate_f22(year: int, svc: F22ServiceDep):
    """Report months of ``year`` that still lack a filed F29."""
    return svc.validate_year(year)


@router.post("/{id}/file", response_model=schemas.F22Out)
def file_f22(id: int, payload: schemas.FileRequest, svc: F22ServiceDep):
    return svc.file(id, payload.folio)
