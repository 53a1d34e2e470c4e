from typing import Annotated

from fastapi import APIRouter, Query, Response

from contapyme.api.dependencies import AlertServiceDep
from contapyme.models import schemas

router = APIRouter()


@router.get("", response_model=schemas.AlertListOut)
def list_alerts(filters: Annotated[schemas.AlertListFilter, Query()], svc: AlertServiceDep):
    items, unread = svc.list_alerts(filters)
    return schemas.AlertListOut(
        items=[schemas.AlertOut.model_validate(a) for a in items],
        unread_count=unread,
    )


@router.post("", response_model=schemas.AlertOut, status_code=201)
def create_alert(payload: schemas.AlertCreate, svc: AlertServiceDep):
    return svc.create(payload)


@router.post("/{id}/read", response_model=schemas.AlertOut)
def mark_read(id: int, svc: AlertServiceDep):
    return svc.mark_read(id)


@router.post("/{id}/resolve", response_model=schemas.AlertOut)
def mark_resolved(id: int, svc: AlertServiceDep):
    return svc.mark_resolved(id)


@router.delete("/{id}", status_code=204)
def delete_alert(id: int, svc: AlertServiceDep):
    svc.delete(id)
    return Response(status_code=204)
