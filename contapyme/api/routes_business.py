from typing import Annotated, TypeAlias

from fastapi import APIRouter, Depends

from contapyme.api.dependencies import BusinessDep, CurrentUserDep
from contapyme.models import schemas
from contapyme.services.business_service import BusinessService, get_business_service

router = APIRouter()

BusinessServiceDep: TypeAlias = Annotated[BusinessService, Depends(get_business_service)]


@router.get("", response_model=schemas.BusinessOut)
def get_business(business: BusinessDep):
    return business


@router.put("", response_model=schemas.BusinessOut)
def upsert_business(
    payload: schemas.BusinessUpdate,
    current_user_id: CurrentUserDep,
    svc: BusinessServiceDep,
):
    """Create the caller's business profile, or update it."""
    return svc.upsert(current_user_id, payload)
