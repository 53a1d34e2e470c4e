from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from contapyme.core.exceptions import BusinessNotFoundError, NotFoundError
from contapyme.db.session import get_db, unit_of_work
from contapyme.models import schemas
from contapyme.models.models import Business, User
from contapyme.utils.rut import normalize_rut

logger = logging.getLogger(__name__)


class BusinessService:
    """Profile of the single business each user keeps books for."""

    def __init__(self, db: Session):
        self.db = db

    def find_for_user(self, user_id: int) -> Business | None:
        return self.db.scalars(select(Business).where(Business.user_id == user_id)).first()

    def get_for_user(self, user_id: int) -> Business:
        business = self.find_for_user(user_id)
        if business is None:
            raise BusinessNotFoundError(user_id)
        return business

    def upsert(self, user_id: int, payload: schemas.BusinessUpdate) -> Business:
        if self.db.get(User, user_id) is None:
            raise NotFoundError("User", user_id)
        tax_id = normalize_rut(payload.tax_id)

        with unit_of_work(self.db):
            business = self.find_for_user(user_id)
            created = business is None
            if business is None:
                business = Business(user_id=user_id, name=payload.name, tax_id=tax_id)
                self.db.add(business)
            business.name = payload.name
            business.tax_id = tax_id
            business.giro = payload.giro
            business.address = payload.address
            business.commune = payload.commune

        self.db.refresh(business)
        logger.info("%s business %s for user %s", "Created" if created else "Updated", business.id, user_id)
        return business


def get_business_service(db: Annotated[Session, Depends(get_db)]) -> BusinessService:
    return BusinessService(db)
