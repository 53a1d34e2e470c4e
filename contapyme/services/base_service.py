"""Business-scoped service base.

Every service is constructed for one business; lookups by id go through
``_get_owned`` so ownership is checked before anything is read or changed.
"""
from __future__ import annotations

import logging
from typing import Any, TypeVar

from sqlalchemy.orm import Session

from contapyme.core.exceptions import NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class BusinessScopedService:
    def __init__(self, db: Session, business_id: int):
        self._db = db
        self._business_id = business_id

    @property
    def db(self) -> Session:
        return self._db

    @property
    def business_id(self) -> int:
        return self._business_id

    def _check_owner(self, entity: Any, owner_id: int, resource: str) -> None:
        if owner_id != self._business_id:
            logger.warning(
                "Business %s denied access to %s %s",
                self._business_id,
                resource,
                entity.id,
                extra={"business_id": self._business_id, "entity_id": entity.id},
            )
            raise PermissionDeniedError(resource, entity.id)

    def _get_owned(self, model: type[ModelT], entity_id: int, resource: str) -> ModelT:
        """Fetch ``model`` by id; NotFound when missing, PermissionDenied when foreign."""
        entity = self._db.get(model, entity_id)
        if entity is None:
            raise NotFoundError(resource, entity_id)
        self._check_owner(entity, entity.business_id, resource)  # type: ignore[attr-defined]
        return entity
