from __future__ import annotations

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from contapyme.api.dependencies import DbDep

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


def _check_db(db) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return False


@router.get("/healthz")
def healthz(db: DbDep):
    db_ok = _check_db(db)
    return {"status": "ok" if db_ok else "degraded", "database": db_ok}
