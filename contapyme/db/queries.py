"""Shared query building blocks."""
from typing import Any

from sqlalchemy import Select


def active_only(stmt: Select[Any], model: Any) -> Select[Any]:
    """Restrict ``stmt`` to rows of ``model`` that have not been deactivated.

    Products and workers move one way, active to inactive; every listing of
    them goes through here.
    """
    return stmt.where(model.is_active.is_(True))
