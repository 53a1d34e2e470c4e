"""Business profile, alert and shared response schemas."""
from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from contapyme.models.alert_models import AlertPriority


class MessageOut(BaseModel):
    detail: str


# ----------------- Business -----------------

class BusinessUpdate(BaseModel):
    """Create-or-update payload for the caller's business profile."""
    name: str = Field(..., min_length=1, max_length=200)
    tax_id: str = Field(..., min_length=3, max_length=15, description="RUT, with or without dots")
    giro: str | None = Field(None, max_length=200, description="Registered business activity")
    address: str | None = Field(None, max_length=255)
    commune: str | None = Field(None, max_length=100)


class BusinessOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    tax_id: str
    giro: str | None = None
    address: str | None = None
    commune: str | None = None
    created_at: dt.datetime | None = None


# ----------------- Alerts -----------------

class AlertCreate(BaseModel):
    """A reminder the owner records by hand."""
    kind: str = Field("manual", min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    priority: AlertPriority = AlertPriority.MEDIUM
    details: dict[str, Any] | None = None


class AlertListFilter(BaseModel):
    is_read: bool | None = None
    priority: AlertPriority | None = None
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    kind: str
    title: str
    message: str
    priority: AlertPriority
    is_read: bool
    is_resolved: bool
    details: dict[str, Any] | None = None
    created_at: dt.datetime | None = None


class AlertListOut(BaseModel):
    items: list[AlertOut]
    unread_count: int
