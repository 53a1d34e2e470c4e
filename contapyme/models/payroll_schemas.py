"""Pydantic schemas for workers, settlements and the Previred export."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contapyme.models.payroll_models import HealthSystem


class WorkerCreate(BaseModel):
    tax_id: str = Field(..., min_length=3, max_length=15, description="RUT, with or without dots")
    first_name: str = Field(..., min_length=1, max_length=100)
    paternal_surname: str = Field(..., min_length=1, max_length=100)
    maternal_surname: str | None = Field(None, max_length=100)
    birth_date: dt.date | None = None
    phone: str | None = Field(None, max_length=30)
    email: str | None = Field(None, max_length=255)
    position: str | None = Field(None, max_length=100)
    start_date: dt.date
    base_salary: int = Field(..., gt=0)
    pension_fund: str | None = Field(None, max_length=50)
    health_system: HealthSystem = HealthSystem.FONASA
    private_health_insurer: str | None = Field(None, max_length=100)



class WorkerUpdate(BaseModel):
    """Partial update of a worker. The RUT identifies the worker and cannot change."""
    model_config = ConfigDict(extra="forbid")

    first_name: str | None = Field(None, min_length=1, max_length=100)
    paternal_surname: str | None = Field(None, min_length=1, max_length=100)
    maternal_surname: str | None = Field(None, max_length=100)
    birth_date: dt.date | None = None
    phone: str | None = Field(None, max_length=30)
    email: str | None = Field(None, max_length=255)
    position: str | None = Field(None, max_length=100)
    start_date: dt.date | None = None
    base_salary: int | None = Field(None, gt=0)
    pension_fund: str | None = Field(None, max_length=50)
    health_system: HealthSystem | None = None
    private_health_insurer: str | None = Field(None, max_length=100)

    @field_validator("first_name", "paternal_surname", "start_date", "base_salary", "health_system")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class WorkerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tax_id: str
    first_name: str
    paternal_surname: str
    maternal_surname: str | None = None
    full_name: str
    position: str | None = None
    start_date: dt.date
    end_date: dt.date | None = None
    base_salary: int
    pension_fund: str | None = None
    health_system: HealthSystem
    private_health_insurer: str | None = None
    is_active: bool


class SettlementCreate(BaseModel):
    worker_id: int
    month: int
    year: int
    overtime_hours: Decimal = Field(default=Decimal("0"), ge=0)
    bonuses: int = Field(default=0, ge=0)
    other_deductions: int = Field(default=0, ge=0)


class SettlementListFilter(BaseModel):
    month: int | None = Field(None, ge=1, le=12)
    year: int | None = None
    worker_id: int | None = None
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)


class SettlementPay(BaseModel):
    paid_at: dt.datetime | None = None


class SettlementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    worker_id: int
    month: int
    year: int
    base_salary: int
    overtime_hours: Decimal
    overtime_amount: int
    bonuses: int
    gross_pay: int
    pension_deduction: int
    health_public: int | None = None
    health_private: int | None = None
    health_deduction: int
    unemployment_deduction: int
    taxable_base: int
    income_tax_withheld: int
    other_deductions: int
    total_deductions: int
    net_pay: int
    employer_unemployment: int
    work_injury_insurance: int
    employer_cost: int
    is_paid: bool
    paid_at: dt.datetime | None = None


class PreviredRequest(BaseModel):
    month: int
    year: int
