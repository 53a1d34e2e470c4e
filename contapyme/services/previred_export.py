"""Previred contribution file.

Pipe-delimited text consumed by the social-security clearing portal. Every
line ends with a newline; field order is fixed:

    1|<business RUT>|<month>|<year>|
    2|<worker RUT>|<first name>|<paternal surname>|<maternal surname>|<gross>|<pension>|<health>|<unemployment>|<income tax>
    3|<count>|<sum gross>|<sum pension>|<sum health>|
"""
from __future__ import annotations

import logging
from typing import Iterable

from contapyme.core.audit import log_audit_event
from contapyme.core.exceptions import NotFoundError
from contapyme.models.models import Business
from contapyme.models.payroll_models import Settlement
from contapyme.services.payroll_service import PayrollService
from contapyme.utils.validators import validate_period

logger = logging.getLogger(__name__)


def render_previred(business: Business, month: int, year: int, settlements: Iterable[Settlement]) -> str:
    lines = [f"1|{business.tax_id}|{month}|{year}|"]
    count = total_gross = total_pension = total_health = 0
    for s in settlements:
        worker = s.worker
        lines.append(
            "|".join(
                str(v)
                for v in (
                    2,
                    worker.tax_id,
                    worker.first_name,
                    worker.paternal_surname,
                    worker.maternal_surname or "",
                    s.gross_pay,
                    s.pension_deduction,
                    s.health_deduction,
                    s.unemployment_deduction,
                    s.income_tax_withheld,
                )
            )
        )
        count += 1
        total_gross += s.gross_pay
        total_pension += s.pension_deduction
        total_health += s.health_deduction
    lines.append(f"3|{count}|{total_gross}|{total_pension}|{total_health}|")
    return "".join(line + "\n" for line in lines)


def previred_filename(month: int, year: int) -> str:
    return f"previred_{month}_{year}.txt"


def export_previred(payroll: PayrollService, business: Business, month: int, year: int) -> str:
    """Render the period's file for active workers; NotFound when there is nothing to export."""
    validate_period(month, year)
    settlements = payroll.period_settlements(month, year)
    if not settlements:
        raise NotFoundError("Settlements for period", f"{month:02d}/{year}")
    content = render_previred(business, month, year, settlements)
    logger.info("Previred export for business %s %02d/%s: %d workers", business.id, month, year, len(settlements))
    log_audit_event("previred.exported", business_id=business.id, month=month, year=year, workers=len(settlements))
    return content
