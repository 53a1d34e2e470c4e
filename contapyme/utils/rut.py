"""Chilean RUT (Rol Único Tributario) helpers.

A RUT is a body of up to eight digits plus a mod-11 check digit, which can
be ``K``. Accepted input forms: ``12.345.678-5``, ``12345678-5``,
``123456785``.
"""
from __future__ import annotations

import re

from contapyme.core.exceptions import InvalidRutError

_RUT_RE = re.compile(r"^(\d{1,8})([\dK])$")


def clean_rut(rut: str) -> str:
    """Strip dots, dashes and spaces; upper-case the check digit."""
    return re.sub(r"[.\-\s]", "", rut or "").upper()


def compute_check_digit(body: str) -> str:
    total = 0
    factor = 2
    for digit in reversed(body):
        total += int(digit) * factor
        factor = 2 if factor == 7 else factor + 1
    remainder = 11 - (total % 11)
    if remainder == 11:
        return "0"
    if remainder == 10:
        return "K"
    return str(remainder)


def is_valid_rut(rut: str) -> bool:
    match = _RUT_RE.match(clean_rut(rut))
    if not match:
        return False
    body, check = match.groups()
    return compute_check_digit(body) == check


def normalize_rut(rut: str) -> str:
    """Validate and return the canonical ``12345678-5`` form."""
    cleaned = clean_rut(rut)
    if not is_valid_rut(cleaned):
        raise InvalidRutError(rut)
    return f"{int(cleaned[:-1])}-{cleaned[-1]}"


def format_rut(rut: str) -> str:
    """Dotted display form, e.g. ``12.345.678-5``."""
    body, check = normalize_rut(rut).split("-")
    return f"{int(body):,}".replace(",", ".") + f"-{check}"
