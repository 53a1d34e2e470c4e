"""Year-keyed tax parameters.

Bracket schedules are written in tax-unit multiples and priced with the
unit values of the effective year: UF for the annual income-tax
(global complementary) table, UTM for the monthly payroll single tax.
Unit values change every year, so they live in data rather than in the
calculators: defaults below, extended or overridden by the JSON file named
in ``settings.TAX_TABLES_FILE``.

File layout::

    {"years": [{"year": 2027, "uf_value": 39000, "utm_value": 68000}]}

Each year entry may also carry ``income_tax_brackets`` or
``payroll_tax_brackets`` as lists of ``{"lower", "upper", "rate", "subtract"}``.
"""
from __future__ import annotations

import json
import logging
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field, PrivateAttr, model_validator

from contapyme.core.config import settings
from contapyme.core.exceptions import TaxTableConfigurationError

from .brackets import BracketTable, scale_brackets

logger = logging.getLogger(__name__)


class BracketSpec(BaseModel):
    """One bracket expressed in tax units."""

    lower: Decimal = Field(..., ge=0)
    upper: Decimal | None = None
    rate: Decimal = Field(..., ge=0, lt=1)
    subtract: Decimal = Field(default=Decimal("0"), ge=0)

    def as_tuple(self) -> tuple:
        return (self.lower, self.upper, self.rate, self.subtract)


def _specs(rows: Iterable[tuple[str, str | None, str, str]]) -> list[BracketSpec]:
    return [
        BracketSpec(
            lower=Decimal(lower),
            upper=None if upper is None else Decimal(upper),
            rate=Decimal(rate),
            subtract=Decimal(subtract),
        )
        for lower, upper, rate, subtract in rows
    ]


# Global complementary tax, annual, in UF
INCOME_TAX_SCHEDULE = _specs([
    ("0", "13.5", "0", "0"),
    ("13.5", "30", "0.04", "0.54"),
    ("30", "50", "0.08", "1.74"),
    ("50", "70", "0.135", "4.49"),
    ("70", "90", "0.23", "11.14"),
    ("90", "120", "0.304", "17.80"),
    ("120", "150", "0.35", "23.32"),
    ("150", None, "0.40", "30.82"),
])

# Single tax on wages, monthly, in UTM
PAYROLL_TAX_SCHEDULE = _specs([
    ("0", "13.5", "0", "0"),
    ("13.5", "30", "0.04", "0.54"),
    ("30", "50", "0.08", "1.74"),
    ("50", "70", "0.135", "4.49"),
    ("70", "90", "0.23", "11.14"),
    ("90", "120", "0.304", "17.80"),
    ("120", None, "0.35", "23.32"),
])


class TaxYearParameters(BaseModel):
    """Unit values and schedules effective from ``year`` onwards."""

    year: int = Field(..., ge=1990)
    uf_value: Decimal = Field(..., gt=0)
    utm_value: Decimal = Field(..., gt=0)
    income_tax_brackets: list[BracketSpec] = Field(default_factory=lambda: list(INCOME_TAX_SCHEDULE))
    payroll_tax_brackets: list[BracketSpec] = Field(default_factory=lambda: list(PAYROLL_TAX_SCHEDULE))

    _income_table: BracketTable | None = PrivateAttr(default=None)
    _payroll_table: BracketTable | None = PrivateAttr(default=None)

    @model_validator(mode="after")
    def _build_tables(self) -> TaxYearParameters:
        # BracketTable raises ValueError on gaps or discontinuities
        self._income_table = scale_brackets(
            [b.as_tuple() for b in self.income_tax_brackets],
            self.uf_value,
            name=f"income-tax-{self.year}",
        )
        self._payroll_table = scale_brackets(
            [b.as_tuple() for b in self.payroll_tax_brackets],
            self.utm_value,
            name=f"payroll-tax-{self.year}",
        )
        return self

    @property
    def income_tax_table(self) -> BracketTable:
        return self._income_table  # type: ignore[return-value]

    @property
    def payroll_tax_table(self) -> BracketTable:
        return self._payroll_table  # type: ignore[return-value]


DEFAULT_TAX_YEARS: list[dict] = [
    {"year": 2025, "uf_value": Decimal("37000"), "utm_value": Decimal("63000")},
    {"year": 2026, "uf_value": Decimal("37800"), "utm_value": Decimal("65000")},
]


class TaxTableRegistry:
    """Looks up the parameters in force for a given year."""

    def __init__(self, parameters: Iterable[TaxYearParameters]):
        self._by_year: dict[int, TaxYearParameters] = {p.year: p for p in parameters}
        if not self._by_year:
            raise TaxTableConfigurationError("no tax years configured")

    @property
    def years(self) -> list[int]:
        return sorted(self._by_year)

    def for_year(self, year: int) -> TaxYearParameters:
        """Most recent parameters effective on or before ``year``."""
        effective = [y for y in self._by_year if y <= year]
        if effective:
            return self._by_year[max(effective)]
        earliest = min(self._by_year)
        logger.warning("No tax parameters effective for %s; using %s", year, earliest)
        return self._by_year[earliest]

    def income_tax_table(self, year: int) -> BracketTable:
        return self.for_year(year).income_tax_table

    def payroll_tax_table(self, year: int) -> BracketTable:
        return self.for_year(year).payroll_tax_table


def load_tax_tables(path: str | Path | None = None) -> TaxTableRegistry:
    """Build a registry from defaults plus the optional JSON override file."""
    entries: dict[int, dict] = {entry["year"]: dict(entry) for entry in DEFAULT_TAX_YEARS}
    if path:
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise TaxTableConfigurationError(f"cannot read {path}: {exc}") from exc
        for entry in raw.get("years", []):
            entries[int(entry["year"])] = {**entries.get(int(entry["year"]), {}), **entry}
        logger.info("Loaded tax tables from %s (years: %s)", path, sorted(entries))
    try:
        parameters = [TaxYearParameters(**entry) for entry in entries.values()]
    except ValueError as exc:
        raise TaxTableConfigurationError(str(exc)) from exc
    return TaxTableRegistry(parameters)


@lru_cache
def get_tax_tables() -> TaxTableRegistry:
    return load_tax_tables(settings.TAX_TABLES_FILE)
