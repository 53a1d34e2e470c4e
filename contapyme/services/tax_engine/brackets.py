"""Progressive tax bracket evaluation.

A bracket table maps a taxable base to ``base * rate - subtract`` for the
single bracket with ``lower <= base < upper``. Tables are validated when
built: they must start at zero, be gap-free with strictly increasing bounds,
and every ``subtract`` must keep the schedule continuous at its lower bound.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def round_clp(value: Decimal | int) -> int:
    """Round to whole pesos, half away from zero."""
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Bracket:
    lower: Decimal
    upper: Decimal | None  # None is +infinity
    rate: Decimal
    subtract: Decimal

    def contains(self, base: Decimal) -> bool:
        return base >= self.lower and (self.upper is None or base < self.upper)

    def raw_tax(self, base: Decimal) -> Decimal:
        """Unrounded tax for ``base`` under this bracket's formula."""
        return base * self.rate - self.subtract


class BracketTable:
    """Ordered, continuous progressive schedule."""

    def __init__(self, brackets: Iterable[Bracket], name: str = "brackets"):
        self.name = name
        self.brackets: tuple[Bracket, ...] = tuple(brackets)
        self._validate()

    def __iter__(self):
        return iter(self.brackets)

    def __len__(self) -> int:
        return len(self.brackets)

    def __repr__(self) -> str:
        return f"<BracketTable(name='{self.name}', brackets={len(self.brackets)})>"

    def find(self, base: Decimal | int) -> Bracket | None:
        value = Decimal(base)
        for bracket in self.brackets:
            if bracket.contains(value):
                return bracket
        return None

    def evaluate(self, base: Decimal | int) -> int:
        """Tax owed on ``base``, rounded once at the end."""
        value = Decimal(base)
        bracket = self.find(value)
        if bracket is None:
            logger.warning("No bracket in %s matches base %s", self.name, value)
            return 0
        return round_clp(bracket.raw_tax(value))

    def discontinuities(self) -> list[Decimal]:
        """Lower bounds where adjacent bracket formulas disagree."""
        jumps = []
        for previous, current in zip(self.brackets, self.brackets[1:]):
            if previous.raw_tax(current.lower) != current.raw_tax(current.lower):
                jumps.append(current.lower)
        return jumps

    def _validate(self) -> None:
        if not self.brackets:
            raise ValueError(f"{self.name}: table has no brackets")
        first, last = self.brackets[0], self.brackets[-1]
        if first.lower != ZERO:
            raise ValueError(f"{self.name}: first bracket must start at 0, got {first.lower}")
        if last.upper is not None:
            raise ValueError(f"{self.name}: last bracket must be open-ended")
        for previous, current in zip(self.brackets, self.brackets[1:]):
            if previous.upper is None or previous.upper != current.lower:
                raise ValueError(
                    f"{self.name}: gap or overlap between {previous.upper} and {current.lower}"
                )
        for bracket in self.brackets:
            if bracket.upper is not None and bracket.upper <= bracket.lower:
                raise ValueError(f"{self.name}: bounds must be strictly increasing at {bracket.lower}")
        jumps = self.discontinuities()
        if jumps:
            raise ValueError(
                f"{self.name}: subtract amounts leave the schedule discontinuous at "
                + ", ".join(str(j) for j in jumps)
            )


def scale_brackets(specs: Sequence[tuple], unit_value: Decimal | int, name: str) -> BracketTable:
    """Price a schedule given in tax-unit multiples.

    ``specs`` holds ``(lower, upper, rate, subtract)`` tuples expressed in
    units (UF or UTM); ``upper`` may be None for the open top bracket.
    """
    unit = Decimal(unit_value)
    brackets = [
        Bracket(
            lower=Decimal(lower) * unit,
            upper=None if upper is None else Decimal(upper) * unit,
            rate=Decimal(rate),
            subtract=Decimal(subtract) * unit,
        )
        for lower, upper, rate, subtract in specs
    ]
    return BracketTable(brackets, name=name)
