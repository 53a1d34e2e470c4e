"""Tests for the progressive bracket evaluator."""
from decimal import Decimal

import pytest

from contapyme.services.tax_engine.brackets import Bracket, BracketTable, round_clp, scale_brackets
from contapyme.services.tax_engine.tables import INCOME_TAX_SCHEDULE, PAYROLL_TAX_SCHEDULE


def _table(rows, unit="37800"):
    return scale_brackets([r.as_tuple() for r in rows], Decimal(unit), name="test")


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("2.5"), 3),
        (Decimal("-2.5"), -3),
        (Decimal("2.4999"), 2),
        (Decimal("2254.56"), 2255),
        (10, 10),
    ],
)
def test_round_clp_half_away_from_zero(value, expected):
    assert round_clp(value) == expected


def test_default_schedules_are_continuous():
    for rows in (INCOME_TAX_SCHEDULE, PAYROLL_TAX_SCHEDULE):
        table = _table(rows)
        assert table.discontinuities() == []


def test_tax_at_upper_bound_matches_next_bracket():
    table = _table(INCOME_TAX_SCHEDULE)
    for previous, current in zip(table.brackets, table.brackets[1:]):
        assert previous.raw_tax(current.lower) == current.raw_tax(current.lower)
        # one peso below the boundary differs only by the marginal rate
        below = table.evaluate(current.lower - 1)
        at = table.evaluate(current.lower)
        assert 0 <= at - below <= 1


def test_exempt_bracket_and_top_bracket():
    table = _table(INCOME_TAX_SCHEDULE)
    assert table.evaluate(0) == 0
    assert table.evaluate(510_299) == 0  # just below 13.5 UF
    # 20,000,000 sits in the open top bracket: 40% minus 30.82 UF
    assert table.evaluate(20_000_000) == 8_000_000 - 1_164_996


def test_payroll_second_bracket():
    table = _table(PAYROLL_TAX_SCHEDULE, unit="65000")
    assert table.evaluate(933_864) == 2_255


def test_no_matching_bracket_returns_zero(caplog):
    table = _table(INCOME_TAX_SCHEDULE)
    assert table.find(-1) is None
    assert table.evaluate(-1) == 0
    assert "No bracket" in caplog.text


def test_rejects_gap():
    with pytest.raises(ValueError, match="gap"):
        BracketTable(
            [
                Bracket(Decimal(0), Decimal(100), Decimal(0), Decimal(0)),
                Bracket(Decimal(150), None, Decimal("0.1"), Decimal(15)),
            ]
        )


def test_rejects_discontinuous_subtract():
    with pytest.raises(ValueError, match="discontinuous"):
        BracketTable(
            [
                Bracket(Decimal(0), Decimal(100), Decimal(0), Decimal(0)),
                Bracket(Decimal(100), None, Decimal("0.1"), Decimal(5)),
            ]
        )


def test_rejects_table_not_starting_at_zero_or_closed_top():
    with pytest.raises(ValueError, match="start at 0"):
        BracketTable([Bracket(Decimal(1), None, Decimal(0), Decimal(0))])
    with pytest.raises(ValueError, match="open-ended"):
        BracketTable([Bracket(Decimal(0), Decimal(10), Decimal(0), Decimal(0))])
