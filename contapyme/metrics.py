"""Metrics facade.

Service code should ONLY call the semantic helpers here so the backend can
change without touching call sites.

Metrics:
- f29_filings_computed_total      F29 filings derived from transactions or amended
- f22_filings_computed_total      F22 filings derived from monthly filings
- filings_marked_filed_total      Filings moved to filed, labelled by form
- settlements_generated_total     Payroll settlements created
- transactions_recorded_total     Transactions recorded, labelled by kind
- transactions_reversed_total     Transactions reversed
- low_stock_alerts_total          Low-stock alerts raised by sales
"""

from __future__ import annotations

import logging

from prometheus_client import Counter

logger = logging.getLogger("metrics")

_F29_COMPUTED = Counter("f29_filings_computed_total", "F29 filings computed")
_F22_COMPUTED = Counter("f22_filings_computed_total", "F22 filings computed")
_FILINGS_FILED = Counter("filings_marked_filed_total", "Filings marked filed", ["form"])
_SETTLEMENTS = Counter("settlements_generated_total", "Payroll settlements generated")
_TRANSACTIONS = Counter("transactions_recorded_total", "Transactions recorded", ["kind"])
_REVERSALS = Counter("transactions_reversed_total", "Transactions reversed")
_LOW_STOCK = Counter("low_stock_alerts_total", "Low-stock alerts raised")


def f29_computed() -> None:
    _F29_COMPUTED.inc()


def f22_computed() -> None:
    _F22_COMPUTED.inc()


def filing_filed(form: str) -> None:
    _FILINGS_FILED.labels(form=form).inc()


def settlement_generated() -> None:
    _SETTLEMENTS.inc()


def transaction_recorded(kind: str) -> None:
    _TRANSACTIONS.labels(kind=kind).inc()


def transaction_reversed() -> None:
    _REVERSALS.inc()


def low_stock_alert() -> None:
    _LOW_STOCK.inc()
    logger.debug("low stock alert counted")
