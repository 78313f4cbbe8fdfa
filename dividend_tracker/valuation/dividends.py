"""Trailing-twelve-month dividend aggregation and yield calculation."""

import logging
import math
from collections.abc import Iterable
from datetime import date, datetime

from dividend_tracker.errors import MalformedRecord
from dividend_tracker.market_data.schemas import DividendRecord

logger = logging.getLogger(__name__)

FMP_DATE_FORMAT = "%Y-%m-%d"


def one_year_before(as_of: date) -> date:
    """Same calendar day one year earlier; Feb 29 maps to Feb 28."""
    try:
        return as_of.replace(year=as_of.year - 1)
    except ValueError:
        return as_of.replace(year=as_of.year - 1, day=28)


def parse_ex_date(record: DividendRecord) -> date:
    """Parse a record's ex-date, raising MalformedRecord when unreadable."""
    try:
        return datetime.strptime(record.date.strip(), FMP_DATE_FORMAT).date()
    except (ValueError, AttributeError) as e:
        raise MalformedRecord(
            f"Unparsable dividend date {record.date!r} for {record.symbol}"
        ) from e


def records_in_window(
    history: Iterable[DividendRecord], as_of: date | None = None
) -> list[DividendRecord]:
    """Records whose ex-date falls in ``(as_of - 1 year, as_of]``.

    Records with unparsable dates are skipped.
    """
    as_of = as_of or date.today()
    start = one_year_before(as_of)

    selected = []
    for record in history:
        try:
            ex_date = parse_ex_date(record)
        except MalformedRecord as e:
            logger.debug(e.message)
            continue
        if start < ex_date <= as_of:
            selected.append(record)
    return selected


def annual_dividend(
    history: Iterable[DividendRecord], as_of: date | None = None
) -> float:
    """Sum the adjusted dividends paid in the trailing twelve months."""
    return sum((r.adj_dividend for r in records_in_window(history, as_of)), 0.0)


def yield_percent(annual: float, price: float) -> float:
    """Dividend yield as a percentage, truncated toward zero to 2 decimals.

    A non-positive price means no quote is available and yields 0.
    """
    if price <= 0:
        return 0.0
    # Snap float noise (0.18 / 10 * 10000 == 179.99999999999997) before flooring.
    return math.floor(round(annual / price * 10000, 9)) / 100
