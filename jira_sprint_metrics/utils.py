"""Utility functions for Jira Sprint Metrics.

This module provides small helpers shared by the calculators and formatters.
"""

import math
from typing import Iterable, List, Sequence


def round_half_up(value, digits=1):
    """Round `value` to `digits` decimals, with halves rounding towards +inf.

    Python's `round()` uses banker's rounding, which would report a drift of
    2.5 as 2; the reports always round halves up.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round1(value):
    """Round to one decimal place."""
    return round_half_up(value, 1)


def round2(value):
    """Round to two decimal places."""
    return round_half_up(value, 2)


def format_points(value):
    """Format a points value without a trailing `.0`."""
    if value is None:
        return "-"
    return f"{value:g}"


def truncate(text, length):
    """Shorten `text` to `length` characters, ending with an ellipsis."""
    text = text or ""
    if len(text) > length:
        return text[: length - 3] + "..."
    return text


def sort_statuses(statuses: Iterable[str], status_order: Sequence[str]) -> List[str]:
    """Sort `statuses` by their position in `status_order`.

    Statuses missing from the order come first, alphabetically. Without a
    configured order the statuses are sorted alphabetically.
    """
    statuses = list(statuses)
    if not status_order:
        return sorted(statuses)
    unknown = sorted(s for s in statuses if s not in status_order)
    known = [s for s in status_order if s in statuses]
    return unknown + known


def quote_jql(value):
    """Quote a value for use in JQL."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
