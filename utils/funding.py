"""Funding progress calculations shared by the project listing views.

Progress is always computed against the commitment gap (the residual amount
open for commitments), and is clamped to 0-100 because the backend does not
enforce committed <= gap.

Two progress readings exist in the wild:

- funding_progress(): derived from committed amount / target. A missing or
  zero target yields 0.
- percentage_progress(): reads the server's ``funding_percentage``. The
  funded-projects views treat a missing percentage as 100.

The two disagree on the "no data" case. Both are kept as-is so callers pick
the reading their view actually uses.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Mapping

from utils.formatting import as_aware, parse_datetime, round_half_up
from utils.strings import safe_float, optional_float


def _get(record: Any, key: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(key, default)
    return getattr(record, key, default)


def funding_progress(committed_amount: Any, target: Any) -> int:
    """Return the funded percentage of *target* as an int in [0, 100].

    Args:
        committed_amount: Amount committed so far (number or numeric string).
        target: Funding target, normally the commitment gap. None, zero,
            negative and NaN targets give 0.

    Returns:
        clamp(committed / target, 0, 1) * 100, halves rounded up

    Examples:
        funding_progress(50, 100) -> 50
        funding_progress(150, 100) -> 100
        funding_progress(10, None) -> 0
    """
    goal = optional_float(target)
    if goal is None or goal <= 0:
        return 0
    ratio = safe_float(committed_amount) / goal
    ratio = min(1.0, max(0.0, ratio))
    return round_half_up(ratio * 100)


def percentage_progress(funding_percentage: Any, missing_default: int = 100) -> float:
    """Read a server-reported funding percentage, clamped to [0, 100].

    Args:
        funding_percentage: Value of the project's ``funding_percentage``.
        missing_default: Returned when the value is missing or NaN. The
            funded views use 100; pass 0 to match funding_progress().
    """
    value = optional_float(funding_percentage)
    if value is None:
        return missing_default
    return min(100.0, max(0.0, value))


def remaining_amount(committed_amount: Any, target: Any) -> float:
    """Amount still open for commitments, never negative."""
    goal = optional_float(target)
    if goal is None:
        return 0.0
    return max(0.0, goal - safe_float(committed_amount))


def project_progress(project: Any) -> int:
    """funding_progress() for a project record (dict or model).

    Uses ``total_committed_amount`` against ``commitment_gap``.
    """
    return funding_progress(
        _get(project, "total_committed_amount", 0),
        _get(project, "commitment_gap"),
    )


def days_left(end_date: Any, now: datetime | None = None) -> int:
    """Whole days until *end_date*, rounded up and floored at 0.

    Missing or unparsable dates give 0. Naive timestamps are taken as UTC.
    """
    end = parse_datetime(end_date)
    if end is None:
        return 0
    current = as_aware(now or datetime.now(timezone.utc))
    seconds = (as_aware(end) - current).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def fundraising_end(project: Any) -> Any:
    """Pick the fundraising end date from whichever field the endpoint sent."""
    for key in ("funding_end_date", "funding_close_date", "fundraising_end_date", "end_date"):
        value = _get(project, key)
        if value:
            return value
    return None


def is_commitment_window_open(project: Any, now: datetime | None = None) -> bool:
    """True while *project* accepts new or changed commitments.

    A project with neither fundraising start nor end date is always open.
    A missing project is never open.
    """
    if not project:
        return False
    start = parse_datetime(_get(project, "fundraising_start_date"))
    end = parse_datetime(_get(project, "fundraising_end_date"))
    if start is None and end is None:
        return True

    current = as_aware(now or datetime.now(timezone.utc))
    if start is not None and current < as_aware(start):
        return False
    if end is not None and current > as_aware(end):
        return False
    return True
