"""Query parameter builders for the project listing endpoints.

Both listing screens hit the paginated ``GET /projects`` endpoint with a
flat dict of query params built from their filter state:

- build_project_query_params(): the live listing (multi-select filters,
  funding/progress/days-left sliders)
- build_advanced_query_params(): the advanced search panel, whose sliders
  are calibrated by ``GET /projects/value-ranges``

Slider values are crores; amounts are sent in rupees. A slider that still
spans its full range is left out of the request.
"""

from typing import Any, Mapping, Optional, Sequence

from client.models import AdvancedFilterState, FilterState, NumericRange, ValueRanges
from utils.config import CRORE, KnownValues
from utils.patterns import PROJECT_REFERENCE_ID
from utils.strings import optional_float

# Live listing slider -> (param prefix suffix, full range, scale to rupees)
_LIVE_RANGES = (
    ("funding_range", "funding", KnownValues.DEFAULT_FUNDING_RANGE, True),
    ("progress_range", "progress", KnownValues.DEFAULT_PROGRESS_RANGE, False),
    ("days_left_range", "days_left", KnownValues.DEFAULT_DAYS_LEFT_RANGE, False),
)

# Advanced panel slider -> request param suffix
_ADVANCED_RANGES = (
    ("fund_requirement", "funding_requirement"),
    ("commitment_gap", "commitment_gap"),
    ("project_cost", "total_project_cost"),
)

# Advanced panel single-select field -> request param
_ADVANCED_FIELDS = (
    ("project_reference_id", "search"),
    ("location", "states"),
    ("project_category", "categories"),
    ("project_stage", "project_stage"),
    ("status", "status"),
    ("credit_score", "municipality_credit_rating"),
    ("funding_type", "funding_type"),
    ("mode_of_implementation", "mode_of_implementation"),
    ("ownership", "ownership"),
)

# Key spellings seen for each bound in /projects/value-ranges responses
_VALUE_RANGE_KEYS = {
    "fund_requirement": (
        ("min_funding_requirement", "fund_requirement_min", "min_fund_requirement"),
        ("max_funding_requirement", "fund_requirement_max", "max_fund_requirement"),
    ),
    "commitment_gap": (
        ("min_commitment_gap", "commitment_gap_min"),
        ("max_commitment_gap", "commitment_gap_max"),
    ),
    "project_cost": (
        ("min_total_project_cost", "project_cost_min", "min_project_cost"),
        ("max_total_project_cost", "project_cost_max", "max_project_cost"),
    ),
}


def _plain_number(value: float) -> int | float:
    """Return an int for integral floats so params serialise as "10", not "10.0"."""
    number = float(value)
    return int(number) if number.is_integer() else number


def crores_to_rupees(value: float) -> int | float:
    """Scale a crore slider value to rupees.

    Examples:
        crores_to_rupees(10) -> 100000000
        crores_to_rupees(2.5) -> 25000000
    """
    return _plain_number(round(float(value) * CRORE, 2))


def rupees_to_crores(value: Any) -> Optional[float]:
    """Convert a rupee amount to crores rounded to two decimals (None if missing)."""
    amount = optional_float(value)
    if amount is None:
        return None
    return round(amount / CRORE, 2)


def range_is_active(selected: Sequence[float], full: Sequence[float] | NumericRange) -> bool:
    """True when a slider pair narrows its full range.

    A pair is active if its lower end is above the range minimum or its upper
    end is below the range maximum. A pair wider than the range is inactive.

    Examples:
        range_is_active((0, 1000), (0, 1000)) -> False
        range_is_active((10, 500), (0, 1000)) -> True
    """
    if isinstance(full, NumericRange):
        full = full.as_pair()
    lo, hi = selected
    return lo > full[0] or hi < full[1]


def clamp_range(value: Sequence[float], lo: float, hi: float) -> tuple[float, float]:
    """Clamp both ends of a slider pair into [lo, hi].

    The pair is not reordered; a pair given as (max, min) stays that way.
    """
    return (
        min(max(value[0], lo), hi),
        min(max(value[1], lo), hi),
    )


def is_reference_id(text: Optional[str]) -> bool:
    """True if *text* is a full project reference such as ``PROJ-2025-00037``."""
    if not text:
        return False
    return bool(PROJECT_REFERENCE_ID.match(text.strip()))


def build_project_query_params(
    filters: FilterState,
    *,
    user_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 10,
    default_status: str = KnownValues.DEFAULT_LISTING_STATUS,
) -> dict[str, Any]:
    """Build ``GET /projects`` params for the live listing.

    Args:
        filters: Current filter state.
        user_id: Sent so the server can flag the user's favorites.
        skip: Pagination offset.
        limit: Page size.
        default_status: Status requested when no status is selected.

    Returns:
        Dict of query params. ``skip``, ``limit`` and ``status`` are always
        present; everything else only when the user narrowed it. The
        interest-rate slider is never sent.

    Examples:
        build_project_query_params(FilterState())
            -> {"skip": 0, "limit": 10, "status": "active"}
        build_project_query_params(FilterState(funding_range=(10, 500)))
            -> {..., "min_funding": 100000000, "max_funding": 5000000000}
    """
    params: dict[str, Any] = {
        "skip": skip,
        "limit": limit,
        "status": default_status,
    }
    if user_id:
        params["user_id"] = user_id

    search = filters.search.strip()
    if search:
        params["search"] = search
    if filters.categories:
        params["categories"] = ",".join(filters.categories)
    if filters.states:
        params["states"] = ",".join(filters.states)
    if filters.status:
        params["status"] = ",".join(s.lower() for s in filters.status)

    for attr, name, full, scale in _LIVE_RANGES:
        selected = getattr(filters, attr)
        if not range_is_active(selected, full):
            continue
        convert = crores_to_rupees if scale else _plain_number
        params[f"min_{name}"] = convert(selected[0])
        params[f"max_{name}"] = convert(selected[1])

    return params


def build_advanced_query_params(
    filters: AdvancedFilterState,
    value_ranges: Optional[ValueRanges] = None,
    *,
    skip: int = 0,
    limit: int = KnownValues.MAX_PAGE_SIZE,
) -> dict[str, Any]:
    """Build ``GET /projects`` params for the advanced search panel.

    Range sliders are compared against *value_ranges* (the server-observed
    bounds, defaults when None) and sent in rupees only when narrowed.

    Example:
        With fund_requirement bounds 0..1000 and a selection of (10, 500):
            {"skip": 0, "limit": 100,
             "min_funding_requirement": 100000000,
             "max_funding_requirement": 5000000000}
    """
    ranges = value_ranges or ValueRanges()
    params: dict[str, Any] = {"skip": skip, "limit": limit}

    for attr, name in _ADVANCED_FIELDS:
        value = (getattr(filters, attr) or "").strip()
        if not value:
            continue
        params[name] = value.lower() if attr == "status" else value

    for attr, name in _ADVANCED_RANGES:
        selected = getattr(filters, attr)
        if range_is_active(selected, getattr(ranges, attr)):
            params[f"min_{name}"] = crores_to_rupees(selected[0])
            params[f"max_{name}"] = crores_to_rupees(selected[1])

    return params


def count_active_filters(
    filters: FilterState | AdvancedFilterState,
    value_ranges: Optional[ValueRanges] = None,
    *,
    advanced_only: bool = False,
) -> int:
    """Count narrowed filters for the "N filters active" badge.

    For the live listing each non-empty multi-select, the search box and each
    narrowed slider count once; ``advanced_only`` counts only the sliders.
    For the advanced panel, each set field and each narrowed slider counts.
    """
    if isinstance(filters, AdvancedFilterState):
        ranges = value_ranges or ValueRanges()
        count = sum(1 for attr, _ in _ADVANCED_FIELDS if (getattr(filters, attr) or "").strip())
        count += sum(
            1 for attr, _ in _ADVANCED_RANGES
            if range_is_active(getattr(filters, attr), getattr(ranges, attr))
        )
        return count

    count = sum(
        1 for attr, _, full, _ in _LIVE_RANGES
        if range_is_active(getattr(filters, attr), full)
    )
    if advanced_only:
        return count
    if filters.search.strip():
        count += 1
    count += sum(1 for group in (filters.categories, filters.states, filters.status) if group)
    return count


def _pick(record: Mapping[str, Any], keys: Sequence[str]) -> Optional[float]:
    for key in keys:
        crores = rupees_to_crores(record.get(key))
        if crores is not None:
            return crores
    return None


def parse_value_ranges(payload: Any) -> ValueRanges:
    """Normalise a ``/projects/value-ranges`` response into ValueRanges.

    The endpoint has answered with a one-element list, a ``{"data": ...}``
    wrapper and a bare object, and with several key spellings. Rupee values
    are converted to crores; any bound that is missing keeps its default.
    """
    record: Any = payload
    if isinstance(record, list):
        record = record[0] if record else {}
    if isinstance(record, Mapping) and isinstance(record.get("data"), (Mapping, list)):
        record = record["data"]
        if isinstance(record, list):
            record = record[0] if record else {}
    if not isinstance(record, Mapping):
        record = {}

    defaults = ValueRanges()
    parsed: dict[str, NumericRange] = {}
    for attr, (min_keys, max_keys) in _VALUE_RANGE_KEYS.items():
        fallback = getattr(defaults, attr)
        lo = _pick(record, min_keys)
        hi = _pick(record, max_keys)
        parsed[attr] = NumericRange(
            min=fallback.min if lo is None else lo,
            max=fallback.max if hi is None else hi,
        )
    return ValueRanges(**parsed)
