"""Output formatting utilities for the funding client.

Provides reusable functions for:
- Formatting rupee amounts on the crore/lakh/thousand scale
- Indian digit grouping (12,34,567)
- File sizes, percentages, counts and dates for display
- Tabular report output for the CLI
"""

import math
from datetime import date, datetime, timezone
from typing import Optional, List, Any

from utils.config import CRORE, LAKH, THOUSAND
from utils.strings import optional_float

RUPEE = "₹"


def round_half_up(value: float) -> int:
    """Round to the nearest int with halves going up (12.5 -> 13, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def format_indian_number(value: Optional[float], decimals: int = 0) -> str:
    """Group digits the Indian way: last three, then pairs.

    Args:
        value: Number to format (None/NaN treated as 0)
        decimals: Digits after the decimal point (default: 0)

    Returns:
        Grouped string like "12,34,567" or "1,00,000.50"

    Examples:
        format_indian_number(1234567) -> "12,34,567"
        format_indian_number(999) -> "999"
        format_indian_number(-150000) -> "-1,50,000"
    """
    number = optional_float(value) or 0.0
    sign = "-" if number < 0 else ""
    text = f"{abs(number):.{decimals}f}"
    whole, _, frac = text.partition(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        whole = ",".join(pairs + [tail])

    return f"{sign}{whole}.{frac}" if frac else f"{sign}{whole}"


def format_currency(amount: Any) -> str:
    """Format a rupee amount with the crore/lakh/thousand scale.

    Args:
        amount: Amount in rupees; strings and None are accepted

    Returns:
        "₹2.50Cr", "₹1.50L", "₹5.00K", or "₹500" for small amounts.
        Zero, None and non-numeric input give "₹0".

    Examples:
        format_currency(25_000_000) -> "₹2.50Cr"
        format_currency(150_000) -> "₹1.50L"
        format_currency(5_000) -> "₹5.00K"
        format_currency(500) -> "₹500"
    """
    value = optional_float(amount)
    if not value:
        return f"{RUPEE}0"

    if value >= CRORE:
        return f"{RUPEE}{value / CRORE:.2f}Cr"
    if value >= LAKH:
        return f"{RUPEE}{value / LAKH:.2f}L"
    if value >= THOUSAND:
        return f"{RUPEE}{value / THOUSAND:.2f}K"
    return f"{RUPEE}{format_indian_number(round_half_up(value))}"


def format_percent(value: Optional[float], precision: int = 0) -> str:
    """Format a percentage for display.

    Examples:
        format_percent(42) -> "42%"
        format_percent(42.5, precision=1) -> "42.5%"
        format_percent(None) -> "-"
    """
    if value is None:
        return "-"
    return f"{value:.{precision}f}%"


def format_count(value: Optional[int]) -> str:
    """Format a count with thousands separator ("1,234" or "-" for None)."""
    if value is None:
        return "-"
    return f"{value:,d}"


_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_file_size(num_bytes: Any) -> str:
    """Format a byte count with 1024-based units, up to two decimals.

    Examples:
        format_file_size(0) -> "0 Bytes"
        format_file_size(1536) -> "1.5 KB"
        format_file_size(2 * 1024 * 1024) -> "2 MB"
    """
    size = optional_float(num_bytes)
    if not size or size < 0:
        return "0 Bytes"
    exponent = int(math.floor(math.log(size, 1024))) if size >= 1 else 0
    exponent = max(0, min(exponent, len(_SIZE_UNITS) - 1))
    scaled = round(size / (1024 ** exponent), 2)
    return f"{scaled:g} {_SIZE_UNITS[exponent]}"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp or date from the backend.

    Accepts datetime/date objects as-is. Returns None for empty or
    unparsable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def as_aware(moment: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values pass through."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def format_date(value: Any) -> str:
    """Format a backend date as "12 Mar 2025".

    Returns "N/A" for missing values; strings that don't parse are returned
    unchanged.
    """
    if value is None or value == "":
        return "N/A"
    parsed = parse_datetime(value)
    if parsed is None:
        return str(value)
    return f"{parsed.day} {parsed.strftime('%b %Y')}"


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to maximum length with ellipsis.

    Examples:
        truncate_text("Long text here", 10) -> "Long te..."
        truncate_text("Short", 10) -> "Short"
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


class TableFormatter:
    """Formats rows as aligned tabular output."""

    def __init__(self, columns: List[str], column_widths: Optional[List[int]] = None,
                 max_width: int = 40):
        """Initialize table formatter.

        Args:
            columns: List of column headers
            column_widths: Optional list of column widths (auto-calculated if None)
            max_width: Cells longer than this are truncated
        """
        self.columns = columns
        self.column_widths = column_widths or [len(col) for col in columns]
        self.max_width = max_width
        self.rows: List[List[str]] = []

    def add_row(self, values: List[Any]) -> None:
        """Add a row to the table.

        Raises:
            ValueError: If value count doesn't match column count
        """
        if len(values) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} values, got {len(values)}")

        str_values = []
        for i, val in enumerate(values):
            str_val = str(val) if val is not None else "-"
            str_val = truncate_text(str_val, self.max_width)
            str_values.append(str_val)
            if len(str_val) > self.column_widths[i]:
                self.column_widths[i] = len(str_val)

        self.rows.append(str_values)

    def _format_row(self, values: List[str], is_header: bool = False) -> str:
        cells = []
        for i, val in enumerate(values):
            width = self.column_widths[i]
            if is_header:
                cells.append(val.ljust(width))
                continue
            # Right-align amounts and percentages
            if val[:1] == "₹" or val.endswith("%") or val.replace(",", "").isdigit():
                cells.append(val.rjust(width))
            else:
                cells.append(val.ljust(width))
        return "  ".join(cells).rstrip()

    def to_string(self, show_header: bool = True, show_separator: bool = True) -> str:
        """Format table as multi-line string."""
        lines = []

        if show_header:
            lines.append(self._format_row(self.columns, is_header=True))
            if show_separator:
                lines.append("  ".join("-" * w for w in self.column_widths))

        for row in self.rows:
            lines.append(self._format_row(row))

        return "\n".join(lines)

    def print_table(self, show_header: bool = True, show_separator: bool = True) -> None:
        """Print table to stdout."""
        print(self.to_string(show_header, show_separator))
