"""Shared utilities for the municipal project funding client.

utils.query and utils.export build on client.models and are imported
directly rather than re-exported here.
"""

# Pattern definitions
from utils.patterns import (
    PROJECT_REFERENCE_ID,
    EMAIL,
    PHONE_DIGITS,
)

# String utilities
from utils.strings import safe_float, optional_float, normalize_whitespace, digits_only

# Configuration
from utils.config import (
    CRORE,
    LAKH,
    THOUSAND,
    Config,
    ClientConfig,
    KnownValues,
)

# Output formatting
from utils.formatting import (
    format_currency,
    format_indian_number,
    format_percent,
    format_count,
    format_file_size,
    format_date,
    parse_datetime,
    as_aware,
    round_half_up,
    truncate_text,
    TableFormatter,
)

# Funding progress
from utils.funding import (
    funding_progress,
    percentage_progress,
    remaining_amount,
    project_progress,
    days_left,
    is_commitment_window_open,
)

# Client-side filtering
from utils.filtering import (
    filter_results,
    filter_by_status,
    sort_results,
    FAVORITE_SEARCH_FIELDS,
    DOCUMENT_REQUEST_SEARCH_FIELDS,
)

# Validation
from utils.validation import (
    ValidationIssue,
    ValidationResult,
    validate_project_form,
    validate_commitment,
    validate_document_request,
    validate_note,
    validate_answer,
    validate_rejection,
)

# Notifications
from utils.notify import Notice, NotificationChannel

# Cache and HTTP
from utils.cache import TTLCache, make_key
from utils.http import RetryStrategy, SessionManager, stream_to_file

# Logging
from utils.log import configure_logging, JsonFormatter

__all__ = [
    # Patterns
    "PROJECT_REFERENCE_ID",
    "EMAIL",
    "PHONE_DIGITS",
    # Strings
    "safe_float",
    "optional_float",
    "normalize_whitespace",
    "digits_only",
    # Config
    "CRORE",
    "LAKH",
    "THOUSAND",
    "Config",
    "ClientConfig",
    "KnownValues",
    # Formatting
    "format_currency",
    "format_indian_number",
    "format_percent",
    "format_count",
    "format_file_size",
    "format_date",
    "parse_datetime",
    "as_aware",
    "round_half_up",
    "truncate_text",
    "TableFormatter",
    # Funding
    "funding_progress",
    "percentage_progress",
    "remaining_amount",
    "project_progress",
    "days_left",
    "is_commitment_window_open",
    # Filtering
    "filter_results",
    "filter_by_status",
    "sort_results",
    "FAVORITE_SEARCH_FIELDS",
    "DOCUMENT_REQUEST_SEARCH_FIELDS",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    "validate_project_form",
    "validate_commitment",
    "validate_document_request",
    "validate_note",
    "validate_answer",
    "validate_rejection",
    # Notifications
    "Notice",
    "NotificationChannel",
    # Cache / HTTP
    "TTLCache",
    "make_key",
    "RetryStrategy",
    "SessionManager",
    "stream_to_file",
    # Logging
    "configure_logging",
    "JsonFormatter",
]
