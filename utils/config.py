"""Configuration management utilities for the funding client.

Provides:
- A Config base class with dict/JSON round-tripping
- ClientConfig, loaded from environment variables
- KnownValues: statuses, funding modes, currency units and the default
  slider ranges the listing screens start from
"""

from pathlib import Path
from typing import Dict, Any
import json
import os as _os


# ── Currency units ────────────────────────────────────────────────────────────
# Indian numbering: 1 crore = 100 lakh = 10,000,000 rupees.

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


class Config:
    """Settings holder whose public attributes round-trip through JSON."""

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Instance with one attribute per key of *data*."""
        config = cls()
        for key, value in data.items():
            setattr(config, key, value)
        return config

    def save_json(self, path: Path) -> None:
        """Write to_dict() to *path*, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_json(cls, path: Path) -> "Config":
        """Read a file written by save_json().

        Raises:
            FileNotFoundError: No file at *path*
            json.JSONDecodeError: The file is not JSON
        """
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)


class ClientConfig(Config):
    """Client configuration loaded from environment variables.

    All env vars have defaults so the client talks to a local backend out of
    the box.

    Environment variables:
        FUNDING_API_BASE_URL: REST API root (default: http://localhost:8000/api/v1)
        FUNDING_API_TOKEN: JWT sent as "Authorization: JWT <token>" (default: unset)
        FUNDING_API_TIMEOUT: Request timeout in seconds (default: 10)
        FUNDING_CACHE_TTL: Seconds a cached GET response stays fresh (default: 300)
        FUNDING_CACHE_SIZE: Max cached GET responses (default: 128)
        FUNDING_MAX_RETRIES: Transport-level retries for GET/HEAD (default: 0)
        FUNDING_PAGE_SIZE: Default page size for list calls (default: 10)
        APP_LOG_FORMAT: Logging format, "text" or "json" (default: text)
        APP_LOG_LEVEL: Root log level name (default: INFO)
    """

    def __init__(self) -> None:
        self.base_url = _os.getenv(
            "FUNDING_API_BASE_URL", "http://localhost:8000/api/v1"
        ).rstrip("/")
        self.token = _os.getenv("FUNDING_API_TOKEN") or None
        self.timeout_seconds = float(_os.getenv("FUNDING_API_TIMEOUT", "10"))
        self.cache_ttl_seconds = float(_os.getenv("FUNDING_CACHE_TTL", "300"))
        self.cache_maxsize = int(_os.getenv("FUNDING_CACHE_SIZE", "128"))
        self.max_retries = int(_os.getenv("FUNDING_MAX_RETRIES", "0"))
        self.page_size = int(_os.getenv("FUNDING_PAGE_SIZE", "10"))
        self.log_format = _os.getenv("APP_LOG_FORMAT", "text")
        self.log_level = _os.getenv("APP_LOG_LEVEL", "INFO").upper()

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create a ClientConfig instance populated from environment variables."""
        return cls()


class KnownValues:
    """Container for known values shared by builders and validators."""

    PROJECT_STATUSES = {
        "draft",
        "pending_validation",
        "active",
        "live",
        "approved",
        "rejected",
        "completed",
        "cancelled",
    }

    COMMITMENT_STATUSES = {
        "under_review",
        "approved",
        "rejected",
        "withdrawn",
    }

    # Commitment funding modes accepted by POST /commitments
    FUNDING_MODES = {"loan", "grant", "csr"}

    # Status the live listing requests when the user hasn't picked one
    DEFAULT_LISTING_STATUS = "active"

    # Slider defaults on the live listing (funding in crores)
    DEFAULT_FUNDING_RANGE = (0, 1000)
    DEFAULT_PROGRESS_RANGE = (0, 100)
    DEFAULT_DAYS_LEFT_RANGE = (0, 365)
    DEFAULT_INTEREST_RATE_RANGE = (0, 25)

    # Fallback value ranges (crores) until /projects/value-ranges answers
    DEFAULT_FUND_REQUIREMENT_RANGE = (0, 1000)
    DEFAULT_COMMITMENT_GAP_RANGE = (0, 500)
    DEFAULT_PROJECT_COST_RANGE = (0, 2000)

    # The backend caps list pages at this size
    MAX_PAGE_SIZE = 100

    @classmethod
    def is_valid_status(cls, status: str) -> bool:
        """Check if a project status is known (case-insensitive)."""
        return isinstance(status, str) and status.lower() in cls.PROJECT_STATUSES

    @classmethod
    def is_valid_funding_mode(cls, mode: str) -> bool:
        """Check if a commitment funding mode is known (case-insensitive)."""
        return isinstance(mode, str) and mode.lower() in cls.FUNDING_MODES
