"""HTTP transport utilities for the funding client.

Provides:
- RetryStrategy: urllib3 retry policy (no retries unless configured)
- SessionManager: pooled requests.Session with the retry policy mounted
- stream_to_file: write a streamed response body to disk
"""

import logging
from pathlib import Path
from typing import Optional, List

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry as URLRetry

logger = logging.getLogger(__name__)


class RetryStrategy:
    """Defines retry behavior for HTTP requests.

    The backend's write endpoints are not idempotent, so only GET and HEAD
    are ever retried, and the default is not to retry at all.
    """

    def __init__(self, max_retries: int = 0, backoff_factor: float = 0.5,
                 status_forcelist: Optional[List[int]] = None):
        """Initialize retry strategy.

        Args:
            max_retries: Maximum number of retry attempts (default: 0)
            backoff_factor: Exponential backoff multiplier (default: 0.5)
            status_forcelist: HTTP status codes to retry on
                            (default: [429, 502, 503, 504])
        """
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.status_forcelist = status_forcelist or [429, 502, 503, 504]

    def get_retry_object(self) -> URLRetry:
        """Get urllib3 Retry object configured with this strategy."""
        return URLRetry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=self.status_forcelist,
            allowed_methods=["GET", "HEAD"],
            raise_on_status=False,
        )


class SessionManager:
    """Manages the HTTP session with connection pooling and retries."""

    def __init__(self, retry_strategy: Optional[RetryStrategy] = None,
                 pool_connections: int = 10, pool_maxsize: int = 20):
        self.retry_strategy = retry_strategy or RetryStrategy()
        self.pool_connections = pool_connections
        self.pool_maxsize = pool_maxsize
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """Get or create the pooled session."""
        if self._session is None:
            self._session = requests.Session()
            adapter = HTTPAdapter(
                max_retries=self.retry_strategy.get_retry_object(),
                pool_connections=self.pool_connections,
                pool_maxsize=self.pool_maxsize
            )
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        return self._session

    def close(self) -> None:
        """Close the session and release resources."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def stream_to_file(resp: requests.Response, dest_path: Path,
                   chunk_size: int = 8192) -> int:
    """Write a streamed response body to *dest_path*.

    Parent directories are created. A partially written file is removed if
    the stream breaks, and the error is re-raised.

    Returns:
        Number of bytes written.
    """
    dest_path = Path(dest_path)
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    try:
        with open(dest_path, "wb") as f:
            for chunk in resp.iter_content(chunk_size=chunk_size):
                if chunk:
                    f.write(chunk)
                    written += len(chunk)
    except (requests.RequestException, OSError):
        if dest_path.exists():
            dest_path.unlink()
        raise
    logger.debug("Wrote %d bytes to %s", written, dest_path)
    return written
