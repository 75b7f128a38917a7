"""HTTP client for the funding REST API.

ApiClient wraps a pooled requests session (utils.http.SessionManager) and
adds what every call needs:

- JSON headers and ``Authorization: JWT <token>`` when a token is set
- a TTL cache for GET responses, invalidated by writes to the same resource
- uniform errors: 401 clears the token and raises AuthenticationError;
  any other failure raises ApiRequestError with the server's message

Requests are never retried unless the SessionManager's RetryStrategy says
so, and even then only GET and HEAD.
"""

import logging
import time
from pathlib import Path
from typing import Any, Mapping, Optional

import requests

from client.errors import ApiRequestError, AuthenticationError, extract_error_message
from utils.cache import TTLCache, make_key
from utils.config import ClientConfig
from utils.http import RetryStrategy, SessionManager, stream_to_file

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"

# Writes under one resource also change what another resource lists
_RELATED_RESOURCES = {
    "/commitments": ("/projects",),
    "/project-favorites": ("/projects",),
    "/project-drafts": ("/projects",),
}


def _normalize_endpoint(endpoint: str) -> str:
    return endpoint if endpoint.startswith("/") else f"/{endpoint}"


def resource_root(endpoint: str) -> str:
    """First path segment of *endpoint* ("/commitments/12/withdraw" -> "/commitments")."""
    return "/" + _normalize_endpoint(endpoint).strip("/").split("/")[0]


class ApiClient:
    """Synchronous JSON client for the funding API.

    Usage::

        with ApiClient("http://localhost:8000/api/v1", token=token) as api:
            projects = api.get("/projects", {"skip": 0, "limit": 10})
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, token: Optional[str] = None,
                 timeout: float = 10, session_manager: Optional[SessionManager] = None,
                 cache: Optional[TTLCache] = None):
        """Initialize the client.

        Args:
            base_url: API root, e.g. "http://localhost:8000/api/v1"
            token: JWT to send; cleared automatically on a 401
            timeout: Per-request timeout in seconds
            session_manager: Pooled session provider (default: no retries)
            cache: GET response cache (default: 128 entries, 300s TTL)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session_manager = session_manager or SessionManager(RetryStrategy(max_retries=0))
        self.cache = cache if cache is not None else TTLCache()

    @classmethod
    def from_config(cls, config: ClientConfig) -> "ApiClient":
        """Build a client from environment-derived settings."""
        return cls(
            base_url=config.base_url,
            token=config.token,
            timeout=config.timeout_seconds,
            session_manager=SessionManager(RetryStrategy(max_retries=config.max_retries)),
            cache=TTLCache(maxsize=config.cache_maxsize, ttl_seconds=config.cache_ttl_seconds),
        )

    # ── Auth and headers ──────────────────────────────────────────────────────

    def set_token(self, token: Optional[str]) -> None:
        self.token = token or None
        self.cache.clear()

    def clear_token(self) -> None:
        self.token = None
        self.cache.clear()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"JWT {self.token}"
        return headers

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{_normalize_endpoint(endpoint)}"

    # ── Core request ──────────────────────────────────────────────────────────

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _send(self, method: str, endpoint: str, params: Optional[Mapping[str, Any]] = None,
              json: Any = None, stream: bool = False) -> requests.Response:
        endpoint = _normalize_endpoint(endpoint)
        started = time.monotonic()
        try:
            resp = self.session_manager.session.request(
                method,
                self.url_for(endpoint),
                params=dict(params) if params else None,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
                stream=stream,
            )
        except requests.Timeout as e:
            logger.warning("%s %s timed out after %ss", method, endpoint, self.timeout,
                           extra={"method": method, "endpoint": endpoint})
            raise ApiRequestError(f"Request timed out: {method} {endpoint}") from e
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, endpoint, e,
                           extra={"method": method, "endpoint": endpoint})
            raise ApiRequestError(f"Network error: {e}") from e

        duration_ms = round((time.monotonic() - started) * 1000, 1)
        extra = {"method": method, "endpoint": endpoint,
                 "status": resp.status_code, "duration_ms": duration_ms}

        if resp.status_code == 401:
            logger.warning("%s %s unauthorized; clearing token", method, endpoint, extra=extra)
            self.clear_token()
            payload = self._decode(resp)
            raise AuthenticationError(
                extract_error_message(payload, "Authentication required"),
                status_code=401,
                payload=payload,
            )

        if not 200 <= resp.status_code < 300:
            payload = self._decode(resp)
            message = extract_error_message(payload, f"Request failed with status {resp.status_code}")
            logger.warning("%s %s -> %s: %s", method, endpoint, resp.status_code, message,
                           extra=extra)
            raise ApiRequestError(message, status_code=resp.status_code, payload=payload)

        logger.debug("%s %s -> %s (%sms)", method, endpoint, resp.status_code, duration_ms,
                     extra=extra)
        return resp

    def _invalidate(self, endpoint: str) -> None:
        root = resource_root(endpoint)
        removed = self.cache.invalidate_prefix(root)
        for related in _RELATED_RESOURCES.get(root, ()):
            removed += self.cache.invalidate_prefix(related)
        if removed:
            logger.debug("Invalidated %d cached responses under %s", removed, root)

    # ── Verbs ─────────────────────────────────────────────────────────────────

    def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None, *,
            use_cache: bool = True) -> Any:
        """GET *endpoint* and return the decoded body.

        Successful responses are cached per (endpoint, params) unless
        ``use_cache`` is False, in which case the cache is bypassed and
        refreshed.
        """
        endpoint = _normalize_endpoint(endpoint)
        key = make_key(endpoint, params)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("GET %s served from cache", endpoint,
                             extra={"method": "GET", "endpoint": endpoint, "cached": True})
                return cached
        payload = self._decode(self._send("GET", endpoint, params=params))
        if payload is not None:
            self.cache.set(key, payload)
        return payload

    def post(self, endpoint: str, data: Any = None,
             params: Optional[Mapping[str, Any]] = None) -> Any:
        payload = self._decode(self._send("POST", endpoint, params=params, json=data))
        self._invalidate(endpoint)
        return payload

    def put(self, endpoint: str, data: Any = None,
            params: Optional[Mapping[str, Any]] = None) -> Any:
        payload = self._decode(self._send("PUT", endpoint, params=params, json=data))
        self._invalidate(endpoint)
        return payload

    def patch(self, endpoint: str, data: Any = None,
              params: Optional[Mapping[str, Any]] = None) -> Any:
        payload = self._decode(self._send("PATCH", endpoint, params=params, json=data))
        self._invalidate(endpoint)
        return payload

    def delete(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        payload = self._decode(self._send("DELETE", endpoint, params=params))
        self._invalidate(endpoint)
        return payload

    def download(self, endpoint: str, dest: Path,
                 params: Optional[Mapping[str, Any]] = None) -> Path:
        """Stream a binary response body to *dest* and return the path."""
        resp = self._send("GET", endpoint, params=params, stream=True)
        try:
            written = stream_to_file(resp, Path(dest))
        finally:
            resp.close()
        logger.info("Downloaded %s (%d bytes) to %s", endpoint, written, dest)
        return Path(dest)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def close(self) -> None:
        self.session_manager.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
