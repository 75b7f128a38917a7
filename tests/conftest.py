"""
Pytest fixtures for the funding client tests.

No test touches the network: ApiClient is built on a MagicMock session
whose ``request`` returns canned responses from make_response().
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from client.models import Project
from client.session import ApiClient
from utils.cache import TTLCache

BASE_URL = "http://api.test/api/v1"


def make_response(status: int = 200, payload=None, raw: bytes | None = None,
                  chunks: list[bytes] | None = None) -> MagicMock:
    """Build a mock requests.Response.

    Args:
        status: HTTP status code
        payload: Decoded JSON body (None means an empty body)
        raw: Raw body bytes that are not JSON
        chunks: Body pieces yielded by iter_content() for downloads
    """
    resp = MagicMock()
    resp.status_code = status
    if raw is not None:
        resp.content = raw
        resp.text = raw.decode("utf-8", errors="replace")
        resp.json.side_effect = ValueError("not json")
    elif payload is None:
        resp.content = b""
        resp.json.side_effect = ValueError("empty")
    else:
        resp.content = json.dumps(payload).encode()
        resp.json.return_value = payload
    resp.iter_content.return_value = iter(chunks or [])
    return resp


@pytest.fixture
def session():
    """The mocked requests.Session behind the api fixture."""
    return MagicMock()


@pytest.fixture
def api(session):
    """ApiClient with a token, a fresh cache and the mocked session."""
    manager = MagicMock()
    manager.session = session
    return ApiClient(BASE_URL, token="test-token", timeout=5,
                     session_manager=manager, cache=TTLCache())


def last_call(session: MagicMock) -> tuple[str, str, dict]:
    """(method, url, kwargs) of the most recent session.request call."""
    args, kwargs = session.request.call_args
    return args[0], args[1], kwargs


@pytest.fixture
def live_project() -> Project:
    """An active project with an open fundraising window."""
    return Project.model_validate({
        "id": 37,
        "project_reference_id": "PROJ-2025-00037",
        "title": "Smart Water Grid",
        "category": "Water",
        "state": "Maharashtra",
        "city": "Pune",
        "funding_requirement": "500000000.00",
        "commitment_gap": "400000000.00",
        "total_committed_amount": "100000000.00",
        "minimum_commitment_amount": "1000000",
        "fundraising_start_date": "2020-01-01T00:00:00Z",
        "fundraising_end_date": "2099-12-31T23:59:59Z",
        "status": "active",
    })


@pytest.fixture
def closed_project(live_project) -> Project:
    return live_project.model_copy(update={"fundraising_end_date": "2021-01-01T00:00:00Z"})


@pytest.fixture
def respond(session):
    """Queue one canned response: respond(200, {"data": [...]})."""
    def _respond(status: int = 200, payload=None, **kwargs) -> MagicMock:
        resp = make_response(status, payload, **kwargs)
        session.request.return_value = resp
        return resp
    return _respond


@pytest.fixture
def respond_seq(session):
    """Queue several responses returned in order."""
    def _respond_seq(*responses: MagicMock) -> None:
        session.request.side_effect = list(responses)
    return _respond_seq


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def sent(session):
    """sent() -> (method, url, kwargs) of the latest request."""
    return lambda: last_call(session)
