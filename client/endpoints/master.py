"""Master-data lookups behind the project form and advanced filter selectors.

Every lookup returns ``{"value", "label"}`` options where the value is the
record id when the server sends one, else its name.
"""

from client.endpoints import to_options
from client.session import ApiClient


def _lookup(api: ApiClient, endpoint: str) -> list[dict[str, str]]:
    return to_options(api.get(endpoint), ("name",), id_key="id")


def list_project_categories(api: ApiClient) -> list[dict[str, str]]:
    return _lookup(api, "/master/project-categories")


def list_project_stages(api: ApiClient) -> list[dict[str, str]]:
    return _lookup(api, "/master/project-stages")


def list_funding_types(api: ApiClient) -> list[dict[str, str]]:
    return _lookup(api, "/master/funding-types")


def list_implementation_modes(api: ApiClient) -> list[dict[str, str]]:
    return _lookup(api, "/master/mode-of-implementations")


def list_ownerships(api: ApiClient) -> list[dict[str, str]]:
    return _lookup(api, "/master/ownerships")
