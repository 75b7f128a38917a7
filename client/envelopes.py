"""Response envelope normalization.

The backend wraps payloads inconsistently: a bare list, ``{"data": [...]}``,
``{"results": [...]}``, ``{"data": {...}}`` or a bare object. Endpoint
helpers normalise every response here, once, instead of guessing at each
call site.
"""

from typing import Any, Literal, Optional, Sequence

Envelope = Literal["list", "wrapped_list", "wrapped_record", "record", "empty"]

LIST_KEYS = ("data", "results", "items")


def classify(payload: Any, keys: Sequence[str] = LIST_KEYS) -> Envelope:
    """Tag the shape of a decoded response body.

    Examples:
        classify([{"id": 1}]) -> "list"
        classify({"data": [{"id": 1}]}) -> "wrapped_list"
        classify({"data": {"id": 1}}) -> "wrapped_record"
        classify({"id": 1}) -> "record"
        classify(None) -> "empty"
    """
    if payload is None or payload == "" or payload == {}:
        return "empty"
    if isinstance(payload, list):
        return "list"
    if isinstance(payload, dict):
        for key in keys:
            if isinstance(payload.get(key), list):
                return "wrapped_list"
        if isinstance(payload.get("data"), dict):
            return "wrapped_record"
        # {"data": null, "total": 0}
        if any(key in payload and payload[key] is None for key in keys):
            return "empty"
        return "record"
    return "empty"


def normalize_list(payload: Any, keys: Sequence[str] = LIST_KEYS) -> list[Any]:
    """Return the list of records carried by *payload*.

    A wrapped single record becomes a one-element list; a bare record does
    too. Empty or unrecognised payloads give [].
    """
    kind = classify(payload, keys)
    if kind == "list":
        return list(payload)
    if kind == "wrapped_list":
        for key in keys:
            if isinstance(payload.get(key), list):
                return list(payload[key])
    if kind == "wrapped_record":
        return [payload["data"]]
    if kind == "record":
        return [payload]
    return []


def normalize_record(payload: Any) -> Optional[dict[str, Any]]:
    """Return the single record carried by *payload*, or None.

    ``{"data": {...}}`` unwraps, a list yields its first element, and a bare
    object is returned as-is.
    """
    kind = classify(payload)
    if kind == "wrapped_record":
        return payload["data"]
    if kind == "record":
        return payload
    if kind == "list":
        return payload[0] if payload else None
    if kind == "wrapped_list":
        items = normalize_list(payload)
        return items[0] if items else None
    return None
