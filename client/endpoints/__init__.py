"""Per-resource API calls.

Each module exposes plain functions taking an ApiClient first. Mutations
accept an optional NotificationChannel and publish a success or error
Notice when one is given; errors are always re-raised to the caller.
"""

from typing import Any, Callable, Optional, Sequence

from client.envelopes import normalize_list
from client.errors import ApiRequestError
from utils.notify import Notice, NotificationChannel


def publish(notifications: Optional[NotificationChannel], notice: Notice) -> None:
    if notifications is not None:
        notifications.publish(notice)


def run_mutation(call: Callable[[], Any], notifications: Optional[NotificationChannel],
                 success: Notice, error_fallback: str) -> Any:
    """Run *call*, publishing *success* or an error notice.

    The error notice body is the server's message when it sent one, else
    *error_fallback*.
    """
    try:
        result = call()
    except ApiRequestError as e:
        body = e.message if e.payload is not None else error_fallback
        publish(notifications, Notice.error("Error", body))
        raise
    publish(notifications, success)
    return result


def to_options(payload: Any, keys: Sequence[str],
               id_key: Optional[str] = None) -> list[dict[str, str]]:
    """Turn a lookup response into ``{"value", "label"}`` options.

    Items may be plain strings or objects using any of *keys* for the name.
    When *id_key* is given, an item's id is preferred over its name as the
    value. Items that end up with no value are dropped.
    """
    options = []
    for item in normalize_list(payload):
        if isinstance(item, dict):
            name = next((str(item[k]) for k in keys if item.get(k)), "")
            ident = item.get(id_key) if id_key else None
            if item.get("value"):
                value = str(item["value"])
            elif ident is not None:
                value = str(ident)
            else:
                value = name
            label = str(item.get("label") or name or value)
        else:
            value = label = str(item)
        if value:
            options.append({"value": value, "label": label})
    return options
