"""Client-side filtering and sorting of already-fetched result lists.

Some screens narrow a loaded page locally instead of asking the server
again: favorites, document requests, and the reference-id search box.
Items may be plain dicts or model instances.
"""

from typing import Any, Iterable, Mapping, Optional, Sequence

DEFAULT_SEARCH_FIELDS = ("project_reference_id", "title")

FAVORITE_SEARCH_FIELDS = (
    "title",
    "project_title",
    "location",
    "municipality_id",
    "category",
    "project_category",
)

DOCUMENT_REQUEST_SEARCH_FIELDS = (
    "project_reference_id",
    "description",
    "requested_by",
    "project.title",
    "project_title",
)


def field_value(item: Any, path: str) -> Any:
    """Read a possibly dotted *path* ("project.title") from a dict or object.

    Returns None if any step is missing.
    """
    current = item
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def _matches(item: Any, needle: str, fields: Sequence[str]) -> bool:
    for path in fields:
        value = field_value(item, path)
        text = "" if value is None else str(value)
        if needle in text.lower():
            return True
    return False


def filter_results(
    items: Iterable[Any],
    query: Optional[str],
    fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
) -> list[Any]:
    """Keep items where any of *fields* contains *query*, case-insensitively.

    A blank or whitespace-only query returns all items (as a new list).

    Examples:
        filter_results(projects, "") -> every project
        filter_results(projects, "proj-2025") -> projects whose reference id
            or title contains "proj-2025" in any case
    """
    items = list(items)
    needle = (query or "").strip().lower()
    if not needle:
        return items
    return [item for item in items if _matches(item, needle, fields)]


def filter_by_status(items: Iterable[Any], statuses: Optional[Iterable[str]]) -> list[Any]:
    """Keep items whose ``status`` is one of *statuses* (case-insensitive).

    None or an empty collection keeps everything.
    """
    items = list(items)
    wanted = {s.lower() for s in (statuses or [])}
    if not wanted:
        return items
    return [
        item for item in items
        if str(field_value(item, "status") or "").lower() in wanted
    ]


def sort_results(items: Iterable[Any], key: str, descending: bool = False) -> list[Any]:
    """Stable sort on *key*; items missing the key always sort last."""
    items = list(items)
    present = [i for i in items if field_value(i, key) is not None]
    missing = [i for i in items if field_value(i, key) is None]
    present.sort(key=lambda i: field_value(i, key), reverse=descending)
    return present + missing
