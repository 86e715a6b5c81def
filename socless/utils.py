"""Small helpers shared across socless modules."""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Tuple


def gen_id() -> str:
    """Generate a uuid used for execution, investigation and message ids."""
    return str(uuid.uuid4())


def gen_datetimenow() -> str:
    """Current UTC time as ISO-8601 with microseconds, e.g. ``2021-01-16T00:57:06.573112Z``."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def json_merge(target: Any, overlay: Any) -> Any:
    """Recursively merge ``overlay`` into ``target`` and return the result.

    Mappings are merged key by key; a ``None`` value in ``overlay`` deletes the
    key from ``target``. Any other value replaces the target value. ``target``
    is modified in place when it is a dict.
    """
    if isinstance(target, dict) and isinstance(overlay, dict):
        for key, value in overlay.items():
            if value is None:
                target.pop(key, None)
            else:
                target[key] = json_merge(target.get(key), value)
        return target
    return copy.deepcopy(overlay)


def set_path(item: Dict[str, Any], path: Tuple[str, ...], value: Any) -> None:
    """Set ``value`` at ``path`` inside ``item``, creating mappings on the way."""
    if not path:
        raise ValueError("path must not be empty")
    current = item
    for key in path[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[path[-1]] = value


def apply_updates(item: Dict[str, Any], updates: Iterable[Tuple[Tuple[str, ...], Any]]) -> None:
    for path, value in updates:
        set_path(item, path, value)


def split_with_delimiter(string: str, delimiter: str) -> Tuple[str, str | None]:
    """Split ``string`` once on ``delimiter``.

    Returns the part before the delimiter and the part after it, or ``None``
    for the second element when the delimiter is absent.
    """
    before, found, after = string.partition(delimiter)
    if not found:
        return string, None
    return before, after
