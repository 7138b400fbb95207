"""Formatting of activity records for the terminal.

Activity records come straight from the API as loosely typed mappings, so
every accessor here falls back to a default instead of raising.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

UNKNOWN = "Unknown"
UNKNOWN_DATE = "Unknown date"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_string_value(record: Mapping[str, Any], key: str) -> str:
    """Return ``record[key]`` as text, or ``"Unknown"`` when the key is absent."""
    if key not in record:
        return UNKNOWN
    value = record[key]
    if isinstance(value, str):
        return value
    return str(value)


def format_start_date(value: Any) -> str:
    """Render an RFC3339 string or epoch seconds as ``YYYY-MM-DD``.

    Strings that don't parse (or carry no UTC offset) are returned verbatim.
    Epoch values are interpreted in UTC.
    """
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return value
        if parsed.tzinfo is None:
            return value
        return parsed.strftime("%Y-%m-%d")
    if _is_number(value):
        try:
            return datetime.fromtimestamp(int(value), tz=timezone.utc).strftime("%Y-%m-%d")
        except (OverflowError, OSError, ValueError):
            return UNKNOWN_DATE
    return UNKNOWN_DATE


def format_distance_km(value: Any) -> float:
    """Metres to kilometres; anything non-numeric counts as 0."""
    if _is_number(value):
        return value / 1000
    return 0.0


def format_activity(index: int, record: Mapping[str, Any]) -> str:
    name = get_string_value(record, "name")
    date = format_start_date(record.get("start_date_local"))
    distance = format_distance_km(record.get("distance"))
    return f"{index}. {name} ({date}) - {distance:.2f} km"


def print_activities(records: Iterable[Mapping[str, Any]]) -> None:
    print("Your recent activities:")
    for i, record in enumerate(records, start=1):
        print(format_activity(i, record))
