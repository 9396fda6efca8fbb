import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from tasknotes.core.exceptions import ValidationError

LIKE_ESCAPE = "\\"


def validate_hex_color(color: Optional[str]) -> bool:
    """Validate hex color format (#RRGGBB or #RGB)."""
    if not color:
        return True  # Allow empty/null

    hex_pattern = r'^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$'
    return bool(re.match(hex_pattern, color))


def require_text(value: Optional[str], field: str) -> str:
    """Return the stripped value, raising ValidationError when it is blank."""
    if value is None or not value.strip():
        raise ValidationError(field)
    return value.strip()


def require_texts(values: Iterable[str], field: str) -> List[str]:
    """Validate every entry of a list of required strings."""
    cleaned = []
    for index, value in enumerate(values):
        cleaned.append(require_text(value, f"{field}[{index}]"))
    return cleaned


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_legacy_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as written by JavaScript's toISOString.

    A trailing ``Z`` or numeric offset is honoured; the result is naive UTC.
    """
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    return to_naive_utc(datetime.fromisoformat(raw))
