from datetime import datetime, timezone

from services.errors import InvalidRequest


def parse_iso(value, field="datetime"):
    """
    ISO 8601 string -> naive UTC datetime.
    Accepts a trailing "Z"; offsets are converted to UTC.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"{field} is required")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidRequest(f"Invalid {field}. Use ISO e.g. 2026-01-20T18:00:00")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_day(value, field="date"):
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"{field} is required")
    try:
        return datetime.fromisoformat(value.strip()[:10]).date()
    except ValueError:
        raise InvalidRequest(f"Invalid {field}. Use YYYY-MM-DD")


def parse_id(value, field):
    if isinstance(value, bool):
        raise InvalidRequest(f"Invalid {field}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRequest(f"Invalid {field}")


def parse_id_list(value, field):
    if not isinstance(value, list) or not value:
        raise InvalidRequest(f"{field} must be a non-empty list")
    return [parse_id(v, field) for v in value]


def optional_text(value, field, max_len):
    if value is None:
        return None
    if not isinstance(value, str) or len(value.strip()) > max_len:
        raise InvalidRequest(f"Invalid {field}")
    return value.strip() or None
