from datetime import datetime, date, timezone


def utcnow():
    return datetime.now(timezone.utc)


def now_iso():
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return to_iso(utcnow())


def to_iso(value):
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(value):
    """Parse an ISO timestamp or a plain ``YYYY-MM-DD`` date.

    Returns an aware UTC datetime, or None when the value is empty or
    not a recognizable date.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def sort_key(value):
    """Sort key for optional timestamps; missing values sort oldest."""
    parsed = parse_datetime(value)
    return parsed or datetime.min.replace(tzinfo=timezone.utc)
