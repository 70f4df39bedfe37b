from datetime import date, datetime, timezone

from school_library.utils.errors import ValidationError


def utcnow() -> datetime:
    # naive UTC, matches what the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value, field: str = "date"):
    """
    Accepts ISO-8601 strings ("2026-01-31", "2026-01-31T10:00:00Z") or
    datetime/date objects. Returns a naive UTC datetime, None for empty input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"{field} is not a valid ISO date")

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def overdue_days(due_date, now: datetime) -> int:
    if not due_date:
        return 0
    return max(0, (now.date() - due_date.date()).days)
