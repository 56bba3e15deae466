from __future__ import annotations
import math
from datetime import datetime, timedelta, timezone


class DateInputError(ValueError):
    pass


_RECEIPT_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%Y/%m/%d")
_INPUT_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d")


def now() -> datetime:
    return datetime.now(tz=timezone.utc)


def to_iso(value: datetime) -> str:
    """Format as UTC with millisecond precision, e.g. 2024-01-15T00:00:00.000Z."""
    value = value.astimezone(timezone.utc)
    return f"{value.year:04d}-{value:%m-%dT%H:%M:%S}.{value.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def can_add_days(value: datetime, days: int) -> bool:
    try:
        add_days(value, days)
    except OverflowError:
        return False
    return True


def parse_receipt_date(token: str) -> datetime | None:
    """Parse a date token found on a receipt line; None when it is not a real date."""
    normalized = token.strip().replace("-", "/")
    for fmt in _RECEIPT_FORMATS:
        try:
            return datetime.strptime(normalized, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def parse_date_input(value: str) -> datetime:
    text = value.strip()
    if not text:
        raise DateInputError("Date is empty.")
    for fmt in _INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        return parse_iso(text)
    except ValueError:
        raise DateInputError(f"Could not understand date '{value}'. Use YYYY-MM-DD.") from None


def days_until(target: datetime, reference: datetime | None = None) -> int:
    reference = reference or now()
    return math.ceil((target - reference).total_seconds() / 86400)
