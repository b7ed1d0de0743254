from datetime import date, datetime, timedelta

from dateutil import parser as date_parser


def parse_date(value):
    """Parse an ISO-ish date string into a ``date``; ``None`` passes through."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.isoparse(str(value)).date()


def parse_datetime(value):
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    parsed = date_parser.isoparse(str(value))
    # stored naive in UTC
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - (parsed.utcoffset() or timedelta(0))
    return parsed


def _coerce(value):
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return parse_datetime(value)


def formatted_date(value):
    """``Oct 9, 2026, 2:05 PM`` or ``Invalid Date``."""
    try:
        d = _coerce(value)
    except (ValueError, OverflowError, TypeError):
        return "Invalid Date"
    if d is None:
        return "Invalid Date"
    hour = d.hour % 12 or 12
    return f"{d:%b} {d.day}, {d.year}, {hour}:{d:%M} {d:%p}"


def short_date(value):
    """``Oct 09, 2026``; unparsable values come back as text."""
    try:
        d = _coerce(value)
    except (ValueError, OverflowError, TypeError):
        return str(value)
    return d.strftime("%b %d, %Y") if d else "-"


def is_new_item(created_at, hours_threshold=24, now=None):
    """True when ``created_at`` lies within the last ``hours_threshold`` hours."""
    if not created_at:
        return False
    try:
        created = _coerce(created_at)
    except (ValueError, OverflowError, TypeError):
        return False
    now = now or datetime.utcnow()
    hours = (now - created).total_seconds() / 3600
    return 0 <= hours <= hours_threshold


def relative_time(value, now=None):
    if not value:
        return ""
    past = _coerce(value)
    now = now or datetime.utcnow()
    seconds = (now - past).total_seconds()
    hours = seconds / 3600
    if hours < 1:
        n, unit = int(seconds // 60), "minute"
    elif hours < 24:
        n, unit = int(hours), "hour"
    else:
        n, unit = int(hours // 24), "day"
    return f"{n} {unit}{'' if n == 1 else 's'} ago"


def format_currency(amount, prefix="PHP"):
    return f"{prefix} {float(amount or 0):,.2f}"


def humanize_key(key):
    """``billing_period`` -> ``Billing Period``"""
    return " ".join(part.capitalize() for part in key.split("_"))
