"""Tabular reports over the back-office tables."""
from collections import namedtuple
from datetime import timedelta

from sqlalchemy import DateTime

from ..models import Announcement, Billing, Complaint, Homeowner, Property, ServiceRequest
from ..utils.formatting import parse_date, parse_datetime

ReportType = namedtuple("ReportType", "model title date_field")

REPORT_TYPES = {
    "homeowners": ReportType(Homeowner, "Homeowners Report", "move_in_date"),
    "properties": ReportType(Property, "Properties Report", "created_at"),
    "service_requests": ReportType(ServiceRequest, "Service Requests Report", "created_at"),
    "complaints": ReportType(Complaint, "Complaints Report", "created_at"),
    "billings": ReportType(Billing, "Billing Report", "due_date"),
    "announcements": ReportType(Announcement, "Announcements Report", "publish_date"),
}


class UnknownReport(LookupError):
    pass


def report_type(name):
    try:
        return REPORT_TYPES[name]
    except KeyError:
        raise UnknownReport(f"Unknown report type: {name}") from None


def _date_bounds(column, start_date, end_date):
    """Inclusive day range as SQL conditions for ``column``."""
    conditions = []
    is_datetime = isinstance(column.expression.type, DateTime)
    if start_date:
        start = parse_date(start_date)
        conditions.append(column >= (parse_datetime(start) if is_datetime else start))
    if end_date:
        end = parse_date(end_date)
        if is_datetime:
            conditions.append(column < parse_datetime(end + timedelta(days=1)))
        else:
            conditions.append(column <= end)
    return conditions


def _matches(row, needle):
    return any(
        value is not None and needle in str(value).lower()
        for value in row.values()
    )


def fetch_rows(name, start_date=None, end_date=None, q=None):
    """Serialized rows of report ``name``, newest first, optionally searched."""
    kind = report_type(name)
    model = kind.model
    query = model.query
    column = getattr(model, kind.date_field)
    for condition in _date_bounds(column, start_date, end_date):
        query = query.filter(condition)

    rows = [r.serialize() for r in query.order_by(model.created_at.desc(), model.id.desc()).all()]
    needle = (q or "").strip().lower()
    if needle:
        rows = [r for r in rows if _matches(r, needle)]
    return rows


def report_columns(rows):
    """Columns from the first row, minus ids, passwords and timestamps."""
    if not rows:
        return []
    return [
        key for key in rows[0]
        if "id" not in key and "password" not in key and key not in ("created_at", "updated_at")
    ]
