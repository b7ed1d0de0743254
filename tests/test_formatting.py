from datetime import date, datetime

from futura_backend.utils.formatting import (
    format_currency,
    formatted_date,
    humanize_key,
    is_new_item,
    parse_datetime,
    relative_time,
    short_date,
)
from futura_backend.utils.pdf import cell_text, generate_table_report

NOW = datetime(2026, 10, 19, 12, 0)


def test_formatted_date():
    assert formatted_date("2026-10-09T14:05:00") == "Oct 9, 2026, 2:05 PM"
    assert formatted_date(date(2026, 1, 1)) == "Jan 1, 2026, 12:00 AM"
    assert formatted_date("not a date") == "Invalid Date"
    assert formatted_date(None) == "Invalid Date"


def test_short_date():
    assert short_date("2026-10-09") == "Oct 09, 2026"
    assert short_date(None) == "-"
    assert short_date("soon") == "soon"


def test_parse_datetime_normalizes_offsets_to_utc():
    assert parse_datetime("2026-10-19T08:00:00+08:00") == datetime(2026, 10, 19, 0, 0)


def test_is_new_item():
    assert is_new_item(datetime(2026, 10, 19, 1, 0), now=NOW)
    assert not is_new_item(datetime(2026, 10, 17, 12, 0), now=NOW)
    assert is_new_item(datetime(2026, 10, 17, 12, 0), hours_threshold=48, now=NOW)
    assert not is_new_item(None)
    assert not is_new_item("garbage", now=NOW)


def test_relative_time():
    assert relative_time(datetime(2026, 10, 19, 11, 59), now=NOW) == "1 minute ago"
    assert relative_time(datetime(2026, 10, 19, 9, 0), now=NOW) == "3 hours ago"
    assert relative_time(datetime(2026, 10, 18, 11, 0), now=NOW) == "1 day ago"
    assert relative_time(None) == ""


def test_currency_and_keys():
    assert format_currency(1234.5) == "PHP 1,234.50"
    assert format_currency(None) == "PHP 0.00"
    assert humanize_key("billing_period") == "Billing Period"


def test_cell_text():
    assert cell_text("notes", None) == "-"
    assert cell_text("is_pinned", True) == "Yes"
    assert cell_text("tags", ["a", "b"]) == "a, b"
    assert cell_text("property_area", {"name": "x"}) == "Object"
    assert cell_text("due_date", "2026-02-01") == "Feb 01, 2026"
    long = "x" * 80
    assert cell_text("description", long) == "x" * 47 + "..."


def test_empty_table_report_is_still_a_pdf():
    assert generate_table_report("Complaints Report", [], []).startswith(b"%PDF")
