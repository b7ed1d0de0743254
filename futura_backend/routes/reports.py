from datetime import datetime
from io import BytesIO

from flask import Blueprint, abort, current_app, render_template, request, send_file

from ..errors import failure, success
from ..security import staff_required
from ..services.reports import REPORT_TYPES, UnknownReport, fetch_rows, report_columns, report_type
from ..utils.pdf import cell_text, generate_table_report

reports_bp = Blueprint("reports", __name__)


def _load(name):
    args = request.args
    kind = report_type(name)
    try:
        rows = fetch_rows(name, args.get("start_date"), args.get("end_date"), args.get("q"))
    except ValueError:
        abort(400, description="Invalid start_date or end_date")
    return kind, rows


@reports_bp.errorhandler(UnknownReport)
def unknown_report(e):
    return failure("not_found", 404, message=str(e))


@reports_bp.get("/reports")
@staff_required
def list_report_types():
    return success([
        {"type": name, "title": kind.title, "date_field": kind.date_field}
        for name, kind in REPORT_TYPES.items()
    ])


@reports_bp.get("/reports/<name>")
@staff_required
def report_data(name):
    kind, rows = _load(name)
    return success(rows, total=len(rows), title=kind.title,
                   date_field=kind.date_field, columns=report_columns(rows))


@reports_bp.get("/reports/<name>/pdf")
@staff_required
def report_pdf(name):
    kind, rows = _load(name)
    pdf = generate_table_report(kind.title, report_columns(rows), rows,
                                request.args.get("start_date"), request.args.get("end_date"))
    current_app.logger.info("Generated %s PDF with %d rows", name, len(rows))
    filename = f"{kind.title.replace(' ', '_')}_{datetime.utcnow():%Y-%m-%d}.pdf"
    return send_file(BytesIO(pdf), mimetype="application/pdf",
                     as_attachment=True, download_name=filename)


@reports_bp.get("/reports/<name>/print")
@staff_required
def report_print(name):
    kind, rows = _load(name)
    return render_template(
        "report.html",
        title=kind.title,
        columns=report_columns(rows),
        rows=rows,
        start_date=request.args.get("start_date"),
        end_date=request.args.get("end_date"),
        generated_at=datetime.utcnow(),
        cell=cell_text,
    )
