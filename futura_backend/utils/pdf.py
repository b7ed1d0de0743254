from datetime import datetime

from fpdf import FPDF, XPos, YPos
from fpdf.fonts import FontFace

from .formatting import format_currency, humanize_key, short_date

RED = (220, 38, 38)
HEADER_RED = (239, 68, 68)
STRIPE = (249, 250, 251)

MAX_CELL_CHARS = 50


def _latin1(text):
    # core PDF fonts only cover latin-1
    return str(text).encode("latin-1", "replace").decode("latin-1")


class _Document(FPDF):
    def __init__(self, orientation="P", footer_text=None):
        super().__init__(orientation=orientation, unit="mm", format="A4")
        self.footer_text = footer_text
        self.set_auto_page_break(auto=True, margin=20)

    def footer(self):
        self.set_y(-12)
        self.set_font("Helvetica", size=8)
        self.set_text_color(100, 100, 100)
        label = f"Page {self.page_no()} of {{nb}}"
        if self.footer_text:
            label = f"{_latin1(self.footer_text)}    {label}"
        self.cell(0, 6, label, align="L")


def _line(pdf, text, size=10, style="", align="L", height=7):
    pdf.set_font("Helvetica", style, size)
    pdf.cell(0, height, _latin1(text), align=align, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _pair(pdf, label, value, label_w=45):
    pdf.set_font("Helvetica", "B", 9)
    pdf.cell(label_w, 7, _latin1(label))
    pdf.set_font("Helvetica", "", 9)
    pdf.multi_cell(0, 7, _latin1(value if value not in (None, "") else "N/A"),
                   new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def generate_transaction_receipt(transaction, company_name="FUTURA HOMES",
                                 tagline="Property Management & Sales"):
    """Render one payment transaction as a PDF receipt and return the bytes."""
    pdf = _Document(footer_text="This is a system-generated receipt.")
    pdf.add_page()

    # Company header band
    pdf.set_fill_color(*RED)
    pdf.rect(0, 0, pdf.w, 45, style="F")
    pdf.set_text_color(255, 255, 255)
    pdf.set_y(10)
    _line(pdf, company_name, size=24, style="B", align="C", height=12)
    _line(pdf, tagline, size=11, align="C", height=6)
    _line(pdf, "Official Payment Receipt", size=11, align="C", height=6)

    pdf.set_text_color(0, 0, 0)
    pdf.set_y(52)
    _line(pdf, "PAYMENT RECEIPT", size=18, style="B", align="C", height=10)
    pdf.ln(4)

    contract = transaction.contract
    _pair(pdf, "Transaction ID:", transaction.transaction_id)
    _pair(pdf, "Transaction Date:", short_date(transaction.transaction_date))
    _pair(pdf, "Receipt No.:", transaction.receipt_number)
    _pair(pdf, "OR No.:", transaction.or_number)
    _pair(pdf, "Payment Method:", humanize_key(transaction.payment_method or "n/a"))
    _pair(pdf, "Payment Type:", humanize_key(transaction.transaction_type or "payment"))
    _pair(pdf, "Status:", humanize_key(transaction.payment_status or ""))
    pdf.ln(3)

    _line(pdf, "Client Information", size=12, style="B")
    if contract is not None:
        _pair(pdf, "Contract No.:", contract.contract_number)
        _pair(pdf, "Client Name:", contract.client_name)
        _pair(pdf, "Email:", contract.client_email)
        _pair(pdf, "Phone:", contract.client_phone)
        _pair(pdf, "Address:", contract.client_address)
    elif transaction.reservation is not None:
        reservation = transaction.reservation
        _pair(pdf, "Tracking No.:", reservation.tracking_number)
        _pair(pdf, "Client Name:", reservation.client_name)
        _pair(pdf, "Email:", reservation.client_email)
        _pair(pdf, "Property:", reservation.property_title)
    else:
        _line(pdf, "No client record attached.", size=9)
    pdf.ln(4)

    pdf.set_fill_color(*RED)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 12, _latin1(f"AMOUNT PAID: {format_currency(transaction.amount)}"),
             align="C", fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(0, 0, 0)

    if transaction.notes:
        pdf.ln(4)
        _line(pdf, "Notes", size=11, style="B")
        pdf.set_font("Helvetica", "", 9)
        pdf.multi_cell(0, 6, _latin1(transaction.notes))

    pdf.ln(6)
    _line(pdf, f"Printed {datetime.utcnow():%b %d, %Y %H:%M} UTC", size=8, align="R")
    return bytes(pdf.output())


def cell_text(column, value):
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if isinstance(value, dict):
        return "Object"
    if "date" in column:
        return short_date(value)
    text = str(value)
    return text if len(text) <= MAX_CELL_CHARS else text[:MAX_CELL_CHARS - 3] + "..."


def generate_table_report(title, columns, rows, start_date=None, end_date=None):
    """Tabular PDF report; ``rows`` are dicts keyed by ``columns``."""
    pdf = _Document(orientation="L")
    pdf.add_page()

    pdf.set_text_color(40, 40, 40)
    _line(pdf, title, size=18, style="B", height=12)
    if start_date and end_date:
        _line(pdf, f"Date Range: {start_date} to {end_date}", size=12)
    _line(pdf, f"Generated: {datetime.utcnow():%B %d, %Y}", size=10, height=6)
    _line(pdf, f"Total Records: {len(rows)}", size=10, height=6)
    pdf.ln(4)

    if not rows or not columns:
        _line(pdf, "No data available for the selected criteria.", size=10)
        return bytes(pdf.output())

    pdf.set_font("Helvetica", size=8)
    headings_style = FontFace(emphasis="BOLD", color=255, fill_color=HEADER_RED)
    with pdf.table(headings_style=headings_style, cell_fill_color=STRIPE,
                   cell_fill_mode="ROWS", line_height=6, text_align="LEFT") as table:
        heading = table.row()
        for column in columns:
            heading.cell(_latin1(humanize_key(column)))
        for item in rows:
            row = table.row()
            for column in columns:
                row.cell(_latin1(cell_text(column, item.get(column))))

    return bytes(pdf.output())
