from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from io import BytesIO

from flask import Blueprint, current_app, render_template, request, send_file
from sqlalchemy import func

from ..errors import failure, missing_fields, success
from ..extensions import db
from ..models import Contract, Transaction
from ..security import ADMIN, COLLECTION, SALES, current_user_id, roles_required
from ..services import notifications
from ..utils.formatting import parse_date, parse_datetime
from ..utils.pdf import generate_transaction_receipt

transactions_bp = Blueprint("transactions", __name__)

PAYMENT_ROLES = (ADMIN, COLLECTION, SALES)
PAYMENT_METHODS = ("cash", "check", "bank_transfer", "gcash", "credit_card")


def next_or_number(today=None):
    """``OR-YYYYMMDD-NNNN``, sequenced per day."""
    today = today or datetime.utcnow()
    prefix = f"OR-{today:%Y%m%d}-"
    count = db.session.query(func.count(Transaction.transaction_id)).filter(
        Transaction.or_number.like(f"{prefix}%")
    ).scalar() or 0
    return f"{prefix}{count + 1:04d}"


@transactions_bp.get("/transactions")
@roles_required(*PAYMENT_ROLES)
def list_transactions():
    query = Transaction.query
    contract_id = request.args.get("contract_id", type=int)
    status = request.args.get("status")
    method = request.args.get("payment_method")

    if contract_id:
        query = query.filter(Transaction.contract_id == contract_id)
    if status and status != "all":
        query = query.filter(Transaction.payment_status == status)
    if method:
        query = query.filter(Transaction.payment_method == method)

    rows = query.order_by(Transaction.transaction_date.desc()).all()
    completed = [t for t in rows if t.payment_status == "completed"]
    return success(
        [t.serialize() for t in rows],
        total=len(rows),
        total_amount=sum(float(t.amount) for t in completed),
        payment_methods=sorted({t.payment_method for t in rows if t.payment_method}),
    )


@transactions_bp.post("/transactions")
@roles_required(*PAYMENT_ROLES)
def record_payment():
    """Walk-in payment against a contract."""
    data = request.get_json(silent=True) or {}
    field = missing_fields(data, ("contract_id", "amount", "payment_method"))
    if field:
        return failure("validation_error", 400, message=f"{field} is required")
    if data["payment_method"] not in PAYMENT_METHODS:
        return failure("validation_error", 400,
                       message=f"Invalid payment method. Must be one of: {', '.join(PAYMENT_METHODS)}")

    contract = db.session.get(Contract, data["contract_id"])
    if contract is None:
        return failure("not_found", 404, message="Contract not found")

    try:
        amount = Decimal(str(data["amount"]))
        transaction_date = parse_datetime(data.get("transaction_date")) or datetime.utcnow()
    except (InvalidOperation, ValueError):
        return failure("validation_error", 400, message="Invalid amount or transaction_date")
    if amount <= 0:
        return failure("validation_error", 400, message="Amount must be greater than zero")

    or_number = (data.get("or_number") or "").strip() or next_or_number()
    transaction = Transaction(
        contract_id=contract.id,
        transaction_type=data.get("transaction_type") or "monthly_payment",
        amount=amount,
        payment_method=data["payment_method"],
        payment_status="completed",
        receipt_number=data.get("receipt_number"),
        or_number=or_number,
        transaction_date=transaction_date,
        notes=data.get("notes"),
        processed_by=current_user_id(),
    )
    db.session.add(transaction)
    db.session.commit()
    current_app.logger.info("Payment %s recorded for contract %s (%s)",
                            transaction.transaction_id, contract.contract_number, or_number)

    notifications.notify(
        notifications.payment_received(amount, contract.contract_number, or_number),
        source_record_id=transaction.transaction_id,
    )
    return success(transaction.serialize(), "Payment recorded successfully", 201)


@transactions_bp.get("/transactions/receipt")
@roles_required(*PAYMENT_ROLES)
def receipt_data():
    """Receipt payload for one transaction or for a date range."""
    transaction_id = request.args.get("transaction_id")
    start_date = request.args.get("start_date")
    end_date = request.args.get("end_date")

    if transaction_id:
        transaction = db.session.get(Transaction, transaction_id)
        if transaction is None:
            return failure("Transaction not found", 404)
        return success(transaction.serialize(), type="single")

    if start_date or end_date:
        query = Transaction.query
        try:
            if start_date:
                query = query.filter(Transaction.transaction_date >= parse_datetime(start_date))
            if end_date:
                # end date is inclusive
                upper = parse_date(end_date) + timedelta(days=1)
                query = query.filter(Transaction.transaction_date < parse_datetime(upper))
        except ValueError:
            return failure("validation_error", 400, message="Invalid start_date or end_date")
        rows = query.order_by(Transaction.transaction_date.desc()).all()
        return success([t.serialize() for t in rows], type="range",
                       startDate=start_date, endDate=end_date)

    return failure("Please provide either transaction_id or start_date/end_date parameters", 400)


@transactions_bp.get("/transactions/<transaction_id>/receipt.pdf")
@roles_required(*PAYMENT_ROLES)
def receipt_pdf(transaction_id):
    transaction = db.get_or_404(Transaction, transaction_id)
    pdf = generate_transaction_receipt(
        transaction,
        company_name=current_app.config["COMPANY_NAME"],
        tagline=current_app.config["COMPANY_TAGLINE"],
    )
    name = transaction.or_number or transaction.receipt_number or transaction.transaction_id[:8]
    return send_file(BytesIO(pdf), mimetype="application/pdf",
                     as_attachment=True, download_name=f"Receipt_{name}.pdf")


@transactions_bp.get("/transactions/<transaction_id>/receipt.html")
@roles_required(*PAYMENT_ROLES)
def receipt_html(transaction_id):
    transaction = db.get_or_404(Transaction, transaction_id)
    return render_template(
        "receipt.html",
        transaction=transaction,
        company_name=current_app.config["COMPANY_NAME"],
        tagline=current_app.config["COMPANY_TAGLINE"],
        printed_at=datetime.utcnow(),
    )
