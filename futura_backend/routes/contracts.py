from datetime import datetime
from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required
from sqlalchemy import func

from ..errors import failure, missing_fields, success
from ..extensions import db
from ..models import Contract, PaymentSchedule, Transaction
from ..security import (
    ADMIN, COLLECTION, SALES, STAFF_ROLES, current_role, current_user_id,
    roles_required, staff_required,
)
from ..services import contracts as contract_service
from ..services import notifications
from ..utils.formatting import parse_date
from .transactions import PAYMENT_METHODS, PAYMENT_ROLES, next_or_number

contracts_bp = Blueprint("contracts", __name__)


def next_contract_number(today=None):
    """``CTS-<year>-<5 digit sequence>`` based on contracts already issued this year."""
    year = (today or datetime.utcnow()).year
    prefix = f"CTS-{year}-"
    count = db.session.query(func.count(Contract.id)).filter(
        Contract.contract_number.like(f"{prefix}%")
    ).scalar() or 0
    return f"{prefix}{count + 1:05d}"


@contracts_bp.get("/contracts")
@staff_required
def list_contracts():
    query = Contract.query
    status = request.args.get("status")
    if status:
        query = query.filter(Contract.status == status)
    contracts = query.order_by(Contract.created_at.desc()).all()
    return success([c.serialize() for c in contracts])


@contracts_bp.get("/contracts/<int:contract_id>")
@staff_required
def get_contract(contract_id):
    contract = db.get_or_404(Contract, contract_id)
    return success(contract.serialize(),
                   payment_schedules=[s.serialize() for s in contract.schedules])


@contracts_bp.post("/contracts")
@roles_required(ADMIN, SALES)
def create_contract():
    data = request.get_json(silent=True) or {}
    missing = missing_fields(data, ("client_name",))
    if missing:
        return failure("validation_error", 400, message=f"{missing} is required")

    number = (data.get("contract_number") or "").strip() or next_contract_number()
    if Contract.query.filter_by(contract_number=number).first():
        return failure("duplicate", 409, message=f"Contract {number} already exists")

    try:
        contract = Contract(
            contract_number=number,
            client_name=data["client_name"].strip(),
            client_email=(data.get("client_email") or "").strip().lower() or None,
            client_phone=data.get("client_phone"),
            client_address=data.get("client_address"),
            user_id=data.get("user_id"),
            property_id=data.get("property_id"),
            total_amount=Decimal(str(data.get("total_amount") or 0)),
        )
    except InvalidOperation:
        return failure("validation_error", 400, message="total_amount must be a number")

    db.session.add(contract)
    db.session.commit()
    current_app.logger.info("Created contract %s", contract.contract_number)
    return success(contract.serialize(), "Contract created successfully", 201)


@contracts_bp.get("/contracts/<int:contract_id>/transactions")
@roles_required(ADMIN, COLLECTION, SALES)
def contract_transactions(contract_id):
    db.get_or_404(Contract, contract_id)
    rows = (Transaction.query.filter_by(contract_id=contract_id)
            .order_by(Transaction.transaction_date.desc()).all())
    total_paid = sum(float(t.amount) for t in rows if t.payment_status == "completed")
    return success([t.serialize() for t in rows], total_paid=total_paid)


def _contract_failure(e):
    return failure(e.error, e.status_code, message=str(e))


def _today():
    value = request.args.get("as_of")
    return parse_date(value) if value else None


@contracts_bp.post("/contracts/create")
@roles_required(ADMIN, SALES)
def create_contract_from_reservation():
    """Draw a contract and its downpayment schedule from an approved reservation."""
    data = request.get_json(silent=True) or {}
    field = missing_fields(data, ("reservation_id", "payment_plan_months"))
    if field:
        return failure("validation_error", 400, message=f"{field} is required")

    try:
        contract = contract_service.create_contract_from_reservation(
            data["reservation_id"], data["payment_plan_months"],
        )
    except contract_service.ContractError as e:
        current_app.logger.warning("Contract for reservation %s refused: %s", data["reservation_id"], e)
        return _contract_failure(e)

    return success(
        {"contract": contract.serialize(),
         "payment_schedules": [s.serialize() for s in contract.schedules]},
        "Contract created successfully", 201,
    )


@contracts_bp.get("/contracts/by-reservation")
@jwt_required()
def contract_by_reservation():
    reservation_id = request.args.get("reservation_id")
    if not reservation_id:
        return failure("validation_error", 400, message="reservation_id is required")

    contract = Contract.query.filter_by(reservation_id=reservation_id).first()
    if contract is not None and current_role() not in STAFF_ROLES \
            and contract.user_id != current_user_id():
        contract = None
    if contract is None:
        return success(None, "No contract found for this reservation")

    return success({"contract": contract.serialize(),
                    "payment_schedules": [s.serialize() for s in contract.schedules]})


@contracts_bp.get("/contracts/payment/walk-in")
@staff_required
def installment_details():
    """One installment with the penalty it would carry if paid now."""
    schedule_id = request.args.get("schedule_id", type=int)
    if not schedule_id:
        return failure("validation_error", 400, message="schedule_id is required")
    try:
        today = _today()
        schedule = contract_service.load_schedule(schedule_id)
    except ValueError:
        return failure("validation_error", 400, message="Invalid as_of date")
    except contract_service.ContractError as e:
        return _contract_failure(e)

    data = schedule.serialize()
    data.update({
        "contract_number": schedule.contract.contract_number,
        "client_name": schedule.contract.client_name,
        "calculated_penalty": float(contract_service.penalty_for(schedule, today)),
        "days_overdue_after_grace": contract_service.days_overdue(schedule, today),
        "grace_period_end": schedule.grace_period_end_date.isoformat()
        if schedule.grace_period_end_date else None,
        "transactions": [t.serialize() for t in schedule.transactions],
    })
    return success(data)


@contracts_bp.post("/contracts/payment/walk-in")
@roles_required(*PAYMENT_ROLES)
def pay_installment():
    data = request.get_json(silent=True) or {}
    field = missing_fields(data, ("schedule_id", "amount_paid", "payment_method"))
    if field:
        return failure("validation_error", 400, message=f"{field} is required")
    if data["payment_method"] not in PAYMENT_METHODS:
        return failure("validation_error", 400,
                       message=f"Invalid payment method. Must be one of: {', '.join(PAYMENT_METHODS)}")

    try:
        transaction = contract_service.record_payment(
            data["schedule_id"],
            Decimal(str(data["amount_paid"])),
            data["payment_method"],
            (data.get("or_number") or "").strip() or next_or_number(),
            processed_by=current_user_id(),
            payment_type=data.get("payment_type") or "full",
            notes=data.get("notes"),
            today=parse_date(data["payment_date"]) if data.get("payment_date") else None,
        )
    except (InvalidOperation, ValueError):
        return failure("validation_error", 400, message="Invalid amount_paid or payment_date")
    except contract_service.ContractError as e:
        db.session.rollback()
        current_app.logger.warning("Payment for schedule %s refused: %s", data["schedule_id"], e)
        return _contract_failure(e)

    notifications.notify(
        notifications.payment_received(transaction.amount + transaction.penalty_paid,
                                       transaction.contract.contract_number, transaction.or_number),
        source_record_id=transaction.transaction_id,
    )
    return success(
        {"transaction": transaction.serialize(), "schedule": transaction.schedule.serialize(),
         "contract": transaction.contract.serialize()},
        "Payment recorded successfully", 201,
    )


@contracts_bp.post("/contracts/payment/revert")
@roles_required(*PAYMENT_ROLES)
def revert_installment():
    data = request.get_json(silent=True) or {}
    if not data.get("schedule_id"):
        return failure("validation_error", 400, message="schedule_id is required")
    try:
        reverted = contract_service.revert_payment(data["schedule_id"])
    except contract_service.ContractError as e:
        return _contract_failure(e)

    schedule = db.session.get(PaymentSchedule, data["schedule_id"])
    return success(
        {"schedule": schedule.serialize(), "contract": schedule.contract.serialize()},
        "Payment reverted successfully",
        reverted_transactions=reverted,
    )


@contracts_bp.get("/contracts/payment/history")
@staff_required
def payment_history():
    contract_id = request.args.get("contract_id", type=int)
    schedule_id = request.args.get("schedule_id", type=int)
    if not contract_id and not schedule_id:
        return failure("validation_error", 400, message="contract_id or schedule_id is required")

    query = Transaction.query
    if contract_id:
        query = query.filter(Transaction.contract_id == contract_id)
    if schedule_id:
        query = query.filter(Transaction.schedule_id == schedule_id)
    rows = query.order_by(Transaction.transaction_date.desc()).all()
    return success([t.serialize() for t in rows], summary=contract_service.payment_summary(rows))
