import secrets
import string
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, request
from sqlalchemy.exc import SQLAlchemyError

from ..errors import failure, missing_fields, non_text_field, success
from ..extensions import db
from ..models import Property, Reservation, Transaction
from ..security import ADMIN, SALES, current_user_id, roles_required
from ..services import notifications

reservations_bp = Blueprint("reservations", __name__)

REQUIRED = ("property_id", "client_name", "client_email")
PAYMENT_WINDOW = timedelta(days=7)
_ALPHABET = string.ascii_uppercase + string.digits


def tracking_number(today=None):
    """``RES-YYYYMMDD-XXXXXX``"""
    today = today or datetime.utcnow()
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"RES-{today:%Y%m%d}-{suffix}"


def receipt_number(reservation_id, today=None):
    year = (today or datetime.utcnow()).year
    return f"RCT-{year}-{reservation_id[:8].upper()}"


def _get_reservation(data):
    reservation_id = data.get("reservation_id")
    if not reservation_id:
        return None, failure("validation_error", 400, message="Reservation ID is required")
    reservation = db.session.get(Reservation, reservation_id)
    if reservation is None:
        return None, failure("not_found", 404, message="Reservation not found")
    return reservation, None


@reservations_bp.post("/property-reservation")
def create_reservation():
    data = request.get_json(silent=True) or {}
    if missing_fields(data, REQUIRED):
        return failure("validation_error", 400,
                       message="Please fill in all required fields to submit your reservation")
    field = non_text_field(data, ("client_name", "client_email", "client_phone"))
    if field:
        return failure("validation_error", 400, message=f"{field} must be text")

    prop = db.session.get(Property, data["property_id"])
    if prop is None:
        return failure("not_found", 404, message="Property not found")

    try:
        fee = Decimal(str(data.get("reservation_fee") or 0))
    except InvalidOperation:
        return failure("validation_error", 400, message="reservation_fee must be a number")
    if fee < 0:
        return failure("validation_error", 400, message="reservation_fee cannot be negative")

    reservation = Reservation(
        tracking_number=tracking_number(),
        property_id=prop.id,
        property_title=data.get("property_title") or prop.property_title,
        user_id=data.get("user_id"),
        client_name=data["client_name"].strip(),
        client_email=data["client_email"].strip().lower(),
        client_phone=(data.get("client_phone") or "").strip() or None,
        reservation_fee=fee,
        notes=data.get("message"),
        status="pending",
    )
    db.session.add(reservation)
    db.session.commit()
    current_app.logger.info("Reservation %s submitted (%s)", reservation.reservation_id, reservation.tracking_number)

    notifications.notify(
        notifications.reservation_submitted(reservation.client_name, reservation.property_title,
                                            reservation.tracking_number),
        source_record_id=reservation.reservation_id,
    )
    return success(
        reservation.serialize(),
        "Reservation submitted successfully! Our team will review your application and contact you soon.",
        201,
    )


@reservations_bp.get("/property-reservation")
@roles_required(ADMIN, SALES)
def list_reservations():
    query = Reservation.query
    status = request.args.get("status")
    if status and status != "all":
        query = query.filter(Reservation.status == status)
    rows = query.order_by(Reservation.created_at.desc()).all()
    return success([r.serialize() for r in rows], total=len(rows))


def _notify_client(reservation):
    if not reservation.user_id:
        return
    notifications.notify(
        notifications.reservation_decided(reservation.status, reservation.tracking_number,
                                          reservation.property_title, reservation.notes),
        recipient_id=reservation.user_id,
        source_record_id=reservation.reservation_id,
    )


@reservations_bp.post("/property-reservation/approve")
@roles_required(ADMIN, SALES)
def approve_reservation():
    data = request.get_json(silent=True) or {}
    reservation, error = _get_reservation(data)
    if error:
        return error
    if reservation.status != "pending":
        return failure("invalid_status", 409,
                       message=f"Only pending reservations can be approved. Current status: {reservation.status}")

    reservation.status = "approved"
    db.session.commit()
    current_app.logger.info("Reservation %s approved", reservation.reservation_id)

    transaction = Transaction(
        reservation_id=reservation.reservation_id,
        transaction_type="reservation_fee",
        amount=reservation.reservation_fee,
        payment_status="pending",
        receipt_number=receipt_number(reservation.reservation_id),
        due_date=datetime.utcnow() + PAYMENT_WINDOW,
        notes=data.get("notes") or "Reservation fee payment - Awaiting payment",
        processed_by=current_user_id(),
    )
    try:
        db.session.add(transaction)
        db.session.commit()
    except SQLAlchemyError as e:
        # the approval stands even without its fee transaction
        db.session.rollback()
        current_app.logger.error("Transaction creation for reservation %s failed: %s",
                                 reservation.reservation_id, e)
        transaction = None

    _notify_client(reservation)
    return success(
        {"reservation": reservation.serialize(),
         "transaction": transaction.serialize() if transaction else None},
        "Reservation approved successfully! Payment transaction created.",
    )


@reservations_bp.post("/property-reservation/reject")
@roles_required(ADMIN, SALES)
def reject_reservation():
    data = request.get_json(silent=True) or {}
    reservation, error = _get_reservation(data)
    if error:
        return error
    if reservation.status != "pending":
        return failure("invalid_status", 409,
                       message=f"Only pending reservations can be rejected. Current status: {reservation.status}")

    reservation.status = "rejected"
    if data.get("notes"):
        reservation.notes = data["notes"]
    db.session.commit()
    current_app.logger.info("Reservation %s rejected", reservation.reservation_id)

    _notify_client(reservation)
    return success(reservation.serialize(), "Reservation rejected")


@reservations_bp.post("/property-reservation/revert")
@roles_required(ADMIN, SALES)
def revert_reservation():
    data = request.get_json(silent=True) or {}
    reservation, error = _get_reservation(data)
    if error:
        return error
    if reservation.status not in ("approved", "rejected"):
        return failure("invalid_status", 400,
                       message="Only approved or rejected reservations can be reverted to pending")

    # unpaid fee transactions go with the approval
    Transaction.query.filter_by(
        reservation_id=reservation.reservation_id, payment_status="pending",
    ).delete(synchronize_session=False)
    reservation.status = "pending"
    db.session.commit()
    current_app.logger.info("Reservation %s reverted to pending", reservation.reservation_id)

    _notify_client(reservation)
    return success(reservation.serialize(), "Reservation reverted to pending successfully!")
