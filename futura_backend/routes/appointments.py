from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required

from ..errors import failure, missing_fields, non_text_field, success
from ..extensions import db
from ..models import Appointment, Property
from ..models.appointment import CS_APPROVED, PENDING
from ..security import ADMIN, current_role, current_user_id, roles_required, staff_required
from ..services import approval, notifications
from ..utils.formatting import parse_date

appointments_bp = Blueprint("appointments", __name__)

REQUIRED = ("property_id", "client_name", "client_email", "appointment_date", "appointment_time")
TEXT_FIELDS = ("client_name", "client_email", "client_phone", "message")


def _approval_failure(e):
    return failure(e.error, e.status_code, message=str(e))


@appointments_bp.post("/book-tour")
def book_tour():
    data = request.get_json(silent=True) or {}
    field = missing_fields(data, REQUIRED)
    if field:
        return failure("validation_error", 400, message=f"{field} is required")
    field = non_text_field(data, TEXT_FIELDS)
    if field:
        return failure("validation_error", 400, message=f"{field} must be text")

    try:
        appointment_date = parse_date(data["appointment_date"])
    except (ValueError, TypeError):
        return failure("validation_error", 400, message="Invalid appointment_date")

    prop = db.session.get(Property, data["property_id"])
    if prop is None:
        return failure("not_found", 404, message="Property not found")

    appointment = Appointment(
        property_id=prop.id,
        property_title=data.get("property_title") or prop.property_title,
        user_id=data.get("user_id"),
        client_name=data["client_name"].strip(),
        client_email=data["client_email"].strip().lower(),
        client_phone=(data.get("client_phone") or "").strip() or None,
        appointment_date=appointment_date,
        appointment_time=str(data["appointment_time"]).strip(),
        message=data.get("message"),
        status=PENDING,
    )
    db.session.add(appointment)
    db.session.commit()
    current_app.logger.info("Tour booked: appointment %s for %s", appointment.id, appointment.client_email)

    notifications.notify(notifications.tour_booked(
        appointment.client_name,
        appointment.property_title,
        appointment.appointment_date.isoformat(),
        appointment.appointment_time,
        appointment.id,
    ))
    return success(appointment.serialize(), "Tour booked successfully", 201)


@appointments_bp.get("/book-tour")
@jwt_required()
def list_appointments():
    query = Appointment.query

    user_id = request.args.get("userId", type=int)
    client_email = request.args.get("clientEmail")
    status = request.args.get("status")

    if current_role() not in approval.APPROVER_ROLES:
        user_id = current_user_id()
        client_email = None

    if user_id:
        query = query.filter(Appointment.user_id == user_id)
    if client_email:
        query = query.filter(Appointment.client_email == client_email.strip().lower())
    if status and status != "all":
        query = query.filter(Appointment.status == status)

    rows = query.order_by(Appointment.created_at.desc(), Appointment.id.desc()).all()
    return success([a.serialize() for a in rows], total=len(rows))


@appointments_bp.post("/book-tour/approve")
@staff_required
def approve_appointment():
    data = request.get_json(silent=True) or {}
    appointment_id = data.get("appointment_id")
    if not appointment_id:
        return failure("validation_error", 400, message="Appointment ID is required")
    if non_text_field(data, ("approval_notes",)):
        return failure("validation_error", 400, message="approval_notes must be text")

    try:
        appointment, message = approval.approve(
            appointment_id, current_user_id(), current_role(), data.get("approval_notes"),
        )
    except approval.ApprovalError as e:
        current_app.logger.warning("Approval of appointment %s refused: %s", appointment_id, e)
        return _approval_failure(e)

    stage = "Customer Service" if appointment.status == CS_APPROVED else "Sales"
    notifications.notify(notifications.tour_approved(
        appointment.property_title, appointment.appointment_date.isoformat(), stage, appointment.id,
    ))
    return success(appointment.serialize(), message)


@appointments_bp.post("/book-tour/reject")
@staff_required
def reject_appointment():
    data = request.get_json(silent=True) or {}
    if non_text_field(data, ("rejection_reason",)):
        return failure("validation_error", 400, message="rejection_reason must be text")
    reason = (data.get("rejection_reason") or "").strip()
    if not reason:
        return failure("validation_error", 400, message="Rejection reason is required")

    appointment_id = data.get("appointment_id")
    if not appointment_id:
        return failure("validation_error", 400, message="Appointment ID is required")

    try:
        appointment = approval.reject(appointment_id, current_user_id(), current_role(), reason)
    except approval.ApprovalError as e:
        current_app.logger.warning("Rejection of appointment %s refused: %s", appointment_id, e)
        return _approval_failure(e)

    notifications.notify(notifications.tour_rejected(
        appointment.property_title, appointment.appointment_date.isoformat(), reason, appointment.id,
    ))
    return success(appointment.serialize(), "Appointment rejected successfully")


@appointments_bp.patch("/book-tour/<int:appointment_id>/status")
@roles_required(ADMIN)
def update_appointment_status(appointment_id):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if not status:
        return failure("validation_error", 400, message="Status is required")

    try:
        appointment = approval.set_administrative_status(appointment_id, status)
    except approval.ApprovalError as e:
        return _approval_failure(e)
    return success(appointment.serialize(), "Appointment status updated successfully")
