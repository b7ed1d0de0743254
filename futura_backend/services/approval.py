"""Two-stage approval of tour appointments.

``pending`` is approved by customer service into ``cs_approved``; sales then
approves ``cs_approved`` into ``sales_approved``. Either stage can reject with
a reason, and ``rejected`` is terminal. Admins may act at every stage.

Every transition is a compare-and-set on the current status, so two staff
members acting on the same appointment cannot both succeed.
"""
import logging
from datetime import datetime

from sqlalchemy import update

from ..extensions import db
from ..models.appointment import (
    ADMINISTRATIVE_STATUSES,
    CS_APPROVED,
    PENDING,
    REJECTED,
    SALES_APPROVED,
    Appointment,
)
from ..security import ADMIN, CUSTOMER_SERVICE, SALES, normalize_role

logger = logging.getLogger(__name__)

APPROVER_ROLES = (ADMIN, CUSTOMER_SERVICE, SALES)

# current status -> (roles allowed to approve, next status, field prefix)
APPROVAL_STEPS = {
    PENDING: ((ADMIN, CUSTOMER_SERVICE), CS_APPROVED, "cs"),
    CS_APPROVED: ((ADMIN, SALES), SALES_APPROVED, "sales"),
}

# current status -> roles allowed to reject
REJECTION_RULES = {
    PENDING: (ADMIN, CUSTOMER_SERVICE),
    CS_APPROVED: (ADMIN, SALES),
    SALES_APPROVED: (ADMIN,),
}

APPROVAL_MESSAGES = {
    CS_APPROVED: "Appointment approved by Customer Service. Awaiting Sales Representative approval.",
    SALES_APPROVED: "Appointment fully approved by Sales Representative!",
}


class ApprovalError(Exception):
    status_code = 400
    error = "validation_error"


class ApprovalForbidden(ApprovalError):
    status_code = 403
    error = "forbidden"


class InvalidTransition(ApprovalError):
    status_code = 409
    error = "invalid_transition"


class AppointmentNotFound(ApprovalError):
    status_code = 404
    error = "not_found"


def _load(appointment_id):
    appointment = db.session.get(Appointment, appointment_id)
    if appointment is None:
        raise AppointmentNotFound(f"Appointment {appointment_id} not found")
    return appointment


def _compare_and_set(appointment_id, expected_status, values):
    """Write ``values`` only if the row still has ``expected_status``."""
    values["updated_at"] = datetime.utcnow()
    result = db.session.execute(
        update(Appointment)
        .where(Appointment.id == appointment_id, Appointment.status == expected_status)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise InvalidTransition(
            f"Appointment not found or already processed. Expected status: {expected_status}"
        )
    db.session.commit()
    appointment = db.session.get(Appointment, appointment_id)
    db.session.refresh(appointment)
    return appointment


def _text(value):
    return "" if value is None else str(value).strip()


def next_approval_status(status, role):
    """Status an approval by ``role`` would move ``status`` to, or raise."""
    role = normalize_role(role)
    if role not in APPROVER_ROLES:
        raise ApprovalForbidden(
            f"You do not have permission to approve appointments. Your role: {role}"
        )
    step = APPROVAL_STEPS.get(status)
    if step is None or role not in step[0]:
        raise InvalidTransition(
            f"Cannot approve appointment. Current status: {status}, Your role: {role}"
        )
    return step[1]


def approve(appointment_id, approver_id, role, notes=None):
    appointment = _load(appointment_id)
    current = appointment.status
    new_status = next_approval_status(current, role)
    prefix = APPROVAL_STEPS[current][2]

    updated = _compare_and_set(appointment_id, current, {
        "status": new_status,
        f"{prefix}_approved_by": approver_id,
        f"{prefix}_approved_at": datetime.utcnow(),
        f"{prefix}_approval_notes": _text(notes) or None,
    })
    logger.info("Appointment %s %s -> %s by user %s", appointment_id, current, new_status, approver_id)
    return updated, APPROVAL_MESSAGES[new_status]


def reject(appointment_id, rejector_id, role, reason):
    reason = _text(reason)
    if not reason:
        raise ApprovalError("Rejection reason is required")

    role = normalize_role(role)
    if role not in APPROVER_ROLES:
        raise ApprovalForbidden(
            f"You do not have permission to reject appointments. Your role: {role}"
        )

    appointment = _load(appointment_id)
    current = appointment.status
    allowed = REJECTION_RULES.get(current)
    if allowed is None or role not in allowed:
        raise InvalidTransition(
            f"Cannot reject appointment. Current status: {current}, Your role: {role}"
        )

    updated = _compare_and_set(appointment_id, current, {
        "status": REJECTED,
        "rejected_by": rejector_id,
        "rejected_at": datetime.utcnow(),
        "rejection_reason": reason,
    })
    logger.info("Appointment %s %s -> rejected by user %s", appointment_id, current, rejector_id)
    return updated


def set_administrative_status(appointment_id, status):
    if status not in ADMINISTRATIVE_STATUSES:
        raise ApprovalError(
            f"Invalid status. Must be one of: {', '.join(ADMINISTRATIVE_STATUSES)}"
        )
    appointment = _load(appointment_id)
    current = appointment.status
    if current == REJECTED:
        raise InvalidTransition("A rejected appointment cannot be changed")
    updated = _compare_and_set(appointment_id, current, {"status": status})
    logger.info("Appointment %s %s -> %s (administrative)", appointment_id, current, status)
    return updated
