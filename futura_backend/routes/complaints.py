from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required

from ..errors import failure, missing_fields, success
from ..extensions import db
from ..models import Complaint, Contract
from ..security import (
    ADMIN, CUSTOMER_SERVICE, STAFF_ROLES, current_role, current_user_id,
    roles_required, staff_required,
)
from ..services import notifications

complaints_bp = Blueprint("complaints", __name__)


def _scoped_user_id(requested):
    """Non-staff callers only ever see their own records."""
    if current_role() in STAFF_ROLES:
        return requested
    return current_user_id()


@complaints_bp.get("/complaints")
@jwt_required()
def list_complaints():
    user_id = _scoped_user_id(request.args.get("user_id", type=int))

    query = Complaint.query
    if user_id:
        contract = Contract.for_user(user_id)
        if contract is None:
            return success([], "No contract found for this user")
        query = query.filter(Complaint.contract_id == contract.id)

    status = request.args.get("status")
    if status and status != "all":
        query = query.filter(Complaint.status == status)

    complaints = query.order_by(Complaint.created_at.desc(), Complaint.id.desc()).all()
    current_app.logger.info("Found %d complaints", len(complaints))
    return success([c.serialize() for c in complaints], "Complaints fetched successfully")


@complaints_bp.post("/complaints")
@jwt_required()
def create_complaint():
    data = request.get_json(silent=True) or {}
    if missing_fields(data, ("subject", "description", "complaint_type")):
        return failure("validation_error", 400,
                       message="Subject, description, and complaint type are required")

    user_id = _scoped_user_id(data.get("user_id"))
    if user_id:
        contract = Contract.for_user(user_id)
        if contract is None:
            return failure("not_found", 404, message="Contract not found. Please contact support.")
    elif data.get("contract_id"):
        contract = db.session.get(Contract, data["contract_id"])
        if contract is None:
            return failure("not_found", 404, message="Contract not found")
    else:
        return failure("validation_error", 400, message="Contract ID is required")

    complaint = Complaint(
        subject=data["subject"].strip(),
        description=data["description"].strip(),
        complaint_type=data["complaint_type"],
        severity=data.get("severity") or "medium",
        contract_id=contract.id,
        property_id=contract.property_id,
        status="pending",
    )
    db.session.add(complaint)
    db.session.commit()
    current_app.logger.info("Complaint created: %s", complaint.id)

    notifications.notify_roles(
        notifications.complaint_filed(contract.client_name, complaint.subject, complaint.complaint_type),
        ADMIN, CUSTOMER_SERVICE,
    )
    return success(complaint.serialize(), "Complaint filed successfully", 201)


@complaints_bp.patch("/complaints")
@staff_required
def update_complaint_status():
    data = request.get_json(silent=True) or {}
    complaint_id = data.get("id")
    status = data.get("status")
    if not complaint_id or not status:
        return failure("validation_error", 400, message="Complaint ID and status are required")
    if status not in Complaint.STATUSES:
        return failure("validation_error", 400,
                       message=f"Invalid status. Must be one of: {', '.join(Complaint.STATUSES)}")

    complaint = db.get_or_404(Complaint, complaint_id)
    complaint.status = status
    db.session.commit()
    current_app.logger.info("Complaint %s updated to %s", complaint.id, status)

    recipient = (complaint.contract.user_id if complaint.contract else None) or data.get("user_id")
    template = notifications.complaint_status_changed(status, complaint.subject)
    if recipient and template:
        notifications.notify(template, recipient_id=recipient, source_record_id=complaint.id)

    return success(complaint.serialize(), "Complaint updated successfully")


@complaints_bp.delete("/complaints/<int:complaint_id>")
@roles_required(ADMIN, CUSTOMER_SERVICE)
def delete_complaint(complaint_id):
    complaint = db.get_or_404(Complaint, complaint_id)
    db.session.delete(complaint)
    db.session.commit()
    return success(None, "Complaint deleted successfully")
