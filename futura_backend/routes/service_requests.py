from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required

from ..errors import failure, missing_fields, success
from ..extensions import db
from ..models import Contract, ServiceRequest
from ..security import (
    ADMIN, CUSTOMER_SERVICE, STAFF_ROLES, current_role, current_user_id,
    roles_required, staff_required,
)
from ..services import notifications

service_requests_bp = Blueprint("service_requests", __name__)


@service_requests_bp.get("/service-requests")
@jwt_required()
def list_service_requests():
    user_id = request.args.get("user_id", type=int)
    if current_role() not in STAFF_ROLES:
        user_id = current_user_id()

    query = ServiceRequest.query
    if user_id:
        contract = Contract.for_user(user_id)
        if contract is None:
            return success([], "No homeowner profile found for this user")
        query = query.filter(ServiceRequest.contract_id == contract.id)

    status = request.args.get("status")
    if status and status != "all":
        query = query.filter(ServiceRequest.status == status)

    rows = query.order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc()).all()
    return success([r.serialize() for r in rows], "Service requests fetched successfully")


@service_requests_bp.post("/service-requests")
@jwt_required()
def create_service_request():
    data = request.get_json(silent=True) or {}
    if missing_fields(data, ("title", "description", "request_type")):
        return failure("validation_error", 400,
                       message="Title, description, and request type are required")

    user_id = data.get("user_id")
    if current_role() not in STAFF_ROLES:
        user_id = current_user_id()

    if user_id:
        contract = Contract.for_user(user_id)
        if contract is None:
            return failure("not_found", 404, message="Homeowner profile not found. Please contact support.")
    elif data.get("contract_id"):
        contract = db.session.get(Contract, data["contract_id"])
        if contract is None:
            return failure("not_found", 404, message="Contract not found")
        user_id = contract.user_id
    else:
        return failure("validation_error", 400, message="Homeowner ID or contract ID is required")

    service_request = ServiceRequest(
        title=data["title"].strip(),
        description=data["description"].strip(),
        request_type=data["request_type"],
        priority=data.get("priority") or "medium",
        user_id=user_id,
        contract_id=contract.id,
        property_id=contract.property_id,
        status="pending",
    )
    db.session.add(service_request)
    db.session.commit()
    current_app.logger.info("Service request created: %s", service_request.id)

    notifications.notify_roles(
        notifications.service_request_created(contract.client_name, service_request.title,
                                              service_request.request_type),
        ADMIN, CUSTOMER_SERVICE,
    )
    return success(service_request.serialize(), "Service request created successfully", 201)


@service_requests_bp.patch("/service-requests")
@staff_required
def update_service_request_status():
    data = request.get_json(silent=True) or {}
    request_id = data.get("id")
    status = data.get("status")
    if not request_id or not status:
        return failure("validation_error", 400, message="Request ID and status are required")
    if status not in ServiceRequest.STATUSES:
        return failure("validation_error", 400,
                       message=f"Invalid status. Must be one of: {', '.join(ServiceRequest.STATUSES)}")

    service_request = db.get_or_404(ServiceRequest, request_id)
    service_request.status = status
    db.session.commit()
    current_app.logger.info("Service request %s updated to %s", service_request.id, status)

    recipient = (service_request.contract.user_id if service_request.contract else None) \
        or service_request.user_id or data.get("user_id")
    template = notifications.service_request_status_changed(status, service_request.title)
    if recipient and template:
        notifications.notify(template, recipient_id=recipient, source_record_id=service_request.id)

    return success(service_request.serialize(), "Service request updated successfully")


@service_requests_bp.delete("/service-requests/<int:request_id>")
@roles_required(ADMIN, CUSTOMER_SERVICE)
def delete_service_request(request_id):
    service_request = db.get_or_404(ServiceRequest, request_id)
    db.session.delete(service_request)
    db.session.commit()
    return success(None, "Service request deleted successfully")
