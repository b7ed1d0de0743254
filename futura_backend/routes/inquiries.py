from flask import Blueprint, current_app, request

from ..errors import failure, missing_fields, non_text_field, success
from ..extensions import db
from ..models import Inquiry
from ..security import ADMIN, SALES, roles_required, staff_required
from ..services import notifications

inquiries_bp = Blueprint("inquiries", __name__)


@inquiries_bp.post("/client-inquiries")
def create_inquiry():
    """Public contact form; routed to sales unless a role is given."""
    data = request.get_json(silent=True) or {}
    if missing_fields(data, ("client_name", "client_email", "message")):
        return failure("validation_error", 400, message="Name, email and message are required")
    field = non_text_field(data, ("client_name", "client_email", "client_phone", "message"))
    if field:
        return failure("validation_error", 400, message=f"{field} must be text")

    inquiry = Inquiry(
        client_name=data["client_name"].strip(),
        client_email=data["client_email"].strip().lower(),
        client_phone=(data.get("client_phone") or "").strip() or None,
        property_id=data.get("property_id"),
        property_title=data.get("property_title"),
        message=data["message"].strip(),
        user_id=data.get("user_id"),
        role_id=data.get("role_id") or SALES,
        status="pending",
    )
    db.session.add(inquiry)
    db.session.commit()
    current_app.logger.info("Inquiry %s received from %s", inquiry.id, inquiry.client_email)

    notifications.notify(notifications.inquiry_received(
        inquiry.client_name, inquiry.client_email, inquiry.property_title, inquiry.id,
    ))
    return success(inquiry.serialize(), "Inquiry sent successfully", 201)


@inquiries_bp.get("/client-inquiries")
@staff_required
def list_inquiries():
    query = Inquiry.query

    role_id = request.args.get("roleId")
    status = request.args.get("status")
    user_id = request.args.get("userId", type=int)
    client_email = request.args.get("clientEmail")

    if role_id:
        query = query.filter(Inquiry.role_id == role_id)
    if status and status != "all":
        query = query.filter(Inquiry.status == status)
    if user_id:
        query = query.filter(Inquiry.user_id == user_id)
    if client_email:
        query = query.filter(Inquiry.client_email == client_email.strip().lower())

    total = query.count()
    query = query.order_by(Inquiry.created_at.desc(), Inquiry.id.desc())

    limit = request.args.get("limit", type=int)
    offset = request.args.get("offset", type=int)
    if offset:
        query = query.offset(offset).limit(limit or 10)
    elif limit:
        query = query.limit(limit)

    inquiries = query.all()
    return success([i.serialize() for i in inquiries], f"Found {len(inquiries)} inquiries", total=total)


@inquiries_bp.patch("/client-inquiries")
@staff_required
def update_inquiry_status():
    data = request.get_json(silent=True) or {}
    inquiry_id = data.get("inquiryId")
    status = data.get("status")
    if not inquiry_id or not status:
        return failure("validation_error", 400, message="Inquiry ID and status are required")
    if status not in Inquiry.STATUSES:
        return failure("validation_error", 400,
                       message=f"Invalid status. Must be one of: {', '.join(Inquiry.STATUSES)}")

    inquiry = db.get_or_404(Inquiry, inquiry_id)
    inquiry.status = status
    db.session.commit()
    current_app.logger.info("Inquiry %s -> %s", inquiry.id, status)
    return success(inquiry.serialize(), "Inquiry status updated successfully")


@inquiries_bp.delete("/client-inquiries")
@roles_required(ADMIN, SALES)
def delete_inquiry():
    inquiry_id = request.args.get("inquiryId", type=int)
    if not inquiry_id:
        return failure("validation_error", 400, message="Inquiry ID is required")
    inquiry = db.get_or_404(Inquiry, inquiry_id)
    db.session.delete(inquiry)
    db.session.commit()
    current_app.logger.info("Inquiry %s deleted", inquiry_id)
    return success(None, "Inquiry deleted successfully")
