from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, request
from sqlalchemy import func, or_

from ..errors import failure, missing_fields, success
from ..extensions import db
from ..models import Billing, Homeowner
from ..security import ADMIN, COLLECTION, roles_required, staff_required
from ..utils.formatting import parse_date

billing_bp = Blueprint("billing", __name__)

REQUIRED = ("homeowner_id", "billing_period", "amount", "due_date")


def _apply(billing, data):
    if "homeowner_id" in data:
        homeowner_id = int(data["homeowner_id"])
        if db.session.get(Homeowner, homeowner_id) is None:
            raise ValueError("Invalid homeowner")
        billing.homeowner_id = homeowner_id
    if "billing_period" in data:
        billing.billing_period = str(data["billing_period"]).strip()
    if "amount" in data:
        billing.amount = Decimal(str(data["amount"]))
    if "due_date" in data:
        billing.due_date = parse_date(data["due_date"])
    if "description" in data:
        billing.description = data["description"]
    if "status" in data:
        if data["status"] not in Billing.STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(Billing.STATUSES)}")
        billing.status = data["status"]


@billing_bp.get("/billing")
@staff_required
def list_billings():
    """Billings newest first, searchable by homeowner name, period or description."""
    q = (request.args.get("q") or "").strip()
    status = request.args.get("status")

    query = Billing.query.outerjoin(Homeowner, Billing.homeowner_id == Homeowner.id)
    if status and status != "all":
        query = query.filter(Billing.status == status)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Homeowner.full_name.ilike(like),
            Billing.billing_period.ilike(like),
            Billing.description.ilike(like),
        ))

    billings = query.order_by(Billing.created_at.desc(), Billing.id.desc()).all()
    total_overdue = db.session.query(func.coalesce(func.sum(Billing.amount), 0)).filter(
        Billing.status == "overdue"
    ).scalar()
    return success(
        [b.serialize() for b in billings],
        total=len(billings),
        total_overdue=float(total_overdue or 0),
    )


@billing_bp.post("/billing")
@roles_required(ADMIN, COLLECTION)
def create_billing():
    data = request.get_json(silent=True) or {}
    if missing_fields(data, REQUIRED):
        return failure("validation_error", 400, message="Please fill in all required fields")

    billing = Billing(status="unpaid")
    try:
        _apply(billing, data)
    except (ValueError, TypeError, InvalidOperation) as e:
        return failure("validation_error", 400, message=str(e))

    db.session.add(billing)
    db.session.commit()
    current_app.logger.info("Created billing %s for homeowner %s", billing.id, billing.homeowner_id)
    return success(billing.serialize(), "Billing created successfully!", 201)


@billing_bp.put("/billing/<int:billing_id>")
@roles_required(ADMIN, COLLECTION)
def update_billing(billing_id):
    billing = db.get_or_404(Billing, billing_id)
    data = request.get_json(silent=True) or {}
    try:
        _apply(billing, data)
    except (ValueError, TypeError, InvalidOperation) as e:
        db.session.rollback()
        return failure("validation_error", 400, message=str(e))
    db.session.commit()
    return success(billing.serialize(), "Billing updated successfully!")


@billing_bp.delete("/billing/<int:billing_id>")
@roles_required(ADMIN, COLLECTION)
def delete_billing(billing_id):
    billing = db.get_or_404(Billing, billing_id)
    db.session.delete(billing)
    db.session.commit()
    current_app.logger.info("Deleted billing %s", billing_id)
    return success(None, "Billing deleted successfully!")
