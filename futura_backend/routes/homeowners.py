from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, request
from sqlalchemy import or_

from ..errors import failure, missing_fields, success
from ..extensions import db
from ..models import Homeowner
from ..security import staff_required
from ..utils.formatting import parse_date

homeowners_bp = Blueprint("homeowners", __name__)

_FIELDS = ("full_name", "email", "phone", "unit_number", "property_id", "user_id")


def _apply(homeowner, data):
    for field in _FIELDS:
        if field in data:
            value = data[field]
            setattr(homeowner, field, value.strip() if isinstance(value, str) else value)
    if "email" in data and homeowner.email:
        homeowner.email = homeowner.email.lower()
    if "monthly_dues" in data:
        homeowner.monthly_dues = Decimal(str(data["monthly_dues"] or 0))
    if "move_in_date" in data:
        homeowner.move_in_date = parse_date(data["move_in_date"])
    if "status" in data:
        if data["status"] not in Homeowner.STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(Homeowner.STATUSES)}")
        homeowner.status = data["status"]


@homeowners_bp.get("/homeowners")
@staff_required
def list_homeowners():
    q = (request.args.get("q") or "").strip()
    status = request.args.get("status")

    query = Homeowner.query
    if status and status != "all":
        query = query.filter(Homeowner.status == status)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Homeowner.full_name.ilike(like),
            Homeowner.email.ilike(like),
            Homeowner.unit_number.ilike(like),
        ))

    homeowners = query.order_by(Homeowner.full_name.asc()).all()
    return success([h.serialize() for h in homeowners], total=len(homeowners))


@homeowners_bp.get("/homeowners/<int:homeowner_id>")
@staff_required
def get_homeowner(homeowner_id):
    homeowner = db.get_or_404(Homeowner, homeowner_id)
    data = homeowner.serialize()
    data["billings"] = [b.serialize() for b in homeowner.billings]
    return success(data)


@homeowners_bp.post("/homeowners")
@staff_required
def create_homeowner():
    data = request.get_json(silent=True) or {}
    missing = missing_fields(data, ("full_name", "email"))
    if missing:
        return failure("validation_error", 400, message=f"{missing} is required")

    homeowner = Homeowner()
    try:
        _apply(homeowner, data)
    except (ValueError, InvalidOperation) as e:
        return failure("validation_error", 400, message=str(e))

    db.session.add(homeowner)
    db.session.commit()
    current_app.logger.info("Created homeowner %s", homeowner.id)
    return success(homeowner.serialize(), "Homeowner created successfully", 201)


@homeowners_bp.put("/homeowners/<int:homeowner_id>")
@staff_required
def update_homeowner(homeowner_id):
    homeowner = db.get_or_404(Homeowner, homeowner_id)
    data = request.get_json(silent=True) or {}
    try:
        _apply(homeowner, data)
    except (ValueError, InvalidOperation) as e:
        return failure("validation_error", 400, message=str(e))
    db.session.commit()
    return success(homeowner.serialize(), "Homeowner updated successfully")


@homeowners_bp.delete("/homeowners/<int:homeowner_id>")
@staff_required
def delete_homeowner(homeowner_id):
    homeowner = db.get_or_404(Homeowner, homeowner_id)
    db.session.delete(homeowner)
    db.session.commit()
    current_app.logger.info("Deleted homeowner %s", homeowner_id)
    return success(None, "Homeowner deleted successfully")
