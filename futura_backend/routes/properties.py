from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, request

from ..errors import failure, missing_fields, success
from ..extensions import db
from ..models import (
    Announcement, Appointment, Complaint, Contract, Homeowner, Inquiry, Property, PropertyType,
    Reservation, ServiceRequest,
)
from ..security import ADMIN, SALES, roles_required

properties_bp = Blueprint("properties", __name__)


# ============= PROPERTY TYPES =============

def _clean_specifications(specs):
    """Drop rows with a blank name or value and trim the rest."""
    cleaned = []
    for spec in specs or []:
        name = str(spec.get("name") or "").strip()
        value = str(spec.get("value") or "").strip()
        if name and value:
            cleaned.append({"name": name, "type": spec.get("type") or "text", "value": value})
    return cleaned


def _name_taken(name, exclude_id=None):
    query = PropertyType.query.filter(PropertyType.property_name == name)
    if exclude_id is not None:
        query = query.filter(PropertyType.id != exclude_id)
    return db.session.query(query.exists()).scalar()


@properties_bp.get("/property-types")
def list_property_types():
    types = PropertyType.query.order_by(PropertyType.property_name.asc()).all()
    return success([t.serialize() for t in types])


@properties_bp.post("/property-types")
@roles_required(ADMIN)
def create_property_type():
    data = request.get_json(silent=True) or {}
    name = (data.get("property_name") or "").strip()
    if not name:
        return failure("validation_error", 400, message="Please enter a property name")
    if _name_taken(name):
        return failure("duplicate", 409, message=f'Property name "{name}" already exists!')

    property_type = PropertyType(
        property_name=name,
        property_area=_clean_specifications(data.get("specifications") or data.get("property_area")),
    )
    db.session.add(property_type)
    db.session.commit()
    current_app.logger.info("Created property type %s", name)
    return success(property_type.serialize(), "Property detail added successfully!", 201)


@properties_bp.put("/property-types/<int:type_id>")
@roles_required(ADMIN)
def update_property_type(type_id):
    property_type = db.get_or_404(PropertyType, type_id)
    data = request.get_json(silent=True) or {}
    name = (data.get("property_name") or "").strip()
    if not name:
        return failure("validation_error", 400, message="Please enter a property name")
    if _name_taken(name, exclude_id=type_id):
        return failure("duplicate", 409, message=f'Property name "{name}" already exists!')

    property_type.property_name = name
    if "specifications" in data or "property_area" in data:
        property_type.property_area = _clean_specifications(
            data.get("specifications") or data.get("property_area")
        )
    db.session.commit()
    return success(property_type.serialize(), "Property detail updated successfully!")


@properties_bp.delete("/property-types/<int:type_id>")
@roles_required(ADMIN)
def delete_property_type(type_id):
    property_type = db.get_or_404(PropertyType, type_id)
    if property_type.properties:
        return failure("in_use", 409, message="Property type is assigned to existing properties")
    db.session.delete(property_type)
    db.session.commit()
    return success(None, "Property detail deleted successfully!")


# ============= PROPERTIES =============

# records that keep a property_id reference
PROPERTY_REFERENCES = (
    (Appointment, "tour bookings"),
    (Reservation, "reservations"),
    (Contract, "contracts"),
    (Homeowner, "homeowners"),
    (Complaint, "complaints"),
    (ServiceRequest, "service requests"),
    (Inquiry, "inquiries"),
    (Announcement, "announcements"),
)


def _property_in_use(property_id):
    return [label for model, label in PROPERTY_REFERENCES
            if db.session.query(model.query.filter_by(property_id=property_id).exists()).scalar()]


def _apply_property(prop, data):
    for field in ("property_title", "lot_number", "location", "property_type_id"):
        if field in data:
            setattr(prop, field, data[field])
    if "price" in data:
        prop.price = Decimal(str(data["price"])) if data["price"] not in (None, "") else None
    if "status" in data:
        if data["status"] not in Property.STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(Property.STATUSES)}")
        prop.status = data["status"]


@properties_bp.get("/properties")
def list_properties():
    query = Property.query
    status = request.args.get("status")
    if status and status != "all":
        query = query.filter(Property.status == status)
    props = query.order_by(Property.created_at.desc()).all()
    return success([p.serialize() for p in props])


@properties_bp.get("/properties/<int:property_id>")
def get_property(property_id):
    return success(db.get_or_404(Property, property_id).serialize())


@properties_bp.post("/properties")
@roles_required(ADMIN, SALES)
def create_property():
    data = request.get_json(silent=True) or {}
    if missing_fields(data, ("property_title",)):
        return failure("validation_error", 400, message="property_title is required")

    prop = Property()
    try:
        _apply_property(prop, data)
    except (ValueError, InvalidOperation) as e:
        return failure("validation_error", 400, message=str(e))
    db.session.add(prop)
    db.session.commit()
    return success(prop.serialize(), "Property created successfully", 201)


@properties_bp.put("/properties/<int:property_id>")
@roles_required(ADMIN, SALES)
def update_property(property_id):
    prop = db.get_or_404(Property, property_id)
    try:
        _apply_property(prop, request.get_json(silent=True) or {})
    except (ValueError, InvalidOperation) as e:
        return failure("validation_error", 400, message=str(e))
    db.session.commit()
    return success(prop.serialize(), "Property updated successfully")


@properties_bp.delete("/properties/<int:property_id>")
@roles_required(ADMIN)
def delete_property(property_id):
    prop = db.get_or_404(Property, property_id)
    used_by = _property_in_use(property_id)
    if used_by:
        return failure("in_use", 409, message=f"Property is referenced by existing {', '.join(used_by)}")
    db.session.delete(prop)
    db.session.commit()
    return success(None, "Property deleted successfully")
