from flask import Blueprint, current_app, request
from sqlalchemy.exc import IntegrityError

from ..errors import failure, success
from ..extensions import db
from ..models import User
from ..security import ADMIN, ROLES, normalize_role, roles_required

users_bp = Blueprint("users", __name__)


@users_bp.get("/users")
@roles_required(ADMIN)
def list_users():
    query = User.query
    role = request.args.get("role")
    if role:
        query = query.filter(User.role == normalize_role(role))
    users = query.order_by(User.id.asc()).all()
    return success([u.serialize() for u in users])


@users_bp.post("/users")
@roles_required(ADMIN)
def create_user():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    role = normalize_role(data.get("role") or "client")

    if not email or not password:
        return failure("validation_error", 400, message="email and password required")
    if role not in ROLES:
        return failure("validation_error", 400, message=f"Invalid role. Must be one of: {', '.join(ROLES)}")

    user = User(
        email=email,
        full_name=data.get("full_name"),
        phone=data.get("phone"),
        role=role,
        is_active=bool(data.get("is_active", True)),
    )
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return failure("conflict", 409, message="email already exists")

    current_app.logger.info("Created user %s (%s)", user.id, user.role)
    return success(user.serialize(), "User created successfully", 201)


@users_bp.put("/users/<int:user_id>")
@roles_required(ADMIN)
def update_user(user_id: int):
    user = db.get_or_404(User, user_id)
    data = request.get_json(silent=True) or {}

    if "email" in data:
        new_email = (data.get("email") or "").strip().lower()
        if not new_email:
            return failure("validation_error", 400, message="email cannot be empty")
        user.email = new_email

    if data.get("password"):
        user.set_password(data["password"])

    if data.get("role"):
        role = normalize_role(data["role"])
        if role not in ROLES:
            return failure("validation_error", 400, message=f"Invalid role. Must be one of: {', '.join(ROLES)}")
        user.role = role

    for field in ("full_name", "phone"):
        if field in data:
            setattr(user, field, data[field])

    if "is_active" in data:
        user.is_active = bool(data["is_active"])

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return failure("conflict", 409, message="email already exists")

    return success(user.serialize(), "User updated successfully")


@users_bp.delete("/users/<int:user_id>")
@roles_required(ADMIN)
def delete_user(user_id: int):
    user = db.get_or_404(User, user_id)
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("Deleted user %s", user_id)
    return success(None, "User deleted successfully")
