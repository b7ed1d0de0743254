# futura_backend/routes/auth.py
from datetime import datetime

from flask import Blueprint, current_app, request
from flask_jwt_extended import create_access_token, jwt_required

from ..errors import failure, success
from ..extensions import db
from ..models import User
from ..security import ROLES, current_user_id

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/auth/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        return failure("validation_error", 400, message="email and password required")

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        current_app.logger.warning("Failed login for %s", email)
        return failure("invalid_credentials", 401, message="Invalid email or password")
    if not user.is_active:
        return failure("account_disabled", 403, message="Account is disabled")

    user.last_login = datetime.utcnow()
    db.session.commit()

    token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
    current_app.logger.info("User %s logged in as %s", user.id, user.role)
    return success({"access_token": token, "user": user.serialize()})


@auth_bp.get("/auth/me")
@jwt_required()
def me():
    user = db.get_or_404(User, current_user_id())
    return success(user.serialize())


@auth_bp.get("/roles")
def list_roles():
    return success([{"name": role} for role in ROLES])
