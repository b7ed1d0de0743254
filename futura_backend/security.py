# futura_backend/security.py
from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

ADMIN = "admin"
CUSTOMER_SERVICE = "customer service"
SALES = "sales representative"
COLLECTION = "collection"
HOMEOWNER = "homeowner"
CLIENT = "client"

ROLES = (ADMIN, CUSTOMER_SERVICE, SALES, COLLECTION, HOMEOWNER, CLIENT)
STAFF_ROLES = (ADMIN, CUSTOMER_SERVICE, SALES, COLLECTION)


def normalize_role(role):
    return (role or "").strip().lower()


def current_role():
    return normalize_role(get_jwt().get("role"))


def current_user_id():
    identity = get_jwt_identity()
    return int(identity) if identity is not None else None


def roles_required(*allowed):
    """Usage: @roles_required("admin", "customer service")"""
    allowed = {normalize_role(r) for r in allowed}

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if current_role() not in allowed:
                return jsonify({"success": False, "error": "forbidden"}), 403
            return fn(*args, **kwargs)
        return wrapper
    return deco


def staff_required(fn):
    return roles_required(*STAFF_ROLES)(fn)
