# futura_backend/errors.py
from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException


def success(data=None, message=None, status=200, **extra):
    """Build the {success, data, message} envelope every endpoint answers with."""
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    body.update(extra)
    return jsonify(body), status


def failure(error, status=400, message=None, **extra):
    body = {"success": False, "error": error}
    if message:
        body["message"] = message
    body.update(extra)
    return jsonify(body), status


def missing_fields(data, fields):
    """Return the first required field that is absent or blank, or None."""
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            return field
    return None


def non_text_field(data, fields):
    """Return the first field that is present but not a string, or None."""
    for field in fields:
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            return field
    return None


def register_error_handlers(app):
    @app.errorhandler(400)
    def bad_request(e):
        return failure("bad_request", 400, message=getattr(e, "description", None))

    @app.errorhandler(401)
    def unauthorized(e):
        return failure("unauthorized", 401)

    @app.errorhandler(403)
    def forbidden(e):
        return failure("forbidden", 403)

    @app.errorhandler(404)
    def not_found(e):
        return failure("not_found", 404, path=request.path)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return failure("method_not_allowed", 405)

    @app.errorhandler(409)
    def conflict(e):
        return failure("conflict", 409, message=getattr(e, "description", None))

    @app.errorhandler(422)
    def unprocessable(e):
        return failure("unprocessable", 422)

    @app.errorhandler(500)
    def server_error(e):
        current_app.logger.exception("Unhandled exception: %s", e)
        return failure("server_error", 500)

    @app.errorhandler(Exception)
    def unhandled(e):
        if isinstance(e, HTTPException):
            return e
        current_app.logger.exception("Unhandled exception: %s", e)
        return failure("server_error", 500, message=str(e))
