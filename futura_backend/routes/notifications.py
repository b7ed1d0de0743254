from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required
from redis.exceptions import RedisError
from sqlalchemy import and_, or_

from ..errors import failure, success
from ..extensions import db
from ..models import Notification
from ..security import ADMIN, current_role, current_user_id, roles_required
from ..services.notifications import create_notification

notifications_bp = Blueprint("notifications", __name__)

DEFAULT_LIMIT = 50


def visible_to(query, user_id=None, role=None):
    """Restrict ``query`` to what ``user_id`` and/or ``role`` may see.

    With both: rows addressed to the user, to the role, or to ``all``.
    With only a role: rows for the role or ``all``. With only a user: rows
    addressed to that user.
    """
    if user_id and role:
        return query.filter(or_(
            Notification.recipient_id == user_id,
            Notification.recipient_role == role,
            Notification.recipient_role == "all",
        ))
    if role:
        return query.filter(
            Notification.recipient_role.isnot(None),
            Notification.recipient_role.in_((role, "all")),
        )
    if user_id:
        return query.filter(Notification.recipient_id == user_id)
    return query


def inbox_of(user_id, role):
    """Rows addressed to ``user_id`` plus unaddressed rows for ``role`` or ``all``."""
    return or_(
        Notification.recipient_id == user_id,
        and_(Notification.recipient_id.is_(None), Notification.recipient_role.in_((role, "all"))),
    )


def _owns(notification, user_id, role):
    if notification.recipient_id is not None:
        return notification.recipient_id == user_id
    return notification.recipient_role in (role, "all")


@notifications_bp.get("/notifications")
@jwt_required()
def list_notifications():
    args = request.args
    query = Notification.query.filter(Notification.status != "archived")
    if current_role() == ADMIN:
        query = visible_to(query, args.get("userId", type=int), args.get("role"))
    else:
        # everyone but admin is pinned to their own inbox
        query = query.filter(inbox_of(current_user_id(), current_role()))

    if args.get("status"):
        query = query.filter(Notification.status == args["status"])
    if args.get("priority"):
        query = query.filter(Notification.priority == args["priority"])
    limit = args.get("limit", DEFAULT_LIMIT, type=int)
    rows = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()
    return success(
        [n.serialize() for n in rows],
        count=len(rows),
        unreadCount=sum(1 for n in rows if n.status == "unread"),
    )


@notifications_bp.post("/notifications")
@roles_required(ADMIN)
def create_manual_notification():
    data = request.get_json(silent=True) or {}
    if not data.get("title") or not data.get("message"):
        return failure("Title and message are required", 400)
    if data.get("priority", "normal") not in Notification.PRIORITIES:
        return failure("validation_error", 400,
                       message=f"Invalid priority. Must be one of: {', '.join(Notification.PRIORITIES)}")

    ok, result = create_notification(
        type=data.get("notification_type") or "manual",
        title=data["title"],
        message=data["message"],
        icon=data.get("icon") or "📢",
        priority=data.get("priority") or "normal",
        recipient_role=data.get("recipient_role") or ADMIN,
        recipient_id=data.get("recipient_id"),
        data=data.get("data"),
        action_url=data.get("action_url"),
        source_table=data.get("source_table") or "manual",
        source_table_display_name=data.get("source_table_display_name") or "Manual Notification",
        source_record_id=data.get("source_record_id"),
    )
    if not ok:
        return failure("server_error", 500, message=result)
    return success(result[0].serialize(), "Notification created successfully", 201)


@notifications_bp.patch("/notifications/<int:notification_id>")
@jwt_required()
def update_notification(notification_id):
    notification = db.get_or_404(Notification, notification_id)
    if current_role() != ADMIN and not _owns(notification, current_user_id(), current_role()):
        return failure("forbidden", 403)

    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if status not in Notification.STATUSES:
        return failure("validation_error", 400,
                       message=f"Invalid status. Must be one of: {', '.join(Notification.STATUSES)}")
    notification.mark(status)
    db.session.commit()
    return success(notification.serialize(), "Notification updated")


@notifications_bp.post("/notifications/read-all")
@jwt_required()
def mark_all_read():
    rows = Notification.query.filter(
        Notification.status == "unread", inbox_of(current_user_id(), current_role()),
    ).all()
    for notification in rows:
        notification.mark("read")
    db.session.commit()
    current_app.logger.info("Marked %d notifications read for user %s", len(rows), current_user_id())
    return success({"updated": len(rows)}, "All notifications marked as read")


@notifications_bp.post("/notifications/broadcast")
@jwt_required()
def broadcast():
    """Relay ``{type, payload}`` to live subscribers."""
    data = request.get_json(silent=True) or {}
    event, payload = data.get("type"), data.get("payload")
    if not event or not payload:
        return failure("Missing type or payload", 400)

    try:
        receivers = current_app.extensions["broadcaster"].publish(event, payload)
    except RedisError as e:
        current_app.logger.error("Broadcast error: %s", e)
        return failure("Failed to broadcast notification", 500)
    return success({"receivers": receivers})
