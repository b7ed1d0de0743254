from flask import Blueprint, current_app, request

from ..errors import failure, missing_fields, success
from ..extensions import db
from ..models import Announcement
from ..security import ADMIN, CUSTOMER_SERVICE, current_role, roles_required
from ..services import notifications

announcements_bp = Blueprint("announcements", __name__)

_EDITABLE = (
    "title", "content", "image_url", "category", "priority",
    "target_audience", "property_id", "author", "is_pinned",
)


def _published_notice(announcement):
    notifications.notify(notifications.announcement_published(announcement.title),
                         source_record_id=announcement.id)


@announcements_bp.get("/homeowner-announcements")
def list_homeowner_announcements():
    query = Announcement.query
    status = request.args.get("status")
    category = request.args.get("category")
    if status:
        query = query.filter(Announcement.status == status)
    if category:
        query = query.filter(Announcement.category == category)
    rows = query.order_by(Announcement.created_at.desc(), Announcement.id.desc()).all()
    return success([a.serialize() for a in rows])


@announcements_bp.get("/announcements")
def list_published_announcements():
    """Homeowner-facing feed: published only, pinned first."""
    query = Announcement.query.filter(Announcement.status == "published")
    category = request.args.get("category")
    if category and category != "all":
        query = query.filter(Announcement.category == category)
    rows = query.order_by(Announcement.is_pinned.desc(), Announcement.publish_date.desc()).all()
    return success([a.serialize() for a in rows])


@announcements_bp.post("/homeowner-announcements")
@roles_required(ADMIN, CUSTOMER_SERVICE)
def create_announcement():
    data = request.get_json(silent=True) or {}
    if missing_fields(data, ("title", "content", "image_url")):
        return failure("validation_error", 400, message="Title, content, and image are required")

    status = data.get("status") or "draft"
    if status not in Announcement.STATUSES:
        return failure("validation_error", 400,
                       message=f"Invalid status. Must be one of: {', '.join(Announcement.STATUSES)}")

    announcement = Announcement(
        title=data["title"],
        content=data["content"],
        image_url=data["image_url"],
        category=data.get("category") or "general",
        priority=data.get("priority") or "normal",
        target_audience=data.get("target_audience") or "all_homeowners",
        property_id=data.get("property_id") or None,
        author=data.get("author") or "Admin",
        author_role=data.get("author_role") or current_role() or "admin",
        status="draft",
        is_pinned=bool(data.get("is_pinned", False)),
    )
    if status == "published":
        announcement.publish()
    else:
        announcement.status = status

    db.session.add(announcement)
    db.session.commit()
    current_app.logger.info("Announcement %s created (%s)", announcement.id, announcement.status)

    if announcement.status == "published":
        _published_notice(announcement)
    return success(announcement.serialize(), "Announcement created successfully", 201)


@announcements_bp.put("/homeowner-announcements")
@roles_required(ADMIN, CUSTOMER_SERVICE)
def update_announcement():
    data = request.get_json(silent=True) or {}
    if not data.get("id"):
        return failure("validation_error", 400, message="Announcement ID is required")

    announcement = db.get_or_404(Announcement, data["id"])
    for field in _EDITABLE:
        if field in data:
            setattr(announcement, field, data[field])

    newly_published = False
    status = data.get("status")
    if status:
        if status not in Announcement.STATUSES:
            return failure("validation_error", 400,
                           message=f"Invalid status. Must be one of: {', '.join(Announcement.STATUSES)}")
        if status == "published":
            newly_published = announcement.status != "published"
            announcement.publish()
        else:
            announcement.status = status

    db.session.commit()
    if newly_published:
        _published_notice(announcement)
    return success(announcement.serialize(), "Announcement updated successfully")


@announcements_bp.delete("/homeowner-announcements")
@roles_required(ADMIN, CUSTOMER_SERVICE)
def delete_announcement():
    announcement_id = request.args.get("id", type=int)
    if not announcement_id:
        return failure("validation_error", 400, message="Announcement ID is required")
    announcement = db.get_or_404(Announcement, announcement_id)
    db.session.delete(announcement)
    db.session.commit()
    return success(None, "Announcement deleted successfully")
