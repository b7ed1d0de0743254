from datetime import datetime

from ..extensions import db
from ..utils.formatting import is_new_item, relative_time


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    notification_type = db.Column(db.String(50), nullable=False, default="manual")
    source_table = db.Column(db.String(80), default="system")
    source_table_display_name = db.Column(db.String(120), default="System")
    source_record_id = db.Column(db.String(64), nullable=True)

    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    icon = db.Column(db.String(16), default="📢")
    priority = db.Column(db.String(20), default="normal")  # urgent, high, normal, low
    status = db.Column(db.String(20), default="unread", index=True)  # unread, read, archived

    recipient_role = db.Column(db.String(50), nullable=True, index=True)  # a role name or "all"
    recipient_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    data = db.Column(db.JSON, default=dict)
    action_url = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    read_at = db.Column(db.DateTime, nullable=True)

    STATUSES = ("unread", "read", "archived")
    PRIORITIES = ("urgent", "high", "normal", "low")

    def __repr__(self):
        return f"<Notification {self.id}: {self.title!r} -> {self.recipient_role}/{self.recipient_id}>"

    def mark(self, status):
        self.status = status
        self.read_at = datetime.utcnow() if status == "read" else self.read_at

    def serialize(self):
        return {
            "id": self.id,
            "notification_type": self.notification_type,
            "source_table": self.source_table,
            "source_table_display_name": self.source_table_display_name,
            "source_record_id": self.source_record_id,
            "title": self.title,
            "message": self.message,
            "icon": self.icon,
            "priority": self.priority,
            "status": self.status,
            "recipient_role": self.recipient_role,
            "recipient_id": self.recipient_id,
            "data": self.data or {},
            "action_url": self.action_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "time_ago": relative_time(self.created_at),
            "is_new": is_new_item(self.created_at),
        }
