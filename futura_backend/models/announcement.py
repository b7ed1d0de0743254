from datetime import datetime

from ..extensions import db


class Announcement(db.Model):
    __tablename__ = "announcements"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(500), nullable=True)
    category = db.Column(db.String(50), default="general", index=True)
    priority = db.Column(db.String(20), default="normal")  # low, normal, high, urgent
    target_audience = db.Column(db.String(50), default="all_homeowners")
    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=True)
    author = db.Column(db.String(200), default="Admin")
    author_role = db.Column(db.String(50), default="admin")
    status = db.Column(db.String(20), default="draft", index=True)  # draft, published, archived
    is_pinned = db.Column(db.Boolean, default=False)
    publish_date = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    STATUSES = ("draft", "published", "archived")

    def __repr__(self):
        return f"<Announcement {self.id}: {self.title}>"

    def publish(self):
        self.status = "published"
        self.publish_date = datetime.utcnow()

    def serialize(self):
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "image_url": self.image_url,
            "category": self.category,
            "priority": self.priority,
            "target_audience": self.target_audience,
            "property_id": self.property_id,
            "author": self.author,
            "author_role": self.author_role,
            "status": self.status,
            "is_pinned": bool(self.is_pinned),
            "publish_date": self.publish_date.isoformat() if self.publish_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
