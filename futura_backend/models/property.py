from datetime import datetime

from ..extensions import db


class PropertyType(db.Model):
    """Catalog entry describing a house model and its area specifications."""

    __tablename__ = "property_types"

    id = db.Column(db.Integer, primary_key=True)
    property_name = db.Column(db.String(255), unique=True, nullable=False, index=True)
    # list of {"name", "type", "value"} specification rows
    property_area = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    properties = db.relationship("Property", backref="property_type", lazy=True)

    def __repr__(self):
        return f"<PropertyType {self.id}: {self.property_name}>"

    def serialize(self):
        return {
            "id": self.id,
            "property_name": self.property_name,
            "property_area": self.property_area or [],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Property(db.Model):
    __tablename__ = "properties"

    id = db.Column(db.Integer, primary_key=True)
    property_title = db.Column(db.String(255), nullable=False)
    property_type_id = db.Column(db.Integer, db.ForeignKey("property_types.id"), nullable=True)
    lot_number = db.Column(db.String(50), nullable=True)
    location = db.Column(db.String(512), nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=True)
    status = db.Column(db.String(20), default="available", index=True)  # available, reserved, sold
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    STATUSES = ("available", "reserved", "sold")

    def __repr__(self):
        return f"<Property {self.id}: {self.property_title}>"

    def serialize(self):
        return {
            "id": self.id,
            "property_title": self.property_title,
            "property_type_id": self.property_type_id,
            "property_type": self.property_type.property_name if self.property_type else None,
            "lot_number": self.lot_number,
            "location": self.location,
            "price": float(self.price) if self.price is not None else None,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
