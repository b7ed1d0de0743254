from datetime import date

import pytest
from flask_jwt_extended import create_access_token

from futura_backend import create_app
from futura_backend.config import TestingConfig
from futura_backend.extensions import db
from futura_backend.models import (
    Appointment,
    Contract,
    Homeowner,
    Property,
    User,
)
from futura_backend.security import ROLES


class RecordingRedis:
    """Stands in for the Redis client; keeps every published message."""

    def __init__(self, receivers=1, error=None):
        self.published = []
        self.receivers = receivers
        self.error = error

    def publish(self, channel, message):
        if self.error is not None:
            raise self.error
        self.published.append((channel, message))
        return self.receivers


@pytest.fixture
def app(tmp_path):
    config = type("Config", (TestingConfig,), {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
    })
    app = create_app(config)
    with app.app_context():
        db.create_all()
        for role in ROLES:
            user = User(email=f"{role.replace(' ', '.')}@example.com", full_name=role.title(), role=role)
            user.set_password("secret123")
            db.session.add(user)
        db.session.commit()

    app.extensions["broadcaster"].client = RecordingRedis()
    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def redis_client(app):
    return app.extensions["broadcaster"].client


@pytest.fixture
def headers_for(app):
    """``headers_for("admin")`` -> Authorization header for that role's user."""
    def build(role):
        with app.app_context():
            user = User.query.filter_by(role=role).first()
            token = create_access_token(identity=str(user.id), additional_claims={"role": role})
        return {"Authorization": f"Bearer {token}"}
    return build


@pytest.fixture
def admin_headers(headers_for):
    return headers_for("admin")


@pytest.fixture
def sample_property(app):
    with app.app_context():
        prop = Property(property_title="Azalea Model", lot_number="B2-L7", price=2500000)
        db.session.add(prop)
        db.session.commit()
        return prop.id


@pytest.fixture
def homeowner_contract(app, sample_property):
    """A contract owned by the homeowner test user."""
    with app.app_context():
        owner = User.query.filter_by(role="homeowner").first()
        contract = Contract(
            contract_number="CTS-2026-00001",
            client_name="Maria Santos",
            client_email="maria@example.com",
            user_id=owner.id,
            property_id=sample_property,
            total_amount=2500000,
        )
        db.session.add(contract)
        db.session.commit()
        return contract.id


@pytest.fixture
def sample_homeowner(app, sample_property):
    with app.app_context():
        homeowner = Homeowner(
            full_name="Jose Rizal",
            email="jose@example.com",
            unit_number="A-12",
            property_id=sample_property,
            move_in_date=date(2026, 3, 1),
        )
        db.session.add(homeowner)
        db.session.commit()
        return homeowner.id


@pytest.fixture
def make_appointment(app, sample_property):
    def build(status="pending"):
        with app.app_context():
            appointment = Appointment(
                property_id=sample_property,
                property_title="Azalea Model",
                client_name="Ana Cruz",
                client_email="ana@example.com",
                appointment_date=date(2026, 11, 5),
                appointment_time="10:00",
                status=status,
            )
            db.session.add(appointment)
            db.session.commit()
            return appointment.id
    return build
