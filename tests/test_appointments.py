import json
from types import SimpleNamespace

import pytest

from futura_backend.extensions import db
from futura_backend.models import Appointment, Notification
from futura_backend.services import approval


def _status(app, appointment_id):
    with app.app_context():
        return db.session.get(Appointment, appointment_id).status


# ---------------- state machine ----------------

@pytest.mark.parametrize("status,role,expected", [
    ("pending", "customer service", "cs_approved"),
    ("pending", "admin", "cs_approved"),
    ("cs_approved", "sales representative", "sales_approved"),
    ("cs_approved", "admin", "sales_approved"),
])
def test_next_approval_status(status, role, expected):
    assert approval.next_approval_status(status, role) == expected


@pytest.mark.parametrize("status,role", [
    ("pending", "sales representative"),
    ("cs_approved", "customer service"),
    ("sales_approved", "admin"),
    ("rejected", "admin"),
])
def test_next_approval_status_refuses_wrong_stage(status, role):
    with pytest.raises(approval.InvalidTransition):
        approval.next_approval_status(status, role)


def test_next_approval_status_refuses_non_approver_roles():
    with pytest.raises(approval.ApprovalForbidden):
        approval.next_approval_status("pending", "collection")


# ---------------- book tour ----------------

def test_book_tour_creates_pending_appointment(app, client, sample_property):
    resp = client.post("/api/book-tour", json={
        "property_id": sample_property,
        "client_name": "Ana Cruz",
        "client_email": "  Ana.Cruz@Example.COM ",
        "appointment_date": "2026-11-05",
        "appointment_time": "10:00",
    })
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["status"] == "pending"
    assert body["data"]["client_email"] == "ana.cruz@example.com"
    assert body["data"]["property_title"] == "Azalea Model"

    with app.app_context():
        note = Notification.query.filter_by(notification_type="tour_booked").one()
        assert note.recipient_role == "sales representative"


def test_book_tour_requires_fields(client, sample_property):
    resp = client.post("/api/book-tour", json={"property_id": sample_property, "client_name": "Ana"})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


@pytest.mark.parametrize("field,value", [
    ("client_name", 42),
    ("client_email", ["ana@example.com"]),
    ("client_phone", {"mobile": "0917"}),
])
def test_book_tour_rejects_non_text_fields(app, client, sample_property, field, value):
    payload = {
        "property_id": sample_property, "client_name": "Ana Cruz", "client_email": "ana@example.com",
        "appointment_date": "2026-11-05", "appointment_time": "10:00",
    }
    payload[field] = value
    resp = client.post("/api/book-tour", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == f"{field} must be text"
    with app.app_context():
        assert Appointment.query.count() == 0


# ---------------- approve ----------------

def test_cs_approval_moves_pending_to_cs_approved(app, client, headers_for, make_appointment):
    appointment_id = make_appointment()
    resp = client.post("/api/book-tour/approve",
                       json={"appointment_id": appointment_id, "approval_notes": "Looks good"},
                       headers=headers_for("customer service"))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["data"]["status"] == "cs_approved"
    assert body["data"]["cs_approval_notes"] == "Looks good"
    assert body["data"]["cs_approved_by"] is not None
    assert body["data"]["sales_approved_by"] is None
    assert "Awaiting Sales Representative" in body["message"]


def test_cs_approval_never_reaches_sales_approved(app, client, headers_for, make_appointment):
    appointment_id = make_appointment()
    headers = headers_for("customer service")
    client.post("/api/book-tour/approve", json={"appointment_id": appointment_id}, headers=headers)
    resp = client.post("/api/book-tour/approve", json={"appointment_id": appointment_id}, headers=headers)
    assert resp.status_code == 409
    assert _status(app, appointment_id) == "cs_approved"


def test_sales_approval_after_cs(app, client, headers_for, make_appointment):
    appointment_id = make_appointment("cs_approved")
    resp = client.post("/api/book-tour/approve", json={"appointment_id": appointment_id},
                       headers=headers_for("sales representative"))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "sales_approved"
    assert resp.get_json()["data"]["sales_approved_at"] is not None


def test_sales_cannot_approve_pending(app, client, headers_for, make_appointment):
    appointment_id = make_appointment()
    resp = client.post("/api/book-tour/approve", json={"appointment_id": appointment_id},
                       headers=headers_for("sales representative"))
    assert resp.status_code == 409
    assert _status(app, appointment_id) == "pending"


def test_collection_role_cannot_approve(app, client, headers_for, make_appointment):
    appointment_id = make_appointment()
    resp = client.post("/api/book-tour/approve", json={"appointment_id": appointment_id},
                       headers=headers_for("collection"))
    assert resp.status_code == 403


def test_homeowner_is_forbidden(client, headers_for, make_appointment):
    appointment_id = make_appointment()
    resp = client.post("/api/book-tour/approve", json={"appointment_id": appointment_id},
                       headers=headers_for("homeowner"))
    assert resp.status_code == 403


def test_approve_unknown_appointment(client, admin_headers):
    resp = client.post("/api/book-tour/approve", json={"appointment_id": 9999}, headers=admin_headers)
    assert resp.status_code == 404


def test_stale_read_fails_compare_and_set(app, client, headers_for, make_appointment, monkeypatch):
    appointment_id = make_appointment("cs_approved")
    # another reviewer already moved it on; this request still sees "pending"
    monkeypatch.setattr(approval, "_load", lambda _id: SimpleNamespace(status="pending"))

    resp = client.post("/api/book-tour/approve", json={"appointment_id": appointment_id},
                       headers=headers_for("customer service"))
    assert resp.status_code == 409
    with app.app_context():
        appointment = db.session.get(Appointment, appointment_id)
        assert appointment.status == "cs_approved"
        assert appointment.cs_approved_by is None


# ---------------- reject ----------------

@pytest.mark.parametrize("reason", ["", "   ", None])
def test_reject_requires_reason_before_lookup(client, admin_headers, reason):
    resp = client.post("/api/book-tour/reject",
                       json={"appointment_id": 9999, "rejection_reason": reason},
                       headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Rejection reason is required"


def test_reject_requires_reason_in_service():
    with pytest.raises(approval.ApprovalError) as exc:
        approval.reject(1, 1, "admin", "  ")
    assert exc.value.status_code == 400


@pytest.mark.parametrize("status,role", [
    ("pending", "customer service"),
    ("pending", "admin"),
    ("cs_approved", "sales representative"),
    ("sales_approved", "admin"),
])
def test_reject_allowed(app, client, headers_for, make_appointment, status, role):
    appointment_id = make_appointment(status)
    resp = client.post("/api/book-tour/reject",
                       json={"appointment_id": appointment_id, "rejection_reason": "Unit no longer available"},
                       headers=headers_for(role))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "rejected"
    assert data["rejection_reason"] == "Unit no longer available"
    assert data["rejected_at"] is not None


@pytest.mark.parametrize("status,role", [
    ("pending", "sales representative"),
    ("cs_approved", "customer service"),
    ("sales_approved", "sales representative"),
    ("rejected", "admin"),
])
def test_reject_refused(app, client, headers_for, make_appointment, status, role):
    appointment_id = make_appointment(status)
    resp = client.post("/api/book-tour/reject",
                       json={"appointment_id": appointment_id, "rejection_reason": "No"},
                       headers=headers_for(role))
    assert resp.status_code == 409
    assert _status(app, appointment_id) == status


def test_reject_notifies_sales(app, client, admin_headers, make_appointment):
    appointment_id = make_appointment()
    client.post("/api/book-tour/reject",
                json={"appointment_id": appointment_id, "rejection_reason": "Double booked"},
                headers=admin_headers)
    with app.app_context():
        note = Notification.query.filter_by(notification_type="tour_rejected").one()
        assert note.data["reason"] == "Double booked"
        assert note.source_record_id == str(appointment_id)


# ---------------- administrative status ----------------

def test_admin_can_confirm(app, client, admin_headers, make_appointment):
    appointment_id = make_appointment("sales_approved")
    resp = client.patch(f"/api/book-tour/{appointment_id}/status", json={"status": "confirmed"},
                        headers=admin_headers)
    assert resp.status_code == 200
    assert _status(app, appointment_id) == "confirmed"


def test_administrative_status_must_be_known(client, admin_headers, make_appointment):
    appointment_id = make_appointment()
    resp = client.patch(f"/api/book-tour/{appointment_id}/status", json={"status": "sales_approved"},
                        headers=admin_headers)
    assert resp.status_code == 400


def test_rejected_is_terminal_for_admin_edits(app, client, admin_headers, make_appointment):
    appointment_id = make_appointment("rejected")
    resp = client.patch(f"/api/book-tour/{appointment_id}/status", json={"status": "completed"},
                        headers=admin_headers)
    assert resp.status_code == 409
    assert _status(app, appointment_id) == "rejected"


def test_administrative_edit_is_admin_only(client, headers_for, make_appointment):
    appointment_id = make_appointment()
    resp = client.patch(f"/api/book-tour/{appointment_id}/status", json={"status": "cancelled"},
                        headers=headers_for("customer service"))
    assert resp.status_code == 403


# ---------------- listing ----------------

def test_list_filters_by_status(client, headers_for, make_appointment):
    make_appointment()
    make_appointment("cs_approved")
    resp = client.get("/api/book-tour?status=cs_approved", headers=headers_for("sales representative"))
    body = resp.get_json()
    assert resp.status_code == 200
    assert [a["status"] for a in body["data"]] == ["cs_approved"]


def test_client_only_sees_own_appointments(client, headers_for, make_appointment):
    make_appointment()
    resp = client.get("/api/book-tour", headers=headers_for("client"))
    assert resp.status_code == 200
    assert resp.get_json()["data"] == []
    assert json.loads(resp.data)["total"] == 0


def test_non_text_notes_and_reason_are_rejected(app, client, headers_for, make_appointment):
    appointment_id = make_appointment()
    headers = headers_for("customer service")

    approve = client.post("/api/book-tour/approve",
                          json={"appointment_id": appointment_id, "approval_notes": 123}, headers=headers)
    assert approve.status_code == 400
    reject = client.post("/api/book-tour/reject",
                         json={"appointment_id": appointment_id, "rejection_reason": {"why": "x"}}, headers=headers)
    assert reject.status_code == 400
    assert _status(app, appointment_id) == "pending"


def test_service_stores_notes_as_text(app, make_appointment):
    appointment_id = make_appointment()
    with app.app_context():
        appointment, _ = approval.approve(appointment_id, 1, "admin", 2026)
        assert appointment.cs_approval_notes == "2026"
