import re
from datetime import datetime, timedelta

from futura_backend.extensions import db
from futura_backend.models import Notification, Reservation, Transaction
from futura_backend.routes.reservations import receipt_number, tracking_number


def _payment(app, contract_id, when, amount=5000, **kw):
    with app.app_context():
        transaction = Transaction(contract_id=contract_id, amount=amount, payment_method="cash",
                                  payment_status=kw.pop("payment_status", "completed"),
                                  transaction_date=when, **kw)
        db.session.add(transaction)
        db.session.commit()
        return transaction.transaction_id


# ---------------- walk-in payments ----------------

def test_record_payment_generates_or_number(app, client, headers_for, homeowner_contract):
    headers = headers_for("collection")
    first = client.post("/api/transactions", json={
        "contract_id": homeowner_contract, "amount": 12500, "payment_method": "cash",
    }, headers=headers)
    second = client.post("/api/transactions", json={
        "contract_id": homeowner_contract, "amount": 300, "payment_method": "gcash",
    }, headers=headers)
    assert first.status_code == 201
    today = datetime.utcnow().strftime("%Y%m%d")
    assert first.get_json()["data"]["or_number"] == f"OR-{today}-0001"
    assert second.get_json()["data"]["or_number"] == f"OR-{today}-0002"
    assert first.get_json()["data"]["property_contracts"]["contract_number"] == "CTS-2026-00001"

    with app.app_context():
        note = Notification.query.filter_by(notification_type="payment_received").first()
        assert "PHP 12,500.00" in note.message


def test_record_payment_validation(client, headers_for, homeowner_contract):
    headers = headers_for("collection")
    missing = client.post("/api/transactions", json={"contract_id": homeowner_contract, "amount": 10},
                          headers=headers)
    assert missing.status_code == 400
    bad_method = client.post("/api/transactions", json={
        "contract_id": homeowner_contract, "amount": 10, "payment_method": "barter",
    }, headers=headers)
    assert bad_method.status_code == 400
    negative = client.post("/api/transactions", json={
        "contract_id": homeowner_contract, "amount": -5, "payment_method": "cash",
    }, headers=headers)
    assert negative.status_code == 400


# ---------------- receipts ----------------

def test_single_receipt(app, client, headers_for, homeowner_contract):
    transaction_id = _payment(app, homeowner_contract, datetime(2026, 10, 1, 9, 30), or_number="OR-1")
    resp = client.get(f"/api/transactions/receipt?transaction_id={transaction_id}",
                      headers=headers_for("collection"))
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["type"] == "single"
    assert body["data"]["property_contracts"]["client_name"] == "Maria Santos"


def test_single_receipt_not_found(client, headers_for):
    resp = client.get("/api/transactions/receipt?transaction_id=missing", headers=headers_for("admin"))
    assert resp.status_code == 404


def test_range_receipt_includes_end_date(app, client, headers_for, homeowner_contract):
    _payment(app, homeowner_contract, datetime(2026, 9, 30, 23, 0))
    inside = _payment(app, homeowner_contract, datetime(2026, 10, 1, 8, 0))
    last_day = _payment(app, homeowner_contract, datetime(2026, 10, 15, 22, 45))
    _payment(app, homeowner_contract, datetime(2026, 10, 16, 0, 5))

    resp = client.get("/api/transactions/receipt?start_date=2026-10-01&end_date=2026-10-15",
                      headers=headers_for("collection"))
    body = resp.get_json()
    assert body["type"] == "range"
    assert body["startDate"] == "2026-10-01"
    assert [t["transaction_id"] for t in body["data"]] == [last_day, inside]


def test_receipt_needs_parameters(client, headers_for):
    resp = client.get("/api/transactions/receipt", headers=headers_for("collection"))
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_receipt_pdf_download(app, client, headers_for, homeowner_contract):
    transaction_id = _payment(app, homeowner_contract, datetime(2026, 10, 1), or_number="OR-20261001-0001",
                              notes="Partial payment")
    resp = client.get(f"/api/transactions/{transaction_id}/receipt.pdf", headers=headers_for("collection"))
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data.startswith(b"%PDF")
    assert "Receipt_OR-20261001-0001.pdf" in resp.headers["Content-Disposition"]


def test_receipt_html(app, client, headers_for, homeowner_contract):
    transaction_id = _payment(app, homeowner_contract, datetime(2026, 10, 1), amount=1234.5)
    resp = client.get(f"/api/transactions/{transaction_id}/receipt.html", headers=headers_for("collection"))
    html = resp.get_data(as_text=True)
    assert resp.status_code == 200
    assert "FUTURA HOMES" in html
    assert "PHP 1,234.50" in html
    assert "Oct 1, 2026, 12:00 AM" in html
    assert "Maria Santos" in html


def test_contract_transactions_total(app, client, headers_for, homeowner_contract):
    _payment(app, homeowner_contract, datetime(2026, 10, 1), amount=1000)
    _payment(app, homeowner_contract, datetime(2026, 10, 2), amount=250, payment_status="pending")
    body = client.get(f"/api/contracts/{homeowner_contract}/transactions",
                      headers=headers_for("collection")).get_json()
    assert len(body["data"]) == 2
    assert body["total_paid"] == 1000.0


# ---------------- reservations ----------------

def test_number_formats():
    assert re.fullmatch(r"RES-20261019-[A-Z0-9]{6}", tracking_number(datetime(2026, 10, 19)))
    assert receipt_number("3f2a9c1e-0000-4000-8000-000000000000", datetime(2026, 1, 2)) == "RCT-2026-3F2A9C1E"


def _reserve(client, property_id, **overrides):
    payload = {"property_id": property_id, "client_name": "Ana Cruz",
               "client_email": "ana@example.com", "reservation_fee": 20000}
    payload.update(overrides)
    return client.post("/api/property-reservation", json=payload)


def test_reservation_approval_creates_fee_transaction(app, client, headers_for, sample_property):
    reservation = _reserve(client, sample_property).get_json()["data"]
    assert reservation["status"] == "pending"
    assert reservation["tracking_number"].startswith("RES-")

    resp = client.post("/api/property-reservation/approve",
                       json={"reservation_id": reservation["reservation_id"]},
                       headers=headers_for("sales representative"))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["reservation"]["status"] == "approved"
    fee = data["transaction"]
    assert fee["transaction_type"] == "reservation_fee"
    assert fee["payment_status"] == "pending"
    assert fee["amount"] == 20000.0
    assert fee["receipt_number"] == receipt_number(reservation["reservation_id"])
    due = datetime.fromisoformat(fee["due_date"])
    assert timedelta(days=6, hours=23) < due - datetime.utcnow() <= timedelta(days=7)


def test_reservation_approval_survives_transaction_failure(app, client, headers_for, sample_property,
                                                           monkeypatch):
    from futura_backend.routes import reservations as module

    reservation_id = _reserve(client, sample_property).get_json()["data"]["reservation_id"]

    def fee_without_amount(**kw):
        kw["amount"] = None
        return Transaction(**kw)

    monkeypatch.setattr(module, "Transaction", fee_without_amount)
    resp = client.post("/api/property-reservation/approve", json={"reservation_id": reservation_id},
                       headers=headers_for("admin"))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["transaction"] is None
    with app.app_context():
        assert db.session.get(Reservation, reservation_id).status == "approved"
        assert Transaction.query.count() == 0


def test_reject_and_revert(app, client, headers_for, sample_property):
    headers = headers_for("sales representative")
    reservation_id = _reserve(client, sample_property).get_json()["data"]["reservation_id"]

    rejected = client.post("/api/property-reservation/reject",
                           json={"reservation_id": reservation_id, "notes": "Incomplete documents"},
                           headers=headers)
    assert rejected.get_json()["data"]["status"] == "rejected"

    again = client.post("/api/property-reservation/approve", json={"reservation_id": reservation_id},
                        headers=headers)
    assert again.status_code == 409

    reverted = client.post("/api/property-reservation/revert", json={"reservation_id": reservation_id},
                           headers=headers)
    assert reverted.get_json()["data"]["status"] == "pending"


def test_revert_removes_unpaid_fee(app, client, headers_for, sample_property):
    headers = headers_for("admin")
    reservation_id = _reserve(client, sample_property).get_json()["data"]["reservation_id"]
    client.post("/api/property-reservation/approve", json={"reservation_id": reservation_id}, headers=headers)
    client.post("/api/property-reservation/revert", json={"reservation_id": reservation_id}, headers=headers)
    with app.app_context():
        assert Transaction.query.filter_by(reservation_id=reservation_id).count() == 0


def test_revert_pending_is_refused(client, headers_for, sample_property):
    reservation_id = _reserve(client, sample_property).get_json()["data"]["reservation_id"]
    resp = client.post("/api/property-reservation/revert", json={"reservation_id": reservation_id},
                       headers=headers_for("admin"))
    assert resp.status_code == 400
