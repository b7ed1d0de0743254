from datetime import date
from decimal import Decimal

import pytest

from futura_backend.extensions import db
from futura_backend.models import Contract, Notification, PaymentSchedule, Reservation, Transaction, User
from futura_backend.services import contracts as contract_service

SIGNED = date(2026, 1, 15)


@pytest.fixture
def make_reservation(app, sample_property):
    def build(status="approved", tracking="RES-20260115-ABC123"):
        with app.app_context():
            owner = User.query.filter_by(role="homeowner").first()
            reservation = Reservation(
                tracking_number=tracking,
                property_id=sample_property,
                property_title="Azalea Model",
                user_id=owner.id,
                client_name="Maria Santos",
                client_email="maria@example.com",
                reservation_fee=20000,
                status=status,
            )
            db.session.add(reservation)
            db.session.commit()
            return reservation.reservation_id
    return build


@pytest.fixture
def signed_contract(app, make_reservation):
    """Twelve month plan signed on 2026-01-15; first installment due 2026-02-15."""
    reservation_id = make_reservation()
    with app.app_context():
        contract = contract_service.create_contract_from_reservation(reservation_id, 12, today=SIGNED)
        return contract.id


def _schedule_ids(app, contract_id):
    with app.app_context():
        return [s.id for s in db.session.get(Contract, contract_id).schedules]


# ---------------- terms and plan ----------------

def test_contract_terms():
    terms = contract_service.contract_terms(2500000, 20000, 12)
    assert terms["downpayment_total"] == Decimal("250000.00")
    assert terms["remaining_downpayment"] == Decimal("230000.00")
    assert terms["monthly_installment"] == Decimal("19166.66")
    assert terms["bank_financing_amount"] == Decimal("2250000.00")


def test_reservation_fee_above_downpayment_leaves_nothing_to_schedule():
    terms = contract_service.contract_terms(100000, 20000, 6)
    assert terms["remaining_downpayment"] == Decimal("0.00")
    assert contract_service.installment_plan(terms["remaining_downpayment"], 6, date(2026, 2, 1)) == []


def test_installment_plan_last_payment_absorbs_rounding():
    plan = contract_service.installment_plan(Decimal("230000"), 12, date(2026, 1, 31))
    assert len(plan) == 12
    assert plan[0] == (1, Decimal("19166.66"), date(2026, 1, 31))
    assert plan[1][2] == date(2026, 2, 28)
    assert plan[-1][1] == Decimal("19166.74")
    assert sum(amount for _, amount, _ in plan) == Decimal("230000.00")


# ---------------- creation ----------------

def test_create_contract_from_reservation(app, client, headers_for, make_reservation):
    reservation_id = make_reservation()
    resp = client.post("/api/contracts/create",
                       json={"reservation_id": reservation_id, "payment_plan_months": 12},
                       headers=headers_for("sales representative"))
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    contract = data["contract"]
    assert contract["contract_number"].endswith("-20260115-ABC123")
    assert contract["reservation_id"] == reservation_id
    assert contract["remaining_downpayment"] == 230000.0
    assert contract["downpayment_status"] == "in_progress"
    assert contract["remaining_balance"] == 230000.0
    assert len(data["payment_schedules"]) == 12
    first = data["payment_schedules"][0]
    assert first["payment_status"] == "pending"
    assert first["scheduled_amount"] == 19166.66
    assert contract["first_installment_date"] == first["due_date"]


def test_signed_contract_dates(app, signed_contract):
    with app.app_context():
        contract = db.session.get(Contract, signed_contract)
        assert contract.contract_number == "CTS-2026-20260115-ABC123"
        assert contract.first_installment_date == date(2026, 2, 15)
        assert contract.final_installment_date == date(2027, 1, 15)
        assert contract.schedules[0].grace_period_end_date == date(2026, 2, 18)


def test_unapproved_reservation_is_refused(client, headers_for, make_reservation):
    reservation_id = make_reservation(status="pending")
    resp = client.post("/api/contracts/create",
                       json={"reservation_id": reservation_id, "payment_plan_months": 12},
                       headers=headers_for("admin"))
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Reservation not found or not approved"


def test_second_contract_for_reservation_conflicts(client, headers_for, make_reservation):
    reservation_id = make_reservation()
    body = {"reservation_id": reservation_id, "payment_plan_months": 6}
    assert client.post("/api/contracts/create", json=body, headers=headers_for("admin")).status_code == 201
    resp = client.post("/api/contracts/create", json=body, headers=headers_for("admin"))
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "conflict"


@pytest.mark.parametrize("months", [0, 61, "twelve"])
def test_plan_length_is_validated(client, headers_for, make_reservation, months):
    resp = client.post("/api/contracts/create",
                       json={"reservation_id": make_reservation(), "payment_plan_months": months},
                       headers=headers_for("admin"))
    assert resp.status_code == 400


def test_collection_cannot_create_contracts(client, headers_for, make_reservation):
    resp = client.post("/api/contracts/create",
                       json={"reservation_id": make_reservation(), "payment_plan_months": 12},
                       headers=headers_for("collection"))
    assert resp.status_code == 403


# ---------------- walk-in installment payments ----------------

def test_full_installment_payment(app, client, headers_for, signed_contract):
    schedule_id = _schedule_ids(app, signed_contract)[0]
    resp = client.post("/api/contracts/payment/walk-in",
                       json={"schedule_id": schedule_id, "amount_paid": 19166.66,
                             "payment_method": "cash", "payment_date": "2026-02-16"},
                       headers=headers_for("collection"))
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["schedule"]["payment_status"] == "paid"
    assert data["schedule"]["remaining_amount"] == 0.0
    assert data["transaction"]["penalty_paid"] == 0.0
    assert data["transaction"]["or_number"].startswith("OR-")
    assert data["contract"]["total_paid_amount"] == 19166.66
    assert data["contract"]["remaining_balance"] == 210833.34

    with app.app_context():
        note = Notification.query.filter_by(notification_type="payment_received").one()
        assert "CTS-2026-20260115-ABC123" in note.message


def test_partial_payment_and_minimum(app, client, headers_for, signed_contract):
    schedule_id = _schedule_ids(app, signed_contract)[0]
    headers = headers_for("collection")
    too_small = client.post("/api/contracts/payment/walk-in",
                            json={"schedule_id": schedule_id, "amount_paid": 1000,
                                  "payment_method": "cash", "payment_type": "partial"},
                            headers=headers)
    assert too_small.status_code == 400
    assert too_small.get_json()["message"] == "Minimum partial payment is 1916.67"

    resp = client.post("/api/contracts/payment/walk-in",
                       json={"schedule_id": schedule_id, "amount_paid": 5000,
                             "payment_method": "gcash", "payment_type": "partial",
                             "payment_date": "2026-02-10"},
                       headers=headers)
    assert resp.status_code == 201
    schedule = resp.get_json()["data"]["schedule"]
    assert schedule["payment_status"] == "partially_paid"
    assert schedule["remaining_amount"] == 14166.66


def test_overpayment_is_refused(app, client, headers_for, signed_contract):
    schedule_id = _schedule_ids(app, signed_contract)[0]
    resp = client.post("/api/contracts/payment/walk-in",
                       json={"schedule_id": schedule_id, "amount_paid": 20000, "payment_method": "cash"},
                       headers=headers_for("admin"))
    assert resp.status_code == 400
    with app.app_context():
        assert Transaction.query.count() == 0


def test_unknown_payment_method_is_refused(app, client, headers_for, signed_contract):
    schedule_id = _schedule_ids(app, signed_contract)[0]
    resp = client.post("/api/contracts/payment/walk-in",
                       json={"schedule_id": schedule_id, "amount_paid": 19166.66, "payment_method": "barter"},
                       headers=headers_for("admin"))
    assert resp.status_code == 400


def test_penalty_after_grace_period(app, client, headers_for, signed_contract):
    schedule_id = _schedule_ids(app, signed_contract)[0]
    headers = headers_for("collection")

    inside_grace = client.get("/api/contracts/payment/walk-in",
                              query_string={"schedule_id": schedule_id, "as_of": "2026-02-18"},
                              headers=headers).get_json()["data"]
    assert inside_grace["calculated_penalty"] == 0.0
    assert inside_grace["days_overdue_after_grace"] == 0

    late = client.get("/api/contracts/payment/walk-in",
                      query_string={"schedule_id": schedule_id, "as_of": "2026-02-25"},
                      headers=headers).get_json()["data"]
    assert late["days_overdue_after_grace"] == 7
    assert late["calculated_penalty"] == 134.17
    assert late["grace_period_end"] == "2026-02-18"

    resp = client.post("/api/contracts/payment/walk-in",
                       json={"schedule_id": schedule_id, "amount_paid": 19166.66,
                             "payment_method": "cash", "payment_date": "2026-02-25"},
                       headers=headers)
    data = resp.get_json()["data"]
    assert data["transaction"]["penalty_paid"] == 134.17
    assert data["schedule"]["penalty_amount"] == 134.17
    # penalty is on top of the installment, not against it
    assert data["contract"]["total_paid_amount"] == 19166.66


def test_installment_details_do_not_write(app, client, headers_for, signed_contract):
    schedule_id = _schedule_ids(app, signed_contract)[0]
    client.get("/api/contracts/payment/walk-in",
               query_string={"schedule_id": schedule_id, "as_of": "2026-06-01"},
               headers=headers_for("admin"))
    with app.app_context():
        assert db.session.get(PaymentSchedule, schedule_id).penalty_amount == 0


# ---------------- revert and history ----------------

def test_revert_paid_installment(app, client, headers_for, signed_contract):
    schedule_id = _schedule_ids(app, signed_contract)[0]
    headers = headers_for("collection")
    client.post("/api/contracts/payment/walk-in",
                json={"schedule_id": schedule_id, "amount_paid": 19166.66, "payment_method": "cash"},
                headers=headers)

    resp = client.post("/api/contracts/payment/revert", json={"schedule_id": schedule_id}, headers=headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["reverted_transactions"] == 1
    assert body["data"]["schedule"]["payment_status"] == "pending"
    assert body["data"]["schedule"]["remaining_amount"] == 19166.66
    assert body["data"]["contract"]["total_paid_amount"] == 0.0

    with app.app_context():
        transaction = Transaction.query.filter_by(schedule_id=schedule_id).one()
        assert transaction.payment_status == "reverted"
        assert "Payment reverted on" in transaction.notes

    again = client.post("/api/contracts/payment/revert", json={"schedule_id": schedule_id}, headers=headers)
    assert again.status_code == 400
    assert again.get_json()["message"] == "Payment schedule is not in paid status"


def test_paying_every_installment_completes_downpayment(app, make_reservation):
    reservation_id = make_reservation()
    with app.app_context():
        contract = contract_service.create_contract_from_reservation(reservation_id, 2, today=SIGNED)
        for schedule in list(contract.schedules):
            contract_service.record_payment(schedule.id, schedule.remaining_amount, "cash", "OR-1",
                                            today=SIGNED)
        contract = db.session.get(Contract, contract.id)
        assert contract.downpayment_status == "completed"
        assert contract.remaining_balance == 0
        assert contract.total_paid_amount == Decimal("230000.00")


def test_payment_history_summary(app, client, headers_for, signed_contract):
    first, second = _schedule_ids(app, signed_contract)[:2]
    headers = headers_for("collection")
    client.post("/api/contracts/payment/walk-in",
                json={"schedule_id": first, "amount_paid": 19166.66, "payment_method": "cash",
                      "payment_date": "2026-02-25"},
                headers=headers)
    client.post("/api/contracts/payment/walk-in",
                json={"schedule_id": second, "amount_paid": 19166.66, "payment_method": "gcash",
                      "payment_date": "2026-03-15"},
                headers=headers)
    client.post("/api/contracts/payment/revert", json={"schedule_id": second}, headers=headers)

    body = client.get("/api/contracts/payment/history", query_string={"contract_id": signed_contract},
                      headers=headers).get_json()
    summary = body["summary"]
    assert summary["total_transactions"] == 2
    assert summary["completed_count"] == 1
    assert summary["total_penalties_paid"] == 134.17
    assert summary["total_amount_paid"] == 19300.83
    assert summary["payment_methods"] == ["cash", "gcash"]

    by_schedule = client.get("/api/contracts/payment/history", query_string={"schedule_id": first},
                             headers=headers).get_json()
    assert len(by_schedule["data"]) == 1
    assert client.get("/api/contracts/payment/history", headers=headers).status_code == 400


# ---------------- lookup ----------------

def test_contract_by_reservation(app, client, headers_for, make_reservation, signed_contract):
    with app.app_context():
        reservation_id = db.session.get(Contract, signed_contract).reservation_id

    owner = client.get("/api/contracts/by-reservation", query_string={"reservation_id": reservation_id},
                       headers=headers_for("homeowner")).get_json()["data"]
    assert owner["contract"]["id"] == signed_contract
    assert len(owner["payment_schedules"]) == 12

    stranger = client.get("/api/contracts/by-reservation", query_string={"reservation_id": reservation_id},
                          headers=headers_for("client")).get_json()
    assert stranger["data"] is None

    missing = client.get("/api/contracts/by-reservation", query_string={"reservation_id": "nope"},
                         headers=headers_for("admin")).get_json()
    assert missing["success"] is True
    assert missing["data"] is None
    assert missing["message"] == "No contract found for this reservation"


def test_contract_details_include_schedule(client, headers_for, signed_contract):
    body = client.get(f"/api/contracts/{signed_contract}", headers=headers_for("admin")).get_json()
    assert len(body["payment_schedules"]) == 12
    assert body["data"]["payment_plan_months"] == 12
