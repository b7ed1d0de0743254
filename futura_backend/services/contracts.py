"""Contracts drawn from approved reservations and their downpayment schedules.

The buyer pays 10% of the property price as downpayment, less the
reservation fee already collected, spread over a monthly plan of 1 to 60
installments. The remaining 90% is financed by a bank and is not tracked
here.

An installment that is still open three days after its due date accrues a
penalty of 3% per month on its open amount, charged per day.
"""
import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_DOWN, Decimal

from dateutil.relativedelta import relativedelta

from ..extensions import db
from ..models import Contract, PaymentSchedule, Property, Reservation, Transaction

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DOWNPAYMENT_RATE = Decimal("0.10")
BANK_FINANCING_RATE = Decimal("0.90")
MIN_PLAN_MONTHS = 1
MAX_PLAN_MONTHS = 60
GRACE_DAYS = 3
PENALTY_RATE = Decimal("0.03")
MIN_PARTIAL_RATE = Decimal("0.10")
PAYMENT_TYPES = ("full", "partial", "monthly", "weekly", "daily")


class ContractError(Exception):
    status_code = 400
    error = "validation_error"


class ContractConflict(ContractError):
    status_code = 409
    error = "conflict"


class ContractNotFound(ContractError):
    status_code = 404
    error = "not_found"


def _money(value):
    return Decimal(str(value or 0)).quantize(CENT)


def contract_terms(price, reservation_fee, months):
    price = _money(price)
    reservation_fee = _money(reservation_fee)
    downpayment = (price * DOWNPAYMENT_RATE).quantize(CENT)
    remaining = max(downpayment - reservation_fee, Decimal("0.00"))
    return {
        "property_price": price,
        "downpayment_total": downpayment,
        "reservation_fee_paid": reservation_fee,
        "remaining_downpayment": remaining,
        "monthly_installment": (remaining / months).quantize(CENT, rounding=ROUND_DOWN),
        "bank_financing_amount": (price * BANK_FINANCING_RATE).quantize(CENT),
    }


def installment_plan(remaining, months, first_due):
    """``(number, amount, due_date)`` per month; the last one absorbs rounding."""
    remaining = _money(remaining)
    if remaining <= 0:
        return []
    monthly = (remaining / months).quantize(CENT, rounding=ROUND_DOWN)
    plan = []
    for number in range(1, months + 1):
        amount = monthly if number < months else remaining - monthly * (months - 1)
        plan.append((number, amount, first_due + relativedelta(months=number - 1)))
    return plan


def _plan_months(months):
    try:
        months = int(months)
    except (TypeError, ValueError):
        raise ContractError("Payment plan months must be a whole number")
    if not MIN_PLAN_MONTHS <= months <= MAX_PLAN_MONTHS:
        raise ContractError(
            f"Payment plan must be between {MIN_PLAN_MONTHS} and {MAX_PLAN_MONTHS} months"
        )
    return months


def create_contract_from_reservation(reservation_id, months, today=None):
    """Contract plus its installment rows for an approved reservation, in one commit."""
    months = _plan_months(months)
    reservation = db.session.get(Reservation, reservation_id)
    if reservation is None or reservation.status != "approved":
        raise ContractNotFound("Reservation not found or not approved")
    if Contract.query.filter_by(reservation_id=reservation_id).first():
        raise ContractConflict("A contract already exists for this reservation")

    prop = db.session.get(Property, reservation.property_id)
    if prop is None or prop.price is None:
        raise ContractError("Property price is not set")

    today = today or date.today()
    terms = contract_terms(prop.price, reservation.reservation_fee, months)
    plan = installment_plan(terms["remaining_downpayment"], months, today + relativedelta(months=1))

    contract = Contract(
        contract_number=f"CTS-{today.year}-{reservation.tracking_number.replace('RES-', '')}",
        reservation_id=reservation.reservation_id,
        client_name=reservation.client_name,
        client_email=reservation.client_email,
        client_phone=reservation.client_phone,
        user_id=reservation.user_id,
        property_id=reservation.property_id,
        total_amount=terms["property_price"],
        status="active",
        payment_plan_months=months,
        downpayment_status="in_progress" if plan else "completed",
        total_paid_amount=Decimal("0.00"),
        remaining_balance=terms["remaining_downpayment"],
        contract_signed_date=today,
        first_installment_date=plan[0][2] if plan else None,
        final_installment_date=plan[-1][2] if plan else None,
        **terms,
    )
    for number, amount, due in plan:
        contract.schedules.append(PaymentSchedule(
            installment_number=number,
            installment_description=f"Downpayment installment {number} of {months}",
            scheduled_amount=amount,
            paid_amount=Decimal("0.00"),
            remaining_amount=amount,
            due_date=due,
            grace_period_end_date=due + timedelta(days=GRACE_DAYS),
            payment_status="pending",
        ))
    db.session.add(contract)
    db.session.commit()
    logger.info("Contract %s created from reservation %s with %d installments",
                contract.contract_number, reservation.tracking_number, len(plan))
    return contract


def days_overdue(schedule, today=None):
    """Days past the grace period; zero while still inside it."""
    today = today or date.today()
    return max((today - schedule.due_date).days - GRACE_DAYS, 0)


def penalty_for(schedule, today=None):
    days = days_overdue(schedule, today)
    if days == 0 or schedule.payment_status == "paid":
        return Decimal("0.00")
    base = _money(schedule.remaining_amount or schedule.scheduled_amount)
    rate = Decimal(str(schedule.penalty_rate)) if schedule.penalty_rate is not None else PENALTY_RATE
    return (base * rate / 30 * days).quantize(CENT)


def load_schedule(schedule_id):
    schedule = db.session.get(PaymentSchedule, schedule_id)
    if schedule is None:
        raise ContractNotFound("Payment schedule not found")
    return schedule


def refresh_totals(contract):
    schedules = contract.schedules
    contract.total_paid_amount = sum((_money(s.paid_amount) for s in schedules), Decimal("0.00"))
    contract.remaining_balance = sum((_money(s.remaining_amount) for s in schedules), Decimal("0.00"))
    if schedules and all(s.payment_status == "paid" for s in schedules):
        contract.downpayment_status = "completed"
    else:
        contract.downpayment_status = "in_progress"


def record_payment(schedule_id, amount, payment_method, or_number, processed_by=None,
                   payment_type="full", notes=None, today=None):
    """Apply a walk-in payment to one installment and return the new transaction.

    The penalty due at payment time is collected on top of ``amount``.
    """
    schedule = load_schedule(schedule_id)
    if payment_type not in PAYMENT_TYPES:
        raise ContractError(f"Invalid payment type. Must be one of: {', '.join(PAYMENT_TYPES)}")

    amount = _money(amount)
    remaining = _money(schedule.remaining_amount)
    if remaining <= 0 or schedule.payment_status == "paid":
        raise ContractError("This installment is already paid")
    if amount <= 0:
        raise ContractError("Amount must be greater than zero")
    if amount > remaining:
        raise ContractError(f"Amount exceeds the remaining balance of {remaining}")

    contract = schedule.contract
    if amount < remaining:
        minimum = (_money(contract.monthly_installment or schedule.scheduled_amount)
                   * MIN_PARTIAL_RATE).quantize(CENT)
        if amount < minimum:
            raise ContractError(f"Minimum partial payment is {minimum}")

    penalty = penalty_for(schedule, today)
    now = datetime.utcnow()
    schedule.penalty_amount = penalty
    schedule.paid_amount = _money(schedule.paid_amount) + amount
    schedule.remaining_amount = remaining - amount
    if schedule.remaining_amount == 0:
        schedule.payment_status = "paid"
        schedule.paid_date = now
    else:
        schedule.payment_status = "partially_paid"

    transaction = Transaction(
        contract_id=contract.id,
        schedule_id=schedule.id,
        transaction_type="monthly_payment",
        amount=amount,
        penalty_paid=penalty,
        payment_method=payment_method,
        payment_status="completed",
        or_number=or_number,
        transaction_date=now,
        notes=notes,
        processed_by=processed_by,
    )
    db.session.add(transaction)
    refresh_totals(contract)
    db.session.commit()
    logger.info("Installment %s of %s: paid %s, penalty %s, status %s",
                schedule.installment_number, contract.contract_number,
                amount, penalty, schedule.payment_status)
    return transaction


def revert_payment(schedule_id):
    """Reopen a paid installment; returns how many transactions were reverted."""
    schedule = load_schedule(schedule_id)
    if schedule.payment_status != "paid":
        raise ContractError("Payment schedule is not in paid status")

    note = f"Payment reverted on {datetime.utcnow():%Y-%m-%d %H:%M} UTC"
    reverted = 0
    for transaction in schedule.transactions:
        if transaction.payment_status == "reverted":
            continue
        transaction.payment_status = "reverted"
        transaction.notes = f"{transaction.notes}\n{note}" if transaction.notes else note
        reverted += 1

    schedule.payment_status = "pending"
    schedule.paid_amount = Decimal("0.00")
    schedule.remaining_amount = schedule.scheduled_amount
    schedule.penalty_amount = Decimal("0.00")
    schedule.paid_date = None
    refresh_totals(schedule.contract)
    db.session.commit()
    logger.info("Reverted installment %s of %s (%d transactions)",
                schedule.installment_number, schedule.contract.contract_number, reverted)
    return reverted


def payment_summary(transactions):
    completed = [t for t in transactions if t.payment_status == "completed"]
    return {
        "total_transactions": len(transactions),
        "total_amount_paid": float(sum((_money(t.amount) + _money(t.penalty_paid) for t in completed),
                                       Decimal("0.00"))),
        "total_penalties_paid": float(sum((_money(t.penalty_paid) for t in completed), Decimal("0.00"))),
        "payment_methods": sorted({t.payment_method for t in transactions if t.payment_method}),
        "completed_count": len(completed),
        "pending_count": sum(1 for t in transactions if t.payment_status == "pending"),
    }
