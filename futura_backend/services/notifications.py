"""Notification rows for staff and homeowners, plus the event templates that fill them."""
import logging
from datetime import datetime

from sqlalchemy import func

from ..extensions import db
from ..models.notification import Notification
from ..models.user import User

logger = logging.getLogger(__name__)


def create_notification(type, title, message, icon="📢", priority="normal",
                        recipient_role="admin", recipient_id=None, recipient_ids=None,
                        data=None, action_url=None, source_table="system",
                        source_table_display_name="System", source_record_id=None):
    """Insert one notification per recipient.

    With ``recipient_ids`` one row is created per id; with ``recipient_id`` a
    single addressed row; otherwise one row addressed to ``recipient_role``.
    Returns ``(ok, rows_or_error)``; failures are logged and never raised.
    """
    payload = dict(data or {})
    payload["created_at"] = datetime.utcnow().isoformat()

    if recipient_ids:
        targets = list(recipient_ids)
    elif recipient_id is not None:
        targets = [recipient_id]
    else:
        targets = [None]

    rows = [
        Notification(
            notification_type=type,
            source_table=source_table,
            source_table_display_name=source_table_display_name,
            source_record_id=str(source_record_id) if source_record_id is not None else None,
            title=title,
            message=message,
            icon=icon,
            priority=priority,
            status="unread",
            recipient_role=recipient_role,
            recipient_id=target,
            data=payload,
            action_url=action_url,
        )
        for target in targets
    ]

    try:
        db.session.add_all(rows)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error("Notification error for %r: %s", title, e)
        return False, str(e)

    logger.info('Notification created: "%s" (%d recipient%s)', title, len(rows), "s" if len(rows) > 1 else "")
    return True, rows


def user_ids_by_role(role):
    """Ids of active users whose role matches ``role`` case-insensitively."""
    rows = (
        db.session.query(User.id)
        .filter(func.lower(User.role) == (role or "").strip().lower(), User.is_active.is_(True))
        .all()
    )
    return [r.id for r in rows]


def notify(template, **overrides):
    """Create a notification from a template dict; overrides win."""
    params = dict(template)
    params.update(overrides)
    return create_notification(**params)


def notify_roles(template, *roles):
    """Address a template to every active user holding any of ``roles``."""
    recipients = []
    for role in roles:
        recipients.extend(user_ids_by_role(role))
    if not recipients:
        logger.info("No recipients with roles %s for %s", roles, template.get("type"))
        return False, []
    return notify(template, recipient_ids=recipients)


# ---------------- Templates ----------------

def tour_booked(client_name, property_title, tour_date, tour_time=None, appointment_id=None, **extra):
    return {
        "type": "tour_booked",
        "title": "New Tour Booking",
        "message": f"{client_name} booked a tour for {property_title or 'a property'} on {tour_date}.",
        "icon": "🏠",
        "priority": "normal",
        "recipient_role": "sales representative",
        "source_table": "appointments",
        "source_table_display_name": "Tour Booking",
        "source_record_id": appointment_id,
        "action_url": "/reservations",
        "data": dict(extra, client_name=client_name, property_title=property_title,
                     tour_date=str(tour_date), tour_time=tour_time),
    }


def tour_approved(property_title, tour_date, stage, appointment_id=None):
    return {
        "type": "tour_approved",
        "title": "Tour Approved",
        "message": f"Tour booking for {property_title or 'a property'} on {tour_date} has been approved ({stage}).",
        "icon": "✅",
        "priority": "normal",
        "recipient_role": "sales representative",
        "source_table": "appointments",
        "source_table_display_name": "Tour Booking",
        "source_record_id": appointment_id,
        "action_url": "/reservations",
        "data": {"stage": stage},
    }


def tour_rejected(property_title, tour_date, reason, appointment_id=None):
    return {
        "type": "tour_rejected",
        "title": "Tour Rejected",
        "message": f"Tour booking for {property_title or 'a property'} on {tour_date} has been rejected.",
        "icon": "❌",
        "priority": "normal",
        "recipient_role": "sales representative",
        "source_table": "appointments",
        "source_table_display_name": "Tour Booking",
        "source_record_id": appointment_id,
        "action_url": "/reservations",
        "data": {"reason": reason},
    }


def complaint_filed(client_name, subject, complaint_type):
    return {
        "type": "complaint_filed",
        "title": "New Complaint Filed",
        "message": f"{client_name} filed a {complaint_type} complaint: {subject}",
        "icon": "⚠️",
        "priority": "high",
        "recipient_role": "admin",
        "source_table": "complaints",
        "source_table_display_name": "Complaint",
        "action_url": "/complaints",
        "data": {"subject": subject, "complaint_type": complaint_type},
    }


_COMPLAINT_STATUS_TEMPLATES = {
    "investigating": ("complaint_approved", "Complaint Under Investigation",
                      'Your complaint "{subject}" is now being investigated.', "🔍"),
    "resolved": ("complaint_resolved", "Complaint Resolved",
                 'Your complaint "{subject}" has been resolved.', "✅"),
    "closed": ("complaint_rejected", "Complaint Closed",
               'Your complaint "{subject}" has been closed.', "📁"),
    "escalated": ("complaint_escalated", "Complaint Escalated",
                  'Your complaint "{subject}" has been escalated to management.', "⏫"),
    "pending": ("complaint_reverted", "Complaint Status Updated",
                'Your complaint "{subject}" has been moved back to pending.', "🔄"),
}


def complaint_status_changed(status, subject):
    entry = _COMPLAINT_STATUS_TEMPLATES.get(status)
    if entry is None:
        return None
    type_, title, message, icon = entry
    return {
        "type": type_,
        "title": title,
        "message": message.format(subject=subject),
        "icon": icon,
        "priority": "normal",
        "recipient_role": "homeowner",
        "source_table": "complaints",
        "source_table_display_name": "Complaint",
        "action_url": "/client-complaints",
        "data": {"subject": subject, "status": status},
    }


def service_request_created(client_name, title, request_type):
    return {
        "type": "service_request_created",
        "title": "New Service Request",
        "message": f"{client_name} submitted a {request_type} request: {title}",
        "icon": "🔧",
        "priority": "normal",
        "recipient_role": "admin",
        "source_table": "service_requests",
        "source_table_display_name": "Service Request",
        "action_url": "/service-requests",
        "data": {"title": title, "request_type": request_type},
    }


_SERVICE_REQUEST_STATUS_TEMPLATES = {
    "approved": ("service_request_approved", "Service Request Approved",
                 'Your service request "{title}" has been approved.', "✅"),
    "in_progress": ("service_request_approved", "Service Request In Progress",
                    'Work on your service request "{title}" is in progress.', "🛠️"),
    "completed": ("service_request_completed", "Service Request Completed",
                  'Your service request "{title}" has been completed.', "🎉"),
    "declined": ("service_request_declined", "Service Request Declined",
                 'Your service request "{title}" was declined.', "❌"),
    "cancelled": ("service_request_declined", "Service Request Cancelled",
                  'Your service request "{title}" was cancelled.', "❌"),
    "pending": ("service_request_reverted", "Service Request Status Updated",
                'Your service request "{title}" has been moved back to pending.', "🔄"),
}


def service_request_status_changed(status, title):
    entry = _SERVICE_REQUEST_STATUS_TEMPLATES.get(status)
    if entry is None:
        return None
    type_, heading, message, icon = entry
    return {
        "type": type_,
        "title": heading,
        "message": message.format(title=title),
        "icon": icon,
        "priority": "normal",
        "recipient_role": "homeowner",
        "source_table": "service_requests",
        "source_table_display_name": "Service Request",
        "action_url": "/client-requests",
        "data": {"title": title, "status": status},
    }


def inquiry_received(client_name, client_email, property_title=None, inquiry_id=None):
    return {
        "type": "inquiry_received",
        "title": "New Property Inquiry",
        "message": f"{client_name} ({client_email}) sent an inquiry about {property_title or 'a property'}.",
        "icon": "❓",
        "priority": "normal",
        "recipient_role": "sales representative",
        "source_table": "client_inquiries",
        "source_table_display_name": "Client Inquiry",
        "source_record_id": inquiry_id,
        "action_url": "/client-inquiries",
        "data": {"client_name": client_name, "client_email": client_email},
    }


def reservation_submitted(client_name, property_title, tracking_number):
    return {
        "type": "reservation_submitted",
        "title": "New Property Reservation",
        "message": f"{client_name} submitted a reservation for {property_title or 'a property'}. Tracking: {tracking_number}",
        "icon": "📅",
        "priority": "high",
        "recipient_role": "sales representative",
        "source_table": "property_reservations",
        "source_table_display_name": "Property Reservation",
        "action_url": "/client-reservation",
        "data": {"tracking_number": tracking_number},
    }


def reservation_decided(status, tracking_number, property_title, notes=None):
    if status == "approved":
        title = "🎉 Reservation Approved!"
        message = (f"Congratulations! Your reservation ({tracking_number}) for {property_title} has been "
                   "approved. Our team will contact you shortly with next steps.")
        priority = "urgent"
    elif status == "rejected":
        title = "Reservation Update"
        tail = f"Reason: {notes}" if notes else "Please contact us for more information."
        message = f"Your reservation ({tracking_number}) for {property_title} was not approved. {tail}"
        priority = "high"
    else:
        title = "🔄 Reservation Status Updated"
        message = (f"Your reservation ({tracking_number}) for {property_title} has been reverted back to "
                   "pending status. Our team will review it again and contact you shortly.")
        priority = "high"
    return {
        "type": f"reservation_{'reverted' if status == 'pending' else status}",
        "title": title,
        "message": message,
        "icon": "📅",
        "priority": priority,
        "recipient_role": "client",
        "source_table": "property_reservations",
        "source_table_display_name": "Property Reservation",
        "action_url": "/client-reservation",
        "data": {"tracking_number": tracking_number, "status": status},
    }


def announcement_published(title):
    return {
        "type": "announcement_published",
        "title": "New Announcement Published",
        "message": f'"{title}" has been published to all homeowners.',
        "icon": "📢",
        "priority": "normal",
        "recipient_role": "homeowner",
        "source_table": "announcements",
        "source_table_display_name": "Announcement",
        "action_url": "/announcements",
        "data": {"title": title},
    }


def payment_received(amount, contract_number, or_number):
    return {
        "type": "payment_received",
        "title": "Payment Received",
        "message": f"PHP {float(amount):,.2f} payment received for {contract_number}. OR#: {or_number}",
        "icon": "💰",
        "priority": "normal",
        "recipient_role": "collection",
        "source_table": "payment_transactions",
        "source_table_display_name": "Payment",
        "action_url": "/transactions",
        "data": {"contract_number": contract_number, "or_number": or_number},
    }
