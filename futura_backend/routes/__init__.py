from .announcements import announcements_bp
from .appointments import appointments_bp
from .auth import auth_bp
from .billing import billing_bp
from .complaints import complaints_bp
from .contracts import contracts_bp
from .homeowners import homeowners_bp
from .inquiries import inquiries_bp
from .notifications import notifications_bp
from .properties import properties_bp
from .reports import reports_bp
from .reservations import reservations_bp
from .service_requests import service_requests_bp
from .transactions import transactions_bp
from .users import users_bp

__all__ = [
    "announcements_bp", "appointments_bp", "auth_bp", "billing_bp", "complaints_bp",
    "contracts_bp", "homeowners_bp", "inquiries_bp", "notifications_bp", "properties_bp",
    "reports_bp", "reservations_bp", "service_requests_bp", "transactions_bp", "users_bp",
]
