from futura_backend.extensions import db

# Core Models
from .user import User
from .property import Property, PropertyType
from .homeowner import Homeowner
from .contract import Contract
from .billing import Billing
from .transaction import Transaction
from .payment_schedule import PaymentSchedule
from .reservation import Reservation

# Front-office records
from .complaint import Complaint
from .service_request import ServiceRequest
from .inquiry import Inquiry
from .announcement import Announcement
from .appointment import Appointment
from .notification import Notification
