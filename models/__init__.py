from .db import db
from .user import User, Role, user_roles
from .audit_log import AuditLog
from .session import Session
from .barbershop import Barbershop
from .barber import Barber, barber_services
from .service import Service
from .slot import Slot
from .booking import Booking
from .booking_service import BookingService
