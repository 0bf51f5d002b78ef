from .health import health_bp
from .timeslots import timeslot_bp
from .bookings import booking_bp
from .catalog import catalog_bp
