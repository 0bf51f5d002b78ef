import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to this file as barberslot.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "barberslot.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer sessions: 8 hours absolute, no idle timeout by default
    SESSION_LIFETIME_SECONDS = int(os.getenv("SESSION_LIFETIME_SECONDS", str(8 * 60 * 60)))
    IDLE_TIMEOUT_SECONDS = int(os.getenv("IDLE_TIMEOUT_SECONDS", "0"))

    # Availability: fixed slot grain
    SLOT_DURATION_MINUTES = int(os.getenv("SLOT_DURATION_MINUTES", "60"))

    # Cancellation policy
    CANCEL_LEAD_TIME_HOURS = int(os.getenv("CANCEL_LEAD_TIME_HOURS", "2"))

    # Unauthenticated POST /api/bookings
    ALLOW_GUEST_BOOKINGS = _env_bool("ALLOW_GUEST_BOOKINGS")

    # Booking listing pagination
    BOOKINGS_PAGE_SIZE = 10
    BOOKINGS_MAX_PAGE_SIZE = 100

    # create_all() at startup (tests, throwaway SQLite); use `flask db upgrade` otherwise
    CREATE_TABLES_ON_STARTUP = _env_bool("CREATE_TABLES_ON_STARTUP")

    # Basic app settings
    DEBUG = False
