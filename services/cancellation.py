from datetime import datetime, timedelta

from models.booking import Booking, CANCELLABLE_STATUSES
from models.slot import Slot
from services.errors import BookingError, InvalidRequest, Conflict

CANCEL_LEAD_TIME_HOURS = 2


def _utcnow():
    return datetime.utcnow()


def check_cancellable(booking, now=None, lead_time_hours=CANCEL_LEAD_TIME_HOURS):
    if booking.status not in CANCELLABLE_STATUSES:
        raise InvalidRequest("Booking not cancellable")

    now = now or _utcnow()
    if booking.slot.start_time - now < timedelta(hours=lead_time_hours):
        raise InvalidRequest(f"Cannot cancel booking within {lead_time_hours} hours of appointment")


def cancel_booking(session, booking, reason=None, now=None, lead_time_hours=CANCEL_LEAD_TIME_HOURS):
    """
    Cancel ``booking`` and free its window.

    The window row is kept (is_booked cleared) so the history stays readable.
    Both writes commit together or not at all.
    """
    now = now or _utcnow()
    check_cancellable(booking, now=now, lead_time_hours=lead_time_hours)

    try:
        updated = (
            session.query(Booking)
            .filter(Booking.id == booking.id, Booking.status.in_(CANCELLABLE_STATUSES))
            .update(
                {
                    Booking.status: "cancelled",
                    Booking.cancelled_at: now,
                    Booking.cancel_reason: reason,
                    Booking.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        if updated != 1:
            raise Conflict("Booking was already cancelled")

        session.query(Slot).filter(Slot.id == booking.slot_id).update(
            {Slot.is_booked: False}, synchronize_session=False
        )
        session.commit()
    except BookingError:
        session.rollback()
        raise

    session.refresh(booking)
    return booking
