from datetime import datetime

from sqlalchemy import or_

from models.barber import Barber
from models.slot import Slot


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    # half-open: [a_start, a_end) and [b_start, b_end)
    return a_start < b_end and b_start < a_end


def active_windows_query(session, barber_id: int, start: datetime, end: datetime):
    """Booked or blocked windows of the barber that overlap [start, end)."""
    return (
        session.query(Slot)
        .filter(
            Slot.barber_id == barber_id,
            or_(Slot.is_booked.is_(True), Slot.is_blocked.is_(True)),
            Slot.start_time < end,
            Slot.end_time > start,
        )
    )


def find_conflict(session, barber_id: int, start: datetime, end: datetime, exclude_slot_id=None):
    """
    First active window overlapping [start, end), or None.

    Always hits storage; callers rely on this running inside the same transaction
    as the write that follows it.
    """
    q = active_windows_query(session, barber_id, start, end)
    if exclude_slot_id is not None:
        q = q.filter(Slot.id != exclude_slot_id)
    return q.order_by(Slot.start_time.asc()).first()


def lock_barber(session, barber_id):
    """
    Load the barber row FOR UPDATE; writes to one barber's calendar queue here.

    SQLite ignores FOR UPDATE, so a no-op UPDATE takes the database write lock
    first. Concurrent bookings then wait instead of checking against stale rows.
    """
    if session.get_bind().dialect.name == "sqlite":
        (
            session.query(Barber)
            .filter(Barber.id == barber_id)
            .update({Barber.id: Barber.id}, synchronize_session=False)
        )
    return (
        session.query(Barber)
        .filter(Barber.id == barber_id)
        .with_for_update()
        .first()
    )
