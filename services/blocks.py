from sqlalchemy.exc import IntegrityError

from models.slot import Slot
from services.conflicts import find_conflict, lock_barber
from services.errors import InvalidRequest, Conflict


def block_window(session, barber, start, end, reason=None):
    """Take [start, end) off the barber's calendar."""
    if end <= start:
        raise InvalidRequest("endTime must be after startTime")

    lock_barber(session, barber.id)
    if find_conflict(session, barber.id, start, end):
        session.rollback()
        raise Conflict("Time range overlaps an existing booking or block")

    slot = Slot(
        barber_id=barber.id,
        start_time=start,
        end_time=end,
        is_booked=False,
        is_blocked=True,
        block_reason=reason,
    )
    session.add(slot)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Time range overlaps an existing booking or block")
    return slot


def unblock_window(session, slot):
    if not slot.is_blocked:
        raise InvalidRequest("Only blocked slots can be removed; cancel the booking instead")

    session.delete(slot)
    session.commit()
