from datetime import datetime

from sqlalchemy.exc import IntegrityError

from models.booking import Booking, BOOKING_STATUSES
from models.booking_service import BookingService
from models.service import Service
from models.slot import Slot
from services.conflicts import find_conflict, lock_barber
from services.errors import BookingError, NotFound, InvalidRequest, Conflict

SLOT_UNAVAILABLE = "Selected time slot is not available"


def _utcnow():
    return datetime.utcnow()


def window_minutes(start: datetime, end: datetime) -> int:
    return round((end - start).total_seconds() / 60)


def _resolve_window(session, barber, start_time, end_time, slot_id):
    """Returns (start, end, reusable_slot). Raises NotFound / Conflict."""
    if slot_id is not None:
        slot = session.get(Slot, slot_id)
        if not slot or slot.barber_id != barber.id:
            raise NotFound("Slot not found")
        if slot.is_booked or slot.is_blocked:
            raise Conflict(SLOT_UNAVAILABLE)
        if find_conflict(session, barber.id, slot.start_time, slot.end_time, exclude_slot_id=slot.id):
            raise Conflict(SLOT_UNAVAILABLE)
        return slot.start_time, slot.end_time, slot

    if find_conflict(session, barber.id, start_time, end_time):
        raise Conflict(SLOT_UNAVAILABLE)
    return start_time, end_time, None


def _load_services(session, barber, service_ids):
    wanted = list(dict.fromkeys(service_ids))
    rows = (
        session.query(Service)
        .filter(
            Service.id.in_(wanted),
            Service.barbershop_id == barber.barbershop_id,
            Service.is_active.is_(True),
        )
        .all()
    )
    if len(rows) != len(wanted):
        raise NotFound("Some services not found")

    by_id = {s.id: s for s in rows}
    return [by_id[i] for i in wanted]


def _reserve_slot(session, barber, start, end, reusable_slot):
    if reusable_slot is None:
        slot = Slot(barber_id=barber.id, start_time=start, end_time=end, is_booked=True, is_blocked=False)
        session.add(slot)
        session.flush()
        return slot

    # compare-and-set: only a still-free window flips to booked
    updated = (
        session.query(Slot)
        .filter(Slot.id == reusable_slot.id, Slot.is_booked.is_(False), Slot.is_blocked.is_(False))
        .update({Slot.is_booked: True}, synchronize_session=False)
    )
    if updated != 1:
        raise Conflict(SLOT_UNAVAILABLE)
    session.refresh(reusable_slot)
    return reusable_slot


def create_booking(
    session,
    barber_id,
    service_ids,
    phone,
    start_time=None,
    end_time=None,
    slot_id=None,
    notes=None,
    user_id=None,
    status="confirmed",
    now=None,
):
    """
    Validate and record a booking in one transaction.

    Checks run in a fixed order and stop at the first failure: barber exists,
    window is free, services exist in the barber's shop, barber can do them all,
    their total duration fits the window. Windows that already started are
    refused whichever way they were picked. Prices and durations are copied onto
    line items so later catalog edits don't change the booking.

    Any uniqueness violation from a concurrent booking surfaces as Conflict.
    """
    if not service_ids:
        raise InvalidRequest("At least one service is required")
    if slot_id is None:
        if start_time is None or end_time is None:
            raise InvalidRequest("startTime and endTime (or slotId) are required")
        if end_time <= start_time:
            raise InvalidRequest("endTime must be after startTime")
    if status not in BOOKING_STATUSES or status == "cancelled":
        raise InvalidRequest("Invalid initial status")

    try:
        barber = lock_barber(session, barber_id)
        if not barber or not barber.is_active:
            raise NotFound("Barber not found")

        start, end, reusable_slot = _resolve_window(session, barber, start_time, end_time, slot_id)
        if start <= (now or _utcnow()):
            raise InvalidRequest("Cannot book past/started slots")

        services = _load_services(session, barber, service_ids)

        capable = {s.id for s in barber.services}
        if any(s.id not in capable for s in services):
            raise InvalidRequest("Barber cannot perform all selected services")

        total_price = sum(s.price for s in services)
        total_duration = sum(s.duration_min for s in services)
        if window_minutes(start, end) < total_duration:
            raise InvalidRequest("Slot duration is insufficient for selected services")

        slot = _reserve_slot(session, barber, start, end, reusable_slot)

        booking = Booking(
            user_id=user_id,
            barber_id=barber.id,
            barbershop_id=barber.barbershop_id,
            slot_id=slot.id,
            total_price=total_price,
            total_duration=total_duration,
            status=status,
            phone=phone,
            notes=notes,
        )
        session.add(booking)
        session.flush()

        for s in services:
            session.add(BookingService(
                booking_id=booking.id,
                service_id=s.id,
                price=s.price,
                duration=s.duration_min,
            ))

        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict(SLOT_UNAVAILABLE)
    except BookingError:
        session.rollback()
        raise

    return booking


def update_booking(session, booking, status=None, notes=None):
    """Staff edits. Cancellation has its own path because it releases the window."""
    if status is not None:
        if status not in BOOKING_STATUSES:
            raise InvalidRequest(f"status must be one of: {', '.join(BOOKING_STATUSES)}")
        if status == "cancelled":
            raise InvalidRequest("Use the cancellation endpoint to cancel a booking")
        if booking.status == "cancelled":
            raise InvalidRequest("Cancelled bookings cannot be changed")
        booking.status = status

    if notes is not None:
        booking.notes = notes

    session.commit()
    return booking
