from datetime import datetime, date, timedelta

from services.conflicts import active_windows_query, overlaps
from services.working_hours import resolve_working_window, schedule_for_barber

DEFAULT_SLOT_MINUTES = 60


class SlotSequence:
    """
    Fixed-length windows tiling [opens_at, closes_at) left to right.

    Iterating twice yields the same windows; a trailing window that would end
    after closes_at is dropped.
    """

    def __init__(self, opens_at: datetime, closes_at: datetime, minutes: int = DEFAULT_SLOT_MINUTES):
        if minutes <= 0:
            raise ValueError("slot length must be positive")
        self.opens_at = opens_at
        self.closes_at = closes_at
        self.step = timedelta(minutes=minutes)

    def __iter__(self):
        start = self.opens_at
        while start + self.step <= self.closes_at:
            yield start, start + self.step
            start += self.step

    def __len__(self):
        if self.closes_at <= self.opens_at:
            return 0
        return (self.closes_at - self.opens_at) // self.step


def slot_id(barber_id: int, start: datetime) -> str:
    return f"slot_{barber_id}_{start.strftime('%Y%m%d%H%M')}"


def candidate_slots(barber, day: date, minutes: int = DEFAULT_SLOT_MINUTES):
    """SlotSequence for the barber's working window on ``day``, or None if closed."""
    window = resolve_working_window(schedule_for_barber(barber), day)
    if window is None:
        return None
    return SlotSequence(window[0], window[1], minutes)


def iter_free_windows(candidates, taken):
    for start, end in candidates:
        if not any(overlaps(start, end, w.start_time, w.end_time) for w in taken):
            yield start, end


def available_slots(session, barber, day: date, minutes: int = DEFAULT_SLOT_MINUTES):
    """
    Free slots for ``barber`` on ``day`` as TimeSlot dicts.

    Active windows in the working range are read fresh on every call, so two calls
    with no writes in between return the same list.
    """
    candidates = candidate_slots(barber, day, minutes)
    if candidates is None:
        return []

    taken = active_windows_query(session, barber.id, candidates.opens_at, candidates.closes_at).all()

    return [
        {
            "id": slot_id(barber.id, start),
            "startTime": start.isoformat(),
            "endTime": end.isoformat(),
            "isAvailable": True,
            "barberId": barber.id,
            "barbershopId": barber.barbershop_id,
        }
        for start, end in iter_free_windows(candidates, taken)
    ]
