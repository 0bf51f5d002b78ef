"""
Weekly working schedules.

A schedule maps a lower-case weekday name to ``{"isOpen": bool, "open": "HH:MM",
"close": "HH:MM"}``. Reads are fail-safe (anything unusable means closed for that
day); writes go through validate_working_hours and reject bad input.
"""
import json
import re
from datetime import datetime, date, time

from services.errors import InvalidRequest

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def _parse_hhmm(value):
    if not isinstance(value, str):
        return None
    m = _HHMM.match(value.strip())
    if not m:
        return None
    return time(int(m.group(1)), int(m.group(2)))


def load_schedule(raw):
    """Return the stored schedule as a dict, or None if it can't be read."""
    if raw is None:
        return None
    if isinstance(raw, str):
        # rows written before the JSON column held stringified JSON
        try:
            raw = json.loads(raw or "{}")
        except ValueError:
            return None
    if not isinstance(raw, dict):
        return None
    return raw


def resolve_working_window(schedule, day: date):
    """
    Open/close datetimes for ``day`` or None when closed.

    Never raises: a missing schedule, missing day, ``isOpen`` false, bad times or a
    close that isn't after open all count as closed.
    """
    schedule = load_schedule(schedule)
    if not schedule:
        return None

    day_schedule = schedule.get(WEEKDAYS[day.weekday()])
    if not isinstance(day_schedule, dict) or day_schedule.get("isOpen") is not True:
        return None

    open_t = _parse_hhmm(day_schedule.get("open"))
    close_t = _parse_hhmm(day_schedule.get("close"))
    if open_t is None or close_t is None:
        return None

    opens_at = datetime.combine(day, open_t)
    closes_at = datetime.combine(day, close_t)
    if closes_at <= opens_at:
        return None
    return opens_at, closes_at


def schedule_for_barber(barber):
    """The barber's own schedule, else the barbershop default."""
    if barber.working_hours is not None:
        return barber.working_hours
    shop = barber.barbershop
    return shop.working_hours if shop is not None else None


def validate_working_hours(payload) -> dict:
    """Normalize a schedule for storage. Raises InvalidRequest on bad input."""
    if not isinstance(payload, dict):
        raise InvalidRequest("workingHours must be an object keyed by weekday")

    unknown = sorted({str(k).lower() for k in payload} - set(WEEKDAYS))
    if unknown:
        raise InvalidRequest(f"Unknown weekday(s): {', '.join(unknown)}")

    out = {}
    for key, value in payload.items():
        name = str(key).lower()
        if not isinstance(value, dict) or not isinstance(value.get("isOpen"), bool):
            raise InvalidRequest(f"{name}: isOpen must be a boolean")

        if not value["isOpen"]:
            out[name] = {"isOpen": False}
            continue

        open_t = _parse_hhmm(value.get("open"))
        close_t = _parse_hhmm(value.get("close"))
        if open_t is None or close_t is None:
            raise InvalidRequest(f"{name}: open and close must be HH:MM")
        if close_t <= open_t:
            raise InvalidRequest(f"{name}: close must be after open")

        out[name] = {
            "isOpen": True,
            "open": open_t.strftime("%H:%M"),
            "close": close_t.strftime("%H:%M"),
        }
    return out
