from datetime import datetime

NINE_TO_FIVE = {
    "monday": {"isOpen": True, "open": "09:00", "close": "17:00"},
    "tuesday": {"isOpen": True, "open": "09:00", "close": "17:00"},
    "wednesday": {"isOpen": True, "open": "09:00", "close": "17:00"},
    "thursday": {"isOpen": True, "open": "09:00", "close": "17:00"},
    "friday": {"isOpen": True, "open": "09:00", "close": "17:00"},
    "saturday": {"isOpen": True, "open": "10:00", "close": "14:30"},
    "sunday": {"isOpen": False},
}


def at(day, hh, mm=0):
    return datetime(day.year, day.month, day.day, hh, mm)
