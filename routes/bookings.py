from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.barber import Barber
from models.booking import Booking, BOOKING_STATUSES
from models.slot import Slot
from security.rbac import (
    ADMIN, BARBER,
    has_role, is_super_admin, can_view_booking, can_cancel_booking, can_update_booking,
)
from services.booking import create_booking as book_window, update_booking as apply_booking_update
from services.cancellation import cancel_booking as cancel_with_policy
from services.errors import Conflict, NotFound, Forbidden, InvalidRequest
from utils.audit import log_event
from utils.auth_context import login_required, login_required_unless_guests_allowed
from utils.parsing import parse_iso, parse_day, parse_id, parse_id_list, optional_text
from utils.serializers import booking_to_dict

booking_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


def _get_booking(booking_id: int) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    return booking


def _scoped_bookings_query(user):
    """What each role may list: everything, their shop, their chair, or their own."""
    q = Booking.query
    if is_super_admin(user):
        return q
    if has_role(user, ADMIN) and user.barbershop_id is not None:
        return q.filter(Booking.barbershop_id == user.barbershop_id)
    if has_role(user, BARBER):
        barber = Barber.query.filter_by(user_id=user.id).first()
        if not barber:
            raise NotFound("Barber profile not found")
        return q.filter(Booking.barber_id == barber.id)
    return q.filter(Booking.user_id == user.id)


def _page_args():
    default_size = current_app.config.get("BOOKINGS_PAGE_SIZE", 10)
    max_size = current_app.config.get("BOOKINGS_MAX_PAGE_SIZE", 100)
    page = request.args.get("page", default=1, type=int)
    limit = request.args.get("limit", default=default_size, type=int)
    if page < 1 or limit < 1 or limit > max_size:
        raise InvalidRequest(f"page must be >= 1 and limit between 1 and {max_size}")
    return page, limit


# ---------- CLIENTS: book a window (DOUBLE-BOOKING SAFE) ----------
@booking_bp.post("")
@login_required_unless_guests_allowed
def create_booking():
    data = request.get_json(silent=True) or {}

    barber_id = parse_id(data.get("barberId"), "barberId")
    service_ids = parse_id_list(data.get("serviceIds"), "serviceIds")
    phone = data.get("phone")
    if not isinstance(phone, str) or not 10 <= len(phone.strip()) <= 30:
        raise InvalidRequest("Phone number must be between 10 and 30 characters")
    phone = phone.strip()
    notes = optional_text(data.get("notes"), "notes", 1000)

    slot_id = None
    start = end = None
    if data.get("slotId") is not None:
        slot_id = parse_id(data.get("slotId"), "slotId")
    else:
        start = parse_iso(data.get("startTime"), "startTime")
        end = parse_iso(data.get("endTime"), "endTime")

    user = getattr(g, "user", None)
    try:
        booking = book_window(
            db.session,
            barber_id=barber_id,
            service_ids=service_ids,
            phone=phone,
            start_time=start,
            end_time=end,
            slot_id=slot_id,
            notes=notes,
            user_id=user.id if user else None,
        )
    except Conflict:
        log_event("BOOKING_FAIL_CONFLICT", entity="barber", entity_id=barber_id,
                  metadata={"start": start.isoformat() if start else None, "slot_id": slot_id})
        raise

    log_event("BOOKING_CREATE", entity="booking", entity_id=booking.id,
              metadata={"slot_id": booking.slot_id, "services": service_ids})
    return jsonify(
        success=True,
        message="Booking created successfully",
        data={"booking": booking_to_dict(booking)},
    ), 201


# ---------- ANY ROLE: list visible bookings ----------
@booking_bp.get("")
@login_required
def list_bookings():
    page, limit = _page_args()
    q = _scoped_bookings_query(g.user)

    status = request.args.get("status")
    if status:
        if status not in BOOKING_STATUSES:
            raise InvalidRequest(f"status must be one of: {', '.join(BOOKING_STATUSES)}")
        q = q.filter(Booking.status == status)
    if request.args.get("barberId"):
        q = q.filter(Booking.barber_id == parse_id(request.args.get("barberId"), "barberId"))
    if request.args.get("barbershopId"):
        q = q.filter(Booking.barbershop_id == parse_id(request.args.get("barbershopId"), "barbershopId"))
    if request.args.get("startDate"):
        q = q.filter(Booking.created_at >= parse_iso(request.args.get("startDate"), "startDate"))
    if request.args.get("endDate"):
        q = q.filter(Booking.created_at <= parse_iso(request.args.get("endDate"), "endDate"))

    total = q.count()
    rows = (
        q.order_by(Booking.created_at.desc(), Booking.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        success=True,
        message="Bookings retrieved successfully",
        data={
            "bookings": [booking_to_dict(b) for b in rows],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": (total + limit - 1) // limit,
            },
        },
    ), 200


# ---------- ANY ROLE: a barber's day with booking status ----------
@booking_bp.get("/calendar")
@login_required
def calendar():
    barber_id = parse_id(request.args.get("barberId"), "barberId")
    day = parse_day(request.args.get("date"))

    if not db.session.get(Barber, barber_id):
        raise NotFound("Barber not found")

    start = datetime(day.year, day.month, day.day)
    end = start + timedelta(days=1)
    slots = (
        Slot.query
        .filter(Slot.barber_id == barber_id, Slot.start_time >= start, Slot.start_time < end)
        .order_by(Slot.start_time.asc())
        .all()
    )

    # latest booking per window; released windows keep their cancelled booking
    latest = {}
    if slots:
        rows = (
            Booking.query
            .filter(Booking.slot_id.in_([s.id for s in slots]))
            .order_by(Booking.id.asc())
            .all()
        )
        for b in rows:
            latest[b.slot_id] = b

    out = []
    for s in slots:
        b = latest.get(s.id)
        out.append({
            "id": s.id,
            "startTime": s.start_time.isoformat(),
            "endTime": s.end_time.isoformat(),
            "isAvailable": not s.is_booked and not s.is_blocked,
            "isBooked": s.is_booked,
            "isBlocked": s.is_blocked,
            "booking": {"id": b.id, "status": b.status} if b else None,
        })

    return jsonify(
        success=True,
        message="Calendar retrieved successfully",
        data={"barberId": barber_id, "date": day.isoformat(), "slots": out},
    ), 200


@booking_bp.get("/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    booking = _get_booking(booking_id)
    if not can_view_booking(g.user, booking):
        raise Forbidden("Insufficient permissions to view this booking")
    return jsonify(success=True, message="Booking retrieved successfully",
                   data={"booking": booking_to_dict(booking)}), 200


# ---------- STAFF: status / notes ----------
@booking_bp.put("/<int:booking_id>")
@login_required
def update_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    booking = _get_booking(booking_id)
    if not can_update_booking(g.user, booking):
        raise Forbidden("Insufficient permissions to update this booking")

    status = data.get("status")
    if status is not None and not isinstance(status, str):
        raise InvalidRequest("Invalid status")
    notes = optional_text(data.get("notes"), "notes", 1000)

    apply_booking_update(db.session, booking, status=status, notes=notes)

    log_event("BOOKING_UPDATE", entity="booking", entity_id=booking.id, metadata={"status": status})
    return jsonify(success=True, message="Booking updated successfully",
                   data={"booking": booking_to_dict(booking)}), 200


# ---------- CLIENT / ADMIN: cancel (lead-time policy) ----------
@booking_bp.delete("/<int:booking_id>")
@login_required
def cancel_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    reason = optional_text(data.get("reason"), "reason", 120)

    booking = _get_booking(booking_id)
    if not can_cancel_booking(g.user, booking):
        raise Forbidden("Insufficient permissions to cancel this booking")

    lead_time = current_app.config.get("CANCEL_LEAD_TIME_HOURS", 2)
    cancel_with_policy(db.session, booking, reason=reason, lead_time_hours=lead_time)

    log_event("BOOKING_CANCEL", entity="booking", entity_id=booking.id,
              metadata={"slot_id": booking.slot_id, "reason": reason})
    return jsonify(success=True, message="Booking cancelled successfully"), 200
