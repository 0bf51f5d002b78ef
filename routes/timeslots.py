from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.barber import Barber
from models.slot import Slot
from security.rbac import require_roles, manages_barbershop
from services.blocks import block_window, unblock_window
from services.errors import NotFound, Forbidden
from services.slots import available_slots
from utils.audit import log_event
from utils.parsing import parse_iso, parse_day, parse_id, optional_text
from utils.serializers import slot_to_dict

timeslot_bp = Blueprint("timeslots", __name__, url_prefix="/api/timeslots")


def _get_barber(barber_id):
    barber = db.session.get(Barber, barber_id)
    if not barber or not barber.is_active:
        raise NotFound("Barber not found")
    return barber


# ---------- PUBLIC: free slots for a barber on a day ----------
@timeslot_bp.get("/available")
def get_available_slots():
    barber_id = parse_id(request.args.get("barberId"), "barberId")
    day = parse_day(request.args.get("date"))

    barber = _get_barber(barber_id)
    minutes = current_app.config.get("SLOT_DURATION_MINUTES", 60)
    slots = available_slots(db.session, barber, day, minutes)

    message = "Available slots retrieved successfully" if slots else "No available slots for this day"
    return jsonify(success=True, message=message, data=slots), 200


# ---------- ADMIN: block a time range ----------
@timeslot_bp.post("/block")
@require_roles("ADMIN")
def block_slot():
    data = request.get_json(silent=True) or {}
    barber_id = parse_id(data.get("barberId"), "barberId")
    start = parse_iso(data.get("startTime"), "startTime")
    end = parse_iso(data.get("endTime"), "endTime")
    reason = optional_text(data.get("reason"), "reason", 255)

    barber = _get_barber(barber_id)
    if not manages_barbershop(g.user, barber.barbershop_id):
        raise Forbidden("Insufficient permissions to block slot")

    slot = block_window(db.session, barber, start, end, reason)

    log_event("SLOT_BLOCK", entity="slot", entity_id=slot.id, metadata={"barber_id": barber.id, "reason": reason})
    return jsonify(success=True, message="Slot blocked successfully", data={"slot": slot_to_dict(slot)}), 201


# ---------- ADMIN: remove a block ----------
@timeslot_bp.delete("/<int:slot_id>")
@require_roles("ADMIN")
def unblock_slot(slot_id: int):
    slot = db.session.get(Slot, slot_id)
    if not slot:
        raise NotFound("Slot not found")

    barber = db.session.get(Barber, slot.barber_id)
    if not barber or not manages_barbershop(g.user, barber.barbershop_id):
        raise Forbidden("Insufficient permissions to unblock slot")

    unblock_window(db.session, slot)

    log_event("SLOT_UNBLOCK", entity="slot", entity_id=slot_id, metadata={"barber_id": barber.id})
    return jsonify(success=True, message="Slot unblocked successfully"), 200
