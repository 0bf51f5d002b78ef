from flask import Blueprint, request, jsonify, g

from models import db
from models.barber import Barber
from models.barbershop import Barbershop
from models.service import Service
from security.rbac import require_roles, manages_barbershop
from services.errors import NotFound, Forbidden
from services.working_hours import validate_working_hours
from utils.audit import log_event
from utils.parsing import parse_id
from utils.serializers import barbershop_to_dict, barber_to_dict, service_to_dict

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


# ---------- PUBLIC: barbershops ----------
@catalog_bp.get("/barbershops")
def list_barbershops():
    name_query = (request.args.get("name") or "").strip()

    q = Barbershop.query.filter(Barbershop.is_active.is_(True))
    if name_query:
        q = q.filter(Barbershop.name.ilike(f"%{name_query}%"))

    rows = q.order_by(Barbershop.name.asc()).limit(200).all()
    return jsonify(success=True, message="Barbershops retrieved successfully",
                   data=[barbershop_to_dict(s) for s in rows]), 200


@catalog_bp.get("/barbershops/<int:shop_id>")
def get_barbershop(shop_id: int):
    shop = db.session.get(Barbershop, shop_id)
    if not shop or not shop.is_active:
        raise NotFound("Barbershop not found")

    data = barbershop_to_dict(shop, detailed=True)
    data["barbers"] = [barber_to_dict(b) for b in shop.barbers if b.is_active]
    data["services"] = [service_to_dict(s) for s in shop.services if s.is_active]
    return jsonify(success=True, message="Barbershop retrieved successfully", data=data), 200


# ---------- PUBLIC: barbers ----------
@catalog_bp.get("/barbers")
def list_barbers():
    q = Barber.query.filter(Barber.is_active.is_(True))
    if request.args.get("barbershopId"):
        q = q.filter(Barber.barbershop_id == parse_id(request.args.get("barbershopId"), "barbershopId"))

    rows = q.order_by(Barber.display_name.asc()).limit(200).all()
    return jsonify(success=True, message="Barbers retrieved successfully",
                   data=[barber_to_dict(b) for b in rows]), 200


@catalog_bp.get("/barbers/<int:barber_id>")
def get_barber(barber_id: int):
    barber = db.session.get(Barber, barber_id)
    if not barber or not barber.is_active:
        raise NotFound("Barber not found")
    return jsonify(success=True, message="Barber retrieved successfully",
                   data=barber_to_dict(barber, detailed=True)), 200


# ---------- ADMIN: barber working hours ----------
@catalog_bp.put("/barbers/<int:barber_id>/working-hours")
@require_roles("ADMIN")
def update_barber_working_hours(barber_id: int):
    data = request.get_json(silent=True) or {}

    barber = db.session.get(Barber, barber_id)
    if not barber:
        raise NotFound("Barber not found")
    if not manages_barbershop(g.user, barber.barbershop_id):
        raise Forbidden("Insufficient permissions to update this barber")

    # null clears the barber's own hours so the shop default applies again
    raw = data.get("workingHours")
    barber.working_hours = None if raw is None else validate_working_hours(raw)
    db.session.commit()

    log_event("BARBER_HOURS_UPDATE", entity="barber", entity_id=barber.id)
    return jsonify(success=True, message="Working hours updated",
                   data=barber_to_dict(barber, detailed=True)), 200


# ---------- PUBLIC: services ----------
@catalog_bp.get("/services")
def list_services():
    q = Service.query.filter(Service.is_active.is_(True))
    if request.args.get("barbershopId"):
        q = q.filter(Service.barbershop_id == parse_id(request.args.get("barbershopId"), "barbershopId"))
    if request.args.get("barberId"):
        barber_id = parse_id(request.args.get("barberId"), "barberId")
        q = q.filter(Service.barbers.any(Barber.id == barber_id))

    rows = q.order_by(Service.name.asc()).limit(200).all()
    return jsonify(success=True, message="Services retrieved successfully",
                   data=[service_to_dict(s) for s in rows]), 200
