from functools import wraps
from flask import g, jsonify

CLIENT = "CLIENT"
BARBER = "BARBER"
ADMIN = "ADMIN"
SUPER_ADMIN = "SUPER_ADMIN"

def has_role(user, role_name: str) -> bool:
    if not user:
        return False
    return role_name in user.role_names

def is_super_admin(user) -> bool:
    return has_role(user, SUPER_ADMIN)

def manages_barbershop(user, barbershop_id) -> bool:
    """SUPER_ADMIN, or ADMIN attached to this barbershop."""
    if is_super_admin(user):
        return True
    return has_role(user, ADMIN) and user.barbershop_id is not None and user.barbershop_id == barbershop_id

def can_view_booking(user, booking) -> bool:
    if manages_barbershop(user, booking.barbershop_id):
        return True
    if booking.user_id is not None and booking.user_id == user.id:
        return True
    barber = booking.barber
    return has_role(user, BARBER) and barber is not None and barber.user_id == user.id

def can_cancel_booking(user, booking) -> bool:
    if manages_barbershop(user, booking.barbershop_id):
        return True
    return booking.user_id is not None and booking.user_id == user.id

def can_update_booking(user, booking) -> bool:
    if manages_barbershop(user, booking.barbershop_id):
        return True
    barber = booking.barber
    return has_role(user, BARBER) and barber is not None and barber.user_id == user.id

def require_roles(*role_names: str):
    """
    Usage: @require_roles("ADMIN")
    SUPER_ADMIN always passes.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(success=False, error="Authentication required"), 401

            user_roles = user.role_names
            if SUPER_ADMIN not in user_roles and not user_roles.intersection(set(role_names)):
                return jsonify(success=False, error="Forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
