from functools import wraps
from flask import g, jsonify, current_app
from security.session import get_session_from_request
from models import db
from models.user import User

def load_current_user():
    sess = get_session_from_request()
    if not sess:
        g.user = None
        g.session = None
        return
    g.session = sess
    g.user = db.session.get(User, sess.user_id)

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(success=False, error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper

def login_required_unless_guests_allowed(fn):
    """Guest bookings are switched on with ALLOW_GUEST_BOOKINGS."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None and not current_app.config.get("ALLOW_GUEST_BOOKINGS", False):
            return jsonify(success=False, error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper
