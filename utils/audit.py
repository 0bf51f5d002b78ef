from flask import request, g
from models import db
from models.audit_log import AuditLog

def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    """Append a row to audit_logs. Defaults the actor to the request's user."""
    if user_id is None:
        user = getattr(g, "user", None)
        user_id = user.id if user is not None else None

    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    user_agent = request.headers.get("User-Agent", "")

    details = dict(metadata or {})
    details.setdefault("route", f"{request.method} {request.path}")

    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent[:255] if user_agent else None,
        details=details,
    )
    db.session.add(row)
    db.session.commit()
