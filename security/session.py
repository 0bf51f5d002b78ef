import hashlib
import secrets
from datetime import datetime, timedelta
from flask import request, current_app

from models import db
from models.session import Session

def _hash_token(token: str) -> str:
    # SHA-256 is fine for hashing random session tokens
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

def create_session(user_id: int, label: str = None) -> str:
    """
    Creates a server-side session and returns the RAW bearer token.
    Only the hash is stored in DB.
    """
    raw_token = secrets.token_urlsafe(32)

    lifetime = current_app.config.get("SESSION_LIFETIME_SECONDS", 28800)
    row = Session(
        user_id=user_id,
        token_hash=_hash_token(raw_token),
        label=label,
        expires_at=datetime.utcnow() + timedelta(seconds=lifetime),
    )
    db.session.add(row)
    db.session.commit()
    return raw_token

def _bearer_token():
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()

def get_session_from_request():
    raw_token = _bearer_token()
    if not raw_token:
        return None

    now = datetime.utcnow()
    sess = Session.query.filter_by(token_hash=_hash_token(raw_token), revoked_at=None).first()
    if not sess or sess.expires_at <= now:
        return None

    idle_seconds = current_app.config.get("IDLE_TIMEOUT_SECONDS")
    if idle_seconds:
        last_seen = sess.last_seen_at or sess.created_at
        if (last_seen + timedelta(seconds=idle_seconds)) <= now:
            return None

    sess.last_seen_at = now
    db.session.commit()
    return sess
