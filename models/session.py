from datetime import datetime
from models.db import db

class Session(db.Model):
    """Server-side bearer session. Only the SHA-256 hash of the token is kept."""

    __tablename__ = "sessions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    token_hash = db.Column(db.String(128), unique=True, nullable=False, index=True)
    label = db.Column(db.String(60), nullable=True)  # e.g. "cli"

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_seen_at = db.Column(db.DateTime, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    revoked_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User")
