from datetime import datetime
from models.db import db

class Slot(db.Model):
    """A reserved window [start_time, end_time) on a barber's calendar."""

    __tablename__ = "slots"

    id = db.Column(db.Integer, primary_key=True)

    barber_id = db.Column(db.Integer, db.ForeignKey("barbers.id"), nullable=False, index=True)
    start_time = db.Column(db.DateTime, nullable=False, index=True)
    end_time = db.Column(db.DateTime, nullable=False)

    is_booked = db.Column(db.Boolean, default=False, nullable=False)
    is_blocked = db.Column(db.Boolean, default=False, nullable=False)
    block_reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    barber = db.relationship("Barber")

    __table_args__ = (
        # Only one active (booked or blocked) window per barber and exact time range.
        # Released windows stay as history and are excluded from the index.
        db.Index(
            "uq_slots_active_window",
            "barber_id", "start_time", "end_time",
            unique=True,
            sqlite_where=db.text("is_booked OR is_blocked"),
            postgresql_where=db.text("is_booked OR is_blocked"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return bool(self.is_booked or self.is_blocked)
