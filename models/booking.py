from datetime import datetime
from models.db import db

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
CANCELLABLE_STATUSES = ("pending", "confirmed")

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    # null for guest bookings
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    barber_id = db.Column(db.Integer, db.ForeignKey("barbers.id"), nullable=False, index=True)
    barbershop_id = db.Column(db.Integer, db.ForeignKey("barbershops.id"), nullable=False, index=True)
    slot_id = db.Column(db.Integer, db.ForeignKey("slots.id"), nullable=False, index=True)

    total_price = db.Column(db.Integer, nullable=False)
    total_duration = db.Column(db.Integer, nullable=False)  # minutes

    status = db.Column(db.String(20), nullable=False, default="confirmed")
    phone = db.Column(db.String(30), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancel_reason = db.Column(db.String(120), nullable=True)

    user = db.relationship("User")
    barber = db.relationship("Barber")
    barbershop = db.relationship("Barbershop")
    slot = db.relationship("Slot")
    line_items = db.relationship(
        "BookingService",
        back_populates="booking",
        order_by="BookingService.id",
        cascade="all, delete-orphan",
    )
