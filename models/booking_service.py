from models.db import db

class BookingService(db.Model):
    """Price and duration of one service, captured when the booking was made."""

    __tablename__ = "booking_services"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False)

    price = db.Column(db.Integer, nullable=False)
    duration = db.Column(db.Integer, nullable=False)

    booking = db.relationship("Booking", back_populates="line_items")
    service = db.relationship("Service")

    __table_args__ = (
        db.UniqueConstraint("booking_id", "service_id", name="uq_booking_service_once"),
    )
