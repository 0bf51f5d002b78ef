from datetime import datetime
from models.db import db

# capability: which services a barber can perform
barber_services = db.Table(
    "barber_services",
    db.Column("barber_id", db.Integer, db.ForeignKey("barbers.id"), primary_key=True),
    db.Column("service_id", db.Integer, db.ForeignKey("services.id"), primary_key=True),
)

class Barber(db.Model):
    __tablename__ = "barbers"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, unique=True)
    barbershop_id = db.Column(db.Integer, db.ForeignKey("barbershops.id"), nullable=False, index=True)

    display_name = db.Column(db.String(120), nullable=False)
    bio = db.Column(db.Text, nullable=True)

    # {"monday": {"isOpen": true, "open": "09:00", "close": "17:00"}, ...}
    working_hours = db.Column(db.JSON, nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    barbershop = db.relationship("Barbershop", back_populates="barbers")
    user = db.relationship("User")
    services = db.relationship("Service", secondary=barber_services, back_populates="barbers")
