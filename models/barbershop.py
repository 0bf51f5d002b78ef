from datetime import datetime
from models.db import db

class Barbershop(db.Model):
    __tablename__ = "barbershops"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    phone = db.Column(db.String(30), nullable=True)
    email = db.Column(db.String(255), nullable=True)

    # default weekly schedule for barbers without their own
    working_hours = db.Column(db.JSON, nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    barbers = db.relationship("Barber", back_populates="barbershop")
    services = db.relationship("Service", back_populates="barbershop")
