from datetime import datetime
from models.db import db
from models.barber import barber_services

class Service(db.Model):
    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    barbershop_id = db.Column(db.Integer, db.ForeignKey("barbershops.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(60), nullable=True)

    price = db.Column(db.Integer, nullable=False, default=0)  # smallest currency unit
    duration_min = db.Column(db.Integer, nullable=False)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    barbershop = db.relationship("Barbershop", back_populates="services")
    barbers = db.relationship("Barber", secondary=barber_services, back_populates="services")
