from datetime import datetime
from models.db import db

# association table for many-to-many User <-> Role
user_roles = db.Table(
    "user_roles",
    db.Column("user_id", db.Integer, db.ForeignKey("users.id"), primary_key=True),
    db.Column("role_id", db.Integer, db.ForeignKey("roles.id"), primary_key=True),
)

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(120), nullable=True)
    phone_number = db.Column(db.String(30), nullable=True)

    # shop an ADMIN manages (null for clients and super admins)
    barbershop_id = db.Column(db.Integer, db.ForeignKey("barbershops.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    roles = db.relationship("Role", secondary=user_roles, back_populates="users")

    @property
    def role_names(self):
        return {r.name for r in self.roles}

class Role(db.Model):
    __tablename__ = "roles"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)  # e.g. CLIENT, BARBER, ADMIN

    users = db.relationship("User", secondary=user_roles, back_populates="roles")
