from flask import Flask, jsonify
from flask_migrate import Migrate
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from config import Config
from routes import health_bp, timeslot_bp, booking_bp, catalog_bp
from models import db
from services.errors import BookingError
from utils.seed import seed_roles
from utils.auth_context import load_current_user


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(timeslot_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(catalog_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    if app.config.get("CREATE_TABLES_ON_STARTUP"):
        with app.app_context():
            db.create_all()

    # Seed default roles at startup (safe & idempotent); skipped before the first migration
    with app.app_context():
        if inspect(db.engine).has_table("roles"):
            seed_roles()

    @app.before_request
    def _load_user():
        load_current_user()

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------

def register_error_handlers(app):
    @app.errorhandler(BookingError)
    def _booking_error(err):
        return jsonify(success=False, error=err.message), err.status_code

    @app.errorhandler(IntegrityError)
    def _integrity_error(err):
        # a constraint lost a race with another request
        db.session.rollback()
        app.logger.warning("Integrity error mapped to 409: %s", err.orig)
        return jsonify(success=False, error="Resource already exists"), 409

    @app.errorhandler(404)
    def _not_found(err):
        return jsonify(success=False, error="Not found"), 404

    @app.errorhandler(405)
    def _method_not_allowed(err):
        return jsonify(success=False, error="Method not allowed"), 405

#-------------------------
import json

import click
from models.user import User, Role
from models.barbershop import Barbershop
from models.barber import Barber
from models.service import Service
from security.rbac import ADMIN, BARBER, CLIENT
from security.session import create_session
from services.errors import InvalidRequest
from services.working_hours import WEEKDAYS, validate_working_hours
from utils.seed import DEFAULT_ROLES

# weekdays 09-18, saturday 10-16, closed sunday
DEFAULT_SHOP_HOURS = {
    **{day: {"isOpen": True, "open": "09:00", "close": "18:00"} for day in WEEKDAYS[:5]},
    "saturday": {"isOpen": True, "open": "10:00", "close": "16:00"},
    "sunday": {"isOpen": False},
}

def _hours_option(raw):
    try:
        return validate_working_hours(json.loads(raw))
    except ValueError:
        raise click.BadParameter("must be a JSON object", param_hint="--hours")
    except InvalidRequest as e:
        raise click.BadParameter(e.message, param_hint="--hours")

def register_cli(app):
    @app.cli.command("create-user")
    @click.argument("email")
    @click.option("--name", default=None, help="Full name")
    @click.option("--role", "role_name", default=CLIENT, type=click.Choice(DEFAULT_ROLES), show_default=True)
    def create_user(email, name, role_name):
        """Create a user with a single role."""
        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            print("User already exists")
            return

        role = Role.query.filter_by(name=role_name).first()
        user = User(email=email, full_name=name)
        if role:
            user.roles.append(role)
        db.session.add(user)
        db.session.commit()
        print(f"Created {user.email} ({role_name})")

    @app.cli.command("make-admin")
    @click.argument("email")
    @click.option("--barbershop-id", type=int, required=True)
    def make_admin(email, barbershop_id):
        """Promote a user to ADMIN of a barbershop."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            print("User not found")
            return
        if not db.session.get(Barbershop, barbershop_id):
            print("Barbershop not found")
            return

        admin_role = Role.query.filter_by(name=ADMIN).first()
        if admin_role not in user.roles:
            user.roles.append(admin_role)
        user.barbershop_id = barbershop_id
        db.session.commit()

        print(f"{user.email} is now ADMIN of barbershop {barbershop_id}")

    @app.cli.command("issue-token")
    @click.argument("email")
    def issue_token(email):
        """Print a bearer token for the user."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            print("User not found")
            return
        print(create_session(user.id, label="cli"))

    @app.cli.command("create-barbershop")
    @click.argument("name")
    @click.option("--address", required=True)
    @click.option("--phone", default=None)
    @click.option("--email", default=None)
    @click.option("--hours", default=None, help="Weekly schedule as JSON; defaults to weekdays 09-18, Sat 10-16")
    def create_barbershop(name, address, phone, email, hours):
        """Create a barbershop with a default weekly schedule."""
        working_hours = _hours_option(hours) if hours else DEFAULT_SHOP_HOURS
        shop = Barbershop(name=name.strip(), address=address.strip(), phone=phone, email=email,
                          working_hours=working_hours)
        db.session.add(shop)
        db.session.commit()
        print(f"Created barbershop {shop.id} ({shop.name})")

    @app.cli.command("create-service")
    @click.argument("name")
    @click.option("--barbershop-id", type=int, required=True)
    @click.option("--price", type=click.IntRange(min=0), required=True, help="Smallest currency unit")
    @click.option("--duration", type=click.IntRange(min=1), required=True, help="Minutes")
    @click.option("--category", default=None)
    def create_service(name, barbershop_id, price, duration, category):
        """Add a service to a barbershop's catalog."""
        if not db.session.get(Barbershop, barbershop_id):
            print("Barbershop not found")
            return

        service = Service(barbershop_id=barbershop_id, name=name.strip(), price=price,
                          duration_min=duration, category=category)
        db.session.add(service)
        db.session.commit()
        print(f"Created service {service.id} ({service.name})")

    @app.cli.command("create-barber")
    @click.argument("name")
    @click.option("--barbershop-id", type=int, required=True)
    @click.option("--user-email", default=None, help="Link an existing user; they get the BARBER role")
    @click.option("--service-id", "service_ids", type=int, multiple=True, help="Repeat for each service offered")
    @click.option("--hours", default=None, help="Own weekly schedule as JSON; omit to use the shop's")
    def create_barber(name, barbershop_id, user_email, service_ids, hours):
        """Create a barber and the services they can perform."""
        if not db.session.get(Barbershop, barbershop_id):
            print("Barbershop not found")
            return

        services = Service.query.filter(
            Service.id.in_(service_ids), Service.barbershop_id == barbershop_id
        ).all()
        if len(services) != len(set(service_ids)):
            print("Some services not found in this barbershop")
            return

        user = None
        if user_email:
            user = User.query.filter_by(email=user_email.strip().lower()).first()
            if not user:
                print("User not found")
                return
            if Barber.query.filter_by(user_id=user.id).first():
                print("User is already a barber")
                return

        barber = Barber(barbershop_id=barbershop_id, display_name=name.strip(),
                        working_hours=_hours_option(hours) if hours else None)
        barber.services = services
        if user:
            barber.user_id = user.id
            barber_role = Role.query.filter_by(name=BARBER).first()
            if barber_role not in user.roles:
                user.roles.append(barber_role)

        db.session.add(barber)
        db.session.commit()
        print(f"Created barber {barber.id} ({barber.display_name})")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
