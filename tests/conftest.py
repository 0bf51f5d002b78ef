from datetime import date, timedelta

import pytest

from app import create_app
from config import Config
from models import db, User, Role, Barbershop, Barber, Service
from security.session import create_session
from tests.helpers import NINE_TO_FIVE


class _TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    CREATE_TABLES_ON_STARTUP = True
    ALLOW_GUEST_BOOKINGS = False
    IDLE_TIMEOUT_SECONDS = 0


@pytest.fixture
def app():
    app = create_app(_TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def monday():
    """A Monday comfortably in the future."""
    d = date.today() + timedelta(days=30)
    return d + timedelta(days=(7 - d.weekday()) % 7)


@pytest.fixture
def shop(app):
    s = Barbershop(name="Elite Barbershop", address="123 Main Street", phone="+1-555-0123",
                   working_hours=NINE_TO_FIVE)
    db.session.add(s)
    db.session.commit()
    return s


@pytest.fixture
def other_shop(app):
    s = Barbershop(name="Corner Cuts", address="9 Side Road", working_hours=NINE_TO_FIVE)
    db.session.add(s)
    db.session.commit()
    return s


@pytest.fixture
def services(shop):
    cut = Service(barbershop_id=shop.id, name="Haircut", price=2500, duration_min=30)
    beard = Service(barbershop_id=shop.id, name="Beard Trim", price=1500, duration_min=20)
    wash = Service(barbershop_id=shop.id, name="Wash & Style", price=1000, duration_min=20)
    colour = Service(barbershop_id=shop.id, name="Colour", price=6000, duration_min=45)
    db.session.add_all([cut, beard, wash, colour])
    db.session.commit()
    return {"cut": cut, "beard": beard, "wash": wash, "colour": colour}


def _make_user(email, role_name, **kwargs):
    user = User(email=email, **kwargs)
    user.roles.append(Role.query.filter_by(name=role_name).one())
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def barber_user(app):
    return _make_user("mike@example.com", "BARBER", full_name="Mike")


@pytest.fixture
def barber(shop, services, barber_user):
    """Works the shop hours; can't do colour."""
    b = Barber(barbershop_id=shop.id, user_id=barber_user.id, display_name="Mike")
    b.services = [services["cut"], services["beard"], services["wash"]]
    db.session.add(b)
    db.session.commit()
    return b


@pytest.fixture
def client_user(app):
    return _make_user("client@example.com", "CLIENT", full_name="Jane Client")


@pytest.fixture
def other_client(app):
    return _make_user("other@example.com", "CLIENT", full_name="Other Client")


@pytest.fixture
def admin_user(shop):
    return _make_user("admin@example.com", "ADMIN", barbershop_id=shop.id)


@pytest.fixture
def other_admin(other_shop):
    return _make_user("admin@corner.example.com", "ADMIN", barbershop_id=other_shop.id)


@pytest.fixture
def super_admin(app):
    return _make_user("root@example.com", "SUPER_ADMIN")


@pytest.fixture
def auth(app):
    def _headers(user):
        return {"Authorization": f"Bearer {create_session(user.id)}"}
    return _headers
