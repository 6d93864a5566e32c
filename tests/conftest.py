from datetime import date, timedelta

import pytest

from app import create_app
from extensions import db
from models import Goguma, User, UserActivity

START_DATE = date(2026, 3, 2)
EXEMPT_NAME = "tester"


class FakeClock:
    """Stand-in for the UTC-today provider that tests can move around."""

    def __init__(self, start: date):
        self.current = start

    def __call__(self) -> date:
        return self.current

    def advance(self, days: int = 1) -> None:
        self.current += timedelta(days=days)


@pytest.fixture()
def clock():
    return FakeClock(START_DATE)


@pytest.fixture()
def app(clock):
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "TODAY_PROVIDER": clock,
            "GOGUMA_EXEMPT_USER": EXEMPT_NAME,
        }
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def start(client, name="alice"):
    resp = client.post("/api/start", json={"userName": name})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def plant(client, name="goguma"):
    resp = client.post("/api/goguma/add", json={"name": name})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["goguma"]


def set_hp(app, goguma_id: int, hp: int) -> None:
    with app.app_context():
        db.session.query(Goguma).filter(Goguma.id == goguma_id).update({Goguma.hp: hp})
        db.session.commit()


def get_hp(app, goguma_id: int) -> int:
    with app.app_context():
        return db.session.get(Goguma, goguma_id).hp


def last_visit(app, user_id: int):
    with app.app_context():
        activity = db.session.get(UserActivity, user_id)
        return activity.last_visit_date if activity else None


def seed_user(app, name: str, gogumas=()) -> int:
    """Insert a user with (name, hp) gogumas directly, bypassing the API limits."""
    with app.app_context():
        user = User(name=name)
        db.session.add(user)
        db.session.flush()
        for goguma_name, hp in gogumas:
            db.session.add(Goguma(user_id=user.id, name=goguma_name, hp=hp))
        db.session.commit()
        return user.id
