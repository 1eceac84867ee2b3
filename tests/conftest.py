import datetime as dt

import pytest

from healthapp import create_app, db
from healthapp.models import Workout
from security.accounts import register_user
from security.models import Role

COOKIE = "health_app_sid"
PASSWORD = "correct-horse-1"


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "WTF_CSRF_ENABLED": False,
        "RATELIMIT_ENABLED": False,
        "OPENWEATHER_API_KEY": None,
        "LOG_LEVEL": "WARNING",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Creates a user and returns its id."""
    def _make(username, role=Role.USER, password=PASSWORD, email=None):
        with app.app_context():
            created = register_user(username, email or f"{username}@example.com", password, role=role)
            assert created.ok
            return created.value.id
    return _make


@pytest.fixture
def login(client):
    def _login(identifier, password=PASSWORD):
        return client.post("/auth/login", data={"identifier": identifier, "password": password})
    return _login


@pytest.fixture
def add_workout(app):
    def _add(user_id, **fields):
        values = {"date": dt.date.today(), "type": "Running", "duration_min": 30, "intensity": 3}
        values.update(fields)
        with app.app_context():
            workout = Workout(user_id=user_id, **values)
            db.session.add(workout)
            db.session.commit()
            return workout.id
    return _add
