import itertools

import pytest
from fastapi.testclient import TestClient

from crmhub.application import create_app
from crmhub.config.settings import Settings
from crmhub.models.user import User
from crmhub.utils.security import hash_password

PASSWORD = "correct-horse-battery"
SECRET = "test-secret-" + "x" * 40


def make_settings(**overrides) -> Settings:
    values = {
        "environment": "test",
        "database_url": "sqlite://",
        "session_secret": SECRET,
        "bcrypt_rounds": 4,
        "auto_create_tables": True,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    application = create_app(settings)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role="employee", status="active", manager=None, password=PASSWORD, email=None):
        n = next(counter)
        user = User(
            email=email or f"{role}{n}@example.com",
            first_name=role.title(),
            last_name=f"Number{n}",
            role=role,
            status=status,
            manager_id=manager.id if manager else None,
            hashed_password=hash_password(password, rounds=4) if password else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def login(app):
    """Return a TestClient holding a session cookie for the user"""

    def _login(user, password=PASSWORD):
        client = TestClient(app)
        response = client.post("/api/login", json={"email": user.email, "password": password})
        assert response.status_code == 200, response.text
        return client

    return _login


@pytest.fixture
def anonymous(app):
    return TestClient(app)
