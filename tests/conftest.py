"""Shared pytest fixtures.

Each test gets a fresh application bound to an in-memory SQLite
database. ``register`` creates a user through the API and returns the
token together with the serialised user.
"""
from __future__ import annotations

import itertools

import pytest

from wellness_portal import create_app, db

_counter = itertools.count(1)


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
        "NOTIFICATION_COOLDOWN_HOURS": 0,
        "LOG_LEVEL": "WARNING",
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Return a helper that registers a user and gives back ``(token, user)``."""

    def _register(role: str = "student", **extra):
        n = next(_counter)
        body = {
            "email": f"{role}{n}@example.edu",
            "password": "secret123",
            "first_name": f"{role.capitalize()}{n}",
            "last_name": "Tester",
            "role": role,
        }
        if role in ("counselor", "admin"):
            body.update(
                specialization="Stress Management",
                experience="5 years",
                license_number=f"LIC-{n}",
                qualifications="MSc Counselling Psychology",
            )
        body.update(extra)
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 201, response.get_json()
        data = response.get_json()
        return data["token"], data["user"]

    return _register


@pytest.fixture
def student(register):
    return register("student")


@pytest.fixture
def counselor(register):
    return register("counselor")
