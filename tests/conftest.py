from __future__ import annotations

from datetime import datetime

import pytest

from src.workforce_hub.workforce_hub import create_app
from src.workforce_hub.workforce_hub.core.enums import Role
from tests.fakes import build_fake_container


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 2, 8, 50, 0)


@pytest.fixture
def container():
    return build_fake_container()


@pytest.fixture
def admin(container):
    return container.employees_repo.add(
        first_name="Ada",
        last_name="Admin",
        email="admin@example.com",
        role=Role.ADMIN,
        department="HR",
    )


@pytest.fixture
def employee(container):
    return container.employees_repo.add(
        first_name="Eve",
        last_name="Worker",
        email="eve@example.com",
        department="Engineering",
        position="Developer",
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """Put an employee into the test client's session."""

    def _login(employee):
        with client.session_transaction() as sess:
            sess["user_id"] = employee.employee_id
            sess["role"] = employee.role.value
            sess["name"] = employee.full_name
            sess["email"] = employee.email
        return client

    return _login
