from __future__ import annotations

from dataclasses import replace

import pytest

from src.workforce_hub.workforce_hub.core.enums import EmployeeStatus, Role
from src.workforce_hub.workforce_hub.core.exceptions import AuthenticationError, ValidationError
from src.workforce_hub.workforce_hub.employees.service import AuthService
from tests.fakes import FakeEmployeesRepo


@pytest.fixture
def repo():
    repo = FakeEmployeesRepo()
    repo.add(first_name="Eve", last_name="Worker", email="eve@example.com", password="password123")
    return repo


def test_authenticate_is_case_insensitive_on_email(repo):
    user = AuthService(repo).authenticate("  EVE@example.com ", "password123")
    assert user.full_name == "Eve Worker"
    assert user.role == Role.EMPLOYEE


def test_authenticate_rejects_wrong_password(repo):
    with pytest.raises(AuthenticationError):
        AuthService(repo).authenticate("eve@example.com", "wrong-password")


def test_authenticate_rejects_inactive_accounts():
    repo = FakeEmployeesRepo()
    repo.add(email="gone@example.com", status=EmployeeStatus.INACTIVE)
    with pytest.raises(AuthenticationError):
        AuthService(repo).authenticate("gone@example.com", "password123")


def test_authenticate_with_placeholder_hash_fails_cleanly(repo):
    eve = repo.get_by_email("eve@example.com")
    repo.items[eve.employee_id] = replace(eve, password_hash="CHANGE_ME")
    with pytest.raises(AuthenticationError):
        AuthService(repo).authenticate("eve@example.com", "password123")


def test_signup_creates_employee_account(repo):
    new_id = AuthService(repo).signup(
        first_name="Sam",
        last_name="New",
        email="Sam@Example.com",
        password="longenough",
        confirm_password="longenough",
    )
    created = repo.get_by_id(new_id)
    assert created.email == "sam@example.com"
    assert created.role == Role.EMPLOYEE
    assert created.status == EmployeeStatus.ACTIVE
    assert AuthService(repo).authenticate("sam@example.com", "longenough").user_id == new_id


@pytest.mark.parametrize(
    "password,confirm,message",
    [
        ("short", "short", "at least 8"),
        ("longenough", "different1", "do not match"),
    ],
)
def test_signup_validates_password(repo, password, confirm, message):
    with pytest.raises(ValidationError, match=message):
        AuthService(repo).signup(
            first_name="Sam",
            last_name="New",
            email="sam@example.com",
            password=password,
            confirm_password=confirm,
        )


def test_signup_rejects_duplicate_email(repo):
    with pytest.raises(ValidationError, match="already exists"):
        AuthService(repo).signup(
            first_name="Eve",
            last_name="Again",
            email="eve@example.com",
            password="password123",
            confirm_password="password123",
        )


def test_signup_rejects_invalid_email(repo):
    with pytest.raises(ValidationError):
        AuthService(repo).signup(first_name="A", last_name="B", email="not-an-email", password="password123")
