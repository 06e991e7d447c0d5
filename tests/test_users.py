import pytest

from studentnest.errors import ValidationError
from studentnest.models import UserRole
from studentnest.schemas import CallerIdentity
from studentnest.services import users

from .utils import unique_external_id


def test_authenticate_creates_once(db):
    ident = CallerIdentity(external_id=unique_external_id(), display_name="Nora", email="nora@example.edu")
    u, created = users.authenticate(db, ident)
    assert created is True
    assert u.role == UserRole.NONE.value
    assert u.full_name == "Nora"

    again, created = users.authenticate(db, ident)
    assert created is False
    assert again.id == u.id


def test_select_role_and_get_role(db):
    u, _ = users.authenticate(db, CallerIdentity(external_id=unique_external_id()))
    assert users.get_role(db, u.id) == UserRole.NONE

    users.select_role(db, u, "LANDLORD")
    assert users.get_role(db, u.id) == UserRole.LANDLORD
    users.select_role(db, u, UserRole.STUDENT)
    assert users.get_role(db, u.id) == UserRole.STUDENT


@pytest.mark.parametrize("role", ["NONE", "ADMIN", ""])
def test_select_role_rejects_unselectable(db, role):
    u, _ = users.authenticate(db, CallerIdentity(external_id=unique_external_id()))
    with pytest.raises(ValidationError):
        users.select_role(db, u, role)
    assert u.role == UserRole.NONE.value


def test_get_role_unknown_user(db):
    assert users.get_role(db, "missing-id") == UserRole.NONE
