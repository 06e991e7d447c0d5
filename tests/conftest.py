import os
import tempfile
from pathlib import Path

import pytest


# Ensure sensible defaults for tests before app import
_TMP = Path(tempfile.mkdtemp(prefix="studentnest-tests-"))
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("DB_URL", f"sqlite:///{_TMP / 'studentnest.db'}")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "true")

from studentnest.database import SessionLocal, engine  # noqa: E402
from studentnest.models import Base, UserRole  # noqa: E402
from studentnest.schemas import CallerIdentity  # noqa: E402
from studentnest.services import listings, users  # noqa: E402

from .utils import property_values, unique_external_id  # noqa: E402


Base.metadata.create_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _make_user(db, role: UserRole, name: str):
    ident = CallerIdentity(external_id=unique_external_id(), display_name=name, email=f"{name.lower()}@example.edu")
    u, _ = users.authenticate(db, ident)
    return users.select_role(db, u, role)


@pytest.fixture()
def landlord(db):
    return _make_user(db, UserRole.LANDLORD, "Lara")


@pytest.fixture()
def other_landlord(db):
    return _make_user(db, UserRole.LANDLORD, "Omar")


@pytest.fixture()
def student(db):
    return _make_user(db, UserRole.STUDENT, "Sam")


@pytest.fixture()
def other_student(db):
    return _make_user(db, UserRole.STUDENT, "Sofia")


@pytest.fixture()
def make_property(db):
    def _make(owner, **overrides):
        return listings.upsert(db, property_values(**overrides), owner.id)

    return _make
