from datetime import datetime

import pytest

from studentnest.errors import NotFound, ValidationError
from studentnest.models import Notification
from studentnest.services import notifications


def test_create_and_count_unread(db, student):
    assert notifications.count_unread(db, student.id) == 0
    n = notifications.create(db, student.id, "  Welcome to StudentNest  ")
    assert n.message == "Welcome to StudentNest"
    assert n.is_read is False
    assert notifications.count_unread(db, student.id) == 1


@pytest.mark.parametrize("message", ["", "   "])
def test_create_rejects_empty_message(db, student, message):
    with pytest.raises(ValidationError):
        notifications.create(db, student.id, message)


def test_mark_read_is_scoped_to_owner(db, student, other_student):
    n = notifications.create(db, student.id, "Your viewing is confirmed")
    with pytest.raises(NotFound):
        notifications.mark_read(db, n.id, user_id=other_student.id)
    with pytest.raises(NotFound):
        notifications.mark_read(db, "missing-id")

    notifications.mark_read(db, n.id, user_id=student.id)
    assert notifications.count_unread(db, student.id) == 0
    # already read stays read
    assert notifications.mark_read(db, n.id, user_id=student.id).is_read is True


def test_mark_all_read_returns_count(db, student, other_student):
    for i in range(3):
        notifications.create(db, student.id, f"Update {i}")
    notifications.create(db, other_student.id, "Not yours")

    assert notifications.mark_all_read(db, student.id) == 3
    assert notifications.count_unread(db, student.id) == 0
    assert notifications.count_unread(db, other_student.id) == 1
    assert notifications.mark_all_read(db, student.id) == 0


def test_list_is_capped_at_page_size(db, student):
    for i in range(25):
        notifications.create(db, student.id, f"Message {i}")
    assert len(notifications.list_for_user(db, student.id)) == 20
    assert len(notifications.list_for_user(db, student.id, limit=5)) == 5
    assert notifications.count_unread(db, student.id) == 25


def test_to_out_carries_property_title(db, landlord, make_property):
    p = make_property(landlord, title="Loft by the river")
    n = notifications.create(db, landlord.id, "Something happened", property_id=p.id)
    db.refresh(n)
    out = notifications.to_out(n)
    assert out.property_id == p.id
    assert out.property_title == "Loft by the river"


def test_list_is_most_recent_first(db, student):
    stamps = [datetime(2026, 6, day) for day in (2, 5, 3)]
    created = []
    for i, ts in enumerate(stamps):
        n = notifications.create(db, student.id, f"Note {i}")
        n.created_at = ts
        created.append(n)
    db.flush()

    rows = notifications.list_for_user(db, student.id)
    assert [n.id for n in rows] == [created[1].id, created[2].id, created[0].id]
    assert all(isinstance(n, Notification) for n in rows)


def test_zero_limit_returns_nothing(db, student):
    notifications.create(db, student.id, "Hidden by a zero limit")
    assert notifications.list_for_user(db, student.id, limit=0) == []
