from datetime import datetime, timedelta

import pytest

from studentnest.errors import NotFound, ValidationError
from studentnest.models import Inquiry, Notification, Property, SavedProperty, Viewing, utcnow
from studentnest.services import engagement, listings, saved

from .utils import property_values


def test_upsert_creates_then_updates_same_row(db, landlord, make_property):
    p = make_property(landlord, status="DRAFT")
    assert p.landlord_id == landlord.id
    assert p.status == "DRAFT"
    created_at = p.created_at

    p2 = listings.upsert(db, property_values(title="Renovated room near campus", price=700, status="ACTIVE"), landlord.id, property_id=p.id)

    assert p2.id == p.id
    assert p2.landlord_id == landlord.id
    assert p2.created_at == created_at
    assert p2.title == "Renovated room near campus"
    assert p2.price == 700.0
    assert [x.id for x in listings.list_by_landlord(db, landlord.id)] == [p.id]


def test_upsert_with_unknown_id_creates_a_new_row(db, landlord):
    p = listings.upsert(db, property_values(), landlord.id, property_id="does-not-exist")
    assert p.id != "does-not-exist"
    assert db.get(Property, p.id) is not None


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "Flat"},
        {"description": "Too short"},
        {"price": 0},
        {"price": -20},
        {"bedrooms": 0},
        {"bedrooms": 1.5},
        {"bathrooms": -1},
        {"location": "N/A"},
        {"amenities": []},
        {"amenities": [""]},
        {"amenities": ["WiFi", "   "]},
        {"status": "SOLD"},
    ],
)
def test_upsert_rejects_invalid_values(db, landlord, overrides):
    with pytest.raises(ValidationError) as exc:
        listings.upsert(db, property_values(**overrides), landlord.id)
    assert next(iter(overrides)) in exc.value.message
    assert listings.list_by_landlord(db, landlord.id) == []


def test_upsert_cannot_take_over_another_landlords_property(db, landlord, other_landlord, make_property):
    p = make_property(landlord)
    with pytest.raises(NotFound):
        listings.upsert(db, property_values(title="Hijacked listing"), other_landlord.id, property_id=p.id)
    assert db.get(Property, p.id).title == "Bright room near campus"
    assert db.get(Property, p.id).landlord_id == landlord.id


def test_list_active_only_returns_active_properties(db, landlord, make_property):
    draft = make_property(landlord, status="DRAFT")
    assert draft.id not in {p.id for p in listings.list_active(db)}

    listings.upsert(db, property_values(status="ACTIVE"), landlord.id, property_id=draft.id)
    assert draft.id in {p.id for p in listings.list_active(db)}

    listings.upsert(db, property_values(status="RENTED"), landlord.id, property_id=draft.id)
    assert draft.id not in {p.id for p in listings.list_active(db)}


def test_list_by_landlord_is_scoped_and_newest_first(db, landlord, other_landlord, make_property):
    older = make_property(landlord, title="Older listing")
    newer = make_property(landlord, title="Newer listing")
    foreign = make_property(other_landlord)
    older.created_at = datetime(2026, 1, 1)
    newer.created_at = datetime(2026, 2, 1)
    db.flush()

    rows = listings.list_by_landlord(db, landlord.id)
    assert [p.id for p in rows] == [newer.id, older.id]
    assert foreign.id not in {p.id for p in rows}


def test_get_for_landlord_does_not_reveal_foreign_properties(db, landlord, other_landlord, make_property):
    p = make_property(landlord)
    assert listings.get_for_landlord(db, p.id, landlord.id).id == p.id

    with pytest.raises(NotFound) as foreign:
        listings.get_for_landlord(db, p.id, other_landlord.id)
    with pytest.raises(NotFound) as missing:
        listings.get_for_landlord(db, "missing-id", other_landlord.id)
    assert foreign.value.message == missing.value.message


def test_get_by_id_unknown(db):
    with pytest.raises(NotFound):
        listings.get_by_id(db, "missing-id")


def test_delete_requires_ownership(db, landlord, other_landlord, make_property):
    p = make_property(landlord)
    with pytest.raises(NotFound):
        listings.delete(db, p.id, other_landlord.id)
    assert db.get(Property, p.id) is not None

    listings.delete(db, p.id, landlord.id)
    assert db.get(Property, p.id) is None


def test_delete_cascades_to_engagement_rows(db, landlord, student, make_property):
    p = make_property(landlord)
    engagement.send_inquiry(db, p.id, student.id, "Is the room still available?")
    engagement.schedule_viewing(db, p.id, student.id, utcnow() + timedelta(days=2))
    saved.toggle(db, student.id, p.id)
    note = db.query(Notification).filter(Notification.user_id == landlord.id).first()
    assert note.property_id == p.id

    listings.delete(db, p.id, landlord.id)

    assert db.query(Inquiry).filter(Inquiry.property_id == p.id).count() == 0
    assert db.query(Viewing).filter(Viewing.property_id == p.id).count() == 0
    assert db.query(SavedProperty).filter(SavedProperty.property_id == p.id).count() == 0
    assert db.get(Notification, note.id).property_id is None


def test_list_active_is_newest_first(db, landlord, make_property):
    older = make_property(landlord, title="Older active room")
    newer = make_property(landlord, title="Newer active room")
    older.created_at = datetime(2030, 1, 1)
    newer.created_at = datetime(2030, 1, 2)
    db.flush()

    ids = [p.id for p in listings.list_active(db)]
    assert ids.index(newer.id) < ids.index(older.id)


@pytest.mark.parametrize("status", ["DRAFT", "RENTED", "ARCHIVED"])
def test_get_active_hides_unlisted_properties(db, landlord, make_property, status):
    p = make_property(landlord, status=status)
    with pytest.raises(NotFound):
        listings.get_active(db, p.id)
    assert listings.get_by_id(db, p.id).id == p.id


def test_get_active(db, landlord, make_property):
    p = make_property(landlord)
    assert listings.get_active(db, p.id).id == p.id
    with pytest.raises(NotFound):
        listings.get_active(db, "missing-id")
