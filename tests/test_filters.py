from datetime import datetime

import pytest

from studentnest.errors import ValidationError
from studentnest.models import Property
from studentnest.services import filters


def _prop(title, price, bedrooms, amenities, created, location="1 Campus Way", description="A comfortable place to live"):
    return Property(
        title=title,
        description=description,
        price=price,
        bedrooms=bedrooms,
        bathrooms=1,
        location=location,
        amenities=amenities,
        created_at=created,
    )


@pytest.fixture()
def props():
    return [
        _prop("Cosy studio", 500, 1, ["WiFi"], datetime(2026, 1, 1)),
        _prop("Two bed flat", 900, 2, ["WiFi", "Parking"], datetime(2026, 3, 1), location="8 Harbour Street"),
        _prop("Family house", 1500, 4, ["WiFi", "Parking", "Garden"], datetime(2026, 2, 1), description="Big garden and quiet street"),
        _prop("Three bed maisonette", 1200, 3, ["Parking"], datetime(2026, 4, 1)),
    ]


def _titles(rows):
    return [p.title for p in rows]


@pytest.mark.parametrize(
    "value,expected",
    [(None, None), ("all", None), ("", None), ("2", (2, False)), ("3+", (3, True)), (4, (4, False))],
)
def test_parse_bedrooms(value, expected):
    assert filters.parse_bedrooms(value) == expected


def test_parse_bedrooms_rejects_garbage():
    with pytest.raises(ValidationError):
        filters.parse_bedrooms("lots")


def test_search_matches_title_description_and_location(props):
    assert _titles(filters.filter_properties(props, search="STUDIO")) == ["Cosy studio"]
    assert _titles(filters.filter_properties(props, search="harbour")) == ["Two bed flat"]
    assert _titles(filters.filter_properties(props, search="garden")) == ["Family house"]


def test_bedrooms_exact_and_at_least(props):
    assert _titles(filters.filter_properties(props, bedrooms="2")) == ["Two bed flat"]
    assert _titles(filters.filter_properties(props, bedrooms="3+")) == ["Family house", "Three bed maisonette"]


def test_price_range_is_inclusive(props):
    rows = filters.filter_properties(props, min_price=900, max_price=1200)
    assert _titles(rows) == ["Two bed flat", "Three bed maisonette"]


def test_amenities_must_all_match(props):
    rows = filters.filter_properties(props, amenities=["WiFi", "Parking"])
    assert _titles(rows) == ["Two bed flat", "Family house"]


def test_sorting(props):
    assert _titles(filters.sort_properties(props, "price_low"))[0] == "Cosy studio"
    assert _titles(filters.sort_properties(props, "price_high"))[0] == "Family house"
    assert _titles(filters.sort_properties(props, "newest")) == [
        "Three bed maisonette",
        "Two bed flat",
        "Family house",
        "Cosy studio",
    ]
