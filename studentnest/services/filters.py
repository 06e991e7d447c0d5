"""In-memory filtering and sorting of an already fetched property list."""

from typing import Iterable, Sequence

from ..errors import ValidationError
from ..models import Property


def parse_bedrooms(value: str | int | None) -> tuple[int, bool] | None:
    """``"3+"`` -> (3, True), ``"2"`` -> (2, False), ``"all"``/None -> None."""
    if value is None:
        return None
    if isinstance(value, int):
        return value, False
    raw = value.strip().lower()
    if raw in ("", "all", "any"):
        return None
    at_least = raw.endswith("+")
    try:
        count = int(raw.rstrip("+"))
    except ValueError:
        raise ValidationError(f"Invalid bedrooms filter {value!r}")
    return count, at_least


def filter_properties(
    properties: Iterable[Property],
    search: str | None = None,
    bedrooms: str | int | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    amenities: Sequence[str] | None = None,
) -> list[Property]:
    term = (search or "").strip().lower()
    beds = parse_bedrooms(bedrooms)
    wanted = [a for a in (amenities or []) if a]

    out = []
    for p in properties:
        if term and not (
            term in (p.title or "").lower()
            or term in (p.description or "").lower()
            or term in (p.location or "").lower()
        ):
            continue
        if beds is not None:
            count, at_least = beds
            if (p.bedrooms < count) if at_least else (p.bedrooms != count):
                continue
        if min_price is not None and p.price < min_price:
            continue
        if max_price is not None and p.price > max_price:
            continue
        if wanted and not all(a in (p.amenities or []) for a in wanted):
            continue
        out.append(p)
    return out


def sort_properties(properties: Iterable[Property], sort_by: str | None = "newest") -> list[Property]:
    items = list(properties)
    if sort_by == "price_low":
        items.sort(key=lambda p: p.price)
    elif sort_by == "price_high":
        items.sort(key=lambda p: p.price, reverse=True)
    elif sort_by == "newest":
        items.sort(key=lambda p: p.created_at, reverse=True)
    return items
