import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session, joinedload

from ..errors import NotFound, ValidationError
from ..models import Property, PropertyStatus
from ..schemas import PropertyIn


log = logging.getLogger(__name__)


def describe_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def validate_values(values: PropertyIn | Mapping[str, Any]) -> PropertyIn:
    if isinstance(values, PropertyIn):
        return values
    try:
        return PropertyIn.model_validate(dict(values))
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e))


def _row_fields(data: PropertyIn) -> dict:
    return {
        "title": data.title,
        "description": data.description,
        "image_url": data.image_url or "",
        "price": float(data.price),
        "bedrooms": data.bedrooms,
        "bathrooms": data.bathrooms,
        "location": data.location,
        "distance_to_campus": data.distance_to_campus or None,
        "amenities": list(data.amenities),
        "available_from": data.available_from,
        "status": PropertyStatus(data.status).value,
    }


def list_by_landlord(db: Session, landlord_id: str) -> list[Property]:
    return (
        db.query(Property)
        .options(joinedload(Property.landlord))
        .filter(Property.landlord_id == landlord_id)
        .order_by(Property.created_at.desc())
        .all()
    )


def list_active(db: Session) -> list[Property]:
    return (
        db.query(Property)
        .options(joinedload(Property.landlord))
        .filter(Property.status == PropertyStatus.ACTIVE.value)
        .order_by(Property.created_at.desc())
        .all()
    )


def get_by_id(db: Session, property_id: str) -> Property:
    p = db.get(Property, property_id)
    if p is None:
        raise NotFound("Property")
    return p


def get_active(db: Session, property_id: str) -> Property:
    """Student-facing lookup; listings that are not ACTIVE look missing."""
    p = db.get(Property, property_id)
    if p is None or p.status != PropertyStatus.ACTIVE.value:
        raise NotFound("Property")
    return p


def get_for_landlord(db: Session, property_id: str, landlord_id: str) -> Property:
    p = db.get(Property, property_id)
    # Someone else's listing looks exactly like a missing one.
    if p is None or p.landlord_id != landlord_id:
        raise NotFound("Property")
    return p


def upsert(db: Session, values: PropertyIn | Mapping[str, Any], landlord_id: str, property_id: str | None = None) -> Property:
    """Create a listing, or update the caller's listing ``property_id`` in place.

    An unknown ``property_id`` creates a fresh row (with a new id), matching
    create-or-update semantics. A ``property_id`` owned by another landlord is
    reported as NotFound and left untouched.
    """
    data = validate_values(values)
    fields = _row_fields(data)
    p = None
    if property_id:
        p = (
            db.query(Property)
            .filter(Property.id == property_id)
            .with_for_update()
            .one_or_none()
        )
        if p is not None and p.landlord_id != landlord_id:
            raise NotFound("Property")
    if p is None:
        p = Property(landlord_id=landlord_id, **fields)
        db.add(p)
        db.flush()
        log.info("property.created id=%s landlord_id=%s status=%s", p.id, landlord_id, p.status)
        return p
    for key, value in fields.items():
        setattr(p, key, value)
    db.flush()
    log.info("property.updated id=%s landlord_id=%s status=%s", p.id, landlord_id, p.status)
    return p


def delete(db: Session, property_id: str, landlord_id: str) -> None:
    """Delete a listing together with its inquiries, viewings and saves."""
    p = get_for_landlord(db, property_id, landlord_id)
    db.delete(p)
    db.flush()
    log.info("property.deleted id=%s landlord_id=%s", property_id, landlord_id)
