import logging
from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from ..models import Property, SavedProperty
from . import listings


log = logging.getLogger(__name__)


def toggle(db: Session, student_id: str, property_id: str) -> bool:
    """Flip the saved flag for (student, property); returns the new state."""
    existing = (
        db.query(SavedProperty)
        .filter(SavedProperty.student_id == student_id, SavedProperty.property_id == property_id)
        .one_or_none()
    )
    if existing is not None:
        db.delete(existing)
        db.flush()
        log.info("saved.removed student_id=%s property_id=%s", student_id, property_id)
        return False
    p = listings.get_active(db, property_id)
    db.add(SavedProperty(student_id=student_id, property_id=p.id))
    db.flush()
    log.info("saved.added student_id=%s property_id=%s", student_id, property_id)
    return True


def list_saved(db: Session, student_id: str) -> list[tuple[Property, datetime]]:
    rows = (
        db.query(SavedProperty)
        .options(joinedload(SavedProperty.property).joinedload(Property.landlord))
        .filter(SavedProperty.student_id == student_id)
        .order_by(SavedProperty.created_at.desc())
        .all()
    )
    return [(sp.property, sp.created_at) for sp in rows if sp.property is not None]


def saved_ids(db: Session, student_id: str) -> set[str]:
    rows = db.query(SavedProperty.property_id).filter(SavedProperty.student_id == student_id).all()
    return {pid for (pid,) in rows}
