import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..errors import NotFound, ValidationError
from ..models import Notification
from ..schemas import NotificationOut


log = logging.getLogger(__name__)


def create(db: Session, user_id: str, message: str, property_id: str | None = None) -> Notification:
    if not message or not message.strip():
        raise ValidationError("Notification message must not be empty")
    n = Notification(user_id=user_id, message=message.strip(), property_id=property_id)
    db.add(n)
    db.flush()
    log.info("notification.created id=%s user_id=%s property_id=%s", n.id, user_id, property_id)
    return n


def list_for_user(db: Session, user_id: str, limit: int | None = None) -> list[Notification]:
    return (
        db.query(Notification)
        .options(joinedload(Notification.property))
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(settings.NOTIFICATIONS_PAGE_SIZE if limit is None else limit)
        .all()
    )


def count_unread(db: Session, user_id: str) -> int:
    return int(
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .scalar()
        or 0
    )


def mark_read(db: Session, notification_id: str, user_id: str | None = None) -> Notification:
    n = db.get(Notification, notification_id)
    if n is None or (user_id is not None and n.user_id != user_id):
        raise NotFound("Notification")
    if not n.is_read:
        n.is_read = True
        db.flush()
    return n


def mark_all_read(db: Session, user_id: str) -> int:
    """Flag every unread notification of ``user_id``; returns the number flagged."""
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session="fetch")
    )
    db.flush()
    return int(updated or 0)


def to_out(n: Notification) -> NotificationOut:
    return NotificationOut(
        id=n.id,
        message=n.message,
        is_read=bool(n.is_read),
        created_at=n.created_at,
        property_id=n.property_id,
        property_title=n.property.title if n.property is not None else None,
    )
