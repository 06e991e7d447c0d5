"""Inquiry and viewing lifecycles between students and landlords.

Both entities move through small state machines. Landlords drive every
transition; illegal moves raise ``IllegalTransition`` instead of silently
overwriting the status. Transitions that concern the other party leave a
notification behind.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session, joinedload

from ..errors import IllegalTransition, NotFound, ValidationError
from ..models import Inquiry, InquiryStatus, Property, Viewing, ViewingStatus, utcnow
from ..schemas import (
    InquiryOut,
    LandlordPropertyDetailOut,
    StudentInquiryThreadOut,
    ViewingOut,
    person_out,
    property_out,
)
from . import listings, notifications


log = logging.getLogger(__name__)

INQUIRY_TRANSITIONS: dict[InquiryStatus, frozenset[InquiryStatus]] = {
    InquiryStatus.PENDING: frozenset({InquiryStatus.PENDING, InquiryStatus.RESPONDED, InquiryStatus.DECLINED}),
    InquiryStatus.RESPONDED: frozenset({InquiryStatus.RESPONDED}),
    InquiryStatus.DECLINED: frozenset({InquiryStatus.DECLINED}),
}

# COMPLETED exists in the data model but nothing moves a viewing there yet.
VIEWING_TRANSITIONS: dict[ViewingStatus, frozenset[ViewingStatus]] = {
    ViewingStatus.REQUESTED: frozenset({ViewingStatus.REQUESTED, ViewingStatus.CONFIRMED, ViewingStatus.DECLINED}),
    ViewingStatus.CONFIRMED: frozenset({ViewingStatus.CONFIRMED}),
    ViewingStatus.DECLINED: frozenset({ViewingStatus.DECLINED}),
    ViewingStatus.COMPLETED: frozenset({ViewingStatus.COMPLETED}),
}


def _parse(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(s.value for s in enum_cls)
        raise ValidationError(f"{label} status must be one of {allowed}")


def _check(table: dict, entity: str, current, target) -> None:
    if target not in table.get(current, frozenset()):
        raise IllegalTransition(entity, current.value, target.value)


def _as_utc_naive(ts: datetime) -> datetime:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def _load_inquiry(db: Session, inquiry_id: str, landlord_id: str | None) -> Inquiry:
    i = (
        db.query(Inquiry)
        .options(joinedload(Inquiry.property))
        .filter(Inquiry.id == inquiry_id)
        .one_or_none()
    )
    if i is None or (landlord_id is not None and i.property.landlord_id != landlord_id):
        raise NotFound("Inquiry")
    return i


def _load_viewing(db: Session, viewing_id: str, landlord_id: str | None) -> Viewing:
    v = (
        db.query(Viewing)
        .options(joinedload(Viewing.property))
        .filter(Viewing.id == viewing_id)
        .one_or_none()
    )
    if v is None or (landlord_id is not None and v.property.landlord_id != landlord_id):
        raise NotFound("Viewing")
    return v


# ---------- inquiries ----------

def send_inquiry(db: Session, property_id: str, student_id: str, message: str) -> Inquiry:
    message = (message or "").strip()
    if not message:
        raise ValidationError("Inquiry message must not be empty")
    p = listings.get_active(db, property_id)
    i = Inquiry(property_id=p.id, student_id=student_id, message=message, status=InquiryStatus.PENDING.value)
    db.add(i)
    db.flush()
    notifications.create(db, p.landlord_id, f"New inquiry about {p.title}", property_id=p.id)
    log.info("inquiry.created id=%s property_id=%s student_id=%s", i.id, p.id, student_id)
    return i


def respond_to_inquiry(db: Session, inquiry_id: str, response: str, landlord_id: str | None = None) -> Inquiry:
    """Store the landlord's answer; answering again replaces the previous text."""
    response = (response or "").strip()
    if not response:
        raise ValidationError("Response must not be empty")
    i = _load_inquiry(db, inquiry_id, landlord_id)
    current = InquiryStatus(i.status)
    _check(INQUIRY_TRANSITIONS, "Inquiry", current, InquiryStatus.RESPONDED)
    i.status = InquiryStatus.RESPONDED.value
    i.response = response
    i.updated_at = utcnow()
    db.flush()
    verb = "updated the response to" if current == InquiryStatus.RESPONDED else "responded to"
    notifications.create(db, i.student_id, f"The landlord {verb} your inquiry about {i.property.title}", property_id=i.property_id)
    log.info("inquiry.responded id=%s property_id=%s", i.id, i.property_id)
    return i


def update_inquiry_status(db: Session, inquiry_id: str, status: InquiryStatus | str, landlord_id: str | None = None) -> Inquiry:
    target = _parse(InquiryStatus, status, "Inquiry")
    i = _load_inquiry(db, inquiry_id, landlord_id)
    current = InquiryStatus(i.status)
    _check(INQUIRY_TRANSITIONS, "Inquiry", current, target)
    if current == target:
        return i
    # RESPONDED needs response text, which only respond_to_inquiry carries.
    if target == InquiryStatus.RESPONDED:
        raise ValidationError("An inquiry is answered by sending a response")
    i.status = target.value
    i.updated_at = utcnow()
    db.flush()
    notifications.create(db, i.student_id, f"Your inquiry about {i.property.title} was declined", property_id=i.property_id)
    log.info("inquiry.status_changed id=%s from=%s to=%s", i.id, current.value, target.value)
    return i


# ---------- viewings ----------

def schedule_viewing(
    db: Session,
    property_id: str,
    student_id: str,
    scheduled_at: datetime,
    notes: str | None = None,
    now: datetime | None = None,
) -> Viewing:
    when = _as_utc_naive(scheduled_at)
    if when < (now or utcnow()):
        raise ValidationError("Viewing must be scheduled in the future")
    p = listings.get_active(db, property_id)
    v = Viewing(
        property_id=p.id,
        student_id=student_id,
        scheduled_at=when,
        notes=(notes or "").strip() or None,
        status=ViewingStatus.REQUESTED.value,
    )
    db.add(v)
    db.flush()
    notifications.create(db, p.landlord_id, f"New viewing request for {p.title} on {when:%Y-%m-%d %H:%M} UTC", property_id=p.id)
    log.info("viewing.requested id=%s property_id=%s student_id=%s at=%s", v.id, p.id, student_id, when.isoformat())
    return v


def update_viewing_status(db: Session, viewing_id: str, status: ViewingStatus | str, landlord_id: str | None = None) -> Viewing:
    target = _parse(ViewingStatus, status, "Viewing")
    v = _load_viewing(db, viewing_id, landlord_id)
    current = ViewingStatus(v.status)
    _check(VIEWING_TRANSITIONS, "Viewing", current, target)
    if current == target:
        return v
    v.status = target.value
    db.flush()
    if target == ViewingStatus.CONFIRMED:
        msg = f"Your viewing of {v.property.title} on {v.scheduled_at:%Y-%m-%d %H:%M} UTC is confirmed"
    else:
        msg = f"Your viewing request for {v.property.title} was declined"
    notifications.create(db, v.student_id, msg, property_id=v.property_id)
    log.info("viewing.status_changed id=%s from=%s to=%s", v.id, current.value, target.value)
    return v


# ---------- projections ----------

def inquiry_out(i: Inquiry, with_student: bool = True) -> InquiryOut:
    return InquiryOut(
        id=i.id,
        property_id=i.property_id,
        student=person_out(i.student) if with_student else None,
        message=i.message,
        response=i.response,
        status=i.status,
        created_at=i.created_at,
        updated_at=i.updated_at,
    )


def viewing_out(v: Viewing, with_student: bool = True) -> ViewingOut:
    return ViewingOut(
        id=v.id,
        property_id=v.property_id,
        property_title=v.property.title if v.property is not None else None,
        student=person_out(v.student) if with_student else None,
        scheduled_at=v.scheduled_at,
        notes=v.notes,
        status=v.status,
        created_at=v.created_at,
    )


def get_for_landlord(db: Session, property_id: str, landlord_id: str) -> LandlordPropertyDetailOut:
    p = listings.get_for_landlord(db, property_id, landlord_id)
    inquiries = (
        db.query(Inquiry)
        .options(joinedload(Inquiry.student))
        .filter(Inquiry.property_id == p.id)
        .order_by(Inquiry.created_at.desc())
        .all()
    )
    viewings = (
        db.query(Viewing)
        .options(joinedload(Viewing.student))
        .filter(Viewing.property_id == p.id)
        .order_by(Viewing.scheduled_at.asc())
        .all()
    )
    return LandlordPropertyDetailOut(
        **property_out(p).model_dump(),
        inquiries=[inquiry_out(i) for i in inquiries],
        viewings=[viewing_out(v) for v in viewings],
    )


def get_for_student(db: Session, student_id: str) -> list[StudentInquiryThreadOut]:
    """Properties the student asked about, each carrying only that student's inquiries."""
    rows = (
        db.query(Inquiry)
        .options(joinedload(Inquiry.property).joinedload(Property.landlord))
        .filter(Inquiry.student_id == student_id)
        .order_by(Inquiry.created_at.desc())
        .all()
    )
    threads: dict[str, StudentInquiryThreadOut] = {}
    for i in rows:
        thread = threads.get(i.property_id)
        if thread is None:
            thread = StudentInquiryThreadOut(**property_out(i.property, landlord=True).model_dump())
            threads[i.property_id] = thread
        thread.inquiries.append(inquiry_out(i, with_student=False))
    return list(threads.values())


def list_viewings_for_student(db: Session, student_id: str) -> list[Viewing]:
    return (
        db.query(Viewing)
        .options(joinedload(Viewing.property))
        .filter(Viewing.student_id == student_id)
        .order_by(Viewing.scheduled_at.asc())
        .all()
    )
