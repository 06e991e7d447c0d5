"""Landlord dashboard summary.

Each figure comes from its own query, so the summary is a snapshot rather
than a transactionally consistent view.
"""

import math
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..models import Inquiry, InquiryStatus, Property, PropertyStatus, Viewing, ViewingStatus, utcnow
from ..schemas import (
    DashboardOut,
    DashboardPropertyOut,
    DashboardStatsOut,
    StatusBucketOut,
    UpcomingViewingOut,
)
from . import notifications

UPCOMING_STATUSES = (ViewingStatus.REQUESTED.value, ViewingStatus.CONFIRMED.value)
DISTRIBUTION_ORDER = (PropertyStatus.ACTIVE, PropertyStatus.RENTED, PropertyStatus.DRAFT, PropertyStatus.ARCHIVED)


def occupancy_rate(rented: int, total: int) -> int:
    if total <= 0:
        return 0
    # rounds half up
    return int(math.floor(rented / total * 100 + 0.5))


def landlord_summary(db: Session, landlord_id: str, now: datetime | None = None) -> DashboardOut:
    now = now or utcnow()
    props = (
        db.query(Property)
        .filter(Property.landlord_id == landlord_id)
        .order_by(Property.created_at.desc())
        .all()
    )
    prop_ids = [p.id for p in props]

    counts = {s: 0 for s in PropertyStatus}
    for p in props:
        try:
            counts[PropertyStatus(p.status)] += 1
        except ValueError:
            continue
    distribution = [StatusBucketOut(status=s, count=counts[s]) for s in DISTRIBUTION_ORDER]

    owned_inquiries = db.query(func.count(Inquiry.id)).select_from(Inquiry).join(Property, Property.id == Inquiry.property_id).filter(Property.landlord_id == landlord_id)
    total_inquiries = int(owned_inquiries.scalar() or 0)
    pending_inquiries = int(owned_inquiries.filter(Inquiry.status == InquiryStatus.PENDING.value).scalar() or 0)

    owned_viewings = db.query(func.count(Viewing.id)).select_from(Viewing).join(Property, Property.id == Viewing.property_id).filter(Property.landlord_id == landlord_id)
    total_viewings = int(owned_viewings.scalar() or 0)
    upcoming_count = int(
        owned_viewings.filter(Viewing.scheduled_at >= now, Viewing.status.in_(UPCOMING_STATUSES)).scalar() or 0
    )

    upcoming = (
        db.query(Viewing)
        .join(Property, Property.id == Viewing.property_id)
        .options(joinedload(Viewing.property), joinedload(Viewing.student))
        .filter(
            Property.landlord_id == landlord_id,
            Viewing.scheduled_at >= now,
            Viewing.status.in_(UPCOMING_STATUSES),
        )
        .order_by(Viewing.scheduled_at.asc())
        .limit(settings.DASHBOARD_UPCOMING_LIMIT)
        .all()
    )

    pending_map: dict[str, int] = {}
    viewing_map: dict[str, int] = {}
    if prop_ids:
        pending_map = dict(
            db.query(Inquiry.property_id, func.count(Inquiry.id))
            .filter(Inquiry.property_id.in_(prop_ids), Inquiry.status == InquiryStatus.PENDING.value)
            .group_by(Inquiry.property_id)
            .all()
        )
        viewing_map = dict(
            db.query(Viewing.property_id, func.count(Viewing.id))
            .filter(Viewing.property_id.in_(prop_ids))
            .group_by(Viewing.property_id)
            .all()
        )

    recent = notifications.list_for_user(db, landlord_id, limit=settings.DASHBOARD_NOTIFICATIONS_LIMIT)

    stats = DashboardStatsOut(
        total_properties=len(props),
        active_properties=counts[PropertyStatus.ACTIVE],
        rented_properties=counts[PropertyStatus.RENTED],
        draft_properties=counts[PropertyStatus.DRAFT],
        total_inquiries=total_inquiries,
        pending_inquiries=pending_inquiries,
        total_viewings=total_viewings,
        upcoming_viewings=upcoming_count,
        occupancy_rate=occupancy_rate(counts[PropertyStatus.RENTED], len(props)),
    )
    return DashboardOut(
        stats=stats,
        property_distribution=distribution,
        properties=[
            DashboardPropertyOut(
                id=p.id,
                title=p.title,
                location=p.location,
                status=p.status,
                image_url=p.image_url or "",
                pending_inquiries=int(pending_map.get(p.id, 0)),
                viewings=int(viewing_map.get(p.id, 0)),
            )
            for p in props
        ],
        upcoming_viewings=[
            UpcomingViewingOut(
                id=v.id,
                property_id=v.property_id,
                property_title=v.property.title,
                property_image=v.property.image_url or "/placeholder.svg",
                student_id=v.student_id,
                student_name=v.student.full_name if v.student is not None else "",
                scheduled_at=v.scheduled_at,
                status=v.status,
            )
            for v in upcoming
        ],
        notifications=[notifications.to_out(n) for n in recent],
    )
