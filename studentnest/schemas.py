from datetime import date, datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from .models import InquiryStatus, Property, PropertyStatus, User, UserRole, ViewingStatus


class CallerIdentity(BaseModel):
    """What the identity provider tells us about the caller."""

    external_id: str
    display_name: str = ""
    email: str = ""


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class DevLoginIn(BaseModel):
    external_id: str = Field(min_length=1, max_length=128)
    name: Optional[str] = None
    email: Optional[str] = None


class RoleIn(BaseModel):
    role: UserRole


class UserOut(BaseModel):
    id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    created_at: datetime


class PersonOut(BaseModel):
    id: str
    name: str
    email: Optional[str] = None


# ---------- properties ----------

AmenityTag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


class PropertyIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=5, description="At least 5 characters")
    description: str = Field(min_length=20, description="At least 20 characters")
    image_url: str = ""
    price: float = Field(gt=0)
    bedrooms: int = Field(gt=0)
    bathrooms: int = Field(gt=0)
    location: str = Field(min_length=5)
    distance_to_campus: Optional[str] = Field(default=None, max_length=64)
    amenities: List[AmenityTag] = Field(min_length=1, description="Select at least one amenity")
    available_from: Optional[date] = None
    status: PropertyStatus = PropertyStatus.DRAFT


class PropertyOut(BaseModel):
    id: str
    landlord_id: str
    title: str
    description: str
    image_url: str
    price: float
    bedrooms: int
    bathrooms: int
    location: str
    distance_to_campus: Optional[str] = None
    amenities: List[str] = []
    available_from: Optional[date] = None
    status: PropertyStatus
    created_at: datetime
    updated_at: datetime
    landlord: Optional[PersonOut] = None
    saved: Optional[bool] = None


class PropertiesListOut(BaseModel):
    properties: List[PropertyOut]


class SavedPropertyOut(PropertyOut):
    saved_at: datetime


class SavedListOut(BaseModel):
    items: List[SavedPropertyOut]


class ToggleSavedOut(BaseModel):
    property_id: str
    saved: bool


# ---------- inquiries & viewings ----------

class InquiryCreateIn(BaseModel):
    message: str = Field(max_length=4000)


class InquiryRespondIn(BaseModel):
    response: str = Field(max_length=4000)


class InquiryStatusIn(BaseModel):
    status: InquiryStatus


class InquiryOut(BaseModel):
    id: str
    property_id: str
    student: Optional[PersonOut] = None
    message: str
    response: Optional[str] = None
    status: InquiryStatus
    created_at: datetime
    updated_at: datetime


class ViewingCreateIn(BaseModel):
    scheduled_at: datetime
    notes: Optional[str] = Field(default=None, max_length=2000)


class ViewingStatusIn(BaseModel):
    status: ViewingStatus


class ViewingOut(BaseModel):
    id: str
    property_id: str
    property_title: Optional[str] = None
    student: Optional[PersonOut] = None
    scheduled_at: datetime
    notes: Optional[str] = None
    status: ViewingStatus
    created_at: datetime


class ViewingsListOut(BaseModel):
    items: List[ViewingOut]


class LandlordPropertyDetailOut(PropertyOut):
    inquiries: List[InquiryOut] = []
    viewings: List[ViewingOut] = []


class StudentInquiryThreadOut(PropertyOut):
    inquiries: List[InquiryOut] = []


class StudentInquiriesOut(BaseModel):
    items: List[StudentInquiryThreadOut]


# ---------- notifications ----------

class NotificationOut(BaseModel):
    id: str
    message: str
    is_read: bool
    created_at: datetime
    property_id: Optional[str] = None
    property_title: Optional[str] = None


class NotificationsListOut(BaseModel):
    items: List[NotificationOut]
    unread: int


class UnreadCountOut(BaseModel):
    unread: int


class MarkedReadOut(BaseModel):
    updated: int


# ---------- dashboard ----------

class StatusBucketOut(BaseModel):
    status: PropertyStatus
    count: int


class DashboardStatsOut(BaseModel):
    total_properties: int
    active_properties: int
    rented_properties: int
    draft_properties: int
    total_inquiries: int
    pending_inquiries: int
    total_viewings: int
    upcoming_viewings: int
    occupancy_rate: int


class DashboardPropertyOut(BaseModel):
    id: str
    title: str
    location: str
    status: PropertyStatus
    image_url: str
    pending_inquiries: int
    viewings: int


class UpcomingViewingOut(BaseModel):
    id: str
    property_id: str
    property_title: str
    property_image: str
    student_id: str
    student_name: str
    scheduled_at: datetime
    status: ViewingStatus


class DashboardOut(BaseModel):
    stats: DashboardStatsOut
    property_distribution: List[StatusBucketOut]
    properties: List[DashboardPropertyOut]
    upcoming_viewings: List[UpcomingViewingOut]
    notifications: List[NotificationOut]


def person_out(u: User | None) -> PersonOut | None:
    if u is None:
        return None
    return PersonOut(id=u.id, name=u.full_name, email=u.email)


def property_out(p: Property, landlord: bool = False, saved: bool | None = None) -> PropertyOut:
    return PropertyOut(
        id=p.id,
        landlord_id=p.landlord_id,
        title=p.title,
        description=p.description,
        image_url=p.image_url or "",
        price=p.price,
        bedrooms=p.bedrooms,
        bathrooms=p.bathrooms,
        location=p.location,
        distance_to_campus=p.distance_to_campus,
        amenities=list(p.amenities or []),
        available_from=p.available_from,
        status=p.status,
        created_at=p.created_at,
        updated_at=p.updated_at,
        landlord=person_out(p.landlord) if landlord else None,
        saved=saved,
    )
