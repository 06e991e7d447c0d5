import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def default_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserRole(str, enum.Enum):
    NONE = "NONE"
    STUDENT = "STUDENT"
    LANDLORD = "LANDLORD"


class PropertyStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    RENTED = "RENTED"
    ARCHIVED = "ARCHIVED"


class InquiryStatus(str, enum.Enum):
    PENDING = "PENDING"
    RESPONDED = "RESPONDED"
    DECLINED = "DECLINED"


class ViewingStatus(str, enum.Enum):
    REQUESTED = "REQUESTED"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"
    COMPLETED = "COMPLETED"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=default_uuid)
    external_id = Column(String(128), nullable=False, unique=True, index=True)
    full_name = Column(String(160), nullable=False, default="")
    email = Column(String(254), nullable=False, default="")
    phone = Column(String(32), nullable=True)
    role = Column(String(16), nullable=False, default=UserRole.NONE.value)  # NONE|STUDENT|LANDLORD
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    properties = relationship("Property", back_populates="landlord")


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        Index("ix_properties_landlord", "landlord_id"),
        Index("ix_properties_status_created", "status", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=default_uuid)
    landlord_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    title = Column(String(160), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String(512), nullable=False, default="")
    price = Column(Float, nullable=False)
    bedrooms = Column(Integer, nullable=False)
    bathrooms = Column(Integer, nullable=False)
    location = Column(String(255), nullable=False)
    distance_to_campus = Column(String(64), nullable=True)
    amenities = Column(JSON, nullable=False, default=list)
    available_from = Column(Date, nullable=True)
    status = Column(String(16), nullable=False, default=PropertyStatus.DRAFT.value)  # DRAFT|ACTIVE|RENTED|ARCHIVED
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    landlord = relationship("User", back_populates="properties")
    inquiries = relationship("Inquiry", back_populates="property", cascade="all, delete-orphan")
    viewings = relationship("Viewing", back_populates="property", cascade="all, delete-orphan")
    saved_entries = relationship("SavedProperty", back_populates="property", cascade="all, delete-orphan")
    # No delete cascade: notifications outlive the listing with property_id nulled.
    notifications = relationship("Notification", back_populates="property")


class Inquiry(Base):
    __tablename__ = "inquiries"
    __table_args__ = (Index("ix_inquiries_student", "student_id"), Index("ix_inquiries_property", "property_id"),)

    id = Column(String(36), primary_key=True, default=default_uuid)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=InquiryStatus.PENDING.value)  # PENDING|RESPONDED|DECLINED
    response = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    property = relationship("Property", back_populates="inquiries")
    student = relationship("User")


class Viewing(Base):
    __tablename__ = "viewings"
    __table_args__ = (Index("ix_viewings_student", "student_id"), Index("ix_viewings_property_scheduled", "property_id", "scheduled_at"),)

    id = Column(String(36), primary_key=True, default=default_uuid)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    scheduled_at = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=ViewingStatus.REQUESTED.value)  # REQUESTED|CONFIRMED|DECLINED|COMPLETED
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    property = relationship("Property", back_populates="viewings")
    student = relationship("User")


class SavedProperty(Base):
    __tablename__ = "saved_properties"
    __table_args__ = (
        UniqueConstraint("student_id", "property_id", name="uq_saved_properties_student_property"),
    )

    id = Column(String(36), primary_key=True, default=default_uuid)
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    property = relationship("Property", back_populates="saved_entries")


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_user_created", "user_id", "created_at"),)

    id = Column(String(36), primary_key=True, default=default_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    property = relationship("Property", back_populates="notifications")
