from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_student
from ..database import get_db
from ..models import User
from ..schemas import (
    InquiryCreateIn,
    InquiryOut,
    PropertiesListOut,
    PropertyOut,
    SavedListOut,
    SavedPropertyOut,
    StudentInquiriesOut,
    ToggleSavedOut,
    ViewingCreateIn,
    ViewingOut,
    ViewingsListOut,
    property_out,
)
from ..services import engagement as engagement_service
from ..services import filters
from ..services import listings as listings_service
from ..services import saved as saved_service


router = APIRouter(tags=["student"])


@router.get("/properties", response_model=PropertiesListOut)
def browse_properties(
    q: Optional[str] = None,
    bedrooms: Optional[str] = Query(None, description="exact count, '3+' or 'all'"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    amenities: Optional[List[str]] = Query(None),
    sort: Literal["newest", "price_low", "price_high"] = "newest",
    user: User = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    rows = listings_service.list_active(db)
    rows = filters.filter_properties(rows, search=q, bedrooms=bedrooms, min_price=min_price, max_price=max_price, amenities=amenities)
    rows = filters.sort_properties(rows, sort)
    saved = saved_service.saved_ids(db, user.id)
    return PropertiesListOut(properties=[property_out(p, landlord=True, saved=p.id in saved) for p in rows])


@router.get("/properties/{property_id}", response_model=PropertyOut)
def get_property(property_id: str, user: User = Depends(get_current_student), db: Session = Depends(get_db)):
    p = listings_service.get_active(db, property_id)
    return property_out(p, landlord=True, saved=p.id in saved_service.saved_ids(db, user.id))


@router.post("/properties/{property_id}/inquiries", response_model=InquiryOut)
def send_inquiry(property_id: str, payload: InquiryCreateIn, user: User = Depends(get_current_student), db: Session = Depends(get_db)):
    i = engagement_service.send_inquiry(db, property_id, user.id, payload.message)
    return engagement_service.inquiry_out(i, with_student=False)


@router.post("/properties/{property_id}/viewings", response_model=ViewingOut)
def schedule_viewing(property_id: str, payload: ViewingCreateIn, user: User = Depends(get_current_student), db: Session = Depends(get_db)):
    v = engagement_service.schedule_viewing(db, property_id, user.id, payload.scheduled_at, payload.notes)
    return engagement_service.viewing_out(v, with_student=False)


@router.get("/inquiries", response_model=StudentInquiriesOut)
def my_inquiries(user: User = Depends(get_current_student), db: Session = Depends(get_db)):
    return StudentInquiriesOut(items=engagement_service.get_for_student(db, user.id))


@router.get("/viewings", response_model=ViewingsListOut)
def my_viewings(user: User = Depends(get_current_student), db: Session = Depends(get_db)):
    rows = engagement_service.list_viewings_for_student(db, user.id)
    return ViewingsListOut(items=[engagement_service.viewing_out(v, with_student=False) for v in rows])


@router.get("/saved", response_model=SavedListOut)
def my_saved(user: User = Depends(get_current_student), db: Session = Depends(get_db)):
    items = [
        SavedPropertyOut(**property_out(p, landlord=True, saved=True).model_dump(), saved_at=saved_at)
        for p, saved_at in saved_service.list_saved(db, user.id)
    ]
    return SavedListOut(items=items)


@router.post("/saved/{property_id}/toggle", response_model=ToggleSavedOut)
def toggle_saved(property_id: str, user: User = Depends(get_current_student), db: Session = Depends(get_db)):
    return ToggleSavedOut(property_id=property_id, saved=saved_service.toggle(db, user.id, property_id))
