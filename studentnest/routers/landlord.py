from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_landlord
from ..database import get_db
from ..models import User
from ..schemas import (
    DashboardOut,
    InquiryOut,
    InquiryRespondIn,
    InquiryStatusIn,
    LandlordPropertyDetailOut,
    PropertiesListOut,
    PropertyIn,
    PropertyOut,
    ViewingOut,
    ViewingStatusIn,
    property_out,
)
from ..services import dashboard as dashboard_service
from ..services import engagement as engagement_service
from ..services import listings as listings_service


router = APIRouter(prefix="/landlord", tags=["landlord"])


@router.get("/properties", response_model=PropertiesListOut)
def my_properties(user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    rows = listings_service.list_by_landlord(db, user.id)
    return PropertiesListOut(properties=[property_out(p) for p in rows])


@router.post("/properties", response_model=PropertyOut)
def create_property(payload: PropertyIn, user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    return property_out(listings_service.upsert(db, payload, user.id))


@router.get("/properties/{property_id}", response_model=LandlordPropertyDetailOut)
def get_property(property_id: str, user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    return engagement_service.get_for_landlord(db, property_id, user.id)


@router.put("/properties/{property_id}", response_model=PropertyOut)
def update_property(property_id: str, payload: PropertyIn, user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    return property_out(listings_service.upsert(db, payload, user.id, property_id=property_id))


@router.delete("/properties/{property_id}")
def delete_property(property_id: str, user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    listings_service.delete(db, property_id, user.id)
    return {"detail": "deleted"}


@router.post("/inquiries/{inquiry_id}/respond", response_model=InquiryOut)
def respond_inquiry(inquiry_id: str, payload: InquiryRespondIn, user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    i = engagement_service.respond_to_inquiry(db, inquiry_id, payload.response, landlord_id=user.id)
    return engagement_service.inquiry_out(i)


@router.patch("/inquiries/{inquiry_id}", response_model=InquiryOut)
def set_inquiry_status(inquiry_id: str, payload: InquiryStatusIn, user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    i = engagement_service.update_inquiry_status(db, inquiry_id, payload.status, landlord_id=user.id)
    return engagement_service.inquiry_out(i)


@router.patch("/viewings/{viewing_id}", response_model=ViewingOut)
def set_viewing_status(viewing_id: str, payload: ViewingStatusIn, user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    v = engagement_service.update_viewing_status(db, viewing_id, payload.status, landlord_id=user.id)
    return engagement_service.viewing_out(v)


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(user: User = Depends(get_current_landlord), db: Session = Depends(get_db)):
    return dashboard_service.landlord_summary(db, user.id)
