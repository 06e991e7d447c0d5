from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import MarkedReadOut, NotificationOut, NotificationsListOut, UnreadCountOut
from ..services import notifications as notifications_service


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationsListOut)
def list_notifications(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = notifications_service.list_for_user(db, user.id)
    return NotificationsListOut(
        items=[notifications_service.to_out(n) for n in rows],
        unread=notifications_service.count_unread(db, user.id),
    )


@router.get("/unread_count", response_model=UnreadCountOut)
def unread_count(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return UnreadCountOut(unread=notifications_service.count_unread(db, user.id))


@router.post("/read_all", response_model=MarkedReadOut)
def read_all(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return MarkedReadOut(updated=notifications_service.mark_all_read(db, user.id))


@router.post("/{notification_id}/read", response_model=NotificationOut)
def read_one(notification_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    n = notifications_service.mark_read(db, notification_id, user_id=user.id)
    return notifications_service.to_out(n)
