from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import create_access_token, get_current_user
from ..config import settings
from ..database import get_db
from ..models import User, UserRole
from ..schemas import CallerIdentity, DevLoginIn, RoleIn, TokenOut, UserOut
from ..services import users as users_service


router = APIRouter(prefix="/auth", tags=["auth"])


def _user_out(u: User, role: UserRole | None = None) -> UserOut:
    return UserOut(id=u.id, full_name=u.full_name, email=u.email, phone=u.phone, role=role or u.role, created_at=u.created_at)


@router.post("/dev_login", response_model=TokenOut, include_in_schema=settings.DEV_MODE)
def dev_login(payload: DevLoginIn, db: Session = Depends(get_db)):
    if not settings.DEV_MODE:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    users_service.authenticate(db, CallerIdentity(external_id=payload.external_id, display_name=payload.name or "", email=payload.email or ""))
    return TokenOut(access_token=create_access_token(payload.external_id, payload.name, payload.email))


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _user_out(user, users_service.get_role(db, user.id))


@router.post("/role", response_model=UserOut)
def choose_role(payload: RoleIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _user_out(users_service.select_role(db, user, payload.role))
