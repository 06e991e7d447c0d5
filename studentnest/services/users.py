import logging

from sqlalchemy.orm import Session

from ..errors import ValidationError
from ..models import User, UserRole
from ..schemas import CallerIdentity


log = logging.getLogger(__name__)

SELECTABLE_ROLES = (UserRole.STUDENT, UserRole.LANDLORD)


def authenticate(db: Session, identity: CallerIdentity) -> tuple[User, bool]:
    """Map an external identity onto a local user, creating it on first sight."""
    u = db.query(User).filter(User.external_id == identity.external_id).one_or_none()
    if u is not None:
        return u, False
    u = User(
        external_id=identity.external_id,
        full_name=identity.display_name or "",
        email=identity.email or "",
        role=UserRole.NONE.value,
    )
    db.add(u)
    db.flush()
    log.info("user.created id=%s external_id=%s", u.id, identity.external_id)
    return u, True


def select_role(db: Session, user: User, role: UserRole | str) -> User:
    try:
        role = UserRole(role)
    except ValueError:
        raise ValidationError(f"Unknown role {role!r}")
    if role not in SELECTABLE_ROLES:
        raise ValidationError("Role must be STUDENT or LANDLORD")
    if user.role != role.value:
        log.info("user.role_changed id=%s from=%s to=%s", user.id, user.role, role.value)
        user.role = role.value
        db.flush()
    return user


def get_role(db: Session, user_id: str) -> UserRole:
    u = db.get(User, user_id)
    if u is None:
        return UserRole.NONE
    try:
        return UserRole(u.role)
    except ValueError:
        log.warning("user.invalid_role id=%s role=%r", user_id, u.role)
        return UserRole.NONE
