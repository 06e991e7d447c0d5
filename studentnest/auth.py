import datetime as dt
import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .models import User, UserRole
from .schemas import CallerIdentity
from .services import users as users_service


log = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_jwks_clients: dict[str, PyJWKClient] = {}


def create_access_token(external_id: str, name: str | None = None, email: str | None = None) -> str:
    """Dev-only token minting; production tokens come from the identity provider."""
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": external_id,
        "name": name or "",
        "email": email or "",
        "iat": int(now.timestamp()),
        "exp": int((now + settings.jwt_delta).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def _decode_with_jwks(token: str, jwks_url: str) -> dict:
    client = _jwks_clients.get(jwks_url)
    if client is None:
        client = _jwks_clients[jwks_url] = PyJWKClient(jwks_url)
    signing_key = client.get_signing_key_from_jwt(token).key
    options = {"require": ["exp", "sub"], "verify_aud": settings.JWT_AUDIENCE is not None}
    return jwt.decode(
        token,
        signing_key,
        algorithms=["RS256"],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
        options=options,
    )


def decode_identity(token: str) -> CallerIdentity:
    if settings.JWT_JWKS_URL:
        payload = _decode_with_jwks(token, settings.JWT_JWKS_URL)
    else:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"], options={"require": ["exp", "sub"]})
    return CallerIdentity(
        external_id=str(payload["sub"]),
        display_name=payload.get("name") or "",
        email=payload.get("email") or "",
    )


def current_caller(creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> CallerIdentity:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    try:
        return decode_identity(creds.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except (jwt.InvalidTokenError, jwt.PyJWKClientError) as e:
        log.info("auth.rejected reason=%s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_current_user(identity: CallerIdentity = Depends(current_caller), db: Session = Depends(get_db)) -> User:
    user, _ = users_service.authenticate(db, identity)
    return user


def require_role(role: UserRole):
    def _dep(user: User = Depends(get_current_user)) -> User:
        if user.role != role.value:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{role.value.lower()}_only")
        return user

    return _dep


get_current_landlord = require_role(UserRole.LANDLORD)
get_current_student = require_role(UserRole.STUDENT)
