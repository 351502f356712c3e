"""
Password hashing, bearer token issuance and the authenticated principal.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext

from app.core.config import Settings, get_settings
from app.core.errors import AuthError, InvalidCredential
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# auto_error=False so a missing header is reported as 401 by us, not 403 by FastAPI
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated identity as seen by the rest of the application."""
    user_id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def can_access(self, owner_id: int) -> bool:
        return self.is_admin or owner_id == self.user_id


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user: User, settings: Optional[Settings] = None) -> str:
    """Issue a signed token for a user."""
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    role = user.role.value if isinstance(user.role, UserRole) else str(user.role)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.token_ttl_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> Principal:
    """
    Verify a token and return the principal it names.

    Raises:
        InvalidCredential: Bad signature, malformed token or expired token
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise InvalidCredential("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise InvalidCredential("Invalid token")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise InvalidCredential("Invalid token payload")

    return Principal(
        user_id=user_id,
        email=payload.get("email", ""),
        role=payload.get("role", UserRole.OPERATOR.value),
    )


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Principal:
    """Dependency resolving the bearer token into a principal."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required")
    return decode_access_token(credentials.credentials)
