"""
User registration and login handlers.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import AuthError, ConflictError, ValidationError
from app.core.security import hash_password, verify_password
from app.models.user import User, UserCreate, UserRole

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == _normalize_email(email)))
    return result.scalars().first()


async def register_user(session: AsyncSession, user_data: UserCreate) -> User:
    """
    Create a user account.

    Raises:
        ValidationError: name, email or password missing
        ConflictError: email already registered
    """
    if not (user_data.name and user_data.name.strip()) or not user_data.email or not user_data.password:
        raise ValidationError("name, email and password are required")

    email = _normalize_email(user_data.email)
    if await get_user_by_email(session, email) is not None:
        raise ConflictError("Email already registered")

    user = User(
        name=user_data.name.strip(),
        email=email,
        role=user_data.role or UserRole.OPERATOR,
        password_hash=hash_password(user_data.password),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Email already registered")
    await session.refresh(user)

    logger.info("User registered", extra={"user_id": user.id})
    return user


async def authenticate_user(session: AsyncSession, email: Optional[str], password: Optional[str]) -> User:
    """
    Check credentials and return the matching active user.

    Raises:
        AuthError: unknown email, wrong password or inactive account
    """
    if not email or not password:
        raise AuthError("Invalid credentials")

    user = await get_user_by_email(session, email)
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        logger.info("Login rejected", extra={"reason": "invalid_credentials"})
        raise AuthError("Invalid credentials")

    return user
