"""
Registration and login endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Any

from app.core.database import get_session
from app.core.security import create_access_token
from app.handlers.auth import register_user, authenticate_user
from app.models.user import UserCreate, UserLogin, UserRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    user: UserCreate,
    session: AsyncSession = Depends(get_session)
) -> Dict[str, Any]:
    """Register a new user. 409 if the email is taken, 400 on missing fields."""
    created = await register_user(session, user)
    return {"message": "Registration successful", "user_id": created.id}


@router.post("/login")
async def login_endpoint(
    credentials: UserLogin,
    session: AsyncSession = Depends(get_session)
) -> Dict[str, Any]:
    """Exchange email and password for a bearer token."""
    user = await authenticate_user(session, credentials.email, credentials.password)
    return {
        "message": "Login successful",
        "token": create_access_token(user),
        "user": UserRead.model_validate(user).model_dump(mode="json")
    }
