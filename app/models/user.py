"""
User model - an authenticated principal owning sensors and alerts.
"""

from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from enum import Enum

from app.utils.time import UTCDateTime, utc_now

if TYPE_CHECKING:
    from app.models.sensor import Sensor


class UserRole(str, Enum):
    """Roles a principal can hold."""
    OPERATOR = "operator"
    ADMIN = "admin"


class UserBase(SQLModel):
    """Base user schema."""
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255, unique=True, index=True)
    role: UserRole = Field(default=UserRole.OPERATOR)


class User(UserBase, table=True):
    """User database table."""
    __tablename__ = "users"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str = Field(..., max_length=255)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    
    # Relationships
    sensors: List["Sensor"] = Relationship(back_populates="owner")


class UserCreate(SQLModel):
    """Registration payload."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None


class UserLogin(SQLModel):
    """Login payload."""
    email: Optional[str] = None
    password: Optional[str] = None


class UserRead(UserBase):
    """Public view of a user, never includes credential material."""
    id: int
