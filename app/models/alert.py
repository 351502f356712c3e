"""
Alert model - threshold breach notification owned by a principal.
"""

from sqlmodel import SQLModel, Field
from datetime import datetime
from enum import Enum

from app.utils.time import UTCDateTime, utc_now


class AlertSeverity(str, Enum):
    """Alert severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertBase(SQLModel):
    """Base alert schema."""
    alert_type: str = Field(..., max_length=50, index=True)
    threshold_value: float = Field(..., description="Threshold active when the alert fired")
    alert_message: str = Field(...)
    severity: AlertSeverity = Field(default=AlertSeverity.MEDIUM)
    is_read: bool = Field(default=False)
    user_id: int = Field(..., foreign_key="users.id", index=True)


class Alert(AlertBase, table=True):
    """Alert database table."""
    __tablename__ = "alerts"
    
    alert_id: str = Field(..., primary_key=True, max_length=100)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)


class AlertRead(AlertBase):
    """Schema for reading an alert."""
    alert_id: str
    created_at: datetime
