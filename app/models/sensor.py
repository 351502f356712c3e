"""
Sensor model - a CO2 / air quality sensor installed at a site.
"""

from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import date
from enum import Enum

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.reading import EmissionReading


class SensorStatus(str, Enum):
    """Operational status of a sensor."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class SensorBase(SQLModel):
    """Base sensor schema."""
    sensor_id: str = Field(..., primary_key=True, max_length=50, min_length=1)
    sensor_type: str = Field(default="CO2", max_length=50)
    model: Optional[str] = Field(default=None, max_length=100)
    installation_date: Optional[date] = Field(default=None)
    status: SensorStatus = Field(default=SensorStatus.ACTIVE, index=True)
    location: Optional[str] = Field(default=None, max_length=255)
    last_calibration: Optional[date] = Field(default=None)
    calibration_interval_days: int = Field(default=90, gt=0)


class Sensor(SensorBase, table=True):
    """Sensor database table."""
    __tablename__ = "sensors"
    
    user_id: int = Field(..., foreign_key="users.id", index=True)
    
    # Relationships
    owner: "User" = Relationship(back_populates="sensors")
    readings: List["EmissionReading"] = Relationship(back_populates="sensor")


class SensorCreate(SensorBase):
    """Schema for registering a sensor. Admins may assign another owner."""
    user_id: Optional[int] = None


class SensorRead(SensorBase):
    """Schema for reading a sensor."""
    user_id: int
