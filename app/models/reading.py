"""
Emission reading model - one timestamped sensor observation.
"""

from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, Any, TYPE_CHECKING
from datetime import datetime

from app.utils.time import UTCDateTime

if TYPE_CHECKING:
    from app.models.sensor import Sensor


class EmissionReadingBase(SQLModel):
    """Base emission reading schema."""
    sensor_id: str = Field(..., foreign_key="sensors.sensor_id", max_length=50)
    timestamp: datetime = Field(..., description="Timestamp of the reading (UTC)", sa_type=UTCDateTime, index=True)
    co2_value: float = Field(..., description="CO2 emission in kg/hour")
    pm25_value: Optional[float] = Field(default=None, description="PM2.5 in µg/m³")
    temperature: Optional[float] = Field(default=None, description="Temperature in °C")
    humidity: Optional[float] = Field(default=None, description="Relative humidity in %")


class EmissionReading(EmissionReadingBase, table=True):
    """Emission reading database table."""
    __tablename__ = "emission_readings"
    
    emission_id: str = Field(..., primary_key=True, max_length=100)
    # Set at most once, by the derivation step
    alert_id: Optional[str] = Field(default=None, foreign_key="alerts.alert_id", index=True)
    
    # Relationship
    sensor: "Sensor" = Relationship(back_populates="readings")


class EmissionPayload(SQLModel):
    """
    Raw ingestion payload, validated by the reading validator rather than
    by schema so that missing fields surface as domain validation errors.
    """
    sensor_id: Optional[Any] = None
    co2_value: Optional[Any] = None
    pm25_value: Optional[Any] = None
    temperature: Optional[Any] = None
    humidity: Optional[Any] = None
    emission_id: Optional[str] = Field(default=None, max_length=100)
    timestamp: Optional[datetime] = None


class EmissionIngestResponse(SQLModel):
    """Identifiers produced by one ingestion."""
    emission_id: str
    alert_id: Optional[str] = None
    credit_id: Optional[str] = None
    duplicate: bool = False

