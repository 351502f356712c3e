"""
Sensor management endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_session
from app.core.security import Principal, get_current_principal
from app.handlers.ingestion import create_sensor, get_sensors
from app.models.sensor import SensorCreate, SensorRead

router = APIRouter(prefix="/sensors", tags=["sensors"])


@router.post("", response_model=SensorRead, status_code=status.HTTP_201_CREATED)
async def create_sensor_endpoint(
    sensor: SensorCreate,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
):
    """Register a sensor for the caller, or for another user when admin."""
    return await create_sensor(session, sensor, principal)


@router.get("", response_model=List[SensorRead])
async def list_sensors_endpoint(
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
):
    """List the caller's sensors."""
    return await get_sensors(session, principal.user_id)
