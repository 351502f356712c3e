"""
Emission ingestion and reading endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Dict, Any

from app.core.database import get_session
from app.core.security import Principal, get_current_principal
from app.handlers.carbon import get_credits_for_reading
from app.handlers.ingestion import ingest_emission
from app.handlers.reports import get_recent_readings
from app.models.credit import CarbonCreditRead
from app.models.reading import EmissionPayload, EmissionIngestResponse, EmissionReading
from app.models.sensor import Sensor

router = APIRouter(prefix="/emissions", tags=["emissions"])


@router.post("", response_model=EmissionIngestResponse, status_code=status.HTTP_201_CREATED)
async def ingest_emission_endpoint(
    payload: EmissionPayload,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
):
    """
    Record a reading and derive its credit or alert synchronously.

    Supplying an emission_id makes the call idempotent: replays return 200
    with the identifiers stored the first time.
    """
    result = await ingest_emission(session, payload, principal)
    if not result.created:
        response.status_code = status.HTTP_200_OK

    return EmissionIngestResponse(
        emission_id=result.reading.emission_id,
        alert_id=result.alert_id,
        credit_id=result.credit_id,
        duplicate=not result.created
    )


@router.get("/recent")
async def recent_emissions_endpoint(
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
) -> List[Dict[str, Any]]:
    """Latest 50 readings of the caller's sensors, newest first."""
    return await get_recent_readings(session, principal.user_id)


@router.get("/{emission_id}/credits", response_model=List[CarbonCreditRead])
async def reading_credits_endpoint(
    emission_id: str,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
):
    """Credits derived from one of the caller's readings; empty for a breach."""
    reading = await session.get(EmissionReading, emission_id)
    sensor = await session.get(Sensor, reading.sensor_id) if reading else None
    if sensor is None or not principal.can_access(sensor.user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Reading {emission_id} not found"
        )
    return await get_credits_for_reading(session, emission_id)
