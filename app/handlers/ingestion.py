"""
Emission ingestion and sensor registration handlers.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import Settings, get_settings
from app.core.errors import (
    CarbonError,
    ConflictError,
    DerivationFailed,
    PermissionDenied,
    StoreUnavailable,
    ValidationError,
)
from app.core.security import Principal
from app.handlers.derivation import DerivationResult, derive_emission, load_derivation
from app.handlers.validation import validate_reading
from app.models.audit import audit_entry
from app.models.reading import EmissionPayload, EmissionReading
from app.models.sensor import Sensor, SensorCreate
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    reading: EmissionReading
    derivation: DerivationResult
    created: bool

    @property
    def alert_id(self) -> Optional[str]:
        return self.derivation.alert.alert_id if self.derivation.alert else None

    @property
    def credit_id(self) -> Optional[str]:
        return self.derivation.credit.credit_id if self.derivation.credit else None


async def _replay(
    session: AsyncSession,
    stored: EmissionReading,
    submitted: EmissionReading
) -> IngestResult:
    """Answer a re-submitted emission_id with what was stored the first time."""
    if stored.sensor_id != submitted.sensor_id:
        raise ConflictError(f"emission_id {stored.emission_id} already used by another sensor")

    derivation = await load_derivation(session, stored) or DerivationResult()
    logger.info("Duplicate reading submission ignored", extra={"emission_id": stored.emission_id})
    return IngestResult(reading=stored, derivation=derivation, created=False)


async def _persist_and_derive(
    session: AsyncSession,
    reading: EmissionReading,
    threshold: float
) -> IngestResult:
    session.add(reading)
    await session.flush()

    derivation = await derive_emission(session, reading, threshold)

    session.add(audit_entry("reading_ingested", "emission_reading", reading.emission_id, reading.model_dump()))
    await session.commit()
    return IngestResult(reading=reading, derivation=derivation, created=True)


async def _ingest(
    session: AsyncSession,
    payload: EmissionPayload,
    principal: Principal,
    threshold: float
) -> IngestResult:
    reading = await validate_reading(session, payload, principal)

    stored = await session.get(EmissionReading, reading.emission_id)
    if stored is not None:
        return await _replay(session, stored, reading)

    try:
        return await _persist_and_derive(session, reading, threshold)
    except IntegrityError:
        # Lost a race against a concurrent submission of the same emission_id
        await session.rollback()
        stored = await session.get(EmissionReading, reading.emission_id)
        if stored is None:
            logger.exception(
                "Integrity failure during derivation",
                extra={"emission_id": reading.emission_id, "sensor_id": reading.sensor_id},
            )
            raise DerivationFailed(f"Derivation failed for reading {reading.emission_id}")
        return await _replay(session, stored, reading)


async def ingest_emission(
    session: AsyncSession,
    payload: EmissionPayload,
    principal: Principal,
    settings: Optional[Settings] = None
) -> IngestResult:
    """
    Validate, persist and derive one reading as a single transaction.

    The emission_id is the idempotency key: re-submitting a stored id returns
    the stored reading and its derivation without writing anything. Every
    store access, lookups included, runs under DB_TIMEOUT_SECONDS.

    Raises:
        ValidationError: Bad payload or unknown sensor
        ConflictError: The emission_id belongs to another sensor's reading
        StoreUnavailable: Store unreachable or the unit exceeded its timeout
        DerivationFailed: Any other persistence failure; nothing was written
    """
    settings = settings or get_settings()

    log_context = {"emission_id": payload.emission_id, "sensor_id": payload.sensor_id}
    try:
        return await asyncio.wait_for(
            _ingest(session, payload, principal, settings.emission_threshold),
            timeout=settings.db_timeout_seconds,
        )
    except asyncio.TimeoutError:
        await session.rollback()
        logger.error("Ingestion timed out", extra=log_context)
        raise StoreUnavailable("Timed out writing reading; retry with the same emission_id")
    except (OperationalError, InterfaceError):
        await session.rollback()
        logger.exception("Store unavailable during ingestion", extra=log_context)
        raise StoreUnavailable("Emission store unavailable; retry with the same emission_id")
    except CarbonError:
        await session.rollback()
        raise
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Derivation failed", extra=log_context)
        raise DerivationFailed("Derivation failed; retry with the same emission_id")


async def create_sensor(
    session: AsyncSession,
    sensor_data: SensorCreate,
    principal: Principal
) -> Sensor:
    """Register a sensor for the principal (admins may name another owner)."""
    owner_id = sensor_data.user_id if sensor_data.user_id is not None else principal.user_id
    if owner_id != principal.user_id:
        if not principal.is_admin:
            raise PermissionDenied("Only administrators can register sensors for other users")
        if await session.get(User, owner_id) is None:
            raise ValidationError(f"Unknown user {owner_id}")

    if await session.get(Sensor, sensor_data.sensor_id) is not None:
        raise ConflictError(f"Sensor {sensor_data.sensor_id} already exists")

    sensor = Sensor(**sensor_data.model_dump(exclude={"user_id"}), user_id=owner_id)
    session.add(sensor)
    session.add(audit_entry("sensor_created", "sensor", sensor.sensor_id, sensor_data.model_dump()))
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"Sensor {sensor_data.sensor_id} already exists")
    await session.refresh(sensor)

    logger.info("Sensor registered", extra={"sensor_id": sensor.sensor_id, "user_id": owner_id})
    return sensor


async def get_sensors(session: AsyncSession, user_id: int) -> List[Sensor]:
    """Return the sensors owned by a user."""
    statement = select(Sensor).where(Sensor.user_id == user_id).order_by(Sensor.sensor_id)
    result = await session.execute(statement)
    return list(result.scalars().all())
