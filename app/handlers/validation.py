"""
Reading validation - normalizes an ingestion payload into an unsaved reading.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import EMISSION_ID_PREFIX
from app.core.errors import ValidationError
from app.core.security import Principal
from app.models.reading import EmissionPayload, EmissionReading
from app.models.sensor import Sensor
from app.utils.ids import new_id
from app.utils.numbers import is_finite_number
from app.utils.time import utc_now, to_utc

OPTIONAL_MEASUREMENTS = ("pm25_value", "temperature", "humidity")


def _optional_measurement(payload: EmissionPayload, name: str) -> Optional[float]:
    value: Any = getattr(payload, name)
    if value is None:
        return None
    if not is_finite_number(value):
        raise ValidationError(f"{name} must be a finite number")
    return float(value)


async def resolve_sensor(
    session: AsyncSession,
    sensor_id: Any,
    principal: Principal
) -> Sensor:
    """Look up the target sensor; sensors of other principals count as unknown."""
    if sensor_id is None or not str(sensor_id).strip():
        raise ValidationError("sensor_id is required")

    sensor_key = str(sensor_id).strip()
    sensor = await session.get(Sensor, sensor_key)
    if sensor is None or not principal.can_access(sensor.user_id):
        raise ValidationError(f"Unknown sensor {sensor_key}")
    return sensor


async def validate_reading(
    session: AsyncSession,
    payload: EmissionPayload,
    principal: Principal
) -> EmissionReading:
    """
    Validate an incoming reading and build the record to persist.

    Assigns an emission_id when the producer did not supply one and a
    server-side timestamp when none was given. Reads only; nothing is added
    to the session.

    Raises:
        ValidationError: Missing/unknown sensor or a missing/non-finite value
    """
    sensor = await resolve_sensor(session, payload.sensor_id, principal)

    if payload.co2_value is None:
        raise ValidationError("co2_value is required")
    if not is_finite_number(payload.co2_value):
        raise ValidationError("co2_value must be a finite number")

    measurements = {name: _optional_measurement(payload, name) for name in OPTIONAL_MEASUREMENTS}

    emission_id = (payload.emission_id or "").strip() or new_id(EMISSION_ID_PREFIX)
    timestamp = to_utc(payload.timestamp) if payload.timestamp else utc_now()

    return EmissionReading(
        emission_id=emission_id,
        sensor_id=sensor.sensor_id,
        timestamp=timestamp,
        co2_value=float(payload.co2_value),
        **measurements
    )
