"""
Derivation of credits and alerts from an accepted emission reading.

This replaces a database trigger: the ingestion handler calls
``derive_emission`` after the reading is flushed, inside the same
transaction, so the reading and everything derived from it commit or roll
back together.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.constants import (
    ALERT_ID_PREFIX,
    ALERT_TYPE_THRESHOLD_EXCEEDED,
    CREDIT_ID_PREFIX,
    MAP_ID_PREFIX,
)
from app.core.errors import DerivationFailed
from app.handlers.alerts import classify_alert
from app.handlers.carbon import compute_credit
from app.models.alert import Alert
from app.models.audit import audit_entry
from app.models.credit import CarbonCredit, CreditReadingLink
from app.models.reading import EmissionReading
from app.models.sensor import Sensor
from app.utils.ids import new_id, derived_id
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


@dataclass
class DerivationResult:
    alert: Optional[Alert] = None
    credit: Optional[CarbonCredit] = None
    link: Optional[CreditReadingLink] = None


async def load_derivation(
    session: AsyncSession,
    reading: EmissionReading
) -> Optional[DerivationResult]:
    """Return what was already derived for a reading, or None if nothing was."""
    alert = await session.get(Alert, reading.alert_id) if reading.alert_id else None

    result = await session.execute(
        select(CreditReadingLink).where(CreditReadingLink.emission_id == reading.emission_id)
    )
    link = result.scalars().first()

    if alert is None and link is None:
        return None

    credit = await session.get(CarbonCredit, link.credit_id) if link else None
    return DerivationResult(alert=alert, credit=credit, link=link)


def _raise_alert(
    reading: EmissionReading,
    owner_id: int,
    threshold: float
) -> Optional[Alert]:
    classification = classify_alert(reading.co2_value, threshold)
    if classification is None:
        return None

    return Alert(
        alert_id=new_id(ALERT_ID_PREFIX),
        alert_type=ALERT_TYPE_THRESHOLD_EXCEEDED,
        threshold_value=threshold,
        alert_message=classification.message,
        severity=classification.severity,
        user_id=owner_id,
    )


async def derive_emission(
    session: AsyncSession,
    reading: EmissionReading,
    threshold: float
) -> DerivationResult:
    """
    Derive the alert and/or credit for one reading.

    1. Alert when co2_value > threshold, owned by the sensor's owner; the
       reading's alert_id is set to it.
    2. Credit plus exactly one link only when co2_value <= threshold.

    Runs inside the caller's transaction and never commits. A reading that
    already has an alert or a credit link is returned as-is, so a retried
    ingest never derives twice.

    Raises:
        DerivationFailed: The reading's sensor cannot be resolved
    """
    existing = await load_derivation(session, reading)
    if existing is not None:
        logger.info("Reading already derived", extra={"emission_id": reading.emission_id})
        return existing

    sensor = await session.get(Sensor, reading.sensor_id)
    if sensor is None:
        raise DerivationFailed(f"Sensor {reading.sensor_id} not found for reading {reading.emission_id}")

    result = DerivationResult()

    alert = _raise_alert(reading, sensor.user_id, threshold)
    if alert is not None:
        session.add(alert)
        await session.flush()

        reading.alert_id = alert.alert_id
        session.add(reading)
        session.add(audit_entry("alert_raised", "alert", alert.alert_id, {
            "alert_id": alert.alert_id,
            "emission_id": reading.emission_id,
            "co2_value": reading.co2_value,
            "threshold": threshold,
            "severity": alert.severity.value,
        }))
        result.alert = alert
        logger.warning(
            "Emission threshold exceeded",
            extra={
                "emission_id": reading.emission_id,
                "alert_id": alert.alert_id,
                "severity": alert.severity.value,
            },
        )

    # Over-threshold readings earn no credit, not even a deficit
    if reading.co2_value <= threshold:
        computation = compute_credit(reading.co2_value, threshold)
        credit = CarbonCredit(
            credit_id=new_id(CREDIT_ID_PREFIX),
            calculated_date=utc_now().date(),
            emission_value=reading.co2_value,
            allowed_limit=threshold,
            credit_amount=computation.credit_amount,
            status=computation.status,
        )
        link = CreditReadingLink(
            map_id=derived_id(MAP_ID_PREFIX, credit.credit_id),
            credit_id=credit.credit_id,
            emission_id=reading.emission_id,
            weight_factor=1.0,
            included_flag=True,
        )
        session.add(credit)
        await session.flush()
        session.add(link)
        session.add(audit_entry("credit_created", "carbon_credit", credit.credit_id, {
            "credit_id": credit.credit_id,
            "emission_id": reading.emission_id,
            "credit_amount": credit.credit_amount,
            "status": credit.status.value,
        }))
        await session.flush()
        result.credit = credit
        result.link = link
        logger.info(
            "Credit derived",
            extra={"emission_id": reading.emission_id, "credit_id": credit.credit_id},
        )

    return result
