"""
Alert classification and alert state handlers.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import CRITICAL_MULTIPLIER, HIGH_MULTIPLIER
from app.handlers.carbon import require_number
from app.models.alert import Alert, AlertSeverity
from app.models.audit import audit_entry
from app.utils.numbers import format_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertClassification:
    severity: AlertSeverity
    message: str


def alert_message(emission_value: float, threshold: float) -> str:
    return (
        f"CO2 emission exceeded threshold: {format_value(emission_value)} kg/hour "
        f"(Limit: {format_value(threshold)} kg/hour)"
    )


def _exceeds(value: float, limit: float, multiplier: float) -> bool:
    # Compared in decimal: 3.6 sits on 3 * 1.2, not above it
    return Decimal(repr(value)) > Decimal(repr(limit)) * Decimal(repr(multiplier))


def classify_alert(emission_value: Any, threshold: Any) -> Optional[AlertClassification]:
    """
    Decide whether a reading breaches the threshold and how badly.

    Returns None when ``emission_value <= threshold``. Otherwise severity is
    critical above 1.2x the threshold, high above 1.1x, medium below that.
    A value exactly on a band edge falls into the lower band.
    """
    value = require_number(emission_value, "emission_value")
    limit = require_number(threshold, "threshold")

    if value <= limit:
        return None

    if _exceeds(value, limit, CRITICAL_MULTIPLIER):
        severity = AlertSeverity.CRITICAL
    elif _exceeds(value, limit, HIGH_MULTIPLIER):
        severity = AlertSeverity.HIGH
    else:
        severity = AlertSeverity.MEDIUM

    return AlertClassification(severity=severity, message=alert_message(value, limit))


async def mark_alert_read(
    session: AsyncSession,
    alert_id: str,
    user_id: int
) -> Optional[Alert]:
    """Mark one of the principal's alerts as read. Returns None if not theirs."""
    alert = await session.get(Alert, alert_id)
    if alert is None or alert.user_id != user_id:
        return None

    if not alert.is_read:
        alert.is_read = True
        session.add(audit_entry("alert_read", "alert", alert_id, {"alert_id": alert_id, "user_id": user_id}))
        await session.commit()
        await session.refresh(alert)
        logger.info("Alert marked read", extra={"alert_id": alert_id, "user_id": user_id})

    return alert
