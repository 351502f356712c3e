"""
Read-only projections over readings, credits and alerts.

Every query is scoped to one principal through sensor ownership (readings,
credits) or direct ownership (alerts).
"""

from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func

from app.core.constants import RECENT_LIMIT
from app.models.alert import Alert
from app.models.credit import CarbonCredit, CreditReadingLink, CreditStatus
from app.models.reading import EmissionReading
from app.models.sensor import Sensor, SensorStatus
from app.utils.time import month_key


def _owned_credits(user_id: int, *columns):
    """Credits reachable from the user's sensors via their readings."""
    return (
        select(*(columns or (CarbonCredit,)))
        .select_from(CarbonCredit)
        .join(CreditReadingLink, CreditReadingLink.credit_id == CarbonCredit.credit_id)
        .join(EmissionReading, EmissionReading.emission_id == CreditReadingLink.emission_id)
        .join(Sensor, Sensor.sensor_id == EmissionReading.sensor_id)
        .where(Sensor.user_id == user_id)
    )


async def get_recent_readings(
    session: AsyncSession,
    user_id: int,
    limit: int = RECENT_LIMIT
) -> List[Dict[str, Any]]:
    """Latest readings of the user's sensors, newest first, with sensor details."""
    statement = (
        select(EmissionReading, Sensor.location, Sensor.sensor_type)
        .join(Sensor, Sensor.sensor_id == EmissionReading.sensor_id)
        .where(Sensor.user_id == user_id)
        .order_by(EmissionReading.timestamp.desc(), EmissionReading.emission_id.desc())
        .limit(limit)
    )
    result = await session.execute(statement)

    return [
        {
            **reading.model_dump(),
            "location": location,
            "sensor_type": sensor_type,
        }
        for reading, location, sensor_type in result.all()
    ]


async def get_dashboard_stats(session: AsyncSession, user_id: int) -> Dict[str, Any]:
    """
    Headline numbers for the dashboard.

    Returns:
        current_emission, total_credits, active_sensors, unread_alerts; all 0
        for a user without data. Evaluated as one statement so the four
        values describe the same snapshot.
    """
    current_emission = (
        select(EmissionReading.co2_value)
        .select_from(EmissionReading)
        .join(Sensor, Sensor.sensor_id == EmissionReading.sensor_id)
        .where(Sensor.user_id == user_id)
        .order_by(EmissionReading.timestamp.desc(), EmissionReading.emission_id.desc())
        .limit(1)
        .scalar_subquery()
    )
    total_credits = (
        _owned_credits(user_id, func.coalesce(func.sum(CarbonCredit.credit_amount), 0.0))
        .scalar_subquery()
    )
    active_sensors = (
        select(func.count())
        .select_from(Sensor)
        .where(Sensor.user_id == user_id, Sensor.status == SensorStatus.ACTIVE)
        .scalar_subquery()
    )
    unread_alerts = (
        select(func.count())
        .select_from(Alert)
        .where(Alert.user_id == user_id, Alert.is_read.is_(False))
        .scalar_subquery()
    )

    result = await session.execute(
        select(
            current_emission.label("current_emission"),
            total_credits.label("total_credits"),
            active_sensors.label("active_sensors"),
            unread_alerts.label("unread_alerts"),
        )
    )
    row = result.one()

    return {
        "current_emission": row.current_emission or 0,
        "total_credits": row.total_credits or 0,
        "active_sensors": row.active_sensors or 0,
        "unread_alerts": row.unread_alerts or 0,
    }


async def get_alerts(
    session: AsyncSession,
    user_id: int,
    limit: int = RECENT_LIMIT,
    unread_only: bool = False
) -> List[Alert]:
    """Latest alerts of a user, newest first."""
    statement = select(Alert).where(Alert.user_id == user_id)
    if unread_only:
        statement = statement.where(Alert.is_read.is_(False))
    statement = statement.order_by(Alert.created_at.desc(), Alert.alert_id.desc()).limit(limit)

    result = await session.execute(statement)
    return list(result.scalars().all())


async def get_monthly_credit_summary(session: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
    """
    Credits grouped by calendar month of calculation, newest month first.

    Each entry: month (YYYY-MM), credits_earned, credits_deficit (absolute),
    net_credits, total_calculations.
    """
    result = await session.execute(_owned_credits(user_id))
    credits = result.scalars().all()

    months: Dict[str, Dict[str, Any]] = defaultdict(lambda: {
        "credits_earned": 0.0,
        "credits_deficit": 0.0,
        "net_credits": 0.0,
        "total_calculations": 0,
    })
    for credit in credits:
        bucket = months[month_key(credit.calculated_date)]
        if credit.status == CreditStatus.EARNED:
            bucket["credits_earned"] += credit.credit_amount
        elif credit.status == CreditStatus.DEFICIT:
            bucket["credits_deficit"] += abs(credit.credit_amount)
        bucket["net_credits"] += credit.credit_amount
        bucket["total_calculations"] += 1

    return [
        {"month": month, **months[month]}
        for month in sorted(months, reverse=True)
    ]


async def get_period_summary(
    session: AsyncSession,
    user_id: int,
    start_date: date,
    end_date: date
) -> Dict[str, Any]:
    """Total emission and credits of a user over an inclusive date range."""
    if end_date < start_date:
        raise ValueError("end_date must not be before start_date")

    start_datetime = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    end_datetime = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)

    emission_result = await session.execute(
        select(func.coalesce(func.sum(EmissionReading.co2_value), 0.0), func.count(EmissionReading.emission_id))
        .select_from(EmissionReading)
        .join(Sensor, Sensor.sensor_id == EmissionReading.sensor_id)
        .where(
            Sensor.user_id == user_id,
            EmissionReading.timestamp >= start_datetime,
            EmissionReading.timestamp < end_datetime
        )
    )
    total_emission, reading_count = emission_result.one()

    credit_result = await session.execute(
        _owned_credits(user_id, func.coalesce(func.sum(CarbonCredit.credit_amount), 0.0))
        .where(
            CarbonCredit.calculated_date >= start_date,
            CarbonCredit.calculated_date <= end_date
        )
    )
    total_credits = credit_result.scalar() or 0.0

    return {
        "period_start": start_date.isoformat(),
        "period_end": end_date.isoformat(),
        "total_emission": total_emission or 0.0,
        "reading_count": reading_count or 0,
        "total_credits": total_credits,
    }
