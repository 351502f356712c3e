"""Tests for how timestamps are written to and read from the store."""

from datetime import datetime, timedelta, timezone

from sqlmodel import select

from app.models.alert import Alert, AlertSeverity
from app.models.audit import AuditLog, audit_entry
from app.models.reading import EmissionReading
from app.models.user import User


async def test_reading_timestamps_load_as_utc(session_factory, sensor) -> None:
    async with session_factory() as writer:
        writer.add(EmissionReading(
            emission_id="EM_offset",
            sensor_id="SENSOR_001",
            timestamp=datetime(2024, 6, 1, 10, 30, tzinfo=timezone(timedelta(hours=2))),
            co2_value=850,
        ))
        writer.add(EmissionReading(
            emission_id="EM_naive",
            sensor_id="SENSOR_001",
            timestamp=datetime(2024, 6, 1, 9, 0),
            co2_value=900,
        ))
        await writer.commit()

    async with session_factory() as reader:
        offset = await reader.get(EmissionReading, "EM_offset")
        naive = await reader.get(EmissionReading, "EM_naive")

    assert offset.timestamp == datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc)
    assert offset.timestamp.utcoffset() == timedelta(0)
    assert naive.timestamp == datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


async def test_readings_order_by_utc_instant(session_factory, sensor) -> None:
    async with session_factory() as writer:
        # 09:00+02:00 is earlier than 08:00Z
        writer.add(EmissionReading(
            emission_id="EM_later",
            sensor_id="SENSOR_001",
            timestamp=datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc),
            co2_value=800,
        ))
        writer.add(EmissionReading(
            emission_id="EM_earlier",
            sensor_id="SENSOR_001",
            timestamp=datetime(2024, 6, 1, 9, 0, tzinfo=timezone(timedelta(hours=2))),
            co2_value=800,
        ))
        await writer.commit()

    async with session_factory() as reader:
        result = await reader.execute(select(EmissionReading.emission_id).order_by(EmissionReading.timestamp))
        assert list(result.scalars().all()) == ["EM_earlier", "EM_later"]


async def test_created_at_defaults_are_aware(session_factory, operator) -> None:
    async with session_factory() as writer:
        writer.add(Alert(
            alert_id="ALERT_1",
            alert_type="threshold_exceeded",
            threshold_value=1000.0,
            alert_message="CO2 emission exceeded threshold: 1300 kg/hour (Limit: 1000 kg/hour)",
            severity=AlertSeverity.CRITICAL,
            user_id=operator.id,
        ))
        writer.add(audit_entry("alert_raised", "alert", "ALERT_1", {"alert_id": "ALERT_1"}))
        await writer.commit()

    async with session_factory() as reader:
        alert = await reader.get(Alert, "ALERT_1")
        user = await reader.get(User, operator.id)
        audit = (await reader.execute(select(AuditLog))).scalars().one()

    now = datetime.now(timezone.utc)
    for stamp in (alert.created_at, user.created_at, user.updated_at, audit.created_at):
        assert stamp.tzinfo is not None
        assert now - stamp < timedelta(minutes=1)
