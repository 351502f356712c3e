"""Tests for dashboard, alert and credit projections."""

from datetime import date, datetime, timezone

import pytest

from app.handlers.alerts import mark_alert_read
from app.handlers.derivation import derive_emission
from app.handlers.reports import (
    get_alerts,
    get_dashboard_stats,
    get_monthly_credit_summary,
    get_period_summary,
    get_recent_readings,
)
from app.models.reading import EmissionReading
from app.models.sensor import SensorStatus

from conftest import THRESHOLD, create_linked_credit, create_sensor, create_user

UTC = timezone.utc


async def _ingest(session, sensor_id, emission_id, co2_value, timestamp):
    reading = EmissionReading(emission_id=emission_id, sensor_id=sensor_id, timestamp=timestamp, co2_value=co2_value)
    session.add(reading)
    await session.flush()
    result = await derive_emission(session, reading, THRESHOLD)
    await session.commit()
    return result


async def test_stats_are_zero_for_a_user_without_data(session, operator) -> None:
    stats = await get_dashboard_stats(session, operator.id)

    assert stats == {"current_emission": 0, "total_credits": 0, "active_sensors": 0, "unread_alerts": 0}


async def test_stats_reflect_latest_reading_credits_sensors_and_alerts(session, operator, sensor) -> None:
    await create_sensor(session, operator, sensor_id="SENSOR_002", status=SensorStatus.INACTIVE)
    await _ingest(session, "SENSOR_001", "EM_1", 850, datetime(2024, 6, 1, 8, tzinfo=UTC))
    await _ingest(session, "SENSOR_001", "EM_2", 1050, datetime(2024, 6, 1, 12, tzinfo=UTC))
    await _ingest(session, "SENSOR_002", "EM_3", 900, datetime(2024, 6, 1, 10, tzinfo=UTC))

    stats = await get_dashboard_stats(session, operator.id)

    assert stats["current_emission"] == 1050
    assert stats["total_credits"] == pytest.approx(0.25)
    assert stats["active_sensors"] == 1
    assert stats["unread_alerts"] == 1


async def test_stats_exclude_other_users(session, operator, sensor) -> None:
    other = await create_user(session, email="other@example.com")
    await create_sensor(session, other, sensor_id="SENSOR_900")
    await _ingest(session, "SENSOR_900", "EM_x", 1300, datetime(2024, 6, 1, 8, tzinfo=UTC))

    stats = await get_dashboard_stats(session, operator.id)

    assert stats["current_emission"] == 0
    assert stats["unread_alerts"] == 0
    assert stats["active_sensors"] == 1


async def test_recent_readings_are_newest_first_with_sensor_details(session, operator, sensor) -> None:
    await _ingest(session, "SENSOR_001", "EM_old", 780, datetime(2024, 6, 1, 8, tzinfo=UTC))
    await _ingest(session, "SENSOR_001", "EM_new", 920, datetime(2024, 6, 2, 8, tzinfo=UTC))

    readings = await get_recent_readings(session, operator.id)

    assert [r["emission_id"] for r in readings] == ["EM_new", "EM_old"]
    assert readings[0]["location"] == "Main Chimney"
    assert readings[0]["sensor_type"] == "CO2"


async def test_recent_readings_are_capped(session, operator, sensor) -> None:
    for minute in range(55):
        session.add(EmissionReading(
            emission_id=f"EM_{minute:03d}",
            sensor_id="SENSOR_001",
            timestamp=datetime(2024, 6, 1, 8, minute, tzinfo=UTC),
            co2_value=800,
        ))
    await session.commit()

    readings = await get_recent_readings(session, operator.id)

    assert len(readings) == 50
    assert readings[0]["emission_id"] == "EM_054"


async def test_alerts_newest_first_and_unread_filter(session, operator, sensor) -> None:
    first = await _ingest(session, "SENSOR_001", "EM_a", 1050, datetime(2024, 6, 1, 8, tzinfo=UTC))
    second = await _ingest(session, "SENSOR_001", "EM_b", 1300, datetime(2024, 6, 1, 9, tzinfo=UTC))

    alerts = await get_alerts(session, operator.id)
    assert [a.alert_id for a in alerts] == [second.alert.alert_id, first.alert.alert_id]

    await mark_alert_read(session, first.alert.alert_id, operator.id)

    unread = await get_alerts(session, operator.id, unread_only=True)
    assert [a.alert_id for a in unread] == [second.alert.alert_id]
    assert (await get_dashboard_stats(session, operator.id))["unread_alerts"] == 1


async def test_marking_someone_elses_alert_is_refused(session, operator, sensor) -> None:
    result = await _ingest(session, "SENSOR_001", "EM_a", 1050, datetime(2024, 6, 1, 8, tzinfo=UTC))
    other = await create_user(session, email="other@example.com")

    assert await mark_alert_read(session, result.alert.alert_id, other.id) is None
    assert await mark_alert_read(session, "ALERT_missing", operator.id) is None


async def test_monthly_summary_groups_by_calculation_month(session, operator, sensor) -> None:
    await create_linked_credit(session, sensor, "EM_m1", 850, date(2024, 5, 20))
    await create_linked_credit(session, sensor, "EM_m2", 1000, date(2024, 5, 21))
    await create_linked_credit(session, sensor, "EM_j1", 700, date(2024, 6, 1))
    await create_linked_credit(session, sensor, "EM_j2", 900, date(2024, 6, 15))

    summary = await get_monthly_credit_summary(session, operator.id)

    assert [entry["month"] for entry in summary] == ["2024-06", "2024-05"]
    june, may = summary
    assert june["credits_earned"] == pytest.approx(0.4)
    assert june["net_credits"] == pytest.approx(0.4)
    assert june["total_calculations"] == 2
    assert may["credits_earned"] == pytest.approx(0.15)
    assert may["credits_deficit"] == 0
    assert may["total_calculations"] == 2


async def test_monthly_summary_is_scoped_to_owner(session, operator, sensor) -> None:
    other = await create_user(session, email="other@example.com")
    foreign = await create_sensor(session, other, sensor_id="SENSOR_900")
    await create_linked_credit(session, foreign, "EM_f", 500, date(2024, 6, 1))

    assert await get_monthly_credit_summary(session, operator.id) == []


async def test_period_summary_is_inclusive(session, operator, sensor) -> None:
    await create_linked_credit(session, sensor, "EM_1", 800, date(2024, 6, 1), datetime(2024, 6, 1, 0, 0, tzinfo=UTC))
    await create_linked_credit(session, sensor, "EM_2", 900, date(2024, 6, 30), datetime(2024, 6, 30, 23, 59, tzinfo=UTC))
    await create_linked_credit(session, sensor, "EM_3", 600, date(2024, 7, 1), datetime(2024, 7, 1, 0, 0, tzinfo=UTC))

    summary = await get_period_summary(session, operator.id, date(2024, 6, 1), date(2024, 6, 30))

    assert summary["period_start"] == "2024-06-01"
    assert summary["period_end"] == "2024-06-30"
    assert summary["reading_count"] == 2
    assert summary["total_emission"] == pytest.approx(1700)
    assert summary["total_credits"] == pytest.approx(0.3)


async def test_period_summary_rejects_reversed_range(session, operator) -> None:
    with pytest.raises(ValueError):
        await get_period_summary(session, operator.id, date(2024, 6, 30), date(2024, 6, 1))
