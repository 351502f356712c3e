"""Unit tests for line-delimited reading parsing."""

import logging

from app.handlers.stream import iter_reading_records, parse_reading_line


def test_parses_producer_record() -> None:
    record = parse_reading_line('{"sensor_id": "SENSOR_001", "co2_value": 850, "temperature": 28.5, "humidity": 65}')

    assert record == {"sensor_id": "SENSOR_001", "co2_value": 850, "temperature": 28.5, "humidity": 65}


def test_unknown_keys_are_dropped() -> None:
    record = parse_reading_line('{"sensor_id": "S", "co2_value": 1, "firmware": "1.2"}')

    assert record == {"sensor_id": "S", "co2_value": 1}


def test_malformed_lines_are_skipped_and_logged(caplog) -> None:
    lines = [
        '{"sensor_id": "SENSOR_001", "co2_value": 850}\n',
        "Warming up sensor...\n",
        "\n",
        '{"sensor_id": "SENSOR_001"}\n',
        "[1, 2, 3]\n",
        '{"sensor_id": "SENSOR_002", "co2_value": 1050.5, "humidity": 60}\n',
    ]

    with caplog.at_level(logging.INFO, logger="app.handlers.stream"):
        records = list(iter_reading_records(lines))

    assert [r["sensor_id"] for r in records] == ["SENSOR_001", "SENSOR_002"]
    assert records[1]["co2_value"] == 1050.5
    assert len(caplog.records) == 3


def test_null_required_field_is_missing() -> None:
    assert parse_reading_line('{"sensor_id": "S", "co2_value": null}') is None
