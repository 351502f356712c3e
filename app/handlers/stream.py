"""
Line-delimited JSON parsing for readings arriving from a sensor producer.
"""

import json
import logging
from typing import Any, Dict, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("sensor_id", "co2_value", "pm25_value", "temperature", "humidity", "timestamp")
REQUIRED_FIELDS = ("sensor_id", "co2_value")


def parse_reading_line(line: str, line_number: Optional[int] = None) -> Optional[Dict[str, Any]]:
    """
    Parse one producer line into a reading record.

    Returns None, after logging, for blank lines, non-JSON output (firmware
    debug prints end up on the same stream) and records missing required
    fields. Value validation is left to the ingestion API.
    """
    text = line.strip()
    if not text:
        return None

    try:
        record = json.loads(text)
    except json.JSONDecodeError:
        logger.info("Discarding non-JSON line %s: %.80s", line_number, text)
        return None

    if not isinstance(record, dict):
        logger.warning("Discarding line %s: expected a JSON object", line_number, extra={"reason": "not_object"})
        return None

    missing = [field for field in REQUIRED_FIELDS if record.get(field) is None]
    if missing:
        logger.warning(
            "Discarding line %s: missing %s",
            line_number,
            ", ".join(missing),
            extra={"reason": "missing_fields"},
        )
        return None

    return {field: record[field] for field in RECORD_FIELDS if field in record}


def iter_reading_records(lines: Iterable[str]) -> Iterator[Dict[str, Any]]:
    """Yield the valid records of a line stream, skipping malformed ones."""
    for line_number, line in enumerate(lines, start=1):
        record = parse_reading_line(line, line_number)
        if record is not None:
            yield record
