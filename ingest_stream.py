#!/usr/bin/env python3
"""
Forward line-delimited JSON sensor readings to the emissions API.

Reads records like {"sensor_id": "SENSOR_001", "co2_value": 850,
"temperature": 28.5, "humidity": 65} from a file, a serial device node, or
stdin. Malformed lines are logged and skipped. Each record gets its
emission_id before the first attempt, so retries after a server or network
failure cannot derive the same reading twice.
"""

import argparse
import logging
import os
import sys
import time
from typing import Any, Dict, Optional, TextIO

import requests

from app.core.constants import EMISSION_ID_PREFIX
from app.core.logging_config import configure_logging
from app.handlers.stream import iter_reading_records
from app.utils.ids import new_id

logger = logging.getLogger("ingest_stream")

API_BASE = os.getenv("CARBON_API_URL", "http://localhost:8000")


def post_reading(
    http: requests.Session,
    api_base: str,
    token: str,
    record: Dict[str, Any],
    max_attempts: int = 5,
    backoff_seconds: float = 0.5,
    sleep=time.sleep
) -> Optional[Dict[str, Any]]:
    """
    POST one reading, retrying retryable failures with exponential backoff.

    Returns the API response body, or None when the reading was rejected or
    every attempt failed.
    """
    payload = {**record, "emission_id": record.get("emission_id") or new_id(EMISSION_ID_PREFIX)}
    headers = {"Authorization": f"Bearer {token}"}

    for attempt in range(1, max_attempts + 1):
        try:
            response = http.post(f"{api_base}/emissions", json=payload, headers=headers, timeout=10)
        except requests.RequestException as e:
            logger.warning("Attempt %d failed: %s", attempt, e, extra={"emission_id": payload["emission_id"]})
        else:
            if response.status_code < 400:
                return response.json()
            if response.status_code < 500:
                logger.error(
                    "Reading rejected (%d): %s",
                    response.status_code,
                    response.text,
                    extra={"emission_id": payload["emission_id"], "sensor_id": payload.get("sensor_id")},
                )
                return None
            logger.warning(
                "Attempt %d got %d",
                attempt,
                response.status_code,
                extra={"emission_id": payload["emission_id"]},
            )

        if attempt < max_attempts:
            sleep(backoff_seconds * (2 ** (attempt - 1)))

    logger.error("Giving up on reading", extra={"emission_id": payload["emission_id"]})
    return None


def forward_stream(stream: TextIO, api_base: str, token: str) -> Dict[str, int]:
    """Forward every valid record of a stream; returns sent/failed counts."""
    counts = {"sent": 0, "failed": 0}
    with requests.Session() as http:
        for record in iter_reading_records(stream):
            result = post_reading(http, api_base, token, record)
            if result is None:
                counts["failed"] += 1
                continue
            counts["sent"] += 1
            logger.info(
                "Reading stored",
                extra={
                    "emission_id": result.get("emission_id"),
                    "alert_id": result.get("alert_id"),
                    "credit_id": result.get("credit_id"),
                },
            )
    return counts


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("source", nargs="?", default="-", help="File or device to read; '-' for stdin")
    parser.add_argument("--api", default=API_BASE, help="Emissions API base URL")
    parser.add_argument("--token", default=os.getenv("CARBON_API_TOKEN"), help="Bearer token from /auth/login")
    args = parser.parse_args(argv)

    configure_logging()

    if not args.token:
        logger.error("A bearer token is required (--token or CARBON_API_TOKEN)")
        return 2

    if args.source == "-":
        counts = forward_stream(sys.stdin, args.api, args.token)
    else:
        with open(args.source, "r", encoding="utf-8") as stream:
            counts = forward_stream(stream, args.api, args.token)

    print(f"Sent: {counts['sent']}  Failed: {counts['failed']}")
    return 0 if counts["failed"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
