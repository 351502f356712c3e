"""
Canonical hashing of audited payloads.
"""

import hashlib
import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping


def _canonical(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def hash_payload(payload: Mapping[str, Any]) -> str:
    """SHA-256 over the key-sorted, whitespace-free JSON form of a payload."""
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=_canonical)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
