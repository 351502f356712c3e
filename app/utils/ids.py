"""
Identifier generation for readings, credits, links and alerts.

Identifiers look like ``EM_20240601120000123456_9f1c2ab4``: a prefix, the UTC
creation time to the microsecond, and 32 random bits. Lexicographic order
follows creation time. For ``n`` identifiers minted under one prefix within
the same microsecond the collision probability is at most ``n**2 / 2**33``.
"""

import secrets
from datetime import datetime
from typing import Callable, Optional

from app.utils.time import utc_now

SUFFIX_BYTES = 4


def new_id(prefix: str, clock: Optional[Callable[[], datetime]] = None) -> str:
    """Mint a new time-sortable identifier."""
    now = (clock or utc_now)()
    return f"{prefix}_{now.strftime('%Y%m%d%H%M%S%f')}_{secrets.token_hex(SUFFIX_BYTES)}"


def derived_id(prefix: str, parent_id: str) -> str:
    """Identifier of a record owned one-to-one by another, e.g. MAP_<credit_id>."""
    return f"{prefix}_{parent_id}"
