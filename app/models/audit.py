"""
Audit log model - append-only tamper-evident audit trail.
"""

from sqlmodel import SQLModel, Field
from typing import Any, Mapping, Optional
from datetime import datetime

from app.utils.hashing import hash_payload
from app.utils.time import UTCDateTime, utc_now


class AuditLogBase(SQLModel):
    """Base audit log schema."""
    payload_hash: str = Field(..., description="SHA-256 hash of the audited payload")
    action: str = Field(..., description="Action type (e.g., 'reading_ingested', 'credit_created')")
    entity_type: str = Field(..., description="Entity type (e.g., 'carbon_credit', 'alert')")
    entity_id: Optional[str] = Field(default=None, description="ID of the entity")


class AuditLog(AuditLogBase, table=True):
    """Audit log database table - append-only."""
    
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


def audit_entry(action: str, entity_type: str, entity_id: str, payload: Mapping[str, Any]) -> AuditLog:
    """Build an audit row whose hash covers the given payload."""
    return AuditLog(
        payload_hash=hash_payload(payload),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id
    )
