# SQLModel database models

from app.models.user import User
from app.models.sensor import Sensor
from app.models.alert import Alert
from app.models.reading import EmissionReading
from app.models.credit import CarbonCredit, CreditReadingLink
from app.models.audit import AuditLog

__all__ = [
    "User",
    "Sensor",
    "Alert",
    "EmissionReading",
    "CarbonCredit",
    "CreditReadingLink",
    "AuditLog",
]
