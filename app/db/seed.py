"""
Optional development seeding script.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from datetime import date, datetime, timezone
from app.core.database import AsyncSessionLocal, init_db
from app.core.logging_config import configure_logging
from app.core.security import Principal
from app.handlers.auth import register_user
from app.handlers.ingestion import create_sensor, ingest_emission
from app.models.reading import EmissionPayload
from app.models.sensor import SensorCreate
from app.models.user import UserCreate, UserRole

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo-password"

USERS = [
    ("Demo Industries Ltd.", "demo@industry.com", UserRole.ADMIN),
    ("Green Tech Manufacturing", "admin@greentech.com", UserRole.ADMIN),
    ("EcoFactory Corp", "operator@ecofactory.com", UserRole.OPERATOR),
]

# (sensor_id, model, installation_date, location, owner index)
SENSORS = [
    ("SENSOR_001", "NDIR-CO2-500", date(2024, 1, 15), "Main Chimney", 0),
    ("SENSOR_002", "NDIR-CO2-500", date(2024, 1, 15), "Secondary Vent", 0),
    ("SENSOR_003", "NDIR-CO2-Pro", date(2024, 2, 1), "Quality Control", 0),
    ("SENSOR_004", "NDIR-CO2-500", date(2024, 1, 20), "Production Line A", 1),
]

# (emission_id, timestamp, co2, pm25, temperature, humidity)
EMISSIONS = [
    ("EM_2024060101", datetime(2024, 6, 1, 8, tzinfo=timezone.utc), 850, 35.2, 28.5, 65.0),
    ("EM_2024060102", datetime(2024, 6, 1, 12, tzinfo=timezone.utc), 920, 42.1, 32.1, 58.3),
    ("EM_2024060103", datetime(2024, 6, 1, 16, tzinfo=timezone.utc), 780, 28.7, 30.2, 60.5),
    ("EM_2024060201", datetime(2024, 6, 2, 8, tzinfo=timezone.utc), 1050, 55.3, 29.8, 62.0),
    ("EM_2024060202", datetime(2024, 6, 2, 12, tzinfo=timezone.utc), 1150, 68.2, 33.5, 55.8),
]


async def seed_data():
    """Seed database with sample data for development."""
    configure_logging()
    await init_db()

    async with AsyncSessionLocal() as session:
        users = []
        for name, email, role in USERS:
            user = await register_user(
                session,
                UserCreate(name=name, email=email, password=DEMO_PASSWORD, role=role)
            )
            users.append(user)
        logger.info("Created %d users", len(users))

        principals = [Principal(user_id=u.id, email=u.email, role=u.role.value) for u in users]

        for sensor_id, model, installed, location, owner in SENSORS:
            await create_sensor(
                session,
                SensorCreate(
                    sensor_id=sensor_id,
                    sensor_type="CO2",
                    model=model,
                    installation_date=installed,
                    location=location
                ),
                principals[owner]
            )
        logger.info("Created %d sensors", len(SENSORS))

        # Ingest through the normal path so credits and alerts are derived
        for emission_id, timestamp, co2, pm25, temperature, humidity in EMISSIONS:
            result = await ingest_emission(
                session,
                EmissionPayload(
                    emission_id=emission_id,
                    sensor_id="SENSOR_001",
                    timestamp=timestamp,
                    co2_value=co2,
                    pm25_value=pm25,
                    temperature=temperature,
                    humidity=humidity
                ),
                principals[0]
            )
            logger.info(
                "Ingested sample reading",
                extra={"emission_id": emission_id, "alert_id": result.alert_id, "credit_id": result.credit_id}
            )

        logger.info("Seed data created successfully")


if __name__ == "__main__":
    asyncio.run(seed_data())
