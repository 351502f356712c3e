"""
Dashboard endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Any

from app.core.database import get_session
from app.core.security import Principal, get_current_principal
from app.handlers.reports import get_dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats_endpoint(
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
) -> Dict[str, Any]:
    """
    Headline figures for the caller.

    Returns:
        - current_emission
        - total_credits
        - active_sensors
        - unread_alerts
    """
    return await get_dashboard_stats(session, principal.user_id)
