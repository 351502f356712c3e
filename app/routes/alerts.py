"""
Alert endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_session
from app.core.security import Principal, get_current_principal
from app.handlers.alerts import mark_alert_read
from app.handlers.reports import get_alerts
from app.models.alert import AlertRead

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=List[AlertRead])
async def list_alerts_endpoint(
    unread_only: bool = False,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
):
    """Latest 50 alerts of the caller, newest first."""
    return await get_alerts(session, principal.user_id, unread_only=unread_only)


@router.patch("/{alert_id}/read", response_model=AlertRead)
async def mark_alert_read_endpoint(
    alert_id: str,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
):
    """Mark one of the caller's alerts as read."""
    alert = await mark_alert_read(session, alert_id, principal.user_id)
    if not alert:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Alert {alert_id} not found"
        )
    return alert
