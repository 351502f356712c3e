"""
Report and aggregation endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Dict, Any, List

from app.core.database import get_session
from app.core.security import Principal, get_current_principal
from app.handlers.reports import get_monthly_credit_summary, get_period_summary

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/credits/monthly")
async def monthly_credit_summary_endpoint(
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
) -> List[Dict[str, Any]]:
    """
    Credit summary per calendar month.
    
    Returns per month:
        - credits_earned
        - credits_deficit
        - net_credits
        - total_calculations
    """
    return await get_monthly_credit_summary(session, principal.user_id)


@router.get("/summary")
async def period_summary_endpoint(
    start_date: date,
    end_date: date,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_session)
) -> Dict[str, Any]:
    """Total emission and credits over an inclusive date range."""
    try:
        return await get_period_summary(session, principal.user_id, start_date, end_date)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
