"""
Carbon credit calculation handler.
"""

from dataclasses import dataclass
from typing import Any, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.constants import KG_PER_CREDIT
from app.core.errors import InvalidInput
from app.models.credit import CarbonCredit, CreditReadingLink, CreditStatus
from app.utils.numbers import is_finite_number


@dataclass(frozen=True)
class CreditComputation:
    credit_amount: float
    status: CreditStatus


def require_number(value: Any, name: str) -> float:
    """Coerce a calculation input to float or raise InvalidInput."""
    if not is_finite_number(value):
        raise InvalidInput(f"{name} must be a finite number, got {value!r}")
    return float(value)


def credit_status(credit_amount: float) -> CreditStatus:
    """Classify a signed credit amount."""
    if credit_amount > 0:
        return CreditStatus.EARNED
    if credit_amount < 0:
        return CreditStatus.DEFICIT
    return CreditStatus.NEUTRAL


def compute_credit(emission_value: Any, allowed_limit: Any) -> CreditComputation:
    """
    Calculate the carbon credit earned (or owed) by one reading.

    Formula: (allowed_limit kg - emission kg) / 1000 = credit in tonnes CO2

    Args:
        emission_value: Observed CO2 in kilograms
        allowed_limit: Limit the reading is judged against, in kilograms

    Returns:
        Signed credit amount and its status

    Raises:
        InvalidInput: If either argument is not a finite number
    """
    emission = require_number(emission_value, "emission_value")
    limit = require_number(allowed_limit, "allowed_limit")

    credit_amount = (limit - emission) / KG_PER_CREDIT
    return CreditComputation(credit_amount=credit_amount, status=credit_status(credit_amount))


async def get_credits_for_reading(
    session: AsyncSession,
    emission_id: str
) -> List[CarbonCredit]:
    """Get the credits linked to a reading."""
    statement = (
        select(CarbonCredit)
        .join(CreditReadingLink, CreditReadingLink.credit_id == CarbonCredit.credit_id)
        .where(CreditReadingLink.emission_id == emission_id)
        .order_by(CarbonCredit.credit_id)
    )
    result = await session.execute(statement)
    return list(result.scalars().all())
