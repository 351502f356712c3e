"""
Carbon credit model - derived credit per compliant reading and its links.
"""

from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date
from enum import Enum


class CreditStatus(str, Enum):
    """Sign of a credit relative to the allowed limit."""
    EARNED = "earned"
    DEFICIT = "deficit"
    NEUTRAL = "neutral"


class CarbonCreditBase(SQLModel):
    """Base carbon credit schema."""
    calculated_date: date = Field(..., index=True)
    emission_value: float = Field(..., description="Source CO2 value in kg")
    allowed_limit: float = Field(..., description="Limit the value was judged against")
    credit_amount: float = Field(..., description="Signed credit in metric tonnes")
    status: CreditStatus = Field(..., index=True)


class CarbonCredit(CarbonCreditBase, table=True):
    """Carbon credit database table. Never mutated after creation."""
    __tablename__ = "carbon_credits"
    
    credit_id: str = Field(..., primary_key=True, max_length=100)


class CarbonCreditRead(CarbonCreditBase):
    """Schema for reading a carbon credit."""
    credit_id: str


class CreditReadingLink(SQLModel, table=True):
    """Associates a credit with the reading(s) it was derived from."""
    __tablename__ = "credit_emission_map"
    
    map_id: str = Field(..., primary_key=True, max_length=100)
    credit_id: str = Field(..., foreign_key="carbon_credits.credit_id", index=True)
    emission_id: str = Field(..., foreign_key="emission_readings.emission_id", index=True)
    weight_factor: float = Field(default=1.0)
    included_flag: bool = Field(default=True)
