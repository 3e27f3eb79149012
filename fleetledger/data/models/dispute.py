"""
Balance dispute data model - a driver flags a delivery balance as wrong and
dispatch corrects it.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DisputeStatus(str, Enum):
    """Dispute status. Everything except OPEN is terminal."""

    OPEN = "open"
    CONFIRMED_ZERO = "confirmed_zero"
    BALANCE_UPDATED = "balance_updated"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not DisputeStatus.OPEN


class ResolutionType(str, Enum):
    """How dispatch resolved a dispute."""

    CONFIRMED_ZERO = "confirmed_zero"
    BALANCE_UPDATED = "balance_updated"
    CANCELLED = "cancelled"

    @property
    def status(self) -> DisputeStatus:
        return DisputeStatus(self.value)


class BalanceDispute(BaseModel):
    """A driver-reported balance discrepancy on one load."""

    model_config = ConfigDict(frozen=True)

    dispute_id: str
    load_id: str
    driver_id: str
    trip_id: Optional[str] = None

    status: DisputeStatus = DisputeStatus.OPEN
    original_balance: Decimal = Field(..., ge=0)
    driver_note: Optional[str] = None

    # Filled by dispatch
    new_balance: Optional[Decimal] = None
    resolution_note: Optional[str] = None
    resolved_by: Optional[str] = None

    created_at: datetime
    resolved_at: Optional[datetime] = None


class DisputeResolution(BaseModel):
    """Outcome of resolving a dispute."""

    dispute: BalanceDispute
    updated_balance: Optional[Decimal] = None  # None when the balance did not change
    notified: bool
