"""
Trip data models - the metrics driver pay is computed from.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fleetledger.data.models.contract import PayContract


class TripMetrics(BaseModel):
    """
    Totals derived from a trip's completed loads.

    Values are not range-checked here; the pay calculator rejects negatives
    with a ValidationError naming the field.
    """

    model_config = ConfigDict(frozen=True)

    actual_miles: Decimal = Field(Decimal("0"), description="Miles driven")
    total_cuft: Decimal = Field(Decimal("0"), description="Cubic feet hauled")
    total_revenue: Decimal = Field(Decimal("0"), description="Revenue of all loads (USD)")
    days_worked: Decimal = Field(Decimal("0"), description="Days on the trip")


class TripLoadRecord(BaseModel):
    """A load as it contributes to trip metrics."""

    load_id: str
    actual_cuft_loaded: Optional[Decimal] = None
    cubic_feet: Optional[Decimal] = Field(None, description="Estimated cuft, used when nothing was measured")
    total_rate: Optional[Decimal] = None


class TripRecord(BaseModel):
    """Trip fields needed to derive metrics and price driver pay."""

    trip_id: str
    driver_id: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    odometer_start: Optional[Decimal] = None
    odometer_end: Optional[Decimal] = None
    total_miles: Optional[Decimal] = None

    # Contract as it stood when the trip started
    pay_contract: Optional[PayContract] = None
