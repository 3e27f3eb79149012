"""
Trip metric extraction - miles, cubic feet, revenue and days from a trip
and its loads.
"""

from decimal import Decimal
from typing import Iterable

from fleetledger.core.money import require_non_negative
from fleetledger.data.models.trip import TripLoadRecord, TripMetrics, TripRecord

ZERO = Decimal("0")


def trip_miles(trip: TripRecord) -> Decimal:
    """Odometer difference when both readings exist, else the recorded total."""
    if trip.odometer_start is not None and trip.odometer_end is not None:
        return max(ZERO, trip.odometer_end - trip.odometer_start)
    if trip.total_miles is not None:
        return require_non_negative(trip.total_miles, "total_miles")
    return ZERO


def trip_days(trip: TripRecord, minimum_days: int = 1) -> Decimal:
    """Calendar days worked, counting both the start and end day."""
    days = minimum_days
    if trip.start_date is not None and trip.end_date is not None:
        days = max(minimum_days, (trip.end_date - trip.start_date).days + 1)
    return Decimal(days)


def extract_trip_metrics(
    trip: TripRecord,
    loads: Iterable[TripLoadRecord],
    minimum_days: int = 1,
) -> TripMetrics:
    """
    Derive pay metrics from a trip and its completed loads.

    Measured cuft wins over the estimate for each load; loads without a
    rate contribute no revenue.

    Raises:
        ValidationError: If a load carries a negative cuft or rate
    """
    total_cuft = ZERO
    total_revenue = ZERO
    for load in loads:
        cuft = load.actual_cuft_loaded if load.actual_cuft_loaded is not None else load.cubic_feet
        if cuft is not None:
            total_cuft += require_non_negative(cuft, f"{load.load_id}.cuft")
        if load.total_rate is not None:
            total_revenue += require_non_negative(load.total_rate, f"{load.load_id}.total_rate")

    return TripMetrics(
        actual_miles=trip_miles(trip),
        total_cuft=total_cuft,
        total_revenue=total_revenue,
        days_worked=trip_days(trip, minimum_days),
    )
