"""
Pay Calculator - driver gross pay from a pay contract and trip metrics.

Pure computation, safe to call repeatedly for live previews.
"""

from decimal import Decimal
from time import time
from typing import Any

from fleetledger.core.exceptions import ConfigurationError
from fleetledger.core.money import require_non_negative, round_money
from fleetledger.data.models.contract import (
    FlatDailyRateContract,
    PayContract,
    PercentOfRevenueContract,
    PerCuftContract,
    PerMileAndCuftContract,
    PerMileContract,
    coerce_pay_contract,
)
from fleetledger.data.models.settlement import GrossPay, LineItem
from fleetledger.data.models.trip import TripMetrics
from fleetledger.engine.base import BaseEngine

HUNDRED = Decimal("100")


def validate_metrics(metrics: TripMetrics) -> TripMetrics:
    """
    Reject negative or non-numeric trip metrics.

    Raises:
        ValidationError: Naming the first offending metric
    """
    values = {
        name: require_non_negative(getattr(metrics, name), name)
        for name in ("actual_miles", "total_cuft", "total_revenue", "days_worked")
    }
    values["total_revenue"] = round_money(values["total_revenue"])
    return TripMetrics(**values)


def _line(label: str, quantity: Decimal, rate: Decimal, amount: Decimal) -> LineItem:
    return LineItem(label=label, quantity=quantity, rate=rate, amount=round_money(amount))


def _mile_line(metrics: TripMetrics, rate_per_mile: Decimal) -> LineItem:
    return _line("miles", metrics.actual_miles, rate_per_mile, metrics.actual_miles * rate_per_mile)


def _cuft_line(metrics: TripMetrics, rate_per_cuft: Decimal) -> LineItem:
    return _line("cuft", metrics.total_cuft, rate_per_cuft, metrics.total_cuft * rate_per_cuft)


def pay_lines(contract: PayContract, metrics: TripMetrics) -> list[LineItem]:
    """Itemized pay lines for a contract, each rounded to the cent."""
    if isinstance(contract, PerMileContract):
        return [_mile_line(metrics, contract.rate_per_mile)]

    if isinstance(contract, PerCuftContract):
        return [_cuft_line(metrics, contract.rate_per_cuft)]

    if isinstance(contract, PerMileAndCuftContract):
        return [
            _mile_line(metrics, contract.rate_per_mile),
            _cuft_line(metrics, contract.rate_per_cuft),
        ]

    if isinstance(contract, PercentOfRevenueContract):
        return [
            _line(
                "percent_of_revenue",
                metrics.total_revenue,
                contract.percent_of_revenue,
                metrics.total_revenue * contract.percent_of_revenue / HUNDRED,
            )
        ]

    if isinstance(contract, FlatDailyRateContract):
        return [
            _line(
                "days",
                metrics.days_worked,
                contract.flat_daily_rate,
                metrics.days_worked * contract.flat_daily_rate,
            )
        ]

    raise ConfigurationError(f"unsupported pay contract {type(contract).__name__}", field="pay_mode")


def compute_gross_pay(contract: Any, metrics: TripMetrics) -> GrossPay:
    """
    Calculate a driver's gross pay for a trip.

    Args:
        contract: Contract variant, or a flat pay record to parse
        metrics: Trip metrics

    Returns:
        GrossPay with the total and its itemized breakdown

    Raises:
        ConfigurationError: If the contract lacks the rate its pay mode requires
        ValidationError: If a metric is negative or not numeric
    """
    contract = coerce_pay_contract(contract)
    metrics = validate_metrics(metrics)

    breakdown = pay_lines(contract, metrics)
    gross_pay = round_money(sum((line.amount for line in breakdown), Decimal("0")))

    return GrossPay(pay_mode=contract.pay_mode, gross_pay=gross_pay, breakdown=breakdown)


def describe_pay(gross: GrossPay) -> str:
    """One-line description of how gross pay was computed."""
    parts = []
    for line in gross.breakdown:
        if line.label == "percent_of_revenue":
            parts.append(f"{line.rate}% of ${line.quantity} revenue")
        else:
            parts.append(f"${line.rate}/{line.label.rstrip('s')} × {line.quantity} {line.label}")
    return " + ".join(parts)


class PayCalculator(BaseEngine):
    """Pay Calculator engine: logs and tracks gross pay computations."""

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the pay calculator."""
        super().__init__(engine_name="pay_calculator", **kwargs)

    def calculate(self, contract: Any, metrics: TripMetrics) -> GrossPay:
        start_time = time()
        try:
            gross = compute_gross_pay(contract, metrics)
        except ConfigurationError as e:
            self.logger.error("pay_contract_invalid", field=e.field, error=e.message)
            raise

        self.record(
            decision_type="gross_pay",
            input_data={
                "pay_mode": gross.pay_mode.value,
                "metrics": metrics.model_dump(mode="json"),
            },
            output_data={"gross_pay": str(gross.gross_pay)},
            summary=describe_pay(gross),
            started_at=start_time,
            finished_at=time(),
        )
        return gross

    def execute(self, *args: Any, **kwargs: Any) -> GrossPay:
        """Execute gross pay calculation (delegates to calculate)."""
        return self.calculate(*args, **kwargs)
