"""
Pay contract data model - how a driver is paid for a trip.

Each pay mode is its own variant carrying only the rates that mode uses.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from fleetledger.core.exceptions import ConfigurationError, ValidationError
from fleetledger.core.money import to_decimal


class PayMode(str, Enum):
    """Driver pay mode."""

    PER_MILE = "per_mile"
    PER_CUFT = "per_cuft"
    PER_MILE_AND_CUFT = "per_mile_and_cuft"
    PERCENT_OF_REVENUE = "percent_of_revenue"
    FLAT_DAILY_RATE = "flat_daily_rate"


class _ContractBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    driver_id: str = Field("", description="Driver the contract belongs to")


class PerMileContract(_ContractBase):
    pay_mode: Literal[PayMode.PER_MILE] = PayMode.PER_MILE
    rate_per_mile: Decimal = Field(..., ge=0)


class PerCuftContract(_ContractBase):
    pay_mode: Literal[PayMode.PER_CUFT] = PayMode.PER_CUFT
    rate_per_cuft: Decimal = Field(..., ge=0)


class PerMileAndCuftContract(_ContractBase):
    pay_mode: Literal[PayMode.PER_MILE_AND_CUFT] = PayMode.PER_MILE_AND_CUFT
    rate_per_mile: Decimal = Field(..., ge=0)
    rate_per_cuft: Decimal = Field(..., ge=0)


class PercentOfRevenueContract(_ContractBase):
    pay_mode: Literal[PayMode.PERCENT_OF_REVENUE] = PayMode.PERCENT_OF_REVENUE
    percent_of_revenue: Decimal = Field(..., ge=0, description="Percent, e.g. 65 for 65%")


class FlatDailyRateContract(_ContractBase):
    pay_mode: Literal[PayMode.FLAT_DAILY_RATE] = PayMode.FLAT_DAILY_RATE
    flat_daily_rate: Decimal = Field(..., ge=0)


PayContract = Annotated[
    Union[
        PerMileContract,
        PerCuftContract,
        PerMileAndCuftContract,
        PercentOfRevenueContract,
        FlatDailyRateContract,
    ],
    Field(discriminator="pay_mode"),
]

CONTRACT_VARIANTS: dict[PayMode, type[_ContractBase]] = {
    PayMode.PER_MILE: PerMileContract,
    PayMode.PER_CUFT: PerCuftContract,
    PayMode.PER_MILE_AND_CUFT: PerMileAndCuftContract,
    PayMode.PERCENT_OF_REVENUE: PercentOfRevenueContract,
    PayMode.FLAT_DAILY_RATE: FlatDailyRateContract,
}

_contract_adapter: TypeAdapter = TypeAdapter(PayContract)


def required_rates(pay_mode: PayMode) -> tuple[str, ...]:
    """Rate fields a pay mode needs, in declaration order."""
    variant = CONTRACT_VARIANTS[pay_mode]
    return tuple(name for name in variant.model_fields if name not in ("driver_id", "pay_mode"))


def parse_pay_contract(record: Mapping[str, Any]) -> PayContract:
    """
    Build a contract variant from a flat driver pay record.

    A stored record carries every rate column; only the ones the pay mode
    needs are read, the others are dropped.

    Args:
        record: Mapping with "pay_mode" and rate columns (plus optional "driver_id")

    Returns:
        The contract variant for the record's pay mode

    Raises:
        ConfigurationError: If the mode is unknown or a required rate is
            missing, non-numeric or negative
    """
    raw_mode = record.get("pay_mode")
    try:
        pay_mode = PayMode(raw_mode)
    except ValueError:
        raise ConfigurationError(f"unknown pay mode {raw_mode!r}", field="pay_mode") from None

    values: dict[str, Any] = {"pay_mode": pay_mode, "driver_id": str(record.get("driver_id") or "")}
    for name in required_rates(pay_mode):
        raw = record.get(name)
        if raw is None:
            raise ConfigurationError(
                f"pay mode {pay_mode.value} requires {name}", field=name
            )
        try:
            rate = to_decimal(raw, name)
        except ValidationError as e:
            raise ConfigurationError(e.message, field=name) from None
        if rate < 0:
            raise ConfigurationError(f"must not be negative (got {rate})", field=name)
        values[name] = rate

    return _contract_adapter.validate_python(values)


def coerce_pay_contract(contract: Any) -> PayContract:
    """Accept a contract variant as-is or parse a flat record."""
    if isinstance(contract, tuple(CONTRACT_VARIANTS.values())):
        return contract
    if isinstance(contract, Mapping):
        return parse_pay_contract(contract)
    raise ConfigurationError(f"unsupported pay contract type {type(contract).__name__}")


def snapshot_contract(contract: Any) -> PayContract:
    """
    Freeze a driver's contract onto a trip.

    Later edits to the driver's contract do not affect the snapshot.
    """
    contract = coerce_pay_contract(contract)
    return contract.model_copy(deep=True)
