"""
Load financial data model - what a load earns the carrier and what the
customer owes at the door.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class TrustLevel(str, Enum):
    """Partner company standing."""

    TRUSTED = "trusted"
    COD_REQUIRED = "cod_required"


class AlertLevel(str, Enum):
    """UI styling hint for a pre-delivery check."""

    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


class ContractAccessorials(BaseModel):
    """Accessorial charges agreed on the delivery contract (USD)."""

    shuttle: Decimal = Field(Decimal("0"), ge=0)
    long_carry: Decimal = Field(Decimal("0"), ge=0)
    stairs: Decimal = Field(Decimal("0"), ge=0)
    bulky: Decimal = Field(Decimal("0"), ge=0)
    packing: Decimal = Field(Decimal("0"), ge=0)
    other: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None

    @computed_field
    @property
    def total(self) -> Decimal:
        """Sum of all accessorial charges."""
        return self.shuttle + self.long_carry + self.stairs + self.bulky + self.packing + self.other


class LoadFinancials(BaseModel):
    """
    Financial fields of a load that drive the pre-delivery COD decision.

    Amounts arrive as stored; the evaluator validates them.
    """

    model_config = ConfigDict(frozen=True)

    load_id: str = Field(..., description="Unique load identifier")
    company_name: str = Field("Partner company", description="Partner company the load came from")

    # Volume and rate
    actual_cuft_loaded: Optional[Decimal] = Field(None, description="Measured cubic feet loaded")
    rate_per_cuft: Optional[Decimal] = Field(None, description="Rate offered per cuft (USD)")
    contract_rate_per_cuft: Optional[Decimal] = Field(
        None, description="Rate per cuft from the signed delivery contract (USD)"
    )

    # Contract
    contract_accessorials_total: Optional[Decimal] = Field(None, description="Agreed accessorials (USD)")
    balance_due_on_delivery: Optional[Decimal] = Field(None, description="Customer balance due at the door (USD)")

    @computed_field
    @property
    def effective_rate_per_cuft(self) -> Optional[Decimal]:
        """Contract rate when set above zero, otherwise the offered rate."""
        if self.contract_rate_per_cuft is not None and self.contract_rate_per_cuft > 0:
            return self.contract_rate_per_cuft
        return self.rate_per_cuft


class DeliveryOverrides(BaseModel):
    """Flags that clear a COD requirement."""

    cod_received: bool = False
    company_approved_exception: bool = False


class PreDeliveryCheck(BaseModel):
    """
    Go/no-go instruction for a driver about to unload.

    Computed on demand, never stored as truth: it is stale as soon as the
    load's balance changes.
    """

    model_config = ConfigDict(frozen=True)

    load_id: Optional[str] = None

    carrier_rate: Decimal
    customer_balance: Decimal
    shortfall: Decimal  # carrier_rate - customer_balance, may be negative

    trust_level: TrustLevel
    is_trusted: bool

    requires_cod: bool
    cod_amount_required: Decimal

    status_message: str
    action_required: str
    alert_level: AlertLevel

    @model_validator(mode="after")
    def _never_claim_success_while_cod_required(self) -> "PreDeliveryCheck":
        if self.requires_cod and self.alert_level is not AlertLevel.DANGER:
            raise ValueError("a check that requires COD must carry the danger alert level")
        return self
