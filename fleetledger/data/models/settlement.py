"""
Settlement data models - the net-pay snapshot for a driver's trip.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from fleetledger.data.models.contract import PayMode
from fleetledger.data.models.items import CollectionItem, ExpenseItem
from fleetledger.data.models.trip import TripMetrics


class LineItem(BaseModel):
    """One line of the gross pay breakdown."""

    model_config = ConfigDict(frozen=True)

    label: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


class GrossPay(BaseModel):
    """Result of the pay calculator."""

    model_config = ConfigDict(frozen=True)

    pay_mode: PayMode
    gross_pay: Decimal
    breakdown: list[LineItem]


class ExpenseTotal(BaseModel):
    """Reimbursable expenses and their total."""

    model_config = ConfigDict(frozen=True)

    total: Decimal
    items: list[ExpenseItem] = Field(default_factory=list)


class CollectionTotal(BaseModel):
    """Customer collections held by the driver and their total."""

    model_config = ConfigDict(frozen=True)

    total: Decimal
    items: list[CollectionItem] = Field(default_factory=list)


class PayStatus(str, Enum):
    OWED_TO_DRIVER = "owed_to_driver"
    DRIVER_OWES = "driver_owes"
    SETTLED = "settled"


class Settlement(BaseModel):
    """
    Immutable net-pay snapshot for one driver trip.

    net_pay == gross_pay + reimbursements - collections
    """

    model_config = ConfigDict(frozen=True)

    driver_id: Optional[str] = None
    trip_id: Optional[str] = None
    pay_mode: PayMode

    gross_pay: Decimal
    pay_breakdown: list[LineItem]

    reimbursements: Decimal
    reimbursement_items: list[ExpenseItem] = Field(default_factory=list)

    collections: Decimal
    collection_items: list[CollectionItem] = Field(default_factory=list)

    net_pay: Decimal
    metrics: TripMetrics

    notes: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_net_pay(self) -> "Settlement":
        expected = self.gross_pay + self.reimbursements - self.collections
        if self.net_pay != expected:
            raise ValueError(
                f"net_pay {self.net_pay} does not equal gross_pay + reimbursements - collections ({expected})"
            )
        return self

    @computed_field
    @property
    def pay_status(self) -> PayStatus:
        """Who owes whom after this settlement."""
        if self.net_pay > 0:
            return PayStatus.OWED_TO_DRIVER
        if self.net_pay < 0:
            return PayStatus.DRIVER_OWES
        return PayStatus.SETTLED


class SettlementKind(str, Enum):
    """Caller-side label: a running estimate or the authoritative settlement."""

    ESTIMATE = "estimate"
    FINAL = "final"


class LabeledSettlement(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: SettlementKind
    settlement: Settlement
    labeled_at: datetime


class SettlementStatus(str, Enum):
    """Payout status of a final settlement."""

    PENDING = "pending"
    PAID = "paid"


class SettlementRecord(BaseModel):
    """A final settlement together with its payout status."""

    settlement: Settlement
    status: SettlementStatus = SettlementStatus.PENDING
    paid_at: Optional[datetime] = None


class EarningsSummary(BaseModel):
    """Driver earnings across settled trips."""

    total_earned: Decimal
    pending_pay: Decimal
    paid_out: Decimal
    trips_completed: int
    total_miles: Decimal
    total_cuft: Decimal
