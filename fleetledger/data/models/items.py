"""
Expense and collection items recorded by drivers during a trip.
"""

from decimal import Decimal
from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class ExpenseCategory(str, Enum):
    """Type of trip expense."""

    FUEL = "fuel"
    TOLLS = "tolls"
    DRIVER_PAY = "driver_pay"
    LUMPER = "lumper"
    PARKING = "parking"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class PaidBy(str, Enum):
    """Who funded an expense."""

    DRIVER_PERSONAL = "driver_personal"  # driver's own money
    DRIVER_CASH = "driver_cash"  # cash the driver collected for the carrier
    COMPANY_CARD = "company_card"
    FUEL_CARD = "fuel_card"


class PaymentMethod(str, Enum):
    """How a customer paid the driver at delivery."""

    CASH = "cash"
    CASHIER_CHECK = "cashier_check"
    MONEY_ORDER = "money_order"
    PERSONAL_CHECK = "personal_check"
    ZELLE = "zelle"
    VENMO = "venmo"
    OTHER = "other"


class ExpenseItem(BaseModel):
    """An expense the driver logged with a receipt."""

    model_config = ConfigDict(frozen=True)

    expense_id: str
    amount: Decimal = Field(..., ge=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    paid_by: PaidBy
    incurred_at: AwareDatetime
    receipt_ref: str = Field(..., min_length=1, description="Receipt photo reference")
    approved: bool = True
    description: str = ""


class CollectionItem(BaseModel):
    """Money the driver collected from a customer at delivery."""

    model_config = ConfigDict(frozen=True)

    collection_id: str
    load_id: str
    amount: Decimal = Field(..., ge=0)
    method: PaymentMethod
    collected_at: AwareDatetime
