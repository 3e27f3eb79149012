"""
Pydantic data models for the settlement engine.

Core models:
- PayContract: Driver pay contract, one variant per pay mode
- TripMetrics / TripRecord: Inputs to driver pay
- ExpenseItem / CollectionItem: Driver-recorded money movements
- Settlement: Driver net-pay snapshot
- LoadFinancials / PreDeliveryCheck: COD decision before unloading
- BalanceDispute: Driver-reported balance corrections
"""

from .contract import (
    FlatDailyRateContract,
    PayContract,
    PayMode,
    PercentOfRevenueContract,
    PerCuftContract,
    PerMileAndCuftContract,
    PerMileContract,
    parse_pay_contract,
    snapshot_contract,
)
from .dispute import BalanceDispute, DisputeResolution, DisputeStatus, ResolutionType
from .items import CollectionItem, ExpenseCategory, ExpenseItem, PaidBy, PaymentMethod
from .load import (
    AlertLevel,
    ContractAccessorials,
    DeliveryOverrides,
    LoadFinancials,
    PreDeliveryCheck,
    TrustLevel,
)
from .settlement import (
    CollectionTotal,
    EarningsSummary,
    ExpenseTotal,
    GrossPay,
    LabeledSettlement,
    LineItem,
    PayStatus,
    Settlement,
    SettlementKind,
    SettlementRecord,
    SettlementStatus,
)
from .trip import TripLoadRecord, TripMetrics, TripRecord

__all__ = [
    "PayMode",
    "PayContract",
    "PerMileContract",
    "PerCuftContract",
    "PerMileAndCuftContract",
    "PercentOfRevenueContract",
    "FlatDailyRateContract",
    "parse_pay_contract",
    "snapshot_contract",
    "TripMetrics",
    "TripRecord",
    "TripLoadRecord",
    "ExpenseItem",
    "ExpenseCategory",
    "PaidBy",
    "CollectionItem",
    "PaymentMethod",
    "LineItem",
    "GrossPay",
    "ExpenseTotal",
    "CollectionTotal",
    "Settlement",
    "PayStatus",
    "SettlementKind",
    "LabeledSettlement",
    "SettlementStatus",
    "SettlementRecord",
    "EarningsSummary",
    "TrustLevel",
    "AlertLevel",
    "ContractAccessorials",
    "LoadFinancials",
    "DeliveryOverrides",
    "PreDeliveryCheck",
    "BalanceDispute",
    "DisputeStatus",
    "ResolutionType",
    "DisputeResolution",
]
