"""
Settlement and delivery reconciliation engines.

This module contains:
- Pay: Driver gross pay by pay mode
- Aggregation: Reimbursable expenses and customer collections
- Settlement: Driver net pay for a trip
- COD: Pre-delivery go/no-go for partner company COD
- Disputes: Driver-reported balance corrections
"""

from .aggregation import aggregate_collections, aggregate_expenses
from .base import BaseEngine, EngineDecision
from .cod import PreDeliveryCODEvaluator, evaluate_pre_delivery, requires_cod_payment
from .disputes import BalanceDisputeResolver
from .metrics import extract_trip_metrics
from .pay import PayCalculator, compute_gross_pay
from .settlement import SettlementAssembler, assemble_settlement, summarize_earnings

__all__ = [
    "BaseEngine",
    "EngineDecision",
    "compute_gross_pay",
    "PayCalculator",
    "extract_trip_metrics",
    "aggregate_expenses",
    "aggregate_collections",
    "assemble_settlement",
    "summarize_earnings",
    "SettlementAssembler",
    "evaluate_pre_delivery",
    "requires_cod_payment",
    "PreDeliveryCODEvaluator",
    "BalanceDisputeResolver",
]
