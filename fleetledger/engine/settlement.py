"""
Settlement Assembler - driver net pay for a trip.

This engine:
- Combines gross pay, reimbursable expenses and customer collections
- Produces the same numbers for running estimates and final settlements
- Keeps final settlements so they are never recomputed
- Summarizes earnings across settled trips
"""

import threading
from datetime import datetime, timezone
from decimal import Decimal
from time import time
from typing import Any, Iterable, Mapping, Optional

from fleetledger.core.exceptions import ConfigurationError, InvalidStateError
from fleetledger.core.money import format_usd, round_money, sum_money
from fleetledger.data.models.items import CollectionItem, ExpenseItem
from fleetledger.data.models.settlement import (
    EarningsSummary,
    LabeledSettlement,
    Settlement,
    SettlementKind,
    SettlementRecord,
    SettlementStatus,
)
from fleetledger.data.models.trip import TripLoadRecord, TripMetrics, TripRecord
from fleetledger.engine.aggregation import aggregate_collections, aggregate_expenses
from fleetledger.engine.base import BaseEngine
from fleetledger.engine.metrics import extract_trip_metrics
from fleetledger.engine.pay import compute_gross_pay, describe_pay


def assemble_settlement(
    contract: Any,
    metrics: TripMetrics,
    expenses: Iterable[ExpenseItem] = (),
    collections: Iterable[CollectionItem] = (),
    *,
    driver_id: Optional[str] = None,
    trip_id: Optional[str] = None,
    reimbursable_paid_by: Optional[Iterable[str]] = None,
) -> Settlement:
    """
    Compute a driver settlement.

    The same formula serves previews and final settlements; labeling a
    result as final is up to the caller.

    Args:
        contract: Pay contract variant or flat pay record
        metrics: Trip metrics
        expenses: Expense items logged on the trip
        collections: Amounts collected from customers on the trip's loads
        driver_id: Driver being settled (defaults to the contract's driver)
        trip_id: Trip being settled
        reimbursable_paid_by: Paid-by values that count as driver-fronted

    Returns:
        Settlement with net_pay == gross_pay + reimbursements - collections

    Raises:
        ConfigurationError: If the contract is missing its required rate
        ValidationError: If a metric is negative
    """
    gross = compute_gross_pay(contract, metrics)
    reimbursed = aggregate_expenses(expenses, reimbursable_paid_by)
    collected = aggregate_collections(collections)

    net_pay = round_money(gross.gross_pay + reimbursed.total - collected.total)

    contract_driver = getattr(contract, "driver_id", None) or (
        contract.get("driver_id") if isinstance(contract, Mapping) else None
    )

    settlement = Settlement(
        driver_id=driver_id or contract_driver or None,
        trip_id=trip_id,
        pay_mode=gross.pay_mode,
        gross_pay=gross.gross_pay,
        pay_breakdown=gross.breakdown,
        reimbursements=reimbursed.total,
        reimbursement_items=reimbursed.items,
        collections=collected.total,
        collection_items=collected.items,
        net_pay=net_pay,
        metrics=metrics,
    )
    return settlement.model_copy(update={"notes": settlement_notes(settlement, describe_pay(gross))})


def settlement_notes(settlement: Settlement, pay_description: str) -> list[str]:
    """Generate readable notes for a settlement."""
    notes = [f"Pay: {pay_description}"]

    notes.append(f"Gross pay: {format_usd(settlement.gross_pay)}")

    if settlement.reimbursements > 0:
        notes.append(
            f"Reimbursed expenses: {format_usd(settlement.reimbursements)} "
            f"({len(settlement.reimbursement_items)} items)"
        )

    if settlement.collections > 0:
        notes.append(f"Collected from customers: {format_usd(settlement.collections)}")

    if settlement.net_pay > 0:
        notes.append(f"Amount owed to driver: {format_usd(settlement.net_pay)}")
    elif settlement.net_pay < 0:
        notes.append(f"Driver owes company: {format_usd(abs(settlement.net_pay))}")
    else:
        notes.append("Settlement is balanced")

    return notes


def summarize_earnings(records: Iterable[SettlementRecord]) -> EarningsSummary:
    """Totals across a driver's final settlements."""
    records = list(records)
    paid = [r for r in records if r.status is SettlementStatus.PAID]
    pending = [r for r in records if r.status is not SettlementStatus.PAID]

    return EarningsSummary(
        total_earned=sum_money(r.settlement.net_pay for r in records),
        pending_pay=sum_money(r.settlement.net_pay for r in pending),
        paid_out=sum_money(r.settlement.net_pay for r in paid),
        trips_completed=len(records),
        total_miles=sum((r.settlement.metrics.actual_miles for r in records), Decimal("0")),
        total_cuft=sum((r.settlement.metrics.total_cuft for r in records), Decimal("0")),
    )


class SettlementAssembler(BaseEngine):
    """
    Settlement Assembler engine.

    Previews are recomputed on every call. A final settlement is computed
    once per trip and returned as stored afterwards.
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the settlement assembler."""
        super().__init__(engine_name="settlement", **kwargs)
        self._final: dict[str, LabeledSettlement] = {}
        self._final_lock = threading.Lock()

    @property
    def reimbursable_paid_by(self) -> frozenset[str]:
        return self.config_manager.get_settlement_rules().reimbursable_paid_by

    def calculate_settlement(
        self,
        contract: Any,
        metrics: TripMetrics,
        expenses: Optional[list[ExpenseItem]] = None,
        collections: Optional[list[CollectionItem]] = None,
        driver_id: Optional[str] = None,
        trip_id: Optional[str] = None,
    ) -> Settlement:
        """
        Calculate a settlement and record the decision.

        Args:
            contract: Driver's pay contract
            metrics: Trip metrics
            expenses: Expenses logged on the trip
            collections: Customer collections on the trip's loads
            driver_id: Driver being settled
            trip_id: Trip being settled

        Returns:
            Settlement
        """
        start_time = time()

        expenses = expenses or []
        collections = collections or []

        self.logger.info(
            "calculating_settlement",
            driver_id=driver_id,
            trip_id=trip_id,
            expenses=len(expenses),
            collections=len(collections),
        )

        try:
            settlement = assemble_settlement(
                contract,
                metrics,
                expenses,
                collections,
                driver_id=driver_id,
                trip_id=trip_id,
                reimbursable_paid_by=self.reimbursable_paid_by,
            )
        except ConfigurationError as e:
            self.logger.error("settlement_blocked", trip_id=trip_id, field=e.field, error=e.message)
            raise

        self.record(
            decision_type="settlement_calculation",
            input_data={
                "driver_id": settlement.driver_id,
                "trip_id": trip_id,
                "expenses": len(expenses),
                "collections": len(collections),
            },
            output_data={
                "gross_pay": str(settlement.gross_pay),
                "reimbursements": str(settlement.reimbursements),
                "collections": str(settlement.collections),
                "net_pay": str(settlement.net_pay),
                "pay_status": settlement.pay_status.value,
            },
            summary=f"Net pay {format_usd(settlement.net_pay)} for trip {trip_id}",
            started_at=start_time,
            finished_at=time(),
        )
        return settlement

    def preview(self, *args: Any, **kwargs: Any) -> LabeledSettlement:
        """Running estimate for a trip still in progress."""
        settlement = self.calculate_settlement(*args, **kwargs)
        return LabeledSettlement(
            kind=SettlementKind.ESTIMATE,
            settlement=settlement,
            labeled_at=datetime.now(timezone.utc),
        )

    def finalize(
        self,
        contract: Any,
        metrics: TripMetrics,
        expenses: Optional[list[ExpenseItem]] = None,
        collections: Optional[list[CollectionItem]] = None,
        driver_id: Optional[str] = None,
        trip_id: Optional[str] = None,
    ) -> LabeledSettlement:
        """
        Authoritative settlement for a closed trip.

        Raises:
            InvalidStateError: If trip_id is missing
        """
        if not trip_id:
            raise InvalidStateError("a final settlement needs a trip id", field="trip_id")

        with self._final_lock:
            existing = self._final.get(trip_id)
            if existing is not None:
                self.logger.info("settlement_already_final", trip_id=trip_id)
                return existing

            settlement = self.calculate_settlement(
                contract, metrics, expenses, collections, driver_id=driver_id, trip_id=trip_id
            )
            labeled = LabeledSettlement(
                kind=SettlementKind.FINAL,
                settlement=settlement,
                labeled_at=datetime.now(timezone.utc),
            )
            self._final[trip_id] = labeled

        self.logger.info("settlement_finalized", trip_id=trip_id, net_pay=str(settlement.net_pay))
        return labeled

    def settle_trip(
        self,
        trip: TripRecord,
        loads: Iterable[TripLoadRecord],
        expenses: Optional[list[ExpenseItem]] = None,
        collections: Optional[list[CollectionItem]] = None,
        final: bool = False,
    ) -> LabeledSettlement:
        """
        Settle a trip from its stored records using the trip's contract snapshot.

        Raises:
            ConfigurationError: If the trip has no pay contract
        """
        if trip.pay_contract is None:
            self.logger.error("settlement_blocked", trip_id=trip.trip_id, field="pay_contract")
            raise ConfigurationError(f"trip {trip.trip_id} has no pay contract", field="pay_contract")

        minimum_days = self.config_manager.get_settlement_rules().minimum_trip_days
        metrics = extract_trip_metrics(trip, loads, minimum_days=minimum_days)
        settle = self.finalize if final else self.preview
        return settle(
            trip.pay_contract,
            metrics,
            expenses,
            collections,
            driver_id=trip.driver_id,
            trip_id=trip.trip_id,
        )

    def get_final(self, trip_id: str) -> Optional[LabeledSettlement]:
        return self._final.get(trip_id)

    def execute(self, *args: Any, **kwargs: Any) -> Settlement:
        """
        Execute settlement calculation (delegates to calculate_settlement).

        Args:
            *args: Positional arguments for calculate_settlement
            **kwargs: Keyword arguments for calculate_settlement

        Returns:
            Settlement
        """
        return self.calculate_settlement(*args, **kwargs)


def print_settlement_report(labeled: LabeledSettlement) -> None:
    """Print a settlement the way it is shown to a driver."""
    settlement = labeled.settlement
    title = "DRIVER SETTLEMENT REPORT" if labeled.kind is SettlementKind.FINAL else "ESTIMATED SETTLEMENT"

    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)
    print(f"Driver: {settlement.driver_id}")
    print(f"Trip: {settlement.trip_id}")
    print(f"Pay mode: {settlement.pay_mode.value}")
    print()

    print("EARNINGS:")
    for line in settlement.pay_breakdown:
        print(f"  {line.label}: {line.quantity} × {line.rate} = {format_usd(line.amount)}")
    print(f"  Gross Pay: {format_usd(settlement.gross_pay)}")
    print()

    print(f"REIMBURSEMENTS: {format_usd(settlement.reimbursements)}")
    for item in settlement.reimbursement_items:
        print(f"  {item.category.value}: {format_usd(item.amount)}")
    print(f"COLLECTIONS: {format_usd(settlement.collections)}")
    for item in settlement.collection_items:
        print(f"  {item.load_id} ({item.method.value}): {format_usd(item.amount)}")
    print()

    print(f"NET PAY: {format_usd(settlement.net_pay)}")
    print(f"Status: {settlement.pay_status.value.upper()}")
    print()

    print("NOTES:")
    for note in settlement.notes:
        print(f"  • {note}")

    print("\n" + "=" * 80)


def main() -> None:
    """Example usage of the settlement assembler."""
    from fleetledger.core.logs import configure_logging
    from fleetledger.data.models.contract import PercentOfRevenueContract
    from fleetledger.data.models.items import PaidBy, PaymentMethod

    assembler = SettlementAssembler()
    env = assembler.config_manager.env
    configure_logging(env.log_level, json_output=env.log_format == "json")

    now = datetime.now(timezone.utc)

    contract = PercentOfRevenueContract(driver_id="DRV-001", percent_of_revenue=Decimal("65"))
    metrics = TripMetrics(
        actual_miles=Decimal("1240"),
        total_cuft=Decimal("2100"),
        total_revenue=Decimal("10000.00"),
        days_worked=Decimal("4"),
    )
    expenses = [
        ExpenseItem(
            expense_id="EXP-001",
            amount=Decimal("120.50"),
            category="tolls",
            paid_by=PaidBy.DRIVER_PERSONAL,
            incurred_at=now,
            receipt_ref="receipts/exp-001.jpg",
        ),
        ExpenseItem(
            expense_id="EXP-002",
            amount=Decimal("410.00"),
            category="fuel",
            paid_by=PaidBy.FUEL_CARD,
            incurred_at=now,
            receipt_ref="receipts/exp-002.jpg",
        ),
    ]
    collections = [
        CollectionItem(
            collection_id="COL-001",
            load_id="LOAD-001",
            amount=Decimal("300.00"),
            method=PaymentMethod.CASH,
            collected_at=now,
        )
    ]

    labeled = assembler.finalize(
        contract, metrics, expenses, collections, driver_id="DRV-001", trip_id="TRIP-001"
    )
    print_settlement_report(labeled)


if __name__ == "__main__":
    main()
