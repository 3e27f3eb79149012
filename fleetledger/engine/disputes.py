"""
Balance Dispute Resolver - driver-reported balance corrections.

A driver flags a load's delivery balance as wrong; dispatch resolves the
dispute exactly once:
- confirmed_zero: balance becomes 0
- balance_updated: balance becomes the corrected amount
- cancelled: original balance stands

Every resolution changes the load's effective balance (or leaves it alone),
invalidates any cached pre-delivery check and notifies the reporting driver.
The reporting driver may also withdraw a dispute while it is still open.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from time import time
from typing import Any, Optional

from fleetledger.core.config import OpenDisputePolicy
from fleetledger.core.exceptions import InvalidStateError, ValidationError
from fleetledger.core.money import ZERO, format_usd, money, require_non_negative
from fleetledger.data.models.dispute import (
    BalanceDispute,
    DisputeResolution,
    DisputeStatus,
    ResolutionType,
)
from fleetledger.engine.base import BaseEngine
from fleetledger.engine.cod import PreDeliveryCODEvaluator
from fleetledger.tools.notifications import Notifier
from fleetledger.tools.stores import DisputeStore, LoadStore

SUPERSEDED_NOTE = "superseded by a newer dispute"
WITHDRAWN_NOTE = "withdrawn by driver"


def parse_resolution_type(value: Any) -> ResolutionType:
    try:
        return ResolutionType(value)
    except ValueError:
        allowed = ", ".join(r.value for r in ResolutionType)
        raise ValidationError(
            f"must be one of: {allowed} (got {value!r})", field="resolution_type"
        ) from None


def parse_new_balance(value: Any) -> Decimal:
    """
    Validate a corrected balance.

    Raises:
        ValidationError: If the amount is missing, non-numeric or negative
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("required when resolution_type is balance_updated", field="new_balance")
    return money(require_non_negative(value, "new_balance"), "new_balance")


def resolution_message(
    resolution_type: ResolutionType,
    load_id: str,
    original_balance: Decimal,
    new_balance: Optional[Decimal],
    note: Optional[str],
) -> tuple[str, str]:
    """Notification title and body for a resolution."""
    if resolution_type is ResolutionType.CONFIRMED_ZERO:
        title = "Balance Confirmed"
        body = f"Dispatch confirmed the balance for load {load_id} is $0.00. Complete delivery without collecting."
    elif resolution_type is ResolutionType.BALANCE_UPDATED:
        title = "Balance Updated"
        body = (
            f"The balance for load {load_id} was updated to {format_usd(new_balance)}. "
            "Review the delivery check before unloading."
        )
    else:
        title = "Balance Dispute Closed"
        body = f"Dispatch closed your dispute for load {load_id}. The original balance of {format_usd(original_balance)} stands."

    if note:
        body = f"{body} Note: {note}"
    return title, body


class BalanceDisputeResolver(BaseEngine):
    """
    Balance Dispute Resolver engine.

    Transitions are compare-and-set from OPEN, so of two dispatchers
    resolving the same dispute the second gets InvalidStateError.
    """

    def __init__(
        self,
        disputes: DisputeStore,
        loads: LoadStore,
        notifier: Notifier,
        cod_evaluator: Optional[PreDeliveryCODEvaluator] = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the dispute resolver."""
        super().__init__(engine_name="dispute_resolver", **kwargs)
        self.disputes = disputes
        self.loads = loads
        self.notifier = notifier
        self.cod_evaluator = cod_evaluator

    @property
    def open_dispute_policy(self) -> OpenDisputePolicy:
        return self.config_manager.get_dispute_rules().open_dispute_policy

    def open_dispute(
        self,
        load_id: str,
        driver_id: str,
        driver_note: Optional[str] = None,
        trip_id: Optional[str] = None,
    ) -> BalanceDispute:
        """
        Open a dispute on a load's current balance.

        Raises:
            NotFoundError: If the load does not exist
            InvalidStateError: If the load already has an open dispute and
                the policy is reject
        """
        load = self.loads.get_financials(load_id)
        dispute = BalanceDispute(
            dispute_id=str(uuid.uuid4()),
            load_id=load_id,
            driver_id=driver_id,
            trip_id=trip_id,
            original_balance=money(
                require_non_negative(load.balance_due_on_delivery or ZERO, "balance_due_on_delivery")
            ),
            driver_note=driver_note,
            created_at=datetime.now(timezone.utc),
        )

        existing = self.disputes.find_open(load_id)
        if existing is not None:
            if self.open_dispute_policy is OpenDisputePolicy.REJECT:
                self.logger.warning(
                    "dispute_already_open", load_id=load_id, dispute_id=existing.dispute_id
                )
                raise InvalidStateError(
                    f"load {load_id} already has open dispute {existing.dispute_id}",
                    field="load_id",
                )
            self._supersede(existing)

        self.disputes.insert_open(dispute)
        self.logger.info(
            "dispute_opened",
            dispute_id=dispute.dispute_id,
            load_id=load_id,
            driver_id=driver_id,
            original_balance=str(dispute.original_balance),
        )
        return dispute

    def _supersede(self, existing: BalanceDispute) -> None:
        cancelled = existing.model_copy(
            update={
                "status": DisputeStatus.CANCELLED,
                "resolution_note": SUPERSEDED_NOTE,
                "resolved_at": datetime.now(timezone.utc),
            }
        )
        if not self.disputes.compare_and_set(existing.dispute_id, DisputeStatus.OPEN, cancelled):
            raise InvalidStateError(
                f"dispute {existing.dispute_id} changed while being superseded",
                field="dispute_id",
            )
        self.logger.info("dispute_superseded", dispute_id=existing.dispute_id, load_id=existing.load_id)

    def resolve_dispute(
        self,
        dispute_id: str,
        resolution_type: Any,
        new_balance: Any = None,
        note: Optional[str] = None,
        resolved_by: Optional[str] = None,
    ) -> DisputeResolution:
        """
        Resolve an open dispute.

        Args:
            dispute_id: Dispute to resolve
            resolution_type: confirmed_zero, balance_updated or cancelled
            new_balance: Corrected balance, required for balance_updated
            note: Dispatch note passed on to the driver
            resolved_by: Dispatcher resolving the dispute

        Returns:
            DisputeResolution with the terminal dispute and the new balance
            (None for cancelled)

        Raises:
            ValidationError: Bad resolution type or new balance; the dispute stays open
            NotFoundError: Unknown dispute
            InvalidStateError: The dispute is not open, or another resolution won the race
        """
        start_time = time()
        resolution = parse_resolution_type(resolution_type)
        dispute = self.disputes.get(dispute_id)

        if dispute.status.is_terminal:
            self.logger.warning(
                "dispute_already_resolved", dispute_id=dispute_id, status=dispute.status.value
            )
            raise InvalidStateError(
                f"dispute {dispute_id} is already {dispute.status.value}", field="status"
            )

        if resolution is ResolutionType.BALANCE_UPDATED:
            updated_balance: Optional[Decimal] = parse_new_balance(new_balance)
        elif resolution is ResolutionType.CONFIRMED_ZERO:
            updated_balance = ZERO
        else:
            updated_balance = None

        resolved = dispute.model_copy(
            update={
                "status": resolution.status,
                "new_balance": updated_balance if resolution is ResolutionType.BALANCE_UPDATED else None,
                "resolution_note": note,
                "resolved_by": resolved_by,
                "resolved_at": datetime.now(timezone.utc),
            }
        )
        if not self.disputes.compare_and_set(dispute_id, DisputeStatus.OPEN, resolved):
            self.logger.warning("dispute_resolution_conflict", dispute_id=dispute_id)
            raise InvalidStateError(f"dispute {dispute_id} was resolved concurrently", field="status")

        if updated_balance is not None:
            self._apply_balance(dispute, resolved, updated_balance, note)

        if self.cod_evaluator is not None:
            self.cod_evaluator.invalidate(dispute.load_id)

        notified = self._notify(resolved, resolution, note)

        self.record(
            decision_type="dispute_resolution",
            input_data={
                "dispute_id": dispute_id,
                "load_id": dispute.load_id,
                "resolution_type": resolution.value,
                "original_balance": str(dispute.original_balance),
            },
            output_data={
                "updated_balance": str(updated_balance) if updated_balance is not None else None,
                "notified": notified,
            },
            summary=f"Dispute {dispute_id} resolved as {resolution.value}",
            started_at=start_time,
            finished_at=time(),
        )
        return DisputeResolution(dispute=resolved, updated_balance=updated_balance, notified=notified)

    def withdraw_dispute(self, dispute_id: str, driver_id: str) -> BalanceDispute:
        """
        Let the reporting driver withdraw their own open dispute.

        The balance is left alone and no one is notified.

        Raises:
            NotFoundError: Unknown dispute
            ValidationError: driver_id is not the driver who opened the dispute
            InvalidStateError: The dispute is not open, or dispatch resolved it first
        """
        dispute = self.disputes.get(dispute_id)

        if dispute.driver_id != driver_id:
            self.logger.warning(
                "dispute_withdrawal_rejected", dispute_id=dispute_id, driver_id=driver_id
            )
            raise ValidationError(
                f"dispute {dispute_id} was not opened by driver {driver_id}", field="driver_id"
            )

        if dispute.status.is_terminal:
            raise InvalidStateError(
                f"dispute {dispute_id} is already {dispute.status.value}", field="status"
            )

        withdrawn = dispute.model_copy(
            update={
                "status": DisputeStatus.CANCELLED,
                "resolution_note": WITHDRAWN_NOTE,
                "resolved_by": driver_id,
                "resolved_at": datetime.now(timezone.utc),
            }
        )
        if not self.disputes.compare_and_set(dispute_id, DisputeStatus.OPEN, withdrawn):
            self.logger.warning("dispute_resolution_conflict", dispute_id=dispute_id)
            raise InvalidStateError(f"dispute {dispute_id} was resolved concurrently", field="status")

        self.logger.info("dispute_withdrawn", dispute_id=dispute_id, load_id=dispute.load_id)
        return withdrawn

    def _apply_balance(
        self,
        dispute: BalanceDispute,
        resolved: BalanceDispute,
        balance: Decimal,
        note: Optional[str],
    ) -> None:
        """Write the balance; on failure put the dispute back to OPEN and re-raise."""
        try:
            self.loads.set_balance(
                dispute.load_id, balance, note or "Balance corrected via driver dispute"
            )
        except Exception as e:
            self.logger.error(
                "dispute_balance_update_failed",
                dispute_id=dispute.dispute_id,
                load_id=dispute.load_id,
                error=str(e),
            )
            self.disputes.compare_and_set(dispute.dispute_id, resolved.status, dispute)
            raise

        self.logger.info(
            "load_balance_updated",
            load_id=dispute.load_id,
            original_balance=str(dispute.original_balance),
            new_balance=str(balance),
        )

    def _notify(self, dispute: BalanceDispute, resolution: ResolutionType, note: Optional[str]) -> bool:
        """Send the one driver notification; a send failure does not undo the resolution."""
        title, body = resolution_message(
            resolution, dispute.load_id, dispute.original_balance, dispute.new_balance, note
        )
        try:
            self.notifier.notify(dispute.driver_id, title, body)
        except Exception as e:
            self.logger.error(
                "dispute_notification_failed",
                dispute_id=dispute.dispute_id,
                driver_id=dispute.driver_id,
                error=str(e),
            )
            return False
        return True

    def list_disputes(self, status: Optional[DisputeStatus] = DisputeStatus.OPEN) -> list[BalanceDispute]:
        """Disputes with the given status (all when None), newest first."""
        return self.disputes.list(status)

    def execute(self, *args: Any, **kwargs: Any) -> DisputeResolution:
        """Execute a dispute resolution (delegates to resolve_dispute)."""
        return self.resolve_dispute(*args, **kwargs)
