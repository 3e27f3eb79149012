"""
Record stores the engine reads loads and disputes from.

The protocols describe what a persistent store must offer; the in-memory
implementations back tests and previews. Dispute transitions are
compare-and-set on the current status, never blind writes.
"""

import threading
from decimal import Decimal
from typing import Optional, Protocol

from fleetledger.core.exceptions import InvalidStateError, NotFoundError
from fleetledger.data.models.dispute import BalanceDispute, DisputeStatus
from fleetledger.data.models.load import LoadFinancials


class LoadStore(Protocol):
    def get_financials(self, load_id: str) -> LoadFinancials: ...

    def balance_version(self, load_id: str) -> int: ...

    def set_balance(self, load_id: str, balance: Decimal, reason: str) -> LoadFinancials: ...


class DisputeStore(Protocol):
    def get(self, dispute_id: str) -> BalanceDispute: ...

    def find_open(self, load_id: str) -> Optional[BalanceDispute]: ...

    def insert_open(self, dispute: BalanceDispute) -> BalanceDispute: ...

    def compare_and_set(
        self, dispute_id: str, expected: DisputeStatus, updated: BalanceDispute
    ) -> bool: ...

    def list(self, status: Optional[DisputeStatus] = None) -> list[BalanceDispute]: ...


class InMemoryLoadStore:
    """Load financials keyed by load id, with a version bumped on every balance change."""

    def __init__(self, loads: Optional[list[LoadFinancials]] = None) -> None:
        self._lock = threading.Lock()
        self._loads: dict[str, LoadFinancials] = {}
        self._versions: dict[str, int] = {}
        self.adjustments: list[tuple[str, Decimal, str]] = []
        for load in loads or []:
            self.put(load)

    def put(self, load: LoadFinancials) -> None:
        with self._lock:
            self._loads[load.load_id] = load
            self._versions[load.load_id] = self._versions.get(load.load_id, 0) + 1

    def get_financials(self, load_id: str) -> LoadFinancials:
        with self._lock:
            try:
                return self._loads[load_id]
            except KeyError:
                raise NotFoundError(f"load {load_id} not found", field="load_id") from None

    def balance_version(self, load_id: str) -> int:
        with self._lock:
            if load_id not in self._versions:
                raise NotFoundError(f"load {load_id} not found", field="load_id")
            return self._versions[load_id]

    def set_balance(self, load_id: str, balance: Decimal, reason: str) -> LoadFinancials:
        with self._lock:
            if load_id not in self._loads:
                raise NotFoundError(f"load {load_id} not found", field="load_id")
            updated = self._loads[load_id].model_copy(update={"balance_due_on_delivery": balance})
            self._loads[load_id] = updated
            self._versions[load_id] += 1
            self.adjustments.append((load_id, balance, reason))
            return updated


class InMemoryDisputeStore:
    """Disputes keyed by id; at most one open dispute per load."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._disputes: dict[str, BalanceDispute] = {}

    def get(self, dispute_id: str) -> BalanceDispute:
        with self._lock:
            try:
                return self._disputes[dispute_id]
            except KeyError:
                raise NotFoundError(f"dispute {dispute_id} not found", field="dispute_id") from None

    def _open_for(self, load_id: str) -> Optional[BalanceDispute]:
        for dispute in self._disputes.values():
            if dispute.load_id == load_id and dispute.status is DisputeStatus.OPEN:
                return dispute
        return None

    def find_open(self, load_id: str) -> Optional[BalanceDispute]:
        with self._lock:
            return self._open_for(load_id)

    def insert_open(self, dispute: BalanceDispute) -> BalanceDispute:
        """
        Insert a new open dispute.

        Raises:
            InvalidStateError: If the load already has an open dispute
        """
        with self._lock:
            existing = self._open_for(dispute.load_id)
            if existing is not None:
                raise InvalidStateError(
                    f"load {dispute.load_id} already has open dispute {existing.dispute_id}",
                    field="load_id",
                )
            self._disputes[dispute.dispute_id] = dispute
            return dispute

    def compare_and_set(
        self, dispute_id: str, expected: DisputeStatus, updated: BalanceDispute
    ) -> bool:
        """Replace a dispute only if its status is still the expected one."""
        with self._lock:
            current = self._disputes.get(dispute_id)
            if current is None:
                raise NotFoundError(f"dispute {dispute_id} not found", field="dispute_id")
            if current.status is not expected:
                return False
            self._disputes[dispute_id] = updated
            return True

    def list(self, status: Optional[DisputeStatus] = None) -> list[BalanceDispute]:
        with self._lock:
            disputes = [d for d in self._disputes.values() if status is None or d.status is status]
        return sorted(disputes, key=lambda d: d.created_at, reverse=True)
