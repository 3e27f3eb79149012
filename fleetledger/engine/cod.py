"""
Pre-Delivery COD Evaluator - may the driver unload?

A trusted partner company may owe the carrier money after delivery. A
COD-required company must pre-fund the gap between the carrier rate and the
customer's balance before the driver unloads.
"""

import threading
from decimal import Decimal
from time import time
from typing import Any, Optional

from fleetledger.core.exceptions import ValidationError
from fleetledger.core.money import ZERO, format_usd, require_non_negative, round_money
from fleetledger.data.models.load import (
    AlertLevel,
    DeliveryOverrides,
    LoadFinancials,
    PreDeliveryCheck,
    TrustLevel,
)
from fleetledger.engine.base import BaseEngine
from fleetledger.tools.stores import LoadStore
from fleetledger.tools.trust import TrustDirectory


def _amount(value: Optional[Decimal], field: str) -> Decimal:
    if value is None:
        return ZERO
    return require_non_negative(value, field)


def carrier_rate_for(load: LoadFinancials) -> Decimal:
    """What the carrier earns for the load: cuft × rate + accessorials."""
    cuft = _amount(load.actual_cuft_loaded, "actual_cuft_loaded")
    rate = _amount(load.effective_rate_per_cuft, "rate_per_cuft")
    accessorials = _amount(load.contract_accessorials_total, "contract_accessorials_total")
    return round_money(cuft * rate + accessorials)


def parse_trust_level(value: Any) -> TrustLevel:
    try:
        return TrustLevel(value)
    except ValueError:
        allowed = ", ".join(t.value for t in TrustLevel)
        raise ValidationError(f"must be one of: {allowed} (got {value!r})", field="trust_level") from None


def requires_cod_payment(trust_level: TrustLevel, carrier_rate: Decimal, customer_balance: Decimal) -> bool:
    """Quick check, ignoring overrides."""
    if parse_trust_level(trust_level) is TrustLevel.TRUSTED:
        return False
    return round_money(carrier_rate - customer_balance) > 0


def _collect_from_customer(customer_balance: Decimal, suffix: str = " and complete delivery") -> str:
    if customer_balance > 0:
        return f"Collect {format_usd(customer_balance)} from customer{suffix}"
    return "Complete delivery"


def evaluate_pre_delivery(
    load: LoadFinancials,
    trust_level: TrustLevel,
    overrides: Optional[DeliveryOverrides] = None,
) -> PreDeliveryCheck:
    """
    Decide whether COD must be collected from the partner company before unloading.

    Args:
        load: The load's financials
        trust_level: The partner company's trust level
        overrides: COD already received / company-approved exception

    Returns:
        PreDeliveryCheck with the decision and driver-facing messages

    Raises:
        ValidationError: If an amount is negative or not numeric
    """
    overrides = overrides or DeliveryOverrides()
    trust_level = parse_trust_level(trust_level)
    company = load.company_name

    carrier_rate = carrier_rate_for(load)
    customer_balance = round_money(_amount(load.balance_due_on_delivery, "balance_due_on_delivery"))
    shortfall = round_money(carrier_rate - customer_balance)

    is_trusted = trust_level is TrustLevel.TRUSTED
    requires_cod = (
        not is_trusted
        and shortfall > 0
        and not overrides.cod_received
        and not overrides.company_approved_exception
    )
    cod_amount_required = shortfall if requires_cod else ZERO

    if overrides.cod_received:
        status_message = f"COD of {format_usd(shortfall)} received from {company}"
        action_required = _collect_from_customer(customer_balance)
        alert_level = AlertLevel.SUCCESS
    elif overrides.company_approved_exception:
        status_message = f"{company} approved delivery without COD"
        action_required = _collect_from_customer(customer_balance)
        alert_level = AlertLevel.SUCCESS
    elif is_trusted:
        if shortfall > 0:
            status_message = f"TRUSTED - {company} will pay you {format_usd(shortfall)} after delivery"
            action_required = _collect_from_customer(customer_balance, suffix=", then complete delivery")
        else:
            status_message = "Customer balance covers your rate"
            action_required = _collect_from_customer(customer_balance, suffix="")
        alert_level = AlertLevel.SUCCESS
    elif shortfall > 0:
        status_message = f"COD REQUIRED - {company} must pay {format_usd(shortfall)} BEFORE you unload"
        action_required = f"DO NOT UNLOAD until you receive {format_usd(shortfall)} from {company}"
        alert_level = AlertLevel.DANGER
    else:
        status_message = "Customer balance covers your rate - no COD needed"
        action_required = _collect_from_customer(customer_balance, suffix="")
        alert_level = AlertLevel.SUCCESS

    return PreDeliveryCheck(
        load_id=load.load_id,
        carrier_rate=carrier_rate,
        customer_balance=customer_balance,
        shortfall=shortfall,
        trust_level=trust_level,
        is_trusted=is_trusted,
        requires_cod=requires_cod,
        cod_amount_required=cod_amount_required,
        status_message=status_message,
        action_required=action_required,
        alert_level=alert_level,
    )


class PreDeliveryCODEvaluator(BaseEngine):
    """
    Pre-Delivery COD Evaluator engine.

    Reads the load's current financials and the company's trust level, and
    caches each check against the load's balance version: a balance change
    makes the cached check stale and the next call recomputes it.
    """

    def __init__(self, loads: LoadStore, trust: TrustDirectory, **kwargs: Any) -> None:
        """Initialize the COD evaluator."""
        super().__init__(engine_name="cod_evaluator", **kwargs)
        self.loads = loads
        self.trust = trust
        self._cache: dict[str, tuple[int, TrustLevel, DeliveryOverrides, PreDeliveryCheck]] = {}
        self._cache_lock = threading.Lock()

    def check_load(
        self,
        load_id: str,
        company_id: str,
        overrides: Optional[DeliveryOverrides] = None,
    ) -> PreDeliveryCheck:
        """
        Pre-delivery check for a stored load.

        Args:
            load_id: Load about to be delivered
            company_id: Partner company the load came from
            overrides: COD received / approved exception flags

        Returns:
            PreDeliveryCheck reflecting the load's current balance
        """
        overrides = overrides or DeliveryOverrides()
        trust_level = self.trust.trust_level(company_id)
        version = self.loads.balance_version(load_id)

        with self._cache_lock:
            cached = self._cache.get(load_id)
        if cached is not None and cached[:3] == (version, trust_level, overrides):
            return cached[3]

        start_time = time()
        load = self.loads.get_financials(load_id)
        check = evaluate_pre_delivery(load, trust_level, overrides)

        with self._cache_lock:
            self._cache[load_id] = (version, trust_level, overrides, check)

        if check.requires_cod:
            self.logger.warning(
                "cod_required",
                load_id=load_id,
                company_id=company_id,
                cod_amount=str(check.cod_amount_required),
            )

        self.record(
            decision_type="pre_delivery_check",
            input_data={
                "load_id": load_id,
                "company_id": company_id,
                "trust_level": trust_level.value,
                "balance_version": version,
                **overrides.model_dump(),
            },
            output_data={
                "carrier_rate": str(check.carrier_rate),
                "customer_balance": str(check.customer_balance),
                "shortfall": str(check.shortfall),
                "requires_cod": check.requires_cod,
                "alert_level": check.alert_level.value,
            },
            summary=check.status_message,
            started_at=start_time,
            finished_at=time(),
        )
        return check

    def cached_check(self, load_id: str) -> Optional[PreDeliveryCheck]:
        """Last computed check for a load, or None if there is none or it was invalidated."""
        with self._cache_lock:
            cached = self._cache.get(load_id)
        return cached[3] if cached else None

    def invalidate(self, load_id: str) -> None:
        """Drop the cached check for a load."""
        with self._cache_lock:
            dropped = self._cache.pop(load_id, None)
        if dropped is not None:
            self.logger.info("pre_delivery_check_invalidated", load_id=load_id)

    def execute(self, *args: Any, **kwargs: Any) -> PreDeliveryCheck:
        """Execute a pre-delivery check (delegates to check_load)."""
        return self.check_load(*args, **kwargs)
