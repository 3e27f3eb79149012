"""
Tests for the pre-delivery COD evaluator.

Run:
    pytest tests/test_cod.py -v
"""

from decimal import Decimal

import pytest

from fleetledger.core.exceptions import NotFoundError, ValidationError
from fleetledger.data.models import (
    AlertLevel,
    ContractAccessorials,
    DeliveryOverrides,
    LoadFinancials,
    PreDeliveryCheck,
    TrustLevel,
)
from fleetledger.engine.cod import evaluate_pre_delivery, requires_cod_payment


def load(balance="1800.00", cuft="1000", rate="2.50", **kwargs):
    return LoadFinancials(
        load_id="LOAD-1",
        company_name="Acme Van Lines",
        actual_cuft_loaded=Decimal(cuft),
        rate_per_cuft=Decimal(rate),
        balance_due_on_delivery=Decimal(balance),
        **kwargs,
    )


class TestEvaluatePreDelivery:

    def test_trusted_company_with_shortfall_may_unload(self):
        check = evaluate_pre_delivery(load(), TrustLevel.TRUSTED)

        assert check.carrier_rate == Decimal("2500.00")
        assert check.customer_balance == Decimal("1800.00")
        assert check.shortfall == Decimal("700.00")
        assert check.requires_cod is False
        assert check.cod_amount_required == Decimal("0")
        assert check.alert_level is AlertLevel.SUCCESS
        assert check.status_message == "TRUSTED - Acme Van Lines will pay you $700.00 after delivery"
        assert check.action_required == "Collect $1,800.00 from customer, then complete delivery"

    def test_cod_required_company_with_shortfall_blocks_unloading(self):
        check = evaluate_pre_delivery(load(), TrustLevel.COD_REQUIRED)

        assert check.requires_cod is True
        assert check.cod_amount_required == Decimal("700.00")
        assert check.alert_level is AlertLevel.DANGER
        assert check.action_required == "DO NOT UNLOAD until you receive $700.00 from Acme Van Lines"

    def test_customer_balance_covers_rate(self):
        check = evaluate_pre_delivery(load(balance="2600.00"), TrustLevel.COD_REQUIRED)

        assert check.shortfall == Decimal("-100.00")
        assert check.requires_cod is False
        assert check.status_message == "Customer balance covers your rate - no COD needed"
        assert check.action_required == "Collect $2,600.00 from customer"

    def test_trusted_with_no_shortfall_and_no_balance(self):
        check = evaluate_pre_delivery(load(balance="0", cuft="0"), TrustLevel.TRUSTED)
        assert check.status_message == "Customer balance covers your rate"
        assert check.action_required == "Complete delivery"

    def test_cod_received(self):
        check = evaluate_pre_delivery(
            load(), TrustLevel.COD_REQUIRED, DeliveryOverrides(cod_received=True)
        )
        assert check.requires_cod is False
        assert check.alert_level is AlertLevel.SUCCESS
        assert check.status_message == "COD of $700.00 received from Acme Van Lines"
        assert check.action_required == "Collect $1,800.00 from customer and complete delivery"

    def test_company_approved_exception(self):
        check = evaluate_pre_delivery(
            load(balance="0"), TrustLevel.COD_REQUIRED, DeliveryOverrides(company_approved_exception=True)
        )
        assert check.requires_cod is False
        assert check.status_message == "Acme Van Lines approved delivery without COD"
        assert check.action_required == "Complete delivery"

    def test_contract_rate_and_accessorials(self):
        accessorials = ContractAccessorials(stairs=Decimal("75"), long_carry=Decimal("50.25"))
        check = evaluate_pre_delivery(
            load(contract_rate_per_cuft=Decimal("3.00"), contract_accessorials_total=accessorials.total),
            TrustLevel.TRUSTED,
        )
        assert accessorials.total == Decimal("125.25")
        assert check.carrier_rate == Decimal("3125.25")

    def test_zero_contract_rate_falls_back_to_offered_rate(self):
        check = evaluate_pre_delivery(load(contract_rate_per_cuft=Decimal("0")), TrustLevel.COD_REQUIRED)

        assert check.carrier_rate == Decimal("2500.00")
        assert check.requires_cod is True
        assert check.cod_amount_required == Decimal("700.00")

    def test_unknown_trust_level_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc:
            evaluate_pre_delivery(load(), "sometimes")
        assert exc.value.field == "trust_level"
        with pytest.raises(ValidationError):
            requires_cod_payment("sometimes", Decimal("2500"), Decimal("0"))

    def test_missing_amounts_count_as_zero(self):
        check = evaluate_pre_delivery(LoadFinancials(load_id="L"), TrustLevel.COD_REQUIRED)
        assert check.carrier_rate == Decimal("0")
        assert check.shortfall == Decimal("0")
        assert check.requires_cod is False

    def test_negative_balance_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            evaluate_pre_delivery(load(balance="-5"), TrustLevel.TRUSTED)
        assert exc.value.field == "balance_due_on_delivery"

    @pytest.mark.parametrize("balance", ["0", "1800.00", "2500.00", "9000.00"])
    @pytest.mark.parametrize(
        "overrides",
        [
            DeliveryOverrides(),
            DeliveryOverrides(cod_received=True),
            DeliveryOverrides(company_approved_exception=True),
        ],
    )
    def test_trusted_never_requires_cod(self, balance, overrides):
        assert evaluate_pre_delivery(load(balance=balance), TrustLevel.TRUSTED, overrides).requires_cod is False

    @pytest.mark.parametrize("balance", ["0", "1800.00", "2500.00", "9000.00"])
    @pytest.mark.parametrize(
        "overrides",
        [DeliveryOverrides(cod_received=True), DeliveryOverrides(company_approved_exception=True)],
    )
    def test_overrides_clear_cod(self, balance, overrides):
        check = evaluate_pre_delivery(load(balance=balance), TrustLevel.COD_REQUIRED, overrides)
        assert check.requires_cod is False
        assert check.cod_amount_required == Decimal("0")

    def test_requires_cod_never_reports_success(self):
        check = evaluate_pre_delivery(load(), TrustLevel.COD_REQUIRED)
        data = check.model_dump()
        data["alert_level"] = AlertLevel.SUCCESS
        with pytest.raises(ValueError):
            PreDeliveryCheck(**data)

    def test_quick_check(self):
        assert requires_cod_payment(TrustLevel.COD_REQUIRED, Decimal("2500"), Decimal("1800")) is True
        assert requires_cod_payment(TrustLevel.COD_REQUIRED, Decimal("1800"), Decimal("1800")) is False
        assert requires_cod_payment(TrustLevel.TRUSTED, Decimal("2500"), Decimal("0")) is False


class TestPreDeliveryCODEvaluator:

    def test_check_uses_company_trust_level(self, cod_evaluator):
        untrusted = cod_evaluator.check_load("LOAD-1", "acme")
        trusted = cod_evaluator.check_load("LOAD-1", "blue-ridge")

        assert untrusted.requires_cod is True
        assert untrusted.cod_amount_required == Decimal("2000.00")
        assert trusted.requires_cod is False

    def test_repeated_checks_are_cached(self, cod_evaluator):
        first = cod_evaluator.check_load("LOAD-2", "blue-ridge")
        second = cod_evaluator.check_load("LOAD-2", "blue-ridge")

        assert second is first
        assert len(cod_evaluator.decision_history) == 1

    def test_balance_change_makes_cached_check_stale(self, cod_evaluator, loads):
        before = cod_evaluator.check_load("LOAD-1", "acme")
        loads.set_balance("LOAD-1", Decimal("2500.00"), "corrected")
        after = cod_evaluator.check_load("LOAD-1", "acme")

        assert before.requires_cod is True
        assert after.requires_cod is False
        assert after.customer_balance == Decimal("2500.00")

    def test_invalidate_drops_cached_check(self, cod_evaluator):
        cod_evaluator.check_load("LOAD-1", "acme")
        cod_evaluator.invalidate("LOAD-1")
        assert cod_evaluator.cached_check("LOAD-1") is None

    def test_unknown_load_or_company(self, cod_evaluator):
        with pytest.raises(NotFoundError):
            cod_evaluator.check_load("LOAD-404", "acme")
        with pytest.raises(NotFoundError):
            cod_evaluator.check_load("LOAD-1", "nobody")
