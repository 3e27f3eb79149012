"""
Tests for the pay calculator.

Run:
    pytest tests/test_pay.py -v
"""

from decimal import Decimal

import pytest

from fleetledger.core.exceptions import ConfigurationError, ValidationError
from fleetledger.data.models import (
    FlatDailyRateContract,
    PayMode,
    PercentOfRevenueContract,
    PerCuftContract,
    PerMileAndCuftContract,
    PerMileContract,
    TripMetrics,
    parse_pay_contract,
    snapshot_contract,
)
from fleetledger.engine.pay import PayCalculator, compute_gross_pay


def metrics(miles="0", cuft="0", revenue="0", days="0"):
    return TripMetrics(
        actual_miles=Decimal(miles),
        total_cuft=Decimal(cuft),
        total_revenue=Decimal(revenue),
        days_worked=Decimal(days),
    )


class TestPayModes:

    def test_per_mile(self):
        result = compute_gross_pay(PerMileContract(rate_per_mile=Decimal("0.55")), metrics(miles="812"))
        assert result.gross_pay == Decimal("446.60")
        assert result.pay_mode is PayMode.PER_MILE
        assert [line.label for line in result.breakdown] == ["miles"]

    def test_per_cuft(self):
        result = compute_gross_pay(PerCuftContract(rate_per_cuft=Decimal("2.50")), metrics(cuft="1000"))
        assert result.gross_pay == Decimal("2500.00")

    def test_per_mile_and_cuft_rounds_each_line_before_summing(self):
        contract = PerMileAndCuftContract(rate_per_mile=Decimal("0.333"), rate_per_cuft=Decimal("0.335"))
        result = compute_gross_pay(contract, metrics(miles="100.5", cuft="10.5"))

        assert [line.amount for line in result.breakdown] == [Decimal("33.47"), Decimal("3.52")]
        # Unrounded total would be 36.984 -> 36.98
        assert result.gross_pay == Decimal("36.99")

    def test_percent_of_revenue(self):
        contract = PercentOfRevenueContract(percent_of_revenue=Decimal("65"))
        result = compute_gross_pay(contract, metrics(revenue="10000.00"))
        assert result.gross_pay == Decimal("6500.00")
        assert result.breakdown[0].rate == Decimal("65")

    def test_revenue_is_rounded_to_the_cent_before_percent(self):
        contract = PercentOfRevenueContract(percent_of_revenue=Decimal("50"))
        result = compute_gross_pay(contract, metrics(revenue="1000.005"))
        assert result.breakdown[0].quantity == Decimal("1000.01")
        assert result.gross_pay == Decimal("500.01")

    def test_flat_daily_rate(self):
        contract = FlatDailyRateContract(flat_daily_rate=Decimal("250.00"))
        result = compute_gross_pay(contract, metrics(days="5"))
        assert result.gross_pay == Decimal("1250.00")

    def test_rounds_half_up_to_the_cent(self):
        result = compute_gross_pay(PerMileContract(rate_per_mile=Decimal("0.005")), metrics(miles="1"))
        assert result.gross_pay == Decimal("0.01")

    def test_zero_metrics_pay_zero(self):
        result = compute_gross_pay(PerCuftContract(rate_per_cuft=Decimal("2.50")), metrics())
        assert result.gross_pay == Decimal("0")


class TestPayRecords:

    def test_flat_record_is_parsed_by_mode(self):
        record = {"pay_mode": "per_cuft", "rate_per_cuft": 2.5, "driver_id": "DRV-1"}
        result = compute_gross_pay(record, metrics(cuft="1000"))
        assert result.gross_pay == Decimal("2500.00")

    def test_unrelated_rate_has_no_effect(self):
        base = {"pay_mode": "percent_of_revenue", "percent_of_revenue": "65"}
        noisy = {**base, "rate_per_mile": "99.99", "flat_daily_rate": "1000", "rate_per_cuft": None}

        trip = metrics(miles="900", cuft="500", revenue="10000", days="3")
        assert compute_gross_pay(base, trip) == compute_gross_pay(noisy, trip)

    def test_unrelated_rates_are_dropped_from_contract(self):
        contract = parse_pay_contract({"pay_mode": "per_mile", "rate_per_mile": "0.6", "rate_per_cuft": "2"})
        assert isinstance(contract, PerMileContract)
        assert not hasattr(contract, "rate_per_cuft")

    def test_float_rates_do_not_carry_binary_artifacts(self):
        contract = parse_pay_contract({"pay_mode": "per_mile", "rate_per_mile": 0.1})
        assert contract.rate_per_mile == Decimal("0.1")

    @pytest.mark.parametrize(
        "record, field",
        [
            ({"pay_mode": "per_mile"}, "rate_per_mile"),
            ({"pay_mode": "per_mile_and_cuft", "rate_per_mile": "0.5"}, "rate_per_cuft"),
            ({"pay_mode": "percent_of_revenue", "percent_of_revenue": None}, "percent_of_revenue"),
            ({"pay_mode": "flat_daily_rate", "flat_daily_rate": "-1"}, "flat_daily_rate"),
            ({"pay_mode": "per_cuft", "rate_per_cuft": "two fifty"}, "rate_per_cuft"),
            ({"pay_mode": "hourly", "rate_per_mile": "1"}, "pay_mode"),
            ({}, "pay_mode"),
        ],
    )
    def test_invalid_contract_is_a_configuration_error(self, record, field):
        with pytest.raises(ConfigurationError) as exc:
            compute_gross_pay(record, metrics(miles="100", cuft="100", revenue="100", days="1"))
        assert exc.value.field == field

    def test_missing_rate_is_never_treated_as_zero(self):
        with pytest.raises(ConfigurationError):
            compute_gross_pay({"pay_mode": "per_mile", "rate_per_mile": None}, metrics())

    def test_snapshot_is_independent_of_the_source(self):
        record = {"pay_mode": "per_mile", "rate_per_mile": "0.55", "driver_id": "DRV-1"}
        snapshot = snapshot_contract(record)
        record["rate_per_mile"] = "0.80"

        assert snapshot.rate_per_mile == Decimal("0.55")
        assert snapshot.driver_id == "DRV-1"


class TestMetricValidation:

    @pytest.mark.parametrize("field", ["actual_miles", "total_cuft", "total_revenue", "days_worked"])
    def test_negative_metric_is_a_validation_error(self, field):
        trip = TripMetrics(**{field: Decimal("-1")})
        with pytest.raises(ValidationError) as exc:
            compute_gross_pay(PerMileContract(rate_per_mile=Decimal("1")), trip)
        assert exc.value.field == field

    def test_negative_unused_metric_is_still_rejected(self):
        with pytest.raises(ValidationError):
            compute_gross_pay(PerMileContract(rate_per_mile=Decimal("1")), metrics(days="-2"))


class TestPayCalculator:

    def test_records_each_calculation(self, config_manager):
        calculator = PayCalculator(config_manager=config_manager)
        contract = FlatDailyRateContract(flat_daily_rate=Decimal("250"))

        first = calculator.execute(contract, metrics(days="5"))
        second = calculator.execute(contract, metrics(days="5"))

        assert first == second
        assert len(calculator.decision_history) == 2
        decision = calculator.decision_history[0]
        assert decision.decision_type == "gross_pay"
        assert decision.output_data == {"gross_pay": "1250.00"}

    def test_configuration_error_propagates(self, config_manager):
        calculator = PayCalculator(config_manager=config_manager)
        with pytest.raises(ConfigurationError):
            calculator.calculate({"pay_mode": "per_cuft"}, metrics(cuft="10"))
        assert calculator.decision_history == []
