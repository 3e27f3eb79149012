"""
Shared fixtures for the settlement engine tests.
"""

from decimal import Decimal

import pytest

from fleetledger.data.models import LoadFinancials, TrustLevel
from fleetledger.engine.cod import PreDeliveryCODEvaluator
from fleetledger.engine.disputes import BalanceDisputeResolver
from fleetledger.tools import (
    InMemoryDisputeStore,
    InMemoryLoadStore,
    RecordingNotifier,
    StaticTrustDirectory,
)
from tests.helpers import write_config


@pytest.fixture
def config_manager(tmp_path):
    return write_config(tmp_path)


@pytest.fixture
def supersede_config(tmp_path):
    return write_config(tmp_path, disputes={"open_dispute_policy": "supersede"})


@pytest.fixture
def loads():
    return InMemoryLoadStore(
        [
            LoadFinancials(
                load_id="LOAD-1",
                company_name="Acme Van Lines",
                actual_cuft_loaded=Decimal("1000"),
                rate_per_cuft=Decimal("2.50"),
                balance_due_on_delivery=Decimal("500.00"),
            ),
            LoadFinancials(
                load_id="LOAD-2",
                company_name="Blue Ridge Movers",
                actual_cuft_loaded=Decimal("400"),
                rate_per_cuft=Decimal("3.00"),
                balance_due_on_delivery=Decimal("0"),
            ),
        ]
    )


@pytest.fixture
def trust():
    return StaticTrustDirectory(
        {"acme": TrustLevel.COD_REQUIRED, "blue-ridge": TrustLevel.TRUSTED}
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def cod_evaluator(loads, trust, config_manager):
    return PreDeliveryCODEvaluator(loads, trust, config_manager=config_manager)


@pytest.fixture
def disputes():
    return InMemoryDisputeStore()


@pytest.fixture
def resolver(disputes, loads, notifier, cod_evaluator, config_manager):
    return BalanceDisputeResolver(
        disputes,
        loads,
        notifier,
        cod_evaluator=cod_evaluator,
        config_manager=config_manager,
    )
