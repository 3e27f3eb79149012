"""
Builders for test records.
"""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import yaml

from fleetledger.core.config import ConfigManager
from fleetledger.data.models import CollectionItem, ExpenseItem, PaidBy, PaymentMethod

NOW = datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)


def write_config(config_dir: Path, **sections) -> ConfigManager:
    config = {
        "company": {"name": "Test Carrier"},
        "settlement": {"reimbursable_paid_by": ["driver_personal"], "minimum_trip_days": 1},
        "disputes": {"open_dispute_policy": "reject"},
    }
    config.update(sections)
    with open(config_dir / "config.yaml", "w") as f:
        yaml.safe_dump(config, f)
    return ConfigManager(config_dir=config_dir)


def expense(expense_id, amount, paid_by=PaidBy.DRIVER_PERSONAL, **kwargs):
    return ExpenseItem(
        expense_id=expense_id,
        amount=Decimal(amount),
        paid_by=paid_by,
        incurred_at=NOW,
        receipt_ref=f"receipts/{expense_id}.jpg",
        **kwargs,
    )


def collection(collection_id, amount, load_id="LOAD-1", method=PaymentMethod.CASH):
    return CollectionItem(
        collection_id=collection_id,
        load_id=load_id,
        amount=Decimal(amount),
        method=method,
        collected_at=NOW,
    )
