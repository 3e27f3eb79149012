"""
Expense and collection aggregation for settlements.

Items are already validated and stored in cents; aggregation only sums.
"""

from typing import Callable, Iterable, Optional, TypeVar

from fleetledger.core.exceptions import ConfigurationError
from fleetledger.core.money import sum_money
from fleetledger.data.models.items import CollectionItem, ExpenseItem, PaidBy
from fleetledger.data.models.settlement import CollectionTotal, ExpenseTotal

T = TypeVar("T", ExpenseItem, CollectionItem)

DEFAULT_REIMBURSABLE_PAID_BY: frozenset[PaidBy] = frozenset({PaidBy.DRIVER_PERSONAL})


def _partition(items: Iterable[T], include: Callable[[T], bool]) -> list[T]:
    return [item for item in items if include(item)]


def reimbursable_methods(paid_by: Optional[Iterable[str]]) -> frozenset[PaidBy]:
    """
    Resolve configured paid-by names.

    Raises:
        ConfigurationError: If a name is not a known PaidBy value
    """
    if paid_by is None:
        return DEFAULT_REIMBURSABLE_PAID_BY
    try:
        return frozenset(PaidBy(value) for value in paid_by)
    except ValueError as e:
        raise ConfigurationError(str(e), field="reimbursable_paid_by") from None


def aggregate_expenses(
    items: Iterable[ExpenseItem],
    reimbursable_paid_by: Optional[Iterable[str]] = None,
) -> ExpenseTotal:
    """
    Sum approved expenses the driver paid for out of pocket.

    Company-funded expenses (company card, fuel card) and expenses paid from
    collected cash are never reimbursed.
    """
    methods = reimbursable_methods(reimbursable_paid_by)
    included = _partition(items, lambda e: e.approved and e.paid_by in methods)
    return ExpenseTotal(total=sum_money(e.amount for e in included), items=included)


def aggregate_collections(items: Iterable[CollectionItem]) -> CollectionTotal:
    """Sum everything the driver collected from customers."""
    included = _partition(items, lambda c: True)
    return CollectionTotal(total=sum_money(c.amount for c in included), items=included)
