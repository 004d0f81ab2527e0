"""
Ledger Aggregation

Computes Totals from a ledger. Accepts either a validated LedgerState
or a raw mapping straight from a JSON document, and never raises on
odd data: a bad salary counts as 0, a bad amount contributes nothing.
"""

from collections.abc import Mapping
from typing import Any, Union

from expense_tracker.models.ledger import EntryType, LedgerState, Totals
from expense_tracker.validation.amount import is_finite_number


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _entry_amount(entry: Any) -> float:
    amount = _get(entry, "amount")
    return float(amount) if is_finite_number(amount) else 0.0


def _is_expense(entry: Any) -> bool:
    # A missing type means expense
    return (_get(entry, "type") or EntryType.EXPENSE.value) == EntryType.EXPENSE.value


def aggregate(state: Union[LedgerState, Mapping]) -> Totals:
    """
    Compute salary, total expenses and remaining balance.

    Args:
        state: LedgerState or a {salary, entries} mapping

    Returns:
        Totals where remaining = salary - total_expenses. Remaining may
        be negative when spending exceeds the salary.
    """
    salary = _get(state, "salary")
    salary = float(salary) if is_finite_number(salary) else 0.0

    entries = _get(state, "entries")
    if not isinstance(entries, (list, tuple)):
        entries = []

    total_expenses = 0.0
    for entry in entries:
        if _is_expense(entry):
            total_expenses += _entry_amount(entry)

    return Totals(
        salary=salary,
        total_expenses=total_expenses,
        remaining=salary - total_expenses,
    )
