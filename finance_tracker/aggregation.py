# finance_tracker/aggregation.py
"""Monthly and per-category totals shared by the store and the charts."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from finance_tracker.core.models import EXPENSE, INCOME, Transaction
from finance_tracker.utils import (
    filter_transactions_by_month,
    month_key,
    short_month_label,
    trailing_months,
)

CHART_WINDOW_MONTHS = 6
CHART_TOP_CATEGORIES = 6
STORE_WINDOW_MONTHS = 12
STORE_TOP_CATEGORIES = 8


@dataclass
class MonthlyTotal:
    key: str
    label: str
    income: float = 0.0
    expense: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expense

    def add(self, tx: Transaction) -> None:
        if tx.type == INCOME:
            self.income += tx.amount
        elif tx.type == EXPENSE:
            self.expense += tx.amount


@dataclass
class CategoryTotal:
    category: str
    amount: float


def _sum(transactions, type_) -> float:
    return sum(tx.amount for tx in transactions if tx.type == type_)


def summarize_totals(transactions: List[Transaction], today: date) -> Dict[str, float]:
    """Balance and all-time totals, plus income/expense for the month of ``today``."""
    monthly = filter_transactions_by_month(transactions, month_key(today))
    total_income = _sum(transactions, INCOME)
    total_expense = _sum(transactions, EXPENSE)
    return {
        "balance": total_income - total_expense,
        "monthly_income": _sum(monthly, INCOME),
        "monthly_expense": _sum(monthly, EXPENSE),
        "total_transactions": len(transactions),
        "total_income": total_income,
        "total_expense": total_expense,
    }


def _label_for_key(key: str) -> str:
    year, month = map(int, key.split("-"))
    return short_month_label(date(year, month, 1))


def aggregate_monthly(
    transactions: Iterable[Transaction],
    window_months: int,
    reference: Optional[date] = None,
) -> List[MonthlyTotal]:
    """Sum income and expense per ``YYYY-MM``, oldest month first.

    With a ``reference`` date the result is a fixed calendar window of the
    ``window_months`` months ending with the reference month; empty months are
    present with zero totals and transactions outside the window are ignored.
    Without one, the window is the ``window_months`` most recent months that
    actually have transactions.
    """
    if window_months <= 0:
        return []

    if reference is not None:
        slots: Dict[str, MonthlyTotal] = {}
        for first_day in trailing_months(reference, window_months):
            key = month_key(first_day)
            slots[key] = MonthlyTotal(key=key, label=short_month_label(first_day))
        for tx in transactions:
            slot = slots.get(month_key(tx.date))
            if slot is not None:
                slot.add(tx)
        return list(slots.values())

    grouped: Dict[str, MonthlyTotal] = {}
    for tx in transactions:
        key = month_key(tx.date)
        if key not in grouped:
            grouped[key] = MonthlyTotal(key=key, label=_label_for_key(key))
        grouped[key].add(tx)
    return [grouped[key] for key in sorted(grouped)[-window_months:]]


def aggregate_categories(
    transactions: Iterable[Transaction],
    top_n: int,
) -> List[CategoryTotal]:
    """Sum expense amounts per category, largest first, keeping ``top_n``."""
    totals: Dict[str, float] = {}
    for tx in transactions:
        if tx.type != EXPENSE:
            continue
        totals[tx.category] = totals.get(tx.category, 0.0) + tx.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [CategoryTotal(category=name, amount=amount) for name, amount in ranked[:top_n]]
