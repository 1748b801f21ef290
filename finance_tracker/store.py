# finance_tracker/store.py
"""Transaction store: owns the collection, its queries and its persistence."""
from __future__ import annotations

import json
import logging
import uuid
from datetime import date, datetime
from typing import Callable, Dict, List, Mapping, Optional

from finance_tracker.aggregation import (
    STORE_TOP_CATEGORIES,
    STORE_WINDOW_MONTHS,
    CategoryTotal,
    MonthlyTotal,
    aggregate_categories,
    aggregate_monthly,
    summarize_totals,
)
from finance_tracker.core.categories import DEFAULT_CATEGORIES
from finance_tracker.core.models import EXPENSE, INCOME, Transaction
from finance_tracker.storage import BaseStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "financeTrackerData"

_MUTABLE_FIELDS = ("type", "category", "description", "amount", "date")


def _default_clock() -> datetime:
    return datetime.now()


def _default_id() -> str:
    return uuid.uuid4().hex


def _coerce_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _by_date_desc(transactions: List[Transaction]) -> List[Transaction]:
    # sorted() stays stable with reverse=True: same-date records keep their
    # collection order, newest addition first.
    return sorted(transactions, key=lambda tx: tx.date, reverse=True)


def sample_transactions(today: date, new_id: Callable[[], str]) -> List[Transaction]:
    """The records seeded when no saved data can be read."""
    return [
        Transaction(
            id=new_id(),
            type=INCOME,
            category="Salaire",
            description="Salaire mensuel",
            amount=3500.0,
            date=today.replace(day=1),
        ),
        Transaction(
            id=new_id(),
            type=EXPENSE,
            category="Logement",
            description="Loyer",
            amount=1200.0,
            date=today.replace(day=5),
        ),
        Transaction(
            id=new_id(),
            type=EXPENSE,
            category="Alimentation",
            description="Courses alimentaires",
            amount=250.0,
            date=today.replace(day=10),
        ),
    ]


class FinanceStore:
    def __init__(
        self,
        storage: BaseStorage,
        storage_key: str = STORAGE_KEY,
        categories: Mapping[str, List[str]] | None = None,
        clock: Callable[[], datetime] = _default_clock,
        id_factory: Callable[[], str] = _default_id,
    ):
        self._storage = storage
        self.storage_key = storage_key
        self._categories = {k: list(v) for k, v in (categories or DEFAULT_CATEGORIES).items()}
        self._clock = clock
        self._id_factory = id_factory
        self.transactions: List[Transaction] = []

    # -- persistence ----------------------------------------------------

    def load_data(self) -> None:
        try:
            saved = self._storage.get_item(self.storage_key)
            if saved:
                records = json.loads(saved)
                self.transactions = [Transaction.from_dict(r) for r in records]
                logger.debug("Loaded %d transaction(s)", len(self.transactions))
                return
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.error("Could not load saved transactions: %s", exc)
        self.initialize_sample_data()

    def save_data(self) -> None:
        payload = json.dumps([tx.to_dict() for tx in self.transactions], ensure_ascii=False)
        try:
            self._storage.set_item(self.storage_key, payload)
        except OSError as exc:
            logger.error("Could not save transactions: %s", exc)

    def initialize_sample_data(self, today: Optional[date] = None) -> None:
        today = today or self._clock().date()
        self.transactions = sample_transactions(today, self._new_id)
        logger.info("Seeded %d sample transaction(s)", len(self.transactions))
        self.save_data()

    # -- mutations ------------------------------------------------------

    def add_transaction(self, data: Mapping[str, object]) -> Transaction:
        tx = Transaction(
            id=self._new_id(),
            type=data.get("type"),
            category=data.get("category"),
            description=data.get("description"),
            amount=float(data.get("amount")),
            date=_coerce_date(data.get("date")),
            created_at=self._timestamp(),
        )
        self.transactions.insert(0, tx)
        self.save_data()
        return tx

    def update_transaction(self, tx_id: str, data: Mapping[str, object]) -> Optional[Transaction]:
        index = self._index_of(tx_id)
        if index is None:
            return None

        current = self.transactions[index]
        merged = {name: getattr(current, name) for name in _MUTABLE_FIELDS}
        merged.update({k: v for k, v in data.items() if k in _MUTABLE_FIELDS})

        updated = Transaction(
            id=current.id,
            type=merged["type"],
            category=merged["category"],
            description=merged["description"],
            amount=float(merged["amount"]),
            date=_coerce_date(merged["date"]),
            created_at=current.created_at,
            updated_at=self._timestamp(),
        )
        self.transactions[index] = updated
        self.save_data()
        return updated

    def delete_transaction(self, tx_id: str) -> bool:
        index = self._index_of(tx_id)
        if index is None:
            return False
        del self.transactions[index]
        self.save_data()
        return True

    # -- queries --------------------------------------------------------

    def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        return next((tx for tx in self.transactions if tx.id == tx_id), None)

    def get_all_transactions(self) -> List[Transaction]:
        return _by_date_desc(self.transactions)

    def get_filtered_transactions(self, filters: Mapping[str, object] | None = None) -> List[Transaction]:
        """Apply the category, type and search filters, newest date first.

        Filters combine with AND; a missing or empty filter matches
        everything. ``search`` is a case-insensitive substring test against
        the description or the category.
        """
        filters = filters or {}
        filtered = list(self.transactions)

        category = filters.get("category")
        if category:
            filtered = [tx for tx in filtered if tx.category == category]

        type_ = filters.get("type")
        if type_:
            filtered = [tx for tx in filtered if tx.type == type_]

        search = filters.get("search")
        if search:
            term = str(search).lower()
            filtered = [
                tx for tx in filtered
                if term in tx.description.lower() or term in tx.category.lower()
            ]

        return _by_date_desc(filtered)

    def get_stats(self, today: Optional[date] = None) -> Dict[str, float]:
        return summarize_totals(self.transactions, today or self._clock().date())

    def get_monthly_data(self) -> List[MonthlyTotal]:
        return aggregate_monthly(self.transactions, STORE_WINDOW_MONTHS)

    def get_category_data(self) -> List[CategoryTotal]:
        return aggregate_categories(self.transactions, STORE_TOP_CATEGORIES)

    def get_categories(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self._categories.items()}

    # -- helpers --------------------------------------------------------

    def _index_of(self, tx_id: str) -> Optional[int]:
        for index, tx in enumerate(self.transactions):
            if tx.id == tx_id:
                return index
        return None

    def _new_id(self) -> str:
        existing = {tx.id for tx in self.transactions}
        new_id = self._id_factory()
        while new_id in existing:
            new_id = self._id_factory()
        return new_id

    def _timestamp(self) -> str:
        return self._clock().isoformat()
