# finance_tracker/controller.py
"""Glue between user input, the store and the charts.

``FinanceApp`` owns the form state, turns validation violations into
notifications and, after every mutation, refreshes the dashboard in a fixed
order: stats, filtered list, monthly chart, category chart, filter options.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Mapping, Optional

from finance_tracker.charts import ChartRenderer
from finance_tracker.core.categories import categories_for_type, filter_options
from finance_tracker.core.models import INCOME, Transaction
from finance_tracker.core.validation import first_message, validate_transaction_data
from finance_tracker.outputs.csv_output import CSVOutput
from finance_tracker.store import FinanceStore
from finance_tracker.utils import format_currency, format_long_date, format_relative_date

logger = logging.getLogger(__name__)

SAVED_MESSAGE = "Transaction enregistrée avec succès"
DELETED_MESSAGE = "Transaction supprimée"
EXPORTED_MESSAGE = "Données exportées avec succès"
CONFIRM_DELETE_MESSAGE = "Êtes-vous sûr de vouloir supprimer cette transaction ?"
NEW_TITLE = "Nouvelle Transaction"
EDIT_TITLE = "Modifier la Transaction"
NO_TRANSACTIONS_MESSAGE = "Aucune transaction trouvée"

FILTER_KEYS = ("category", "type", "search")


@dataclass
class Notification:
    message: str
    level: str
    expires_at: datetime


class Notifier:
    """Transient messages that disappear ``duration`` seconds after showing."""

    def __init__(
        self,
        duration: float = 3,
        clock: Callable[[], datetime] = datetime.now,
        listener: Optional[Callable[[Notification], None]] = None,
    ):
        self.duration = duration
        self._clock = clock
        self._listener = listener
        self._items: List[Notification] = []

    def show(self, message: str, level: str = "info") -> Notification:
        note = Notification(message, level, self._clock() + timedelta(seconds=self.duration))
        self._items.append(note)
        if self._listener:
            self._listener(note)
        return note

    def active(self) -> List[Notification]:
        now = self._clock()
        self._items = [note for note in self._items if note.expires_at > now]
        return list(self._items)


@dataclass
class TransactionForm:
    type: str = ""
    amount: str = ""
    category: str = ""
    description: str = ""
    date: str = ""
    editing_id: Optional[str] = None
    title: str = NEW_TITLE
    category_options: List[str] = field(default_factory=list)

    @property
    def submit_label(self) -> str:
        return "Modifier" if self.editing_id else "Ajouter"

    def data(self) -> Dict[str, str]:
        return {
            "type": self.type,
            "amount": self.amount,
            "category": self.category,
            "description": self.description,
            "date": self.date,
        }


@dataclass
class TransactionRow:
    id: str
    type: str
    description: str
    category: str
    amount: str
    date: str
    full_date: str


@dataclass
class DashboardView:
    stats: Dict[str, float]
    transactions: List[Transaction]
    rows: List[TransactionRow]
    monthly_svg: str
    category_html: str
    category_options: List[str]
    filters: Dict[str, str]
    notifications: List[Notification]

    @property
    def is_empty(self) -> bool:
        return not self.transactions


def normalize_filters(filters: Mapping[str, object] | None) -> Dict[str, str]:
    filters = filters or {}
    normalized = {}
    for key in FILTER_KEYS:
        value = filters.get(key) or ""
        normalized[key] = str(value).strip()
    return normalized


class FinanceApp:
    def __init__(
        self,
        store: FinanceStore,
        renderer: Optional[ChartRenderer] = None,
        notifier: Optional[Notifier] = None,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.renderer = renderer or ChartRenderer()
        self.notifier = notifier or Notifier()
        self._today = today
        self.filters: Dict[str, str] = normalize_filters(None)
        self.form = TransactionForm()
        self.view: Optional[DashboardView] = None

    # -- form -----------------------------------------------------------

    def open_form(self) -> TransactionForm:
        self.reset_form()
        return self.form

    def reset_form(self) -> None:
        self.form = TransactionForm(date=self._today().isoformat())

    def set_form_type(self, type_: str) -> None:
        self.form.type = type_
        self.form.category_options = categories_for_type(self.store.get_categories(), type_)
        if self.form.category not in self.form.category_options:
            self.form.category = ""

    def edit_transaction(self, tx_id: str) -> Optional[TransactionForm]:
        tx = self.store.get_transaction(tx_id)
        if tx is None:
            return None
        self.form = TransactionForm(
            amount=f"{tx.amount:.2f}".rstrip("0").rstrip("."),
            description=tx.description,
            date=tx.date.isoformat(),
            editing_id=tx.id,
            title=EDIT_TITLE,
        )
        # options first, then the selection
        self.set_form_type(tx.type)
        self.form.category = tx.category
        return self.form

    def submit(self, data: Mapping[str, object] | None = None, editing_id: Optional[str] = None) -> Optional[Transaction]:
        """Validate and save the form; returns the saved record or None."""
        if data is None:
            data = self.form.data()
            editing_id = self.form.editing_id

        violations = validate_transaction_data(data, self.store.get_categories())
        if violations:
            self.notifier.show(first_message(violations), "error")
            return None

        if editing_id:
            tx = self.store.update_transaction(editing_id, data)
            if tx is None:
                logger.warning("Transaction %s disappeared before it could be updated", editing_id)
                return None
        else:
            tx = self.store.add_transaction(data)

        self.reset_form()
        self.update_ui()
        self.notifier.show(SAVED_MESSAGE, "success")
        return tx

    def delete_transaction(self, tx_id: str, confirm: Callable[[str], bool] = lambda _msg: True) -> bool:
        if not confirm(CONFIRM_DELETE_MESSAGE):
            return False
        deleted = self.store.delete_transaction(tx_id)
        if not deleted:
            logger.warning("Transaction %s not found for deletion", tx_id)
            return False
        self.update_ui()
        self.notifier.show(DELETED_MESSAGE, "success")
        return True

    # -- display --------------------------------------------------------

    def set_filters(self, filters: Mapping[str, object] | None) -> DashboardView:
        self.filters = normalize_filters(filters)
        return self.update_ui()

    def update_ui(self) -> DashboardView:
        today = self._today()
        stats = self.store.get_stats(today)
        transactions = self.store.get_filtered_transactions(self.filters)
        all_transactions = self.store.get_all_transactions()
        monthly_svg = self.renderer.update_monthly_chart(all_transactions, today)
        category_html = self.renderer.update_category_chart(all_transactions)
        options = filter_options(self.store.get_categories())

        self.view = DashboardView(
            stats=stats,
            transactions=transactions,
            rows=[self.row_for(tx, today) for tx in transactions],
            monthly_svg=monthly_svg,
            category_html=category_html,
            category_options=options,
            filters=dict(self.filters),
            notifications=self.notifier.active(),
        )
        return self.view

    def resize_chart(self, width: float) -> str:
        self.renderer.handle_resize(width)
        return self.renderer.monthly_svg

    @staticmethod
    def row_for(tx: Transaction, today: date) -> TransactionRow:
        sign = "+" if tx.type == INCOME else "-"
        return TransactionRow(
            id=tx.id,
            type=tx.type,
            description=tx.description,
            category=tx.category,
            amount=f"{sign} {format_currency(tx.amount)}",
            date=format_relative_date(tx.date, today),
            full_date=format_long_date(tx.date),
        )

    # -- export ---------------------------------------------------------

    def export_data(self, output: Optional[CSVOutput] = None) -> str:
        output = output or CSVOutput({})
        content = output.render(self.store.get_all_transactions())
        self.notifier.show(EXPORTED_MESSAGE, "success")
        return content
