# finance_tracker/outputs/html_output.py

from finance_tracker.charts import ChartRenderer
from finance_tracker.controller import (
    CONFIRM_DELETE_MESSAGE,
    NO_TRANSACTIONS_MESSAGE,
    FinanceApp,
    TransactionForm,
)
from finance_tracker.core.models import EXPENSE, INCOME
from finance_tracker.outputs.base import BaseOutput
from finance_tracker.storage import MemoryStorage
from finance_tracker.store import FinanceStore
from finance_tracker.utils import escape_html as esc, format_currency

STYLE = (
    "body{font-family:Inter,sans-serif;margin:2rem;color:#111827;background:#F9FAFB;}"
    ".stats{display:flex;gap:1rem;margin-bottom:1.5rem;}"
    ".stat{background:#fff;border-radius:8px;padding:1rem 1.5rem;min-width:10rem;}"
    ".stat-value{font-size:1.4rem;font-weight:600;}.negative{color:#EF4444;}"
    ".notification{padding:.5rem 1rem;border-radius:6px;margin-bottom:1rem;}"
    ".notification-success{background:#D1FAE5;}.notification-error{background:#FEE2E2;}"
    ".panel{background:#fff;border-radius:8px;padding:1rem;margin-bottom:1.5rem;}"
    ".transaction-item{display:flex;justify-content:space-between;padding:.5rem 0;border-bottom:1px solid #F3F4F6;}"
    ".amount.income{color:#10B981;}.amount.expense{color:#EF4444;}"
    ".category-item{margin-bottom:.75rem;}.category-info{display:flex;gap:.5rem;align-items:center;}"
    ".category-color{width:12px;height:12px;border-radius:3px;}"
    ".category-bar{background:#F3F4F6;height:6px;border-radius:3px;}"
    ".category-progress{height:6px;border-radius:3px;}"
    ".category-empty{text-align:center;color:#6B7280;padding:3rem;}"
)

STAT_CARDS = [
    ("balance", "Solde total", "balance-value"),
    ("monthly_income", "Revenus du mois", "income-value"),
    ("monthly_expense", "Dépenses du mois", "expense-value"),
]


def _option(value, label, selected):
    attr = " selected" if selected else ""
    return f'<option value="{esc(value)}"{attr}>{esc(label)}</option>'


def _stats_html(stats):
    cards = []
    for key, label, element_id in STAT_CARDS:
        value = stats[key]
        css = "stat-value negative" if key == "balance" and value < 0 else "stat-value"
        cards.append(
            f'<div class="stat"><div>{label}</div>'
            f'<div id="{element_id}" class="{css}">{format_currency(value)}</div></div>'
        )
    cards.append(
        '<div class="stat"><div>Transactions</div>'
        f'<div id="transactions-count" class="stat-value">{stats["total_transactions"]}</div></div>'
    )
    return f'<section class="stats">{"".join(cards)}</section>'


def _form_html(form, categories):
    type_options = [_option("", "Sélectionner un type", not form.type)]
    type_options += [
        _option(INCOME, "Revenu", form.type == INCOME),
        _option(EXPENSE, "Dépense", form.type == EXPENSE),
    ]
    category_options = [_option("", "Sélectionner une catégorie", not form.category)]
    for type_, label in ((INCOME, "Revenus"), (EXPENSE, "Dépenses")):
        if form.type and form.type != type_:
            continue
        opts = "".join(_option(name, name, name == form.category) for name in categories.get(type_, []))
        category_options.append(f'<optgroup label="{label}">{opts}</optgroup>')

    editing = (
        f'<input type="hidden" name="editing_id" value="{esc(form.editing_id)}">'
        if form.editing_id else ""
    )
    return (
        '<section class="panel">'
        f'<h2 id="modal-title">{esc(form.title)}</h2>'
        '<form id="transaction-form" method="post" action="/transactions">'
        f"{editing}"
        f'<select id="transaction-type" name="type">{"".join(type_options)}</select> '
        f'<input id="transaction-amount" name="amount" type="number" step="0.01" min="0.01" '
        f'placeholder="Montant" value="{esc(form.amount)}"> '
        f'<select id="transaction-category" name="category">{"".join(category_options)}</select> '
        f'<input id="transaction-description" name="description" placeholder="Description" '
        f'value="{esc(form.description)}"> '
        f'<input id="transaction-date" name="date" type="date" value="{esc(form.date)}"> '
        f'<button type="submit" id="submit-text">{form.submit_label}</button>'
        '</form></section>'
    )


def _filters_html(view):
    filters = view.filters
    category_options = [_option("", "Toutes les catégories", not filters["category"])]
    category_options += [
        _option(name, name, name == filters["category"]) for name in view.category_options
    ]
    type_options = [
        _option("", "Tous les types", not filters["type"]),
        _option(INCOME, "Revenus", filters["type"] == INCOME),
        _option(EXPENSE, "Dépenses", filters["type"] == EXPENSE),
    ]
    return (
        '<form method="get" action="/" class="filters">'
        f'<select id="category-filter" name="category">{"".join(category_options)}</select> '
        f'<select id="type-filter" name="type">{"".join(type_options)}</select> '
        f'<input id="search-input" name="search" placeholder="Rechercher..." '
        f'value="{esc(filters["search"])}"> '
        '<button type="submit">Filtrer</button> '
        '<a id="export-btn" href="/api/export.csv">Exporter CSV</a>'
        '</form>'
    )


def _transactions_html(view):
    if view.is_empty:
        return f'<p id="no-transactions">{NO_TRANSACTIONS_MESSAGE}</p>'
    items = []
    for row in view.rows:
        items.append(
            f'<div class="transaction-item" data-transaction-id="{esc(row.id)}">'
            '<div class="transaction-details">'
            f"<h4>{esc(row.description)}</h4><p>{esc(row.category)}</p></div>"
            '<div class="transaction-right">'
            f'<span class="amount {esc(row.type)}">{esc(row.amount)}</span> '
            f'<span class="date" title="{esc(row.full_date)}">{esc(row.date)}</span> '
            f'<a class="edit-btn" href="/?edit={esc(row.id)}">Modifier</a> '
            f'<form method="post" action="/transactions/{esc(row.id)}/delete" style="display:inline" '
            f'onsubmit="return confirm(&quot;{esc(CONFIRM_DELETE_MESSAGE)}&quot;)">'
            '<button class="delete-btn" type="submit">Supprimer</button></form>'
            "</div></div>"
        )
    return f'<div id="transactions-list">{"".join(items)}</div>'


def render_dashboard(view, form=None, categories=None, error=None):
    """Full dashboard page for a refreshed view."""
    form = form or TransactionForm()
    notes = [(n.level, n.message) for n in view.notifications]
    if error:
        notes.append(("error", error))
    notifications = "".join(
        f'<div class="notification notification-{esc(level)}">{esc(text)}</div>'
        for level, text in notes
    )
    return "".join([
        "<!DOCTYPE html><html lang='fr'><head><meta charset='UTF-8'>",
        "<title>Finance Tracker</title>",
        f"<style>{STYLE}</style></head><body>",
        "<h1>Finance Tracker</h1>",
        notifications,
        _stats_html(view.stats),
        _form_html(form, categories or {}),
        '<section class="panel"><h2>Évolution mensuelle</h2>',
        f'<div id="monthly-chart">{view.monthly_svg}</div></section>',
        '<section class="panel"><h2>Dépenses par catégorie</h2>',
        f'<div id="category-chart">{view.category_html}</div></section>',
        '<section class="panel"><h2>Transactions</h2>',
        _filters_html(view),
        _transactions_html(view),
        "</section></body></html>",
    ])


class HTMLOutput(BaseOutput):
    """Static snapshot of the dashboard: stats, charts and the full list."""
    filename = 'dashboard.html'

    def render(self, transactions):
        chart_cfg = self.config.get('chart', {})
        store = FinanceStore(MemoryStorage(), categories=self.config.get('categories'))
        store.transactions = list(transactions)
        app = FinanceApp(
            store,
            ChartRenderer(
                width=chart_cfg.get('width', 800),
                height=chart_cfg.get('height', 300),
                pixel_ratio=chart_cfg.get('device_pixel_ratio', 1.0),
            ),
        )
        view = app.update_ui()
        return render_dashboard(view, app.open_form(), store.get_categories())
