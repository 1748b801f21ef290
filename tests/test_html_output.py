from datetime import date

from finance_tracker.controller import NO_TRANSACTIONS_MESSAGE, FinanceApp
from finance_tracker.core.models import Transaction
from finance_tracker.outputs.html_output import HTMLOutput, render_dashboard
from finance_tracker.storage import MemoryStorage
from finance_tracker.store import STORAGE_KEY, FinanceStore


def _transactions():
    return [
        Transaction(id="t1", type="income", category="Salaire", description="Paie",
                    amount=1000.0, date=date(2024, 1, 1)),
        Transaction(id="t2", type="expense", category="Loisirs", description="<script>x</script>",
                    amount=300.0, date=date(2024, 1, 2)),
    ]


def test_html_output_renders_dashboard(tmp_path):
    out = HTMLOutput({"output_dir": str(tmp_path)})
    path = out.write(_transactions())

    html = path.read_text(encoding="utf-8")
    assert path.name == "dashboard.html"
    assert html.startswith("<!DOCTYPE html>")
    assert '<div id="transactions-count" class="stat-value">2</div>' in html
    assert 'data-transaction-id="t1"' in html
    assert "&lt;script&gt;x&lt;/script&gt;" in html
    assert "<script>x</script>" not in html
    assert '<div id="monthly-chart"><svg' in html
    assert 'action="/transactions/t2/delete"' in html


def test_html_output_empty_list():
    html = HTMLOutput({}).render([])
    assert f'<p id="no-transactions">{NO_TRANSACTIONS_MESSAGE}</p>' in html


def test_render_dashboard_edit_form_and_error():
    store = FinanceStore(MemoryStorage({STORAGE_KEY: "[]"}))
    store.load_data()
    store.transactions = _transactions()
    app = FinanceApp(store, today=lambda: date(2024, 1, 10))
    view = app.update_ui()
    form = app.edit_transaction("t2")

    html = render_dashboard(view, form, store.get_categories(), error="Transaction introuvable")

    assert '<input type="hidden" name="editing_id" value="t2">' in html
    assert '<h2 id="modal-title">Modifier la Transaction</h2>' in html
    assert '<option value="Loisirs" selected>Loisirs</option>' in html
    # only the expense categories are offered for an expense
    assert '<optgroup label="Revenus">' not in html
    assert 'notification-error">Transaction introuvable<' in html
    assert '<span class="date" title="2 janvier 2024">2 janv.</span>' in html
