import json
import threading
from datetime import date
from http.server import HTTPServer
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

import pytest

from finance_tracker.controller import FinanceApp
from finance_tracker.storage import MemoryStorage
from finance_tracker.store import STORAGE_KEY, FinanceStore
from finance_tracker.web import make_handler


@pytest.fixture
def server():
    store = FinanceStore(MemoryStorage({STORAGE_KEY: "[]"}))
    store.load_data()
    app = FinanceApp(store, today=lambda: date(2024, 3, 15))
    httpd = HTTPServer(("127.0.0.1", 0), make_handler(app))
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield app, f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()


def _request(url, method="GET", payload=None, form=None):
    data = None
    headers = {}
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
        headers["Content-Type"] = "application/json"
    elif form is not None:
        data = urlencode(form).encode("utf-8")
        headers["Content-Type"] = "application/x-www-form-urlencoded"
    req = Request(url, data=data, method=method, headers=headers)
    try:
        with urlopen(req) as resp:
            return resp.status, resp.headers, resp.read().decode("utf-8")
    except HTTPError as exc:
        return exc.code, exc.headers, exc.read().decode("utf-8")


TAXI = {
    "type": "expense",
    "amount": "42.5",
    "category": "Transport",
    "description": "Taxi",
    "date": "2024-03-14",
}


def test_create_get_update_delete(server):
    app, base = server

    status, _, body = _request(f"{base}/api/transactions", "POST", payload=TAXI)
    assert status == 201
    created = json.loads(body)
    assert created["amount"] == 42.5
    assert "createdAt" in created

    status, _, body = _request(f"{base}/api/transactions/{created['id']}")
    assert status == 200
    assert json.loads(body)["description"] == "Taxi"

    status, _, body = _request(f"{base}/api/transactions/{created['id']}", "PUT", payload={"amount": 50})
    assert status == 200
    updated = json.loads(body)
    assert updated["amount"] == 50.0
    assert updated["category"] == "Transport"
    assert "updatedAt" in updated

    status, _, _ = _request(f"{base}/api/transactions/{created['id']}", "DELETE")
    assert status == 200
    assert app.store.transactions == []

    status, _, _ = _request(f"{base}/api/transactions/{created['id']}", "DELETE")
    assert status == 404


def test_create_invalid_returns_violations(server):
    app, base = server

    status, _, body = _request(f"{base}/api/transactions", "POST", payload=dict(TAXI, amount="-1"))

    assert status == 400
    payload = json.loads(body)
    assert payload["error"] == "Le montant doit être supérieur à zéro"
    assert payload["violations"] == [
        {"field": "amount", "code": "not_positive", "message": "Le montant doit être supérieur à zéro"},
    ]
    assert app.store.transactions == []


def test_create_rejects_category_of_the_other_type(server):
    app, base = server

    status, _, body = _request(f"{base}/api/transactions", "POST", payload=dict(TAXI, category="Salaire"))

    assert status == 400
    assert json.loads(body)["violations"][0]["code"] == "invalid_category"
    assert app.store.transactions == []


def test_invalid_json_body(server):
    _, base = server
    req = Request(f"{base}/api/transactions", data=b"{oops", method="POST")
    with pytest.raises(HTTPError) as excinfo:
        urlopen(req)
    assert excinfo.value.code == 400


def test_update_and_get_unknown_id(server):
    _, base = server
    assert _request(f"{base}/api/transactions/nope", "PUT", payload={"amount": 5})[0] == 404
    assert _request(f"{base}/api/transactions/nope")[0] == 404
    assert _request(f"{base}/api/unknown")[0] == 404


def test_dashboard_filters(server):
    app, base = server
    app.submit(TAXI)
    app.submit(dict(TAXI, type="income", category="Salaire", description="Paie", amount="1000"))

    status, _, body = _request(f"{base}/api/dashboard?type=income")

    assert status == 200
    payload = json.loads(body)
    assert [tx["description"] for tx in payload["transactions"]] == ["Paie"]
    assert payload["stats"]["balance"] == 957.5
    assert payload["filters"]["type"] == "income"
    assert payload["monthly"][-1] == {"month": "2024-03", "label": "mars", "income": 1000.0, "expense": 42.5}
    assert payload["categories"] == [{"category": "Transport", "amount": 42.5}]
    assert payload["rows"][0]["date"] == "Hier"


def test_categories(server):
    _, base = server
    status, _, body = _request(f"{base}/api/categories")
    assert status == 200
    assert "Salaire" in json.loads(body)["income"]


def test_export_csv(server):
    app, base = server
    app.submit(TAXI)

    status, headers, body = _request(f"{base}/api/export.csv")

    assert status == 200
    assert headers["Content-Type"].startswith("text/csv")
    assert body.splitlines() == [
        '"Date","Type","Catégorie","Description","Montant"',
        '"2024-03-14","Dépense","Transport","Taxi","42.50"',
    ]


def test_monthly_chart_svg_resize(server):
    app, base = server
    app.submit(TAXI)

    status, headers, body = _request(f"{base}/api/charts/monthly.svg?width=400")

    assert status == 200
    assert headers["Content-Type"] == "image/svg+xml"
    assert 'viewBox="0 0 400 300"' in body


@pytest.mark.parametrize("width", ["abc", "-5", "0"])
def test_monthly_chart_rejects_bad_width(server, width):
    _, base = server

    status, _, body = _request(f"{base}/api/charts/monthly.svg?width={width}")

    assert status == 400
    assert "invalid width" in json.loads(body)["error"]


def test_dashboard_page_and_form_submit(server):
    app, base = server

    status, _, body = _request(f"{base}/")
    assert status == 200
    assert "Aucune transaction trouvée" in body
    assert 'value="2024-03-15"' in body

    status, _, body = _request(f"{base}/transactions", "POST", form=TAXI)
    assert status == 200
    assert len(app.store.transactions) == 1
    assert "Transaction enregistrée avec succès" in body
    assert "Taxi" in body

    tx_id = app.store.transactions[0].id
    status, _, body = _request(f"{base}/?edit={tx_id}")
    assert status == 200
    assert f'name="editing_id" value="{tx_id}"' in body

    status, _, _ = _request(f"{base}/transactions", "POST", form=dict(TAXI, editing_id=tx_id, amount="10"))
    assert status == 200
    assert app.store.get_transaction(tx_id).amount == 10.0

    status, _, _ = _request(f"{base}/transactions/{tx_id}/delete", "POST", form={})
    assert status == 200
    assert app.store.transactions == []


def test_form_submit_error_keeps_values(server):
    app, base = server

    status, _, body = _request(f"{base}/transactions", "POST", form=dict(TAXI, description=""))

    assert status == 400
    assert "Veuillez remplir tous les champs" in body
    assert 'value="42.5"' in body
    assert app.store.transactions == []


def test_edit_unknown_id_page(server):
    _, base = server
    status, _, body = _request(f"{base}/?edit=nope")
    assert status == 404
    assert "Transaction introuvable" in body
