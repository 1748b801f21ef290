from __future__ import annotations

import argparse
import json
import logging
import math
from dataclasses import asdict
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse, unquote

from finance_tracker.controller import FILTER_KEYS, FinanceApp
from finance_tracker.core.validation import first_message, validate_transaction_data
from finance_tracker.outputs.html_output import render_dashboard

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Transaction introuvable"
FORM_FIELDS = ("type", "amount", "category", "description", "date")


def _get_param(query: dict[str, list[str]], key: str) -> str | None:
    values = query.get(key)
    return values[0] if values else None


def _parse_width(value: str | None) -> float | None:
    """Chart width from a query parameter; raises ValueError unless positive."""
    if value is None or value == "":
        return None
    width = float(value)
    if not math.isfinite(width) or width <= 0:
        raise ValueError(f"invalid width: {value}")
    return width


def _json_response(handler: BaseHTTPRequestHandler, payload: Any, status: int = 200) -> None:
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    _send(handler, body, "application/json", status)


def _send(handler: BaseHTTPRequestHandler, body: bytes, content_type: str, status: int = 200) -> None:
    handler.send_response(status)
    handler.send_header("Content-Type", content_type)
    handler.send_header("Cache-Control", "no-store")
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def _violations_payload(violations) -> dict:
    return {
        "error": first_message(violations),
        "violations": [asdict(v) for v in violations],
    }


def dashboard_payload(app: FinanceApp) -> dict:
    view = app.view or app.update_ui()
    return {
        "stats": view.stats,
        "filters": view.filters,
        "transactions": [tx.to_dict() for tx in view.transactions],
        "rows": [asdict(row) for row in view.rows],
        "monthly": [
            {"month": m.key, "label": m.label, "income": m.income, "expense": m.expense}
            for m in app.renderer.monthly_data
        ],
        "categories": [
            {"category": c.category, "amount": c.amount} for c in app.renderer.category_data
        ],
        "category_options": view.category_options,
    }


class FinanceWebHandler(BaseHTTPRequestHandler):
    app: FinanceApp | None = None

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    # -- dispatch -------------------------------------------------------

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path.startswith("/api/"):
            self._guard(self._handle_api_get, parsed)
            return
        if parsed.path == "/":
            self._handle_page(parse_qs(parsed.query))
            return
        self.send_error(404)

    def do_POST(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path == "/api/transactions":
            self._guard(self._handle_api_create)
            return
        if parsed.path == "/transactions":
            self._handle_form_submit()
            return
        parts = parsed.path.strip("/").split("/")
        if len(parts) == 3 and parts[0] == "transactions" and parts[2] == "delete":
            self._handle_form_delete(unquote(parts[1]))
            return
        self.send_error(404)

    def do_PUT(self) -> None:
        tx_id = self._api_transaction_id(urlparse(self.path).path)
        if tx_id is None:
            _json_response(self, {"error": "not found"}, status=404)
            return
        self._guard(self._handle_api_update, tx_id)

    def do_DELETE(self) -> None:
        tx_id = self._api_transaction_id(urlparse(self.path).path)
        if tx_id is None:
            _json_response(self, {"error": "not found"}, status=404)
            return
        if not self.app.delete_transaction(tx_id):
            _json_response(self, {"error": NOT_FOUND_MESSAGE}, status=404)
            return
        _json_response(self, {"deleted": tx_id})

    def _guard(self, handler, *args) -> None:
        try:
            handler(*args)
        except Exception as exc:
            logger.exception("Request %s %s failed", self.command, self.path)
            _json_response(self, {"error": str(exc)}, status=500)

    @staticmethod
    def _api_transaction_id(path: str) -> str | None:
        prefix = "/api/transactions/"
        if not path.startswith(prefix) or len(path) == len(prefix):
            return None
        return unquote(path[len(prefix):])

    # -- JSON API -------------------------------------------------------

    def _handle_api_get(self, parsed) -> None:
        query = parse_qs(parsed.query)
        path = parsed.path

        if path == "/api/dashboard":
            self.app.set_filters({key: _get_param(query, key) for key in FILTER_KEYS})
            _json_response(self, dashboard_payload(self.app))
            return

        if path == "/api/categories":
            _json_response(self, self.app.store.get_categories())
            return

        if path == "/api/export.csv":
            body = self.app.export_data().encode("utf-8")
            self.send_response(200)
            self.send_header("Content-Type", "text/csv; charset=utf-8")
            self.send_header(
                "Content-Disposition", 'attachment; filename="transactions.csv"'
            )
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
            return

        if path == "/api/charts/monthly.svg":
            try:
                width = _parse_width(_get_param(query, "width"))
            except ValueError as e:
                _json_response(self, {"error": str(e)}, status=400)
                return
            svg = self.app.update_ui().monthly_svg
            if width:
                svg = self.app.resize_chart(width)
            _send(self, svg.encode("utf-8"), "image/svg+xml")
            return

        tx_id = self._api_transaction_id(path)
        if tx_id is not None:
            tx = self.app.store.get_transaction(tx_id)
            if tx is None:
                _json_response(self, {"error": NOT_FOUND_MESSAGE}, status=404)
                return
            _json_response(self, tx.to_dict())
            return

        _json_response(self, {"error": "not found"}, status=404)

    def _handle_api_create(self) -> None:
        data = self._read_json()
        if data is None:
            return
        violations = validate_transaction_data(data, self.app.store.get_categories())
        if violations:
            _json_response(self, _violations_payload(violations), status=400)
            return
        tx = self.app.submit(data)
        _json_response(self, tx.to_dict(), status=201)

    def _handle_api_update(self, tx_id: str) -> None:
        data = self._read_json()
        if data is None:
            return
        current = self.app.store.get_transaction(tx_id)
        if current is None:
            _json_response(self, {"error": NOT_FOUND_MESSAGE}, status=404)
            return
        merged = {key: value for key, value in current.to_dict().items() if key in FORM_FIELDS}
        merged.update({key: value for key, value in data.items() if key in FORM_FIELDS})
        violations = validate_transaction_data(merged, self.app.store.get_categories())
        if violations:
            _json_response(self, _violations_payload(violations), status=400)
            return
        tx = self.app.submit(merged, editing_id=tx_id)
        _json_response(self, tx.to_dict())

    def _read_json(self) -> dict | None:
        length = int(self.headers.get("Content-Length") or 0)
        raw = self.rfile.read(length) if length else b""
        try:
            data = json.loads(raw.decode("utf-8") or "{}")
        except (UnicodeDecodeError, json.JSONDecodeError):
            _json_response(self, {"error": "invalid JSON body"}, status=400)
            return None
        if not isinstance(data, dict):
            _json_response(self, {"error": "expected a JSON object"}, status=400)
            return None
        return data

    # -- HTML dashboard ---------------------------------------------------

    def _handle_page(self, query, status: int = 200, error: str | None = None) -> None:
        app = self.app
        view = app.set_filters({key: _get_param(query, key) for key in FILTER_KEYS})
        edit_id = _get_param(query, "edit")
        if edit_id and app.edit_transaction(edit_id) is None:
            error = NOT_FOUND_MESSAGE
            status = 404
        elif not edit_id:
            app.open_form()
        self._send_page(view, status, error)

    def _send_page(self, view, status: int = 200, error: str | None = None) -> None:
        body = render_dashboard(view, self.app.form, self.app.store.get_categories(), error=error)
        _send(self, body.encode("utf-8"), "text/html; charset=utf-8", status)

    def _redirect_home(self) -> None:
        self.send_response(303)
        self.send_header("Location", "/")
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _read_form(self) -> dict[str, str]:
        length = int(self.headers.get("Content-Length") or 0)
        raw = self.rfile.read(length).decode("utf-8") if length else ""
        return {key: values[0] for key, values in parse_qs(raw, keep_blank_values=True).items()}

    def _handle_form_submit(self) -> None:
        app = self.app
        fields = self._read_form()
        editing_id = fields.get("editing_id") or None
        if editing_id:
            if app.edit_transaction(editing_id) is None:
                self._handle_page({}, status=404, error=NOT_FOUND_MESSAGE)
                return
        else:
            app.open_form()

        app.set_form_type(fields.get("type", ""))
        for name in ("amount", "category", "description", "date"):
            setattr(app.form, name, fields.get(name, ""))

        if app.submit() is None:
            self._send_page(app.update_ui(), status=400)
            return
        self._redirect_home()

    def _handle_form_delete(self, tx_id: str) -> None:
        if not self.app.delete_transaction(tx_id):
            self._handle_page({}, status=404, error=NOT_FOUND_MESSAGE)
            return
        self._redirect_home()


def make_handler(app: FinanceApp) -> type:
    return type("FinanceWebHandler", (FinanceWebHandler,), {"app": app})


def run_server(app: FinanceApp, host: str = "127.0.0.1", port: int = 8000) -> None:
    server = HTTPServer((host, port), make_handler(app))
    print(f"Finance Tracker running at http://{host}:{port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


def main() -> None:
    from finance_tracker.app import configure_logging, create_app
    from finance_tracker.config import load_config

    parser = argparse.ArgumentParser(description="Finance Tracker web dashboard")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.get("log_level"))
    run_server(create_app(config), args.host, args.port)


if __name__ == "__main__":
    main()
