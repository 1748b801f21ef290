# finance_tracker/outputs/excel_output.py

"""Excel output module backed by XlsxWriter.

The workbook holds a ``Transactions`` worksheet with every record, newest
first, a ``Mensuel`` worksheet with income and expense per month plus a
native column chart, and a ``Catégories`` worksheet with the top expense
categories plus a pie chart.
"""

from __future__ import annotations

import io
import xlsxwriter

from finance_tracker.aggregation import (
    STORE_TOP_CATEGORIES,
    STORE_WINDOW_MONTHS,
    aggregate_categories,
    aggregate_monthly,
)
from finance_tracker.core.models import TYPE_LABELS
from finance_tracker.outputs.base import BaseOutput
from finance_tracker.outputs.csv_output import HEADERS


class ExcelOutput(BaseOutput):
    """Generate a local Excel workbook with native charts."""

    filename = "transactions.xlsx"
    binary = True

    ALL_DATA = "Transactions"
    MONTHLY = "Mensuel"
    CATEGORIES = "Catégories"
    AMOUNT_FORMAT = "#,##0.00 €"

    def render(self, transactions):
        buf = io.BytesIO()
        workbook = xlsxwriter.Workbook(buf, {"in_memory": True})
        amount_fmt = workbook.add_format({"num_format": self.AMOUNT_FORMAT})

        ordered = sorted(transactions, key=lambda tx: tx.date, reverse=True)

        all_ws = workbook.add_worksheet(self.ALL_DATA)
        all_ws.freeze_panes(1, 0)
        all_ws.write_row(0, 0, HEADERS)
        for idx, tx in enumerate(ordered, start=1):
            all_ws.write_row(idx, 0, [
                tx.date.isoformat(),
                TYPE_LABELS.get(tx.type, tx.type),
                tx.category,
                tx.description,
            ])
            all_ws.write_number(idx, 4, float(tx.amount), amount_fmt)
        all_ws.set_column(4, 4, 12, amount_fmt)
        all_ws.add_table(0, 0, max(len(ordered), 1), 4, {
            "columns": [{"header": h} for h in HEADERS]
        })

        tables = self._build_chart_tables(transactions)

        monthly_ws = workbook.add_worksheet(self.MONTHLY)
        monthly_ws.set_column(1, 2, 12, amount_fmt)
        for offset, row in enumerate(tables["monthly"]):
            monthly_ws.write_row(offset, 0, row)

        categories_ws = workbook.add_worksheet(self.CATEGORIES)
        categories_ws.set_column(1, 1, 12, amount_fmt)
        for offset, row in enumerate(tables["categories"]):
            categories_ws.write_row(offset, 0, row)

        self._insert_charts(workbook, monthly_ws, categories_ws, tables)

        workbook.close()
        return buf.getvalue()

    def _build_chart_tables(self, transactions):
        monthly = aggregate_monthly(transactions, STORE_WINDOW_MONTHS)
        categories = aggregate_categories(transactions, STORE_TOP_CATEGORIES)
        return {
            "monthly": [["Mois", "Revenus", "Dépenses"]] + [
                [item.key, item.income, item.expense] for item in monthly
            ],
            "categories": [["Catégorie", "Montant"]] + [
                [item.category, item.amount] for item in categories
            ],
        }

    def _insert_charts(self, workbook, monthly_ws, categories_ws, tables):
        month_rows = len(tables["monthly"])
        if month_rows > 1:
            chart = workbook.add_chart({"type": "column"})
            for col, color in ((1, "#10B981"), (2, "#EF4444")):
                chart.add_series({
                    "name": [monthly_ws.name, 0, col],
                    "categories": [monthly_ws.name, 1, 0, month_rows - 1, 0],
                    "values": [monthly_ws.name, 1, col, month_rows - 1, col],
                    "fill": {"color": color},
                })
            chart.set_title({"name": "Revenus et dépenses par mois"})
            chart.set_legend({"position": "bottom"})
            monthly_ws.insert_chart(0, 4, chart)

        category_rows = len(tables["categories"])
        if category_rows > 1:
            chart = workbook.add_chart({"type": "pie"})
            chart.add_series({
                "name": "Dépenses par catégorie",
                "categories": [categories_ws.name, 1, 0, category_rows - 1, 0],
                "values": [categories_ws.name, 1, 1, category_rows - 1, 1],
            })
            chart.set_title({"name": "Dépenses par catégorie"})
            chart.set_legend({"position": "right"})
            chart.set_size({"width": 480, "height": 300})
            categories_ws.insert_chart(0, 3, chart)
