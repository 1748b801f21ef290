# finance_tracker/outputs/csv_output.py

import csv
import io
from finance_tracker.core.models import TYPE_LABELS
from finance_tracker.outputs.base import BaseOutput

HEADERS = ['Date', 'Type', 'Catégorie', 'Description', 'Montant']


class CSVOutput(BaseOutput):
    """
    Export every transaction, newest first, as a CSV file with every field
    quoted and amounts written with two decimals.
    """
    filename = 'transactions.csv'

    def render(self, transactions):
        ordered = sorted(transactions, key=lambda tx: tx.date, reverse=True)
        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
        writer.writerow(HEADERS)
        for tx in ordered:
            writer.writerow([
                tx.date.isoformat(),
                TYPE_LABELS.get(tx.type, tx.type),
                tx.category,
                tx.description,
                f"{tx.amount:.2f}",
            ])
        return buf.getvalue()
