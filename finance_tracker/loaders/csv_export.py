# finance_tracker/loaders/csv_export.py
import pandas as pd
from finance_tracker.core.models import TYPE_LABELS
from finance_tracker.loaders.base import BaseLoader
from finance_tracker.outputs.csv_output import HEADERS

_TYPES_BY_LABEL = {label.lower(): type_ for type_, label in TYPE_LABELS.items()}


class CSVExportLoader(BaseLoader):
    """Read back a file written by CSVOutput."""

    def load(self, file_path):
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False, encoding='utf-8')

        missing = [h for h in HEADERS if h not in df.columns]
        if missing:
            raise RuntimeError(f"Missing column(s) {', '.join(missing)} in {file_path}")

        date_col, type_col, cat_col, desc_col, amt_col = HEADERS
        for _, row in df.iterrows():
            label = row[type_col].strip()
            type_ = _TYPES_BY_LABEL.get(label.lower(), label.lower())
            yield {
                'date': row[date_col].strip(),
                'type': type_,
                'category': row[cat_col],
                'description': row[desc_col],
                'amount': row[amt_col].strip(),
            }
