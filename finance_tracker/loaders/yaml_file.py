# finance_tracker/loaders/yaml_file.py
from datetime import date

import yaml
from finance_tracker.loaders.base import BaseLoader


class YAMLLoader(BaseLoader):
    """Load a YAML list of transactions."""

    def load(self, file_path):
        with open(file_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or []
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of transactions in {file_path}")

        for entry in data:
            if not isinstance(entry, dict):
                raise ValueError(f"Expected a mapping, got: {entry!r}")
            raw_date = entry.get('date')
            if not raw_date:
                raise ValueError(f"Missing 'date' in entry: {entry}")
            yield {
                'date': raw_date.isoformat() if isinstance(raw_date, date) else str(raw_date),
                'type': entry.get('type', ''),
                'category': entry.get('category', ''),
                'description': entry.get('description', ''),
                'amount': entry.get('amount'),
            }
