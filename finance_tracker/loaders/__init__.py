# finance_tracker/loaders/__init__.py
import os

from finance_tracker.loaders.csv_export import CSVExportLoader
from finance_tracker.loaders.yaml_file import YAMLLoader

_LOADERS = {
    '.csv': CSVExportLoader,
    '.yaml': YAMLLoader,
    '.yml': YAMLLoader,
}


def get_loader(file_path):
    ext = os.path.splitext(file_path)[1].lower()
    if ext not in _LOADERS:
        raise ValueError(f"Unsupported import file type: {file_path}")
    return _LOADERS[ext]()
