# finance_tracker/outputs/base.py
import os
from abc import ABC, abstractmethod
from pathlib import Path


class BaseOutput(ABC):
    filename = "transactions"
    binary = False

    def __init__(self, config):
        self.config = config
        self.output_dir = config.get('output_dir', 'exports')

    @abstractmethod
    def render(self, transactions):
        """Return the file content for the given transactions."""
        pass

    def write(self, transactions, path=None):
        """Render to ``path`` (defaults to ``<output_dir>/<filename>``)."""
        if path is None:
            os.makedirs(self.output_dir, exist_ok=True)
            path = os.path.join(self.output_dir, self.filename)
        content = self.render(transactions)
        target = Path(path)
        if self.binary:
            target.write_bytes(content)
        else:
            target.write_text(content, encoding='utf-8')
        return target
