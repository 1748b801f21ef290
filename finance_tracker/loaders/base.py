# finance_tracker/loaders/base.py
from abc import ABC, abstractmethod

class BaseLoader(ABC):
    @abstractmethod
    def load(self, file_path: str):
        """
        Yield transaction form data (dicts with type, category, description,
        amount and date) read from file_path.
        """
        pass
