# recurring_tracker/outputs/base.py
from abc import ABC, abstractmethod

class BaseOutput(ABC):
    @abstractmethod
    def write(self, transactions):
        """Write previewed or generated transactions to the chosen sink."""
        pass
