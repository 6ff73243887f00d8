"""
Defines the abstract base class for all reporters.
"""
from abc import ABC, abstractmethod
from typing import List

from ..models.health import HealthRecord


class BaseReporter(ABC):
    """
    Abstract Base Class for all reporters.
    """

    @abstractmethod
    def report(self, data: List[HealthRecord]):
        """
        Takes one cycle's health records and presents them in a specific format.
        """
        pass
