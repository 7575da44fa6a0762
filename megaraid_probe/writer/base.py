"""
Base writer interface for MegaRAID probe results.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..schema.models import ClassificationResult

# Initialize logger
LOG = logging.getLogger(__name__)


class Writer(ABC):
    """
    Base class for all writers.
    A writer publishes the classification results of one sweep.
    """

    @abstractmethod
    def write(self, results: List[ClassificationResult], sweep_iteration: int = 1) -> bool:
        """
        Write sweep results to the destination.

        Args:
            results: One ClassificationResult per probed device
            sweep_iteration: Current sweep number

        Returns:
            True if write was successful, False otherwise
        """
        pass

    def close(self) -> None:
        """
        Optional method to close the writer and clean up resources.
        Default implementation does nothing - override in subclasses that need cleanup.
        """
        pass
