"""
Multi-writer for MegaRAID probe results.
Supports writing to multiple destinations simultaneously (e.g., JSON + Prometheus).
"""

import logging
from typing import List

from .base import Writer
from ..schema.models import ClassificationResult

# Initialize logger
LOG = logging.getLogger(__name__)

class MultiWriter(Writer):
    """
    Composite writer that can write to multiple destinations simultaneously.
    """

    def __init__(self, writers: List[Writer]):
        """
        Initialize the multi-writer with a list of writers.

        Args:
            writers: List of Writer instances to write to
        """
        self.writers = writers
        LOG.info(f"MultiWriter initialized with {len(writers)} writers: {[type(w).__name__ for w in writers]}")

    def write(self, results: List[ClassificationResult], sweep_iteration: int = 1) -> bool:
        """
        Write results to all configured writers.

        Returns:
            True if all writes were successful, False if any failed
        """
        success = True
        for i, writer in enumerate(self.writers):
            writer_name = type(writer).__name__
            LOG.debug(f"Writing to {writer_name} ({i+1}/{len(self.writers)})")
            if not writer.write(results, sweep_iteration):
                LOG.error(f"{writer_name} write failed")
                success = False
        return success

    def close(self) -> None:
        """Close all writers."""
        for writer in self.writers:
            writer.close()

    def __str__(self) -> str:
        """String representation of the multi-writer."""
        writer_names = [type(w).__name__ for w in self.writers]
        return f"MultiWriter({', '.join(writer_names)})"

    def __repr__(self) -> str:
        return self.__str__()
