"""
Writer factory for MegaRAID probe results.
"""

import logging

from .base import Writer
from .json_writer import JsonWriter
from .prometheus_writer import PrometheusWriter
from .multi_writer import MultiWriter

# Initialize logger
LOG = logging.getLogger(__name__)

class WriterFactory:
    """
    Factory for creating writer instances based on configuration.
    """

    @staticmethod
    def create_writer_from_config(writer_config) -> Writer:
        """
        Create a writer based on WriterConfig object.

        Args:
            writer_config: WriterConfig instance with writer settings

        Returns:
            Appropriate Writer instance
        """
        output_choice = writer_config.output_format

        if output_choice == 'json':
            LOG.info("Creating JSON writer from WriterConfig")
            return JsonWriter(writer_config.to_dict())

        elif output_choice == 'prometheus':
            LOG.info(f"Creating Prometheus writer on port {writer_config.prometheus_port}")
            return PrometheusWriter(writer_config.to_dict())

        elif output_choice == 'both':
            writers = [
                JsonWriter(writer_config.to_dict()),
                PrometheusWriter(writer_config.to_dict()),
            ]
            return MultiWriter(writers)

        else:
            LOG.error(f"Unknown output format: {output_choice}")
            raise ValueError(f"Unsupported output format: {output_choice}")
