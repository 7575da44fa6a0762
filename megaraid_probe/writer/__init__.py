"""Writer module for MegaRAID probe results.

Provides writer implementations for different output formats.
"""

from .base import Writer
from .factory import WriterFactory
from .json_writer import JsonWriter
from .prometheus_writer import PrometheusWriter
from .multi_writer import MultiWriter

__all__ = ['Writer', 'WriterFactory', 'JsonWriter', 'PrometheusWriter', 'MultiWriter']
