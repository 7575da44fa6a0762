"""Core probe package initialization."""

from .config import ProbeConfig
from .writer_config import WriterConfig
from .logging_config import LoggingConfigurator

__all__ = ['ProbeConfig', 'WriterConfig', 'LoggingConfigurator']
