"""DataSource implementations for live and replayed controller queries."""

from .base import DataSource
from .storcli import StorcliDataSource, DEFAULT_STORCLI_PATH, STORCLI_QUERY_ARGS
from .json_replay import JSONReplayDataSource

__all__ = ['DataSource', 'StorcliDataSource', 'JSONReplayDataSource',
           'DEFAULT_STORCLI_PATH', 'STORCLI_QUERY_ARGS']
