"""Core configuration classes for the probe."""

from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from ..datasources.storcli import DEFAULT_STORCLI_PATH
from ..read.devlinks import DEFAULT_DEV_ROOT

# Key of this probe's entry in the host's probe configuration list
MEGARAID_CONFIG_KEY = 'mega-raid-probe'
DEFAULT_PROBE_NAME = 'mega raid probe'
DEFAULT_PROBE_PRIORITY = 2

ALLOWED_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


@dataclass
class ProbeConfig:
    """Configuration for the MegaRAID probe.

    Passed to the probe's constructor; the probe keeps no module-level state.
    """

    # Probe identity as seen by the host inventory
    name: str = DEFAULT_PROBE_NAME
    enabled: bool = True
    priority: int = DEFAULT_PROBE_PRIORITY

    # Data source configuration
    storcli_path: str = DEFAULT_STORCLI_PATH
    from_json: Optional[str] = None  # storcli capture to replay instead of running the tool

    # Device selection
    dev_root: str = DEFAULT_DEV_ROOT
    devices: Optional[List[str]] = None

    # Share one controller query across all devices of a sweep
    cache_per_sweep: bool = False

    # Sweep scheduling
    interval_time: int = 0  # seconds between sweeps, 0 = run a single sweep
    max_iterations: int = 0  # 0 = unlimited, >0 = exit after N sweeps

    # Debugging
    log_level: str = 'INFO'
    logfile: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.storcli_path:
            raise ValueError("storcli_path must not be empty")
        if not isinstance(self.priority, int) or isinstance(self.priority, bool):
            raise ValueError(f"priority must be an integer, got {self.priority!r}")
        if self.interval_time < 0 or self.max_iterations < 0:
            raise ValueError("interval_time and max_iterations must not be negative")
        if not isinstance(self.log_level, str) or self.log_level.upper() not in ALLOWED_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {ALLOWED_LOG_LEVELS}")
        self.log_level = self.log_level.upper()

    @property
    def use_json_replay(self) -> bool:
        return self.from_json is not None

    @classmethod
    def from_args(cls, args, settings=None) -> 'ProbeConfig':
        """Create configuration from command line arguments.

        Values from a loaded Settings object are used where the command line
        leaves an option unset.
        """
        base: Dict[str, Any] = settings.to_probe_kwargs() if settings is not None else {}

        def pick(attr: str, key: str):
            value = getattr(args, attr, None)
            return value if value is not None else base.get(key)

        kwargs = {
            'name': base.get('name', DEFAULT_PROBE_NAME),
            'enabled': base.get('enabled', True),
            'storcli_path': pick('storcli', 'storcli_path') or DEFAULT_STORCLI_PATH,
            'from_json': getattr(args, 'fromJson', None),
            'dev_root': pick('dev_root', 'dev_root') or DEFAULT_DEV_ROOT,
            'devices': getattr(args, 'device', None) or None,
            'cache_per_sweep': bool(getattr(args, 'cache_per_sweep', False) or base.get('cache_per_sweep', False)),
            'interval_time': getattr(args, 'intervalTime', 0) or 0,
            'max_iterations': getattr(args, 'maxIterations', 0) or 0,
            'log_level': pick('log_level', 'log_level') or 'INFO',
            'logfile': pick('logfile', 'logfile'),
        }
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for passing to DataSources."""
        return {
            'name': self.name,
            'enabled': self.enabled,
            'priority': self.priority,
            'storcli_path': self.storcli_path,
            'from_json': self.from_json,
            'dev_root': self.dev_root,
            'devices': self.devices,
            'cache_per_sweep': self.cache_per_sweep,
            'interval_time': self.interval_time,
            'max_iterations': self.max_iterations,
            'log_level': self.log_level,
            'logfile': self.logfile,
        }
