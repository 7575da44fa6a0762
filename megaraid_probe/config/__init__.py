"""
Configuration file and environment loading for the MegaRAID probe.
"""

import os
import yaml
import json
from typing import List, Optional, Dict, Any
import logging

from ..core.config import MEGARAID_CONFIG_KEY
from ..utils import check_truthy

# Initialize logger
LOG = logging.getLogger(__name__)


class Settings:
    """
    Configuration settings for the MegaRAID probe.
    Supports loading from environment variables, YAML, or JSON.

    The file uses the host inventory daemon's layout, where each probe is an
    entry of "probeconfigs" identified by its key:

        storcli_path: /opt/MegaRAID/storcli/storcli64
        probeconfigs:
          - key: mega-raid-probe
            name: mega raid probe
            state: true
    """

    def __init__(self, config_file: Optional[str] = None, from_env: bool = True):
        """
        Initialize settings from a config file or environment variables.

        Args:
            config_file: Path to YAML or JSON configuration file
            from_env: Whether to load settings from environment variables
        """
        # Default values, None means "not set here"
        self.storcli_path: Optional[str] = None
        self.dev_root: Optional[str] = None
        self.cache_per_sweep: Optional[bool] = None
        self.log_level: Optional[str] = None
        self.logfile: Optional[str] = None
        self.probe_name: Optional[str] = None
        self.probe_state: Optional[bool] = None
        self.probe_configs: List[Dict[str, Any]] = []

        # Load configuration in order of precedence
        if config_file:
            self._load_from_file(config_file)

        if from_env:
            self._load_from_env()

    def _load_from_file(self, config_file: str) -> None:
        """Load settings from a YAML or JSON file."""
        if not os.path.exists(config_file):
            LOG.warning(f"Config file not found: {config_file}")
            return

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.lower().endswith('.yaml') or config_file.lower().endswith('.yml'):
                    config = yaml.safe_load(f)
                elif config_file.lower().endswith('.json'):
                    config = json.load(f)
                else:
                    LOG.warning(f"Unsupported config file format: {config_file}")
                    return
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            LOG.error(f"Failed to load config from {config_file}: {e}")
            return

        if not isinstance(config, dict):
            LOG.error(f"Config file {config_file} does not contain a mapping")
            return

        self.apply(config)
        LOG.info(f"Loaded configuration from {config_file}")

    def apply(self, config: Dict[str, Any]) -> None:
        """Apply a configuration mapping."""
        self.storcli_path = config.get('storcli_path', self.storcli_path)
        self.dev_root = config.get('dev_root', self.dev_root)
        if 'cache_per_sweep' in config:
            self.cache_per_sweep = check_truthy(config['cache_per_sweep'])
        self.log_level = config.get('log_level', self.log_level)
        self.logfile = config.get('logfile', self.logfile)

        self.probe_configs = config.get('probeconfigs') or []
        for probe_config in self.probe_configs:
            if isinstance(probe_config, dict) and probe_config.get('key') == MEGARAID_CONFIG_KEY:
                self.probe_name = probe_config.get('name', self.probe_name)
                self.probe_state = check_truthy(probe_config.get('state'))
                break

    def _load_from_env(self) -> None:
        """Load settings from environment variables."""
        self.storcli_path = os.getenv('MEGARAID_STORCLI_PATH', self.storcli_path)
        self.log_level = os.getenv('MEGARAID_LOG_LEVEL', self.log_level)

        state = os.getenv('MEGARAID_PROBE_STATE')
        if state is not None:
            self.probe_state = check_truthy(state)

    def to_probe_kwargs(self) -> Dict[str, Any]:
        """Return the settings that were actually set, keyed by ProbeConfig field."""
        values = {
            'name': self.probe_name,
            'enabled': self.probe_state,
            'storcli_path': self.storcli_path,
            'dev_root': self.dev_root,
            'cache_per_sweep': self.cache_per_sweep,
            'log_level': self.log_level,
            'logfile': self.logfile,
        }
        return {k: v for k, v in values.items() if v is not None}
