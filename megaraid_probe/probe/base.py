"""
Base Probe - Abstract base class for block device probes.

A probe fills in attributes of a BlockDevice that the host inventory cannot
read directly. Probes are constructed with everything they need (config,
data source) and keep no global state, so the host decides how and when to
register and run them.
"""

import logging
from abc import ABC, abstractmethod

from ..core.config import ProbeConfig
from ..schema.blockdevice import BlockDevice
from ..schema.models import ClassificationResult


class Probe(ABC):
    """
    Abstract base class for block device probes.

    Subclasses must implement:
    - fill_block_device_details(): inspect and update one device
    """

    def __init__(self, config: ProbeConfig):
        self.config = config
        self.logger = logging.getLogger(f'megaraid_probe.probe.{self.__class__.__name__}')

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def priority(self) -> int:
        return self.config.priority

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def start(self) -> None:
        """Hook called once by the host before the first device. Default does nothing."""
        pass

    @abstractmethod
    def fill_block_device_details(self, block_device: BlockDevice) -> ClassificationResult:
        """
        Inspect one device and write what was learned onto it.

        Must not raise for per-device failures; those are reported through
        the returned result and the log.
        """
        pass
