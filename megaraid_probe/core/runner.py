"""Sweep orchestration for the MegaRAID probe.

Builds the data source, the optional sweep cache and the probe from one
ProbeConfig, then classifies a set of block devices and hands the results
to a writer.
"""

import logging
import time
import uuid
from typing import Optional, List

from ..cache.inventory_cache import SweepInventoryCache
from ..datasources.base import DataSource
from ..datasources.json_replay import JSONReplayDataSource
from ..datasources.storcli import StorcliDataSource
from ..probe.megaraid import MegaRaidProbe
from ..read.devlinks import discover_block_devices
from ..schema.blockdevice import BlockDevice
from ..schema.models import ClassificationResult
from ..writer.base import Writer
from .config import ProbeConfig


class ProbeRunner:
    """Main orchestrator for MegaRAID probe sweeps.

    Each device is classified independently; a failure on one device is
    recorded in its result and never stops the sweep.
    """

    def __init__(self, config: ProbeConfig, writer: Optional[Writer] = None,
                 datasource: Optional[DataSource] = None, udev_context=None):
        """Initialize runner with configuration.

        Args:
            config: Probe configuration object
            writer: Destination for sweep results (optional)
            datasource: Overrides the data source derived from config
            udev_context: pyudev Context used for device discovery (optional)
        """
        self.config = config
        self.writer = writer
        self.datasource = datasource
        self.udev_context = udev_context
        self.cache: Optional[SweepInventoryCache] = None
        self.probe: Optional[MegaRaidProbe] = None
        self.logger = logging.getLogger(__name__)

        # Statistics tracking
        self.sweeps_completed = 0

    def initialize(self) -> bool:
        """Initialize the data source and the probe.

        Returns:
            True if the probe is ready to run, False if it is disabled
        """
        if self.datasource is None:
            if self.config.use_json_replay:
                self.logger.info(f"Initializing JSON replay from {self.config.from_json}")
                self.datasource = JSONReplayDataSource(self.config.to_dict())
            else:
                self.logger.info(f"Initializing storcli data source at {self.config.storcli_path}")
                self.datasource = StorcliDataSource(self.config.to_dict())
                if not self.datasource.is_available():
                    self.logger.warning(f"storcli not found or not executable at {self.config.storcli_path}")

        if self.config.cache_per_sweep:
            self.cache = SweepInventoryCache()

        self.probe = MegaRaidProbe(self.config, self.datasource, cache=self.cache)
        if not self.probe.enabled:
            self.logger.warning(f"{self.probe.name} is disabled")
            return False

        self.probe.start()
        self.logger.info(f"{self.probe.name} initialized (priority {self.probe.priority})")
        return True

    def classify(self, devices: List[BlockDevice]) -> List[ClassificationResult]:
        """Classify each device once, in order."""
        if self.probe is None:
            raise RuntimeError("Runner not initialized - call initialize() first")

        results = []
        for device in devices:
            try:
                results.append(self.probe.fill_block_device_details(device))
            except Exception as e:
                # One device failing never stops the sweep
                self.logger.exception(f"Unexpected failure classifying {device.dev_path}")
                results.append(ClassificationResult(device.dev_path,
                                                    ClassificationResult.ERROR,
                                                    error_message=str(e)))
        return results

    def run_sweep(self, devices: Optional[List[BlockDevice]] = None) -> List[ClassificationResult]:
        """Run one sweep over the given or discovered devices.

        Returns:
            One ClassificationResult per device
        """
        sweep_id = uuid.uuid4().hex
        if self.cache is not None:
            self.cache.start_sweep(sweep_id)

        if devices is None:
            devices = discover_block_devices(self.udev_context, devices=self.config.devices,
                                             dev_root=self.config.dev_root)

        self.logger.info(f"Sweep {sweep_id[:8]}: classifying {len(devices)} devices")
        results = self.classify(devices)
        self.sweeps_completed += 1

        matched = sum(1 for r in results if r.status == ClassificationResult.MATCHED)
        self.logger.info(f"Sweep {sweep_id[:8]} complete: {matched}/{len(results)} devices matched, "
                         f"{self.datasource.queries_completed} controller queries so far")

        if self.writer is not None and not self.writer.write(results, self.sweeps_completed):
            self.logger.error("Failed to write sweep results")

        return results

    def run_continuous(self) -> None:
        """Run sweeps until max_iterations is reached.

        With interval_time 0 a single sweep is run. Devices are rediscovered
        on every sweep so hot-plugged disks are picked up.
        """
        if self.config.interval_time == 0:
            self.run_sweep()
            return

        iteration_count = 0
        self.logger.info(f"Starting continuous sweeps (interval: {self.config.interval_time}s, "
                         f"max_iterations: {self.config.max_iterations if self.config.max_iterations > 0 else 'unlimited'})")

        while True:
            iteration_count += 1
            if self.config.max_iterations > 0 and iteration_count > self.config.max_iterations:
                self.logger.info(f"Reached maximum iterations ({self.config.max_iterations}) - exiting")
                break

            self.run_sweep()

            if self.config.max_iterations == 0 or iteration_count < self.config.max_iterations:
                self.logger.debug(f"Waiting {self.config.interval_time} seconds until next sweep...")
                time.sleep(self.config.interval_time)
