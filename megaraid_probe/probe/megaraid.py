"""
MegaRAID probe - media type of block devices behind a MegaRAID controller.

The kernel only sees the controller's virtual drives, so rotational/solid
state detection through sysfs reports the virtual device, not the disks
behind it. storcli knows both sides: every virtual drive carries its SCSI
NAA id, which udev also exposes as a /dev/disk/by-id/wwn-0x<naa id> link,
and lists its member physical drives with their media type.
"""

import os
from typing import List, Optional

from ..cache.inventory_cache import SweepInventoryCache
from ..core.config import ProbeConfig
from ..datasources.base import DataSource
from ..errors import ProbeError
from ..schema.blockdevice import BlockDevice, BY_ID_LINK
from ..schema.models import ClassificationResult, VirtualDrive
from .base import Probe


class MegaRaidProbe(Probe):
    """
    Probe setting device_attributes.drive_type from storcli's inventory.
    """

    def __init__(self, config: ProbeConfig, datasource: DataSource,
                 cache: Optional[SweepInventoryCache] = None):
        super().__init__(config)
        self.datasource = datasource
        self.cache = cache

    def get_by_ids(self, block_device: BlockDevice) -> List[str]:
        """Return the links of the device's first by-id link group, or an empty list."""
        for item in block_device.dev_links:
            if item.kind == BY_ID_LINK:
                return item.links
        return []

    def get_vd_infos(self) -> List[VirtualDrive]:
        """Resolve all virtual drives, through the sweep cache when one is set.

        Raises:
            ProbeError: any failure of the query, decode or extraction
        """
        if self.cache is not None:
            return self.cache.get_or_load(self.datasource.collect_virtual_drives)
        return self.datasource.collect_virtual_drives()

    def fill_block_device_details(self, block_device: BlockDevice) -> ClassificationResult:
        dev_path = block_device.dev_path

        if not self.enabled:
            self.logger.debug(f"{self.name} disabled, skipping {dev_path}")
            return ClassificationResult(dev_path, ClassificationResult.SKIPPED)

        by_ids = self.get_by_ids(block_device)
        if not by_ids:
            self.logger.error(f"{dev_path} byids not found")
            return ClassificationResult(dev_path, ClassificationResult.SKIPPED,
                                        error_message="no by-id links")

        try:
            vds = self.get_vd_infos()
        except ProbeError as e:
            self.logger.error(f"{dev_path} err: {e}")
            return ClassificationResult(dev_path, ClassificationResult.ERROR, error_message=str(e))

        link_names = [os.path.basename(by_id) for by_id in by_ids]
        for vd_item in vds:
            if vd_item.identifier in link_names:
                self.logger.info(f"set {dev_path} drive type {vd_item.media_type}")
                block_device.device_attributes.drive_type = vd_item.media_type
                return ClassificationResult(dev_path, ClassificationResult.MATCHED,
                                            drive_type=vd_item.media_type)

        self.logger.warning(f"{dev_path} matched none of {len(vds)} virtual drives")
        return ClassificationResult(dev_path, ClassificationResult.NO_MATCH)
