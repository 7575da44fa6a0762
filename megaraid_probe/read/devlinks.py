"""
Block device discovery from the udev database.

udev publishes stable names for every block device in its DEVLINKS property:

    /dev/disk/by-id/wwn-0x6a416e7a06f9600027d34e94a257db13
    /dev/disk/by-id/scsi-36a416e7a06f9600027d34e94a257db13
    /dev/disk/by-path/pci-0000:18:00.0-scsi-0:2:0:0

Links are grouped by the /dev/disk/<kind> directory they live in, which
yields the dev_links the probe reads.
"""
import logging
import os
from typing import Dict, Iterable, List, Optional

import pyudev

from ..schema.blockdevice import BlockDevice

logger = logging.getLogger(__name__)

DEFAULT_DEV_ROOT = "/dev/disk"


def group_links(links: Iterable[str], dev_root: str = DEFAULT_DEV_ROOT) -> Dict[str, List[str]]:
    """
    Group udev device links by kind.

    Args:
        links: Link paths as listed in DEVLINKS
        dev_root: Directory holding the by-* link directories

    Returns:
        Mapping of kind ("by-id", "by-path", ...) to sorted link paths. Links
        outside dev_root (e.g. /dev/mapper names) are dropped.
    """
    grouped: Dict[str, List[str]] = {}
    for link in links:
        parent = os.path.dirname(link)
        if os.path.dirname(parent) != dev_root:
            continue
        grouped.setdefault(os.path.basename(parent), []).append(link)
    return {kind: sorted(paths) for kind, paths in sorted(grouped.items())}


def block_device_from_udev(device, dev_root: str = DEFAULT_DEV_ROOT) -> BlockDevice:
    """Build a BlockDevice from a pyudev Device."""
    return BlockDevice.from_path(device.device_node, group_links(device.device_links, dev_root))


def discover_block_devices(context: Optional[pyudev.Context] = None,
                           devices: Optional[List[str]] = None,
                           include_partitions: bool = False,
                           dev_root: str = DEFAULT_DEV_ROOT) -> List[BlockDevice]:
    """
    Build BlockDevice records for the block devices udev knows about.

    Args:
        context: udev context, a new pyudev.Context() when omitted
        devices: Only return these device paths. A path may be a device node,
            one of its links or any symlink resolving to the node. A requested
            device udev does not know is still returned, with no dev_links.
        include_partitions: Keep partition devices (skipped by default)
        dev_root: Directory holding the by-* link directories

    Returns:
        BlockDevice records ordered by device node, or in request order
    """
    if context is None:
        context = pyudev.Context()

    if devices:
        known = [d for d in context.list_devices(subsystem='block') if d.device_node]
        result = []
        for requested in devices:
            resolved = os.path.realpath(requested)
            match = next((d for d in known
                          if d.device_node in (requested, resolved) or requested in d.device_links),
                         None)
            if match is None:
                logger.warning(f"{requested} is not known to udev")
                result.append(BlockDevice.from_path(resolved))
            else:
                result.append(block_device_from_udev(match, dev_root))
    else:
        if include_partitions:
            udev_devices = context.list_devices(subsystem='block')
        else:
            udev_devices = context.list_devices(subsystem='block', DEVTYPE='disk')
        result = sorted((block_device_from_udev(d, dev_root) for d in udev_devices if d.device_node),
                        key=lambda bd: bd.dev_path)

    logger.info(f"Discovered {len(result)} block devices")
    return result
