"""Block device model shared with the host inventory.

Only the parts the probe reads (identifier, udev links) and writes
(device_attributes.drive_type) are modelled here.
"""

from dataclasses import dataclass, field
from typing import List, Dict

# udev symlink kinds, named after their /dev/disk/by-* directories
BY_ID_LINK = 'by-id'
BY_PATH_LINK = 'by-path'
BY_UUID_LINK = 'by-uuid'
BY_LABEL_LINK = 'by-label'
BY_PARTUUID_LINK = 'by-partuuid'

LINK_KINDS = (BY_ID_LINK, BY_PATH_LINK, BY_UUID_LINK, BY_LABEL_LINK, BY_PARTUUID_LINK)


@dataclass
class DevLink:
    """A group of symlinks of one kind pointing at the same device."""
    kind: str
    links: List[str] = field(default_factory=list)


@dataclass
class Identifier:
    dev_path: str


@dataclass
class DeviceAttributes:
    drive_type: str = ''


@dataclass
class BlockDevice:
    identifier: Identifier
    dev_links: List[DevLink] = field(default_factory=list)
    device_attributes: DeviceAttributes = field(default_factory=DeviceAttributes)

    @classmethod
    def from_path(cls, dev_path: str, links: Dict[str, List[str]] = None) -> 'BlockDevice':
        """Build a device from its path and a kind -> links mapping."""
        dev_links = [DevLink(kind=kind, links=list(paths)) for kind, paths in (links or {}).items()]
        return cls(identifier=Identifier(dev_path=dev_path), dev_links=dev_links)

    @property
    def dev_path(self) -> str:
        return self.identifier.dev_path
