"""
Utility functions for identifier and value conversions.
"""
from typing import Any

# Prefix udev uses for by-id links derived from a device WWN
WWN_LINK_PREFIX = "wwn-0x"

_TRUTHY_VALUES = {'1', 'true', 'yes', 'y', 'on', 'enable', 'enabled'}


def naa_id_to_wwn(naa_id: str) -> str:
    """
    Convert a SCSI NAA id reported by storcli into the by-id link name udev
    creates for the same device.

    Args:
        naa_id: Hex NAA id, e.g. "6a416e7a06f9600027d34e94a257db13"

    Returns:
        The canonical identifier, e.g. "wwn-0x6a416e7a06f9600027d34e94a257db13"
    """
    return f"{WWN_LINK_PREFIX}{naa_id}"


def check_truthy(value: Any) -> bool:
    """
    Interpret a configuration value as a boolean.

    Accepts real booleans as well as strings such as "true", "Yes", "1" or
    "enabled". Anything else, including None, is False.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY_VALUES


__all__ = ['WWN_LINK_PREFIX', 'naa_id_to_wwn', 'check_truthy']
