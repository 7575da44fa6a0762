"""
Readers for storcli output and udev device links.
"""
from .response_decoder import decode_response, decode_controller, check_status
from .drive_extractor import extract_virtual_drives, extract_all, MAX_VD_INDEX
from .devlinks import discover_block_devices, group_links

__all__ = [
    'decode_response',
    'decode_controller',
    'check_status',
    'extract_virtual_drives',
    'extract_all',
    'MAX_VD_INDEX',
    'discover_block_devices',
    'group_links',
]
