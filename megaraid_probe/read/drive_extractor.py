"""
Virtual drive extraction from a controller's "Response Data" mapping.

storcli keys its per-drive sections by virtual drive number rather than
returning a list:

    "VD0 Properties": {"SCSI NAA Id": "6a41...db13", ...}
    "PDs for VD 0":   [{"Med": "HDD", ...}, {"Med": "HDD", ...}]
    "VD1 Properties": {...}
    "PDs for VD 1":   [...]

Indices are scanned from zero and the scan stops at the first index where
either key is missing. A gap therefore hides every later virtual drive; this
matches the behaviour the host inventory has always had.
"""
import json
import logging
from typing import Any, Dict, List

from ..errors import DecodeError
from ..schema.models import (
    ControllerResponse,
    PhysicalDrive,
    VirtualDrive,
    VirtualDriveProperties,
)
from ..utils import naa_id_to_wwn
from .response_decoder import check_status, summarize

logger = logging.getLogger(__name__)

# Sanity ceiling on the index scan, the presence check ends it much earlier
MAX_VD_INDEX = 100

VD_PROPERTIES_KEY = "VD{index} Properties"
PDS_FOR_VD_KEY = "PDs for VD {index}"


def _redecode(value: Any, what: str) -> Any:
    """Re-serialize a located sub-value so it is decoded from plain JSON."""
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{what}: value is not JSON serializable: {e}") from e


def decode_physical_drives(value: Any, index: int = 0) -> List[PhysicalDrive]:
    """Decode a "PDs for VD <i>" value into PhysicalDrive records.

    Raises:
        DecodeError: if the value is not a list of objects
    """
    what = PDS_FOR_VD_KEY.format(index=index)
    data = _redecode(value, what)
    if not isinstance(data, list):
        raise DecodeError(f"{what}: expected a list, got {type(data).__name__}")
    return [PhysicalDrive.from_api_response(item) for item in data]


def decode_virtual_drive_properties(value: Any, index: int = 0) -> VirtualDriveProperties:
    """Decode a "VD<i> Properties" value.

    Raises:
        DecodeError: if the value is not an object or a field has the wrong type
    """
    what = VD_PROPERTIES_KEY.format(index=index)
    return VirtualDriveProperties.from_api_response(_redecode(value, what))


def extract_virtual_drives(response_data: Dict[str, Any]) -> List[VirtualDrive]:
    """Extract resolved virtual drives from one controller's response data.

    The media type of a virtual drive is taken from its first physical drive.

    Args:
        response_data: The controller's "Response Data" mapping

    Returns:
        VirtualDrive records in index order

    Raises:
        DecodeError: if any located virtual or physical drive section fails to decode
    """
    virtual_drives: List[VirtualDrive] = []

    for index in range(MAX_VD_INDEX + 1):
        vd_key = VD_PROPERTIES_KEY.format(index=index)
        pd_key = PDS_FOR_VD_KEY.format(index=index)
        if vd_key not in response_data or pd_key not in response_data:
            break

        physical_drives = decode_physical_drives(response_data[pd_key], index)
        properties = decode_virtual_drive_properties(response_data[vd_key], index)
        if not physical_drives:
            raise DecodeError(f"{pd_key}: no physical drives listed")

        vd = VirtualDrive(
            identifier=naa_id_to_wwn(properties.scsi_naa_id),
            media_type=physical_drives[0].med,
        )
        logger.debug(f"VD{index}: {vd.identifier} ({properties.os_drive_name or 'not exposed'}) "
                     f"media {vd.media_type}")
        virtual_drives.append(vd)

    logger.debug(f"Extracted {len(virtual_drives)} virtual drives")
    return virtual_drives


def extract_all(controllers: List[ControllerResponse]) -> List[VirtualDrive]:
    """Extract virtual drives across all controllers of one response.

    Controllers are processed in order and the first one reporting a
    non-success status aborts the whole extraction.

    Raises:
        ControllerError: if a controller reported a non-success status
        DecodeError: if a drive section fails to decode
    """
    logger.debug(f"Controller status: {summarize(controllers)}")

    virtual_drives: List[VirtualDrive] = []
    for controller in controllers:
        check_status(controller)
        virtual_drives.extend(extract_virtual_drives(controller.response_data))
    return virtual_drives
