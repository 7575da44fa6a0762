from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from .base_model import BaseModel, json_field

# storcli's literal success value for "Command Status".Status
SUCCESS_STATUS = "Success"


@dataclass
class CommandStatus(BaseModel):
    """
    {
        "CLI Version": "007.1705.0000.0000 Mar 31, 2021",
        "Operating system": "Linux 5.4.0-42-generic",
        "Controller": 0,
        "Status": "Success",
        "Description": "None"
    }
    Per-controller command outcome reported by storcli
    """
    controller: int = json_field('Controller', default=0)
    status: str = json_field('Status', default='')
    description: str = json_field('Description', default='')

    def is_success(self) -> bool:
        return self.status == SUCCESS_STATUS


@dataclass
class ControllerResponse(BaseModel):
    """
    One entry of the top-level "Controllers" list.

    "Response Data" is kept as an open-ended mapping; its keys are indexed by
    virtual drive number ("VD0 Properties", "PDs for VD 0", ...) and are
    decoded on demand by the drive extractor.
    """
    command_status: CommandStatus = field(default_factory=CommandStatus)
    response_data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VirtualDriveProperties(BaseModel):
    """
    {
        "Strip Size": "256 KB",
        "Number of Blocks": 3904897024,
        "VD has Emulated PD": "No",
        "Span Depth": 1,
        "Number of Drives Per Span": 2,
        "Write Cache(initial setting)": "WriteBack",
        "Disk Cache Policy": "Disk's Default",
        "Encryption": "None",
        "Data Protection": "Disabled",
        "Active Operations": "None",
        "Exposed to OS": "Yes",
        "OS Drive Name": "/dev/sda",
        "Creation Date": "15-06-2020",
        "Creation Time": "09:36:28 AM",
        "Emulation type": "default",
        "Cachebypass size": "Cachebypass-64k",
        "Cachebypass Mode": "Cachebypass Intelligent",
        "Is LD Ready for OS Requests": "Yes",
        "SCSI NAA Id": "6a416e7a06f9600027d34e94a257db13"
    }
    Properties block of a single virtual drive
    """
    scsi_naa_id: str = json_field('SCSI NAA Id', default='')
    os_drive_name: Optional[str] = json_field('OS Drive Name', default=None)


@dataclass
class PhysicalDrive(BaseModel):
    """
    {
        "EID:Slt": "252:0",
        "DID": 8,
        "State": "Onln",
        "DG": 0,
        "Size": "1.818 TB",
        "Intf": "SATA",
        "Med": "HDD",
        "SED": "N",
        "PI": "N",
        "SeSz": "512B",
        "Model": "ST2000NM0055-1V4104",
        "Sp": "U",
        "Type": "-"
    }
    Member drive entry from a "PDs for VD <i>" list
    """
    med: str = json_field('Med', default='')


@dataclass
class VirtualDrive:
    """Virtual drive resolved for matching against block device links."""
    identifier: str
    media_type: str


@dataclass
class ClassificationResult:
    """Outcome of classifying one block device."""
    dev_path: str
    status: str
    drive_type: str = ''
    error_message: Optional[str] = None

    MATCHED = 'matched'
    NO_MATCH = 'no_match'
    SKIPPED = 'skipped'
    ERROR = 'error'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dev_path': self.dev_path,
            'status': self.status,
            'drive_type': self.drive_type,
            'error_message': self.error_message,
        }
