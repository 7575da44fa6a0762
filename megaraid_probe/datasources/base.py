"""Base DataSource interface for controller inventory queries."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional

from ..read.drive_extractor import extract_all
from ..read.response_decoder import decode_response
from ..schema.models import VirtualDrive


class DataSource(ABC):
    """Abstract base class for all controller data sources.

    A data source produces the raw storcli JSON document. Decoding and
    extraction are shared so that a live tool run and a replayed capture
    go through exactly the same pipeline.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(__name__)
        self.queries_completed = 0

    @property
    def name(self) -> str:
        """Data source name for logging."""
        return self.__class__.__name__

    @abstractmethod
    def query(self) -> bytes:
        """Return the raw controller inventory document.

        Raises:
            ExecutionError: if the inventory could not be obtained
        """
        pass

    def collect_virtual_drives(self) -> List[VirtualDrive]:
        """Query the controllers and resolve every virtual drive.

        Raises:
            ExecutionError, MalformedResponseError, ControllerError, DecodeError
        """
        raw = self.query()
        self.queries_completed += 1
        controllers = decode_response(raw)
        virtual_drives = extract_all(controllers)
        self.logger.debug(f"{self.name}: {len(virtual_drives)} virtual drives "
                          f"across {len(controllers)} controllers")
        return virtual_drives
