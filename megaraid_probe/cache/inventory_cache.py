import logging
import threading
from typing import Callable, Dict, List, Optional

from ..schema.models import VirtualDrive


class SweepInventoryCache:
    """
    Per-sweep cache of the controller virtual drive inventory

    Provides:
    - One controller query per sweep instead of one per device
    - Invalidation whenever a new sweep starts
    - Read-only sharing between concurrent classifications of the same sweep

    Failed loads are not cached; the next classification in the same sweep
    queries again. Nothing outlives the process.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sweep_id: Optional[str] = None
        self._inventory: Dict[str, List[VirtualDrive]] = {}
        self.logger = logging.getLogger(__name__)

        # Counters for diagnostics
        self.hits = 0
        self.loads = 0

    @property
    def sweep_id(self) -> Optional[str]:
        return self._sweep_id

    def start_sweep(self, sweep_id: str) -> None:
        """
        Begin a new sweep, dropping the inventory of any previous one

        Args:
            sweep_id: Unique identity of the sweep
        """
        with self._lock:
            if self._sweep_id is not None and self._sweep_id != sweep_id:
                self.logger.debug(f"Invalidating inventory of sweep {self._sweep_id}")
            self._sweep_id = sweep_id
            self._inventory = {}

    def get_or_load(self, loader: Callable[[], List[VirtualDrive]]) -> List[VirtualDrive]:
        """
        Return the current sweep's inventory, loading it on first use

        Without an active sweep the loader is always called and nothing is stored.

        Args:
            loader: Callable returning the virtual drives; its exceptions propagate

        Returns:
            The virtual drives of the current sweep
        """
        with self._lock:
            sweep_id = self._sweep_id
            if sweep_id is None:
                return loader()

            cached = self._inventory.get(sweep_id)
            if cached is not None:
                self.hits += 1
                return list(cached)

            # Loading under the lock keeps concurrent callers from querying twice
            virtual_drives = loader()
            self.loads += 1
            self._inventory[sweep_id] = list(virtual_drives)
            self.logger.debug(f"Cached {len(virtual_drives)} virtual drives for sweep {sweep_id}")
            return list(virtual_drives)

