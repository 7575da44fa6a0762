"""JSON Replay DataSource implementation.

Replays a previously captured storcli JSON document, e.g. one saved with
`storcli64 /call/vall show all J > capture.json`.
"""

from pathlib import Path
from typing import Dict, Any, Optional

from ..errors import ExecutionError
from .base import DataSource


class JSONReplayDataSource(DataSource):
    """DataSource that reads storcli output from a file.

    Read failures are reported as ExecutionError so callers handle a bad
    capture exactly like a failed tool run.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.json_file = self.config.get('from_json')

    def query(self) -> bytes:
        if not self.json_file:
            raise ExecutionError("JSON replay file not configured")

        path = Path(self.json_file)
        self.logger.debug(f"Replaying storcli output from {path}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise ExecutionError(f"cannot read storcli capture {path}: {e}", stderr=str(e)) from e
