"""storcli DataSource implementation.

Runs the MegaRAID management utility on the local host.
"""

import os
import subprocess
from typing import Dict, Any, List, Optional

from ..errors import ExecutionError
from .base import DataSource

# Documented install location of the MegaRAID storcli utility
DEFAULT_STORCLI_PATH = "/opt/MegaRAID/storcli/storcli64"

# All controllers, all virtual drives, full report, JSON output
STORCLI_QUERY_ARGS = ["/call/vall", "show", "all", "J"]


class StorcliDataSource(DataSource):
    """DataSource that invokes storcli.

    The binary is taken from a fixed path, never looked up on PATH. No
    timeout is applied; storcli is local and expected to return quickly.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.storcli_path = self.config.get('storcli_path') or DEFAULT_STORCLI_PATH

    def build_command(self) -> List[str]:
        return [self.storcli_path] + STORCLI_QUERY_ARGS

    def query(self) -> bytes:
        """Run storcli and return its stdout.

        Raises:
            ExecutionError: if storcli is missing, not executable or exits non-zero
        """
        cmd = self.build_command()
        self.logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, check=False)
        except FileNotFoundError as e:
            raise ExecutionError(f"storcli not found at {self.storcli_path}", stderr=str(e)) from e
        except PermissionError as e:
            raise ExecutionError(f"storcli at {self.storcli_path} is not executable",
                                 stderr=str(e)) from e
        except OSError as e:
            raise ExecutionError(f"failed to run storcli at {self.storcli_path}: {e}",
                                 stderr=str(e)) from e

        if result.returncode != 0:
            stderr = result.stderr.decode('utf-8', errors='replace').strip()
            raise ExecutionError(
                f"storcli exited with status {result.returncode}",
                returncode=result.returncode,
                stderr=stderr,
            )

        return result.stdout

    def is_available(self) -> bool:
        """Check whether the configured storcli binary can be executed."""
        return os.path.isfile(self.storcli_path) and os.access(self.storcli_path, os.X_OK)
