"""Exception taxonomy for the MegaRAID probe.

Every failure the probe pipeline can produce derives from ProbeError so that
callers classifying many devices can catch one type and move on.
"""

from typing import Optional


class ProbeError(Exception):
    """Base class for all probe pipeline failures."""


class ExecutionError(ProbeError):
    """The controller management tool could not be run or exited non-zero."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ''):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class MalformedResponseError(ProbeError):
    """The tool output does not have the expected top-level shape."""


class ControllerError(ProbeError):
    """A controller reported a non-success command status.

    The message is the controller's own description, unmodified.
    """

    def __init__(self, description: str, controller: Optional[int] = None):
        super().__init__(description)
        self.description = description
        self.controller = controller


class DecodeError(ProbeError):
    """A virtual or physical drive sub-structure failed to decode."""
