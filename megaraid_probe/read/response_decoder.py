"""
Decoder for the top-level storcli JSON envelope.

storcli answers "/call/vall show all J" with one entry per controller:

    {
        "Controllers": [
            {
                "Command Status": {"Controller": 0, "Status": "Success", ...},
                "Response Data": {"VD0 Properties": {...}, "PDs for VD 0": [...], ...}
            }
        ]
    }

Only the envelope and the command status are decoded here. "Response Data"
is kept as an open mapping and handed to the drive extractor.
"""
import json
import logging
from typing import Any, Dict, List, Union

from ..errors import ControllerError, MalformedResponseError, DecodeError
from ..schema.models import CommandStatus, ControllerResponse

logger = logging.getLogger(__name__)

CONTROLLERS_KEY = 'Controllers'
COMMAND_STATUS_KEY = 'Command Status'
RESPONSE_DATA_KEY = 'Response Data'


def _load_json(raw: Union[bytes, str]) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedResponseError(f"storcli output is not valid JSON: {e}") from e


def decode_controller(entry: Any, position: int = 0) -> ControllerResponse:
    """Decode a single "Controllers" entry.

    Raises:
        MalformedResponseError: if the entry or its command status is not an object,
            or "Response Data" is present but not an object.
    """
    if not isinstance(entry, dict):
        raise MalformedResponseError(
            f"controller entry {position} is {type(entry).__name__}, expected an object")

    status_data = entry.get(COMMAND_STATUS_KEY)
    if not isinstance(status_data, dict):
        raise MalformedResponseError(f"controller entry {position} has no '{COMMAND_STATUS_KEY}' object")

    try:
        command_status = CommandStatus.from_api_response(status_data)
    except DecodeError as e:
        raise MalformedResponseError(f"controller entry {position}: {e}") from e

    response_data = entry.get(RESPONSE_DATA_KEY)
    if response_data is None:
        response_data = {}
    elif not isinstance(response_data, dict):
        raise MalformedResponseError(
            f"controller entry {position} has a non-object '{RESPONSE_DATA_KEY}'")

    return ControllerResponse(
        command_status=command_status,
        response_data=response_data,
        _raw_data=entry.copy(),
    )


def decode_response(raw: Union[bytes, str]) -> List[ControllerResponse]:
    """Parse raw storcli output into per-controller responses.

    Args:
        raw: stdout bytes of the storcli invocation

    Returns:
        One ControllerResponse per entry of "Controllers", in order

    Raises:
        MalformedResponseError: if the top-level structure does not match
    """
    document = _load_json(raw)
    if not isinstance(document, dict):
        raise MalformedResponseError(
            f"storcli output is {type(document).__name__}, expected an object")

    controllers = document.get(CONTROLLERS_KEY)
    if not isinstance(controllers, list):
        raise MalformedResponseError(f"storcli output has no '{CONTROLLERS_KEY}' list")

    responses = [decode_controller(entry, i) for i, entry in enumerate(controllers)]
    for response in responses:
        logger.debug(f"Controller {response.command_status.controller}: "
                     f"storcli {response.command_status.get_raw('CLI Version', 'unknown')}")
    logger.debug(f"Decoded {len(responses)} controller responses")
    return responses


def check_status(controller: ControllerResponse) -> None:
    """Raise ControllerError unless the controller reported success.

    The error message is the controller's own description, unmodified.
    """
    status: CommandStatus = controller.command_status
    if not status.is_success():
        raise ControllerError(status.description, controller=status.controller)


def summarize(controllers: List[ControllerResponse]) -> Dict[int, str]:
    """Map controller number to its reported status, for diagnostics."""
    return {c.command_status.controller: c.command_status.status for c in controllers}
