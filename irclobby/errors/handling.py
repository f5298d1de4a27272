from __future__ import annotations

from ..logging_config import log_structured_error
from .internal import (
    AlreadyConnectedError,
    AlreadyInRoom,
    InternalError,
    InvalidParameterError,
    MessageTooLong,
    NetworkError,
    NicknameInvalid,
    NotConnectedError,
    OutOfRange,
    ProtocolParseError,
    RoomNotJoined,
)

_STATE_ERRORS = (
    AlreadyConnectedError,
    AlreadyInRoom,
    NotConnectedError,
    RoomNotJoined,
)
_VALIDATION_ERRORS = (
    InvalidParameterError,
    MessageTooLong,
    NicknameInvalid,
    OutOfRange,
)


def classify_error(error: Exception) -> str:
    """Map an exception onto the error category used by structured logging."""
    if isinstance(error, NetworkError | OSError | ConnectionError):
        return "network"
    if isinstance(error, ProtocolParseError):
        return "protocol"
    if isinstance(error, _STATE_ERRORS):
        return "state"
    if isinstance(error, _VALIDATION_ERRORS):
        return "validation"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str, error: Exception, context: dict[str, object] | None = None
) -> None:
    """Logs an error message with the associated exception details.

    The error's own ``data`` mapping (for InternalError subclasses) is merged
    under the explicit context so both end up in the structured line.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    merged: dict[str, object] = {}
    if isinstance(error, InternalError):
        merged.update(error.data)
    if context:
        merged.update(context)
    log_structured_error(
        error_type=classify_error(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=merged or None,
    )
