"""Centralized internal error hierarchy.

Every failure the lobby client surfaces is one of these exceptions. Nothing is
retried internally; callers decide what to do with each category.

Classes:
  InternalError          – Base for all internal errors.
  NetworkError           – Transport failure (connect, send, read, close).
  ProtocolParseError     – A received line could not be parsed.
  NicknameInvalid        – Nickname rejected before any transport call.
  MessageTooLong         – Outgoing text or wire line exceeds the limit.
  InvalidParameterError  – Outgoing parameter cannot be represented on the wire.
  OutOfRange             – Room id outside the legal range.
  RoomNotJoined          – Operation needs a joined room.
  AlreadyInRoom          – Operation needs the session to be outside any room.
  ToggleStatusError      – Room status has no successor.
  NoAvailableRoomError   – Discovery found no free room.
  UserNotInLobby         – Invite target is not present in the lobby.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for transport layer errors.

    Covers connection refusal, resets, timeouts and EOF while waiting for a
    reply. Never retried by the session itself.
    """


class DisconnectError(NetworkError):
    """Both the QUIT send and the physical close failed.

    Attributes:
        quit_error: Failure raised while sending QUIT.
        close_error: Failure raised while closing the transport.
    """

    def __init__(self, quit_error: Exception, close_error: Exception) -> None:
        super().__init__(
            f"QUIT failed ({quit_error}) and close failed ({close_error})",
            data={"quit_error": str(quit_error), "close_error": str(close_error)},
        )
        self.quit_error = quit_error
        self.close_error = close_error


class ParseFailure(Enum):
    EMPTY_LINE = "empty_line"
    MISSING_COMMAND = "missing_command"


class ProtocolParseError(InternalError):
    """Raised when a received line does not match the IRC message grammar.

    Attributes:
        reason: Which part of the grammar was violated.
        line: The offending raw line (after CRLF stripping).
    """

    def __init__(self, reason: ParseFailure, line: str = "") -> None:
        super().__init__(
            f"Cannot parse IRC line ({reason.value}): {line[:80]!r}",
            data={"reason": reason.value},
        )
        self.reason = reason
        self.line = line


class NicknameInvalid(InternalError):
    """Nickname rejected by client-side validation."""


class MessageTooLong(InternalError):
    """Outgoing message exceeds the allowed length."""


class InvalidParameterError(InternalError):
    """Outgoing command parameter cannot be encoded as a single IRC line."""


class OutOfRange(InternalError):
    """Room id is outside the legal range."""


class RoomNotJoined(InternalError):
    """Operation requires the session to be inside a room."""


class AlreadyInRoom(InternalError):
    """Operation requires the session to be outside any room."""


class NotConnectedError(InternalError):
    """Operation requires a connected session."""


class AlreadyConnectedError(InternalError):
    """connect() called on a session that is already connected."""


class ToggleStatusError(InternalError):
    """Room status cannot be toggled (free or unrecognised topic)."""


class NoAvailableRoomError(InternalError):
    """Room discovery exhausted every room id without finding a free one."""


class UserNotInLobby(InternalError):
    """Invite target nickname is not present in the lobby channel."""


class ConfigError(InternalError):
    """Configuration file could not be read or decoded."""


class RetryExhaustedError(InternalError):
    """Exception raised when all retry attempts have been exhausted."""

    def __init__(
        self, message: str, attempts: int, final_exception: Exception | None = None
    ) -> None:
        super().__init__(message, data={"attempts": attempts})
        self.attempts = attempts
        self.final_exception = final_exception


__all__ = [
    "InternalError",
    "NetworkError",
    "DisconnectError",
    "ParseFailure",
    "ProtocolParseError",
    "NicknameInvalid",
    "MessageTooLong",
    "InvalidParameterError",
    "OutOfRange",
    "RoomNotJoined",
    "AlreadyInRoom",
    "NotConnectedError",
    "AlreadyConnectedError",
    "ToggleStatusError",
    "NoAvailableRoomError",
    "UserNotInLobby",
    "ConfigError",
    "RetryExhaustedError",
]
