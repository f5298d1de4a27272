"""IRC message parsing and encoding.

Grammar handled here::

    message = [":" prefix SPACE] command [" " params] [" :" trailing] CRLF

Parsing is lenient (missing CRLF, repeated spaces and oversized lines are
accepted); encoding is strict and enforces the 512-byte line limit.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..constants import LINE_TERMINATOR, MAX_LINE_LENGTH
from ..errors.internal import (
    InvalidParameterError,
    MessageTooLong,
    ParseFailure,
    ProtocolParseError,
)

_FORBIDDEN_CHARS = ("\r", "\n", "\0")


@dataclass
class IRCMessage:
    command: str
    params: list[str] = field(default_factory=list)
    trailing: str | None = None
    prefix: str | None = None
    raw: str = ""

    @property
    def nick(self) -> str | None:
        """Nickname part of a ``nick!user@host`` prefix."""
        if self.prefix is None:
            return None
        return self.prefix.split("!", 1)[0]


def _strip_terminator(raw_line: str) -> str:
    if raw_line.endswith("\r\n"):
        return raw_line[:-2]
    if raw_line.endswith("\n"):
        return raw_line[:-1]
    return raw_line


def parse_irc_message(raw_line: str | bytes) -> IRCMessage:
    """Parse one received IRC line into an IRCMessage.

    Total over every input: any string either parses or raises
    ProtocolParseError. Bytes are decoded as UTF-8 with replacement.

    Raises:
        ProtocolParseError: EMPTY_LINE when nothing remains after stripping the
            line terminator, MISSING_COMMAND when no command token is present.
    """
    if isinstance(raw_line, bytes):
        raw_line = raw_line.decode("utf-8", errors="replace")

    line = _strip_terminator(raw_line)
    if not line:
        raise ProtocolParseError(ParseFailure.EMPTY_LINE, line)

    prefix: str | None = None
    rest = line
    if rest.startswith(":"):
        space = rest.find(" ")
        if space == -1:
            raise ProtocolParseError(ParseFailure.MISSING_COMMAND, line)
        prefix = rest[1:space]
        rest = rest[space + 1 :]

    tokens: list[str] = []
    trailing: str | None = None
    pos = 0
    while pos < len(rest):
        if rest[pos] == " ":
            pos += 1
            continue
        if rest[pos] == ":":
            trailing = rest[pos + 1 :]
            break
        end = rest.find(" ", pos)
        if end == -1:
            end = len(rest)
        tokens.append(rest[pos:end])
        pos = end

    if not tokens:
        raise ProtocolParseError(ParseFailure.MISSING_COMMAND, line)

    return IRCMessage(
        command=tokens[0],
        params=tokens[1:],
        trailing=trailing,
        prefix=prefix,
        raw=line,
    )


def _check_wire_safe(value: str, what: str) -> None:
    if any(ch in value for ch in _FORBIDDEN_CHARS):
        raise InvalidParameterError(
            f"{what} contains a line break or NUL", data={"value": value[:40]}
        )


def encode_irc_message(
    command: str, params: Sequence[str] = (), trailing: str | None = None
) -> bytes:
    """Serialize a command into one CRLF-terminated wire line.

    Raises:
        InvalidParameterError: A component contains CR, LF or NUL, or a middle
            parameter is empty, contains a space or starts with ':'.
        MessageTooLong: Encoded line (including CRLF) exceeds 512 bytes.
    """
    if not command or " " in command:
        raise InvalidParameterError(
            "command must be a single non-empty token", data={"command": command}
        )
    _check_wire_safe(command, "command")
    for param in params:
        _check_wire_safe(param, "parameter")
        if not param or " " in param or param.startswith(":"):
            raise InvalidParameterError(
                f"middle parameter {param!r} must be a non-empty token not starting with ':'",
                data={"command": command},
            )

    parts = [command, *params]
    line = " ".join(parts)
    if trailing is not None:
        _check_wire_safe(trailing, "trailing parameter")
        line = f"{line} :{trailing}"

    data = (line + LINE_TERMINATOR).encode("utf-8")
    if len(data) > MAX_LINE_LENGTH:
        raise MessageTooLong(
            f"{command} line is {len(data)} bytes, limit is {MAX_LINE_LENGTH}",
            data={"command": command, "length": len(data)},
        )
    return data
