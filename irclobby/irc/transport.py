"""Line transport used by the lobby session.

The session only depends on the ``Transport`` protocol; ``AsyncioTransport``
is the stock TCP implementation on asyncio streams.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ..constants import IRC_CONNECT_TIMEOUT, IRC_READ_LINE_MAX_BYTES, IRC_READ_TIMEOUT
from ..errors.internal import NetworkError
from ..logs.logger import logger


class Transport(Protocol):
    """Capability the session needs from the network layer.

    Every method raises NetworkError on failure.
    """

    async def connect(self, host: str, port: int) -> None:
        """Open the connection."""
        ...

    async def send(self, data: bytes) -> None:
        """Write all bytes to the connection."""
        ...

    async def read_line(self, max_bytes: int = IRC_READ_LINE_MAX_BYTES) -> bytes:
        """Return one line including its terminator, at most max_bytes long."""
        ...

    async def disconnect(self) -> None:
        """Close the connection."""
        ...


class AsyncioTransport:
    """TCP transport built on asyncio streams with per-call timeouts."""

    def __init__(
        self,
        connect_timeout: float = IRC_CONNECT_TIMEOUT,
        read_timeout: float = IRC_READ_TIMEOUT,
    ) -> None:
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

    @property
    def is_open(self) -> bool:
        return self.writer is not None

    async def connect(self, host: str, port: int) -> None:
        if self.writer is not None:
            raise NetworkError("Transport is already connected")
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=self.connect_timeout
            )
        except TimeoutError as e:
            raise NetworkError(
                f"Timed out connecting to {host}:{port}",
                data={"host": host, "port": port, "timeout": self.connect_timeout},
            ) from e
        except OSError as e:
            raise NetworkError(
                f"Cannot connect to {host}:{port}: {e}",
                data={"host": host, "port": port},
            ) from e
        logger.log_event(
            "irc", "transport_open", level=logging.DEBUG, host=host, port=port
        )

    async def send(self, data: bytes) -> None:
        if self.writer is None:
            raise NetworkError("Transport is not connected")
        try:
            self.writer.write(data)
            await self.writer.drain()
        except OSError as e:
            raise NetworkError(f"Send failed: {e}") from e

    async def read_line(self, max_bytes: int = IRC_READ_LINE_MAX_BYTES) -> bytes:
        if self.reader is None:
            raise NetworkError("Transport is not connected")
        try:
            line = await asyncio.wait_for(
                self.reader.readline(), timeout=self.read_timeout
            )
        except TimeoutError as e:
            raise NetworkError(
                "Timed out waiting for a reply line",
                data={"timeout": self.read_timeout},
            ) from e
        except (OSError, ValueError) as e:
            # ValueError: line longer than the stream buffer limit
            raise NetworkError(f"Read failed: {e}") from e
        if not line:
            raise NetworkError("Connection closed by server")
        return line[:max_bytes]

    async def disconnect(self) -> None:
        writer = self.writer
        self.writer = None
        self.reader = None
        if writer is None:
            return
        try:
            writer.close()
            await writer.wait_closed()
        except OSError as e:
            raise NetworkError(f"Close failed: {e}") from e
        logger.log_event("irc", "transport_closed", level=logging.DEBUG)
