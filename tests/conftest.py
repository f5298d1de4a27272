"""Shared fixtures: a scripted in-memory transport and ready-made sessions."""

from __future__ import annotations

from collections import deque

import pytest
import pytest_asyncio

from irclobby.config import LobbyConfig
from irclobby.errors import NetworkError
from irclobby.lobby import LobbySession


class FakeTransport:
    """Transport double that records traffic and replays scripted replies."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.sent: list[bytes] = []
        self.replies: deque[bytes | Exception] = deque()
        self.read_sizes: list[int] = []
        self.connected_to: tuple[str, int] | None = None
        self.connect_error: Exception | None = None
        self.disconnect_error: Exception | None = None
        self._send_errors: list[tuple[bytes, Exception]] = []

    @property
    def sent_lines(self) -> list[bytes]:
        return [line + b"\r\n" for line in b"".join(self.sent).split(b"\r\n") if line]

    def fail_send(self, prefix: bytes, error: Exception | None = None) -> None:
        """Make every send whose payload starts with ``prefix`` raise."""
        self._send_errors.append((prefix, error or NetworkError("send failed")))

    def queue_reply(self, line: str | bytes | Exception) -> None:
        if isinstance(line, str):
            line = (line + "\r\n").encode("utf-8")
        self.replies.append(line)

    def queue_topic(self, room_name: str, topic: str | None) -> None:
        if topic is None:
            self.queue_reply(f":irc.test 331 tester {room_name} :No topic is set")
        else:
            self.queue_reply(f":irc.test 332 tester {room_name} :{topic}")

    async def connect(self, host: str, port: int) -> None:
        self.calls.append("connect")
        if self.connect_error:
            raise self.connect_error
        self.connected_to = (host, port)

    async def send(self, data: bytes) -> None:
        self.calls.append("send")
        for prefix, error in self._send_errors:
            if data.startswith(prefix):
                raise error
        self.sent.append(data)

    async def read_line(self, max_bytes: int = 512) -> bytes:
        self.calls.append("read_line")
        self.read_sizes.append(max_bytes)
        if not self.replies:
            raise NetworkError("no scripted reply")
        reply = self.replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply[:max_bytes]

    async def disconnect(self) -> None:
        self.calls.append("disconnect")
        if self.disconnect_error:
            raise self.disconnect_error
        self.connected_to = None


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def lobby_config() -> LobbyConfig:
    return LobbyConfig(
        host="irc.test", port=6667, lobby_channel="#lobby", room_prefix="cruce"
    )


@pytest.fixture
def session(transport: FakeTransport, lobby_config: LobbyConfig) -> LobbySession:
    return LobbySession(transport, lobby_config)


@pytest_asyncio.fixture
async def connected_session(
    session: LobbySession, transport: FakeTransport
) -> LobbySession:
    """A session connected as 'alice' with the handshake traffic cleared."""
    await session.connect("alice")
    transport.sent.clear()
    transport.calls.clear()
    return session
