"""Lobby session: connection lifecycle, current room and command orchestration.

One session owns one transport connection. Requests are strictly sequential:
a query sends one command and then awaits exactly one reply line, so the
channel is assumed quiet between a request and its reply. The session is not
safe for concurrent use.

Multi-command operations are not atomic. If the handshake or the
create-room JOIN/TOPIC pair fails part way, nothing is rolled back and the
session state reflects the commands known to have been sent.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..config.model import LobbyConfig
from ..constants import (
    IRC_READ_LINE_MAX_BYTES,
    MAX_LOBBY_MESSAGE_LENGTH,
    NAMES_MEMBERSHIP_PREFIXES,
    NICK_MAX_LENGTH,
    NICK_MIN_LENGTH,
    TOPIC_WAITING,
)
from ..errors.handling import log_error
from ..errors.internal import (
    AlreadyConnectedError,
    AlreadyInRoom,
    DisconnectError,
    InternalError,
    InvalidParameterError,
    MessageTooLong,
    NetworkError,
    NicknameInvalid,
    NotConnectedError,
    OutOfRange,
    ProtocolParseError,
    RoomNotJoined,
    ToggleStatusError,
    UserNotInLobby,
)
from ..irc.models import ConnectionState, NamesScope, RoomStatus
from ..irc.parser import IRCMessage, encode_irc_message, parse_irc_message
from ..irc.transport import Transport
from ..logs.logger import logger
from .discovery import find_available_room
from .rooms import next_status, parse_topic_status

_NICK_FORBIDDEN = (" ", "\t", "\r", "\n", "\0")


def validate_nickname(nickname: str) -> str:
    """Check a nickname against the client-side rules.

    Raises:
        NicknameInvalid: length outside [1, 9], whitespace or control
            characters, or a leading ':' or '#'.
    """
    if not NICK_MIN_LENGTH <= len(nickname) <= NICK_MAX_LENGTH:
        raise NicknameInvalid(
            f"Nickname must be {NICK_MIN_LENGTH}-{NICK_MAX_LENGTH} characters, "
            f"got {len(nickname)}",
            data={"length": len(nickname)},
        )
    if any(ch in nickname for ch in _NICK_FORBIDDEN) or nickname[0] in ":#":
        raise NicknameInvalid(f"Nickname {nickname!r} contains forbidden characters")
    return nickname


class LobbySession:
    """Matchmaking session over a single IRC connection."""

    def __init__(self, transport: Transport, config: LobbyConfig | None = None) -> None:
        self.transport = transport
        self.config = config or LobbyConfig()
        self._nickname: str | None = None
        self._state = ConnectionState.DISCONNECTED
        self._current_room: int | None = None

    @property
    def nickname(self) -> str | None:
        return self._nickname

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def current_room(self) -> int | None:
        return self._current_room

    @property
    def current_room_name(self) -> str | None:
        if self._current_room is None:
            return None
        return self.config.room_name(self._current_room)

    async def __aenter__(self) -> LobbySession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc is None:
            await self.disconnect()
            return
        # The body's exception wins; a disconnect failure is already logged.
        try:
            await self.disconnect()
        except NetworkError:
            pass

    def _set_state(self, new_state: ConnectionState) -> None:
        if self._state is not new_state:
            logger.log_event(
                "irc",
                "state_change",
                level=logging.DEBUG,
                user=self._nickname,
                old_state=self._state.name,
                new_state=new_state.name,
            )
            self._state = new_state

    def _report(self, message: str, error: InternalError) -> InternalError:
        log_error(message, error, context={"user": self._nickname})
        return error

    def _require_connected(self) -> None:
        if self._state is not ConnectionState.CONNECTED:
            raise self._report(
                "Operation rejected", NotConnectedError("Session is not connected")
            )

    def _require_room(self) -> int:
        self._require_connected()
        if self._current_room is None:
            raise self._report(
                "Operation rejected", RoomNotJoined("Session has not joined a room")
            )
        return self._current_room

    def _require_no_room(self) -> None:
        if self._current_room is not None:
            raise self._report(
                "Operation rejected",
                AlreadyInRoom(
                    f"Already in room {self._current_room}",
                    data={"room_id": self._current_room},
                ),
            )

    def _room_name(self, room_id: int) -> str:
        try:
            return self.config.room_name(room_id)
        except OutOfRange as e:
            log_error("Invalid room id", e, context={"user": self._nickname})
            raise

    async def _send(
        self, command: str, params: Sequence[str] = (), trailing: str | None = None
    ) -> None:
        try:
            data = encode_irc_message(command, params, trailing)
        except (InvalidParameterError, MessageTooLong) as e:
            log_error(f"Cannot encode {command}", e, context={"user": self._nickname})
            raise
        logger.log_event(
            "irc",
            "send",
            level=logging.DEBUG,
            user=self._nickname,
            line=data.decode("utf-8", errors="replace").rstrip("\r\n"),
        )
        try:
            await self.transport.send(data)
        except NetworkError as e:
            log_error(f"Sending {command} failed", e, context={"user": self._nickname})
            raise

    async def _request(self, command: str, params: Sequence[str]) -> IRCMessage:
        await self._send(command, params)
        try:
            raw = await self.transport.read_line(IRC_READ_LINE_MAX_BYTES)
        except NetworkError as e:
            log_error(
                f"Reading reply to {command} failed", e, context={"user": self._nickname}
            )
            raise
        try:
            reply = parse_irc_message(raw)
        except ProtocolParseError as e:
            log_error(
                f"Reply to {command} is malformed", e, context={"user": self._nickname}
            )
            raise
        logger.log_event(
            "irc",
            "recv",
            level=logging.DEBUG,
            user=self._nickname,
            line=reply.raw,
            source=reply.nick,
        )
        return reply

    async def connect(self, nickname: str) -> None:
        """Open the transport, register and join the lobby.

        The four handshake commands go out in a single send.

        Raises:
            AlreadyConnectedError: The session is already connected.
            NicknameInvalid: Checked before any transport call.
            NetworkError: connect or send failed; the session stays disconnected.
        """
        if self._state is ConnectionState.CONNECTED:
            raise self._report(
                "Connect rejected",
                AlreadyConnectedError(f"Already connected as {self._nickname}"),
            )
        try:
            validate_nickname(nickname)
        except NicknameInvalid as e:
            log_error("Connect rejected", e, context={"user": nickname})
            raise
        handshake = b"".join(
            (
                encode_irc_message("PASS", ["*"]),
                encode_irc_message("NICK", [nickname]),
                encode_irc_message("USER", [nickname, "8", "*"], nickname),
                encode_irc_message("JOIN", [self.config.lobby_channel]),
            )
        )

        host, port = self.config.host, self.config.port
        logger.log_event("irc", "connect_start", user=nickname, host=host, port=port)
        try:
            await self.transport.connect(host, port)
        except NetworkError as e:
            log_error(
                f"Connecting to {host}:{port} failed", e, context={"user": nickname}
            )
            raise

        try:
            await self.transport.send(handshake)
        except NetworkError as e:
            log_error("Handshake send failed", e, context={"user": nickname})
            await self._close_quietly(nickname)
            raise

        self._nickname = nickname
        self._current_room = None
        self._set_state(ConnectionState.CONNECTED)
        logger.log_event(
            "irc", "connect_success", user=nickname, channel=self.config.lobby_channel
        )

    async def _close_quietly(self, nickname: str) -> None:
        # The handshake error is the one surfaced; a close failure is only logged.
        try:
            await self.transport.disconnect()
        except NetworkError as e:
            logger.log_event(
                "irc",
                "close_after_failure_failed",
                level=logging.WARNING,
                user=nickname,
                error=str(e),
            )

    async def disconnect(self) -> None:
        """Send QUIT (best effort) and always close the transport.

        The session is reset to disconnected whatever happens. Does nothing on
        a session that is not connected.

        Raises:
            NetworkError: Either QUIT or the close failed.
            DisconnectError: Both failed.
        """
        if self._state is ConnectionState.DISCONNECTED:
            return

        quit_error: NetworkError | None = None
        close_error: NetworkError | None = None
        try:
            await self._send("QUIT")
        except NetworkError as e:
            # Already logged by _send; the close is still attempted.
            quit_error = e
        try:
            await self.transport.disconnect()
        except NetworkError as e:
            close_error = e
            log_error("Closing transport failed", e, context={"user": self._nickname})

        nickname = self._nickname
        self._current_room = None
        self._set_state(ConnectionState.DISCONNECTED)
        self._nickname = None
        logger.log_event("irc", "disconnected", level=logging.INFO, user=nickname)

        if quit_error and close_error:
            raise DisconnectError(quit_error, close_error)
        if quit_error:
            raise quit_error
        if close_error:
            raise close_error

    async def join_room(self, room_id: int) -> None:
        """Join a room channel. The room's topic is left untouched.

        Raises:
            NotConnectedError, AlreadyInRoom, OutOfRange, NetworkError.
        """
        self._require_connected()
        self._require_no_room()
        room_name = self._room_name(room_id)
        await self._send("JOIN", [room_name])
        self._current_room = room_id
        logger.log_event(
            "room", "joined", user=self._nickname, channel=room_name, room_id=room_id
        )

    async def leave_room(self) -> None:
        """Part the current room.

        Raises:
            NotConnectedError, RoomNotJoined, NetworkError.
        """
        room_id = self._require_room()
        room_name = self._room_name(room_id)
        await self._send("PART", [room_name])
        self._current_room = None
        logger.log_event(
            "room", "left", user=self._nickname, channel=room_name, room_id=room_id
        )

    async def send_lobby_message(self, text: str) -> None:
        """Send a chat line to the lobby channel.

        Raises:
            NotConnectedError, MessageTooLong (text over 512 characters or the
            encoded line over 512 bytes), InvalidParameterError, NetworkError.
        """
        self._require_connected()
        if len(text) > MAX_LOBBY_MESSAGE_LENGTH:
            raise self._report(
                "Lobby message rejected",
                MessageTooLong(
                    f"Lobby message is {len(text)} characters, limit is "
                    f"{MAX_LOBBY_MESSAGE_LENGTH}",
                    data={"length": len(text)},
                ),
            )
        await self._send("PRIVMSG", [self.config.lobby_channel], text)
        logger.log_event(
            "lobby",
            "message_sent",
            level=logging.DEBUG,
            user=self._nickname,
            channel=self.config.lobby_channel,
            length=len(text),
        )

    async def query_room_status(self, room_id: int) -> RoomStatus:
        """Ask the server for a room's topic and classify it.

        UNKNOWN is a normal result: the reply carried no recognised marker.

        Raises:
            NotConnectedError, OutOfRange, NetworkError, ProtocolParseError.
        """
        self._require_connected()
        room_name = self._room_name(room_id)
        reply = await self._request("TOPIC", [room_name])
        status = parse_topic_status(reply.trailing or "")
        logger.log_event(
            "room",
            "status",
            level=logging.DEBUG,
            user=self._nickname,
            channel=room_name,
            room_id=room_id,
            status=status.value,
        )
        return status

    async def toggle_room_status(self, room_id: int) -> RoomStatus:
        """Flip a room between WAITING and PLAYING and return the new status.

        Raises:
            ToggleStatusError: The room is free or its topic is unrecognised.
            NotConnectedError, OutOfRange, NetworkError, ProtocolParseError.
        """
        current = await self.query_room_status(room_id)
        try:
            new_topic = next_status(current)
        except ToggleStatusError as e:
            log_error(
                f"Cannot toggle room {room_id}", e, context={"user": self._nickname}
            )
            raise
        room_name = self._room_name(room_id)
        await self._send("TOPIC", [room_name, new_topic])
        new_status = parse_topic_status(new_topic)
        logger.log_event(
            "room",
            "toggled",
            user=self._nickname,
            channel=room_name,
            room_id=room_id,
            status=new_status.value,
        )
        return new_status

    async def create_room(self) -> int:
        """Find a free room, join it and mark it WAITING. Returns the room id.

        If the JOIN goes out but the TOPIC send fails, the session stays in
        the room and the NetworkError propagates; the caller may retry the
        topic with set_room_waiting().

        Raises:
            AlreadyInRoom: Raised before any command is sent.
            NoAvailableRoomError, NotConnectedError, NetworkError,
            ProtocolParseError.
        """
        self._require_connected()
        self._require_no_room()
        room_id = await find_available_room(self)
        room_name = self._room_name(room_id)

        await self._send("JOIN", [room_name])
        self._current_room = room_id
        logger.log_event(
            "room", "joined", user=self._nickname, channel=room_name, room_id=room_id
        )

        try:
            await self._send("TOPIC", [room_name, TOPIC_WAITING])
        except NetworkError as e:
            logger.log_event(
                "room",
                "topic_set_failed",
                level=logging.WARNING,
                user=self._nickname,
                channel=room_name,
                room_id=room_id,
                error=str(e),
            )
            raise
        logger.log_event(
            "room", "created", user=self._nickname, channel=room_name, room_id=room_id
        )
        return room_id

    async def set_room_waiting(self) -> None:
        """Set the current room's topic to WAITING.

        Recovers from a create_room whose TOPIC send failed after the JOIN.

        Raises:
            NotConnectedError, RoomNotJoined, NetworkError.
        """
        room_id = self._require_room()
        await self._send("TOPIC", [self._room_name(room_id), TOPIC_WAITING])

    async def list_names(self, scope: NamesScope = NamesScope.LOBBY) -> list[str]:
        """Return the nicknames present in the lobby or the current room.

        Membership prefixes (``@``, ``+`` ...) are stripped.

        Raises:
            RoomNotJoined: scope is CURRENT_ROOM and no room is joined.
            NotConnectedError, NetworkError, ProtocolParseError.
        """
        if scope is NamesScope.CURRENT_ROOM:
            channel = self._room_name(self._require_room())
        else:
            self._require_connected()
            channel = self.config.lobby_channel

        reply = await self._request("NAMES", [channel])
        names = [
            token.lstrip(NAMES_MEMBERSHIP_PREFIXES)
            for token in (reply.trailing or "").split()
        ]
        names = [name for name in names if name]
        logger.log_event(
            "lobby",
            "names_listed",
            level=logging.DEBUG,
            user=self._nickname,
            channel=channel,
            scope=scope.name.lower(),
            count=len(names),
        )
        return names

    async def invite(self, nickname: str) -> None:
        """Invite a lobby member into the current room.

        The target must appear as an exact nickname in the lobby's NAMES list.

        Raises:
            RoomNotJoined, UserNotInLobby, NotConnectedError, NetworkError,
            ProtocolParseError.
        """
        room_id = self._require_room()
        lobby_names = await self.list_names(NamesScope.LOBBY)
        if nickname not in lobby_names:
            raise self._report(
                "Invite rejected",
                UserNotInLobby(
                    f"{nickname} is not in {self.config.lobby_channel}",
                    data={"target": nickname},
                ),
            )
        room_name = self._room_name(room_id)
        await self._send("INVITE", [nickname, room_name])
        logger.log_event(
            "lobby", "invite_sent", user=self._nickname, channel=room_name, target=nickname
        )
