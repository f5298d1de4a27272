"""
Protocol constants for the IRC lobby client

Hard protocol limits are fixed. Tunables can be overridden by setting an
environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Wire limits (RFC 1459 line length includes the trailing CRLF)
MAX_LINE_LENGTH = 512
LINE_TERMINATOR = "\r\n"
MAX_LOBBY_MESSAGE_LENGTH = 512

# Legacy IRC nickname length limit, enforced client-side
NICK_MIN_LENGTH = 1
NICK_MAX_LENGTH = 9

# Room channel numbering
ROOM_ID_MIN = 0
ROOM_ID_MAX = 999
ROOM_ID_DIGITS = 3

# Topic markers used to encode room status
TOPIC_FREE_MARKER = "no topic is set"
TOPIC_WAITING = "WAITING"
TOPIC_PLAYING = "PLAYING"

# Channel membership prefixes that may precede a nickname in a NAMES reply
NAMES_MEMBERSHIP_PREFIXES = "~&@%+"

# Defaults for injected configuration
DEFAULT_IRC_HOST = "localhost"
DEFAULT_IRC_PORT = 6667
DEFAULT_ROOM_PREFIX = "cruce"
DEFAULT_LOBBY_CHANNEL = "#cruce-lobby"

# Transport tunables
IRC_READ_LINE_MAX_BYTES = _get_env_int("IRC_READ_LINE_MAX_BYTES", MAX_LINE_LENGTH)
IRC_CONNECT_TIMEOUT = _get_env_float("IRC_CONNECT_TIMEOUT", 15.0)
IRC_READ_TIMEOUT = _get_env_float("IRC_READ_TIMEOUT", 30.0)

# Caller-side retry helper defaults
IRC_RETRY_MAX_ATTEMPTS = _get_env_int("IRC_RETRY_MAX_ATTEMPTS", 3)
IRC_RETRY_MAX_WAIT = _get_env_float("IRC_RETRY_MAX_WAIT", 30.0)
