"""Project logging package.

Contains internal logging utilities (event catalog + LobbyLogger). Avoid
importing stdlib logging through this package name externally.
"""

from .event_catalog import EVENT_TEMPLATES, reload_event_templates  # noqa: F401
from .logger import LobbyLogger, logger  # noqa: F401

__all__ = ["LobbyLogger", "logger", "EVENT_TEMPLATES", "reload_event_templates"]
