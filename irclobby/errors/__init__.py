"""Error taxonomy and structured error reporting."""

from .handling import classify_error, log_error  # noqa: F401
from .internal import *  # noqa: F401,F403
from .internal import __all__ as _internal_all

__all__ = [*_internal_all, "classify_error", "log_error"]
