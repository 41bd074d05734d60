from __future__ import annotations

from typing import Callable, Optional

from .codec import Negotiation
from .constants import DEFAULT_PING_OPTION, PING_OPTION_MAX, PING_OPTION_MIN
from .errors import ConfigurationError

SignalHandler = Callable[[Negotiation], Optional[bytes]]


def validate_ping_option(option: object) -> int:
    if isinstance(option, bool) or not isinstance(option, int):
        raise ConfigurationError(f"invalid ping option: {option!r} (must be an integer)")
    if option < PING_OPTION_MIN or option > PING_OPTION_MAX:
        raise ConfigurationError(
            f"invalid ping option: {option} (must be {PING_OPTION_MIN}-{PING_OPTION_MAX})"
        )
    return option


def validate_chunk_size(size: object) -> int:
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ConfigurationError(f"invalid chunk size: {size!r} (must be a positive integer)")
    return size


class SessionState:
    """Per-connection state shared by the synchronizer and the dispatcher.

    ``got_pong`` is False from the start of a read cycle until the remote's
    reply to the ping option is seen, and True from then until the next cycle.
    """

    __slots__ = ("_ping_option", "got_pong", "handler")

    def __init__(self, ping_option: int = DEFAULT_PING_OPTION, handler: SignalHandler | None = None):
        self._ping_option = validate_ping_option(ping_option)
        self.got_pong = False
        self.handler = handler

    @property
    def ping_option(self) -> int:
        return self._ping_option

    def set_handler(self, handler: SignalHandler | None) -> None:
        self.handler = handler

    def __repr__(self) -> str:
        return f"SessionState(ping_option={self._ping_option}, got_pong={self.got_pong})"
