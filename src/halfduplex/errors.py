from __future__ import annotations


class HalfDuplexError(Exception):
    pass


class ConfigurationError(HalfDuplexError, ValueError):
    pass


class Disconnected(HalfDuplexError, ConnectionError):
    """The stream ended before the remote answered the ping.

    ``cause`` holds the socket-level error, or ``None`` for an orderly close.
    """

    def __init__(self, message: str, cause: OSError | None = None):
        super().__init__(message)
        self.cause = cause
