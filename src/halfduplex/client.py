from __future__ import annotations

import logging

from .constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONNECT_TIMEOUT_S,
    DEFAULT_PING_OPTION,
    DEFAULT_PORT,
)
from .dispatcher import SignalDispatcher
from .errors import Disconnected
from .session import SessionState, SignalHandler, validate_chunk_size
from .synchronizer import Synchronizer
from .transport import TelnetSocket, Transport

logger = logging.getLogger(__name__)


class HalfDuplexTelnet:
    """A telnet client whose ``read`` returns the whole reply to the last send.

        with HalfDuplexTelnet.connect("localhost") as tn:
            print(tn.read().decode())
            print(tn.command("ls").decode())

    See ``Synchronizer`` for how the end of the output is detected and why it
    is only a heuristic.
    """

    def __init__(
        self,
        transport: Transport,
        ping_option: int = DEFAULT_PING_OPTION,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.state = SessionState(ping_option)
        validate_chunk_size(chunk_size)
        self.transport = transport
        self.dispatcher = SignalDispatcher(self.state)
        self.transport.negotiation_callback = self.dispatcher
        self.synchronizer = Synchronizer(transport, self.state, chunk_size=chunk_size)
        self.closed = False

    @classmethod
    def connect(
        cls,
        host: str,
        port: int = DEFAULT_PORT,
        ping_option: int = DEFAULT_PING_OPTION,
        timeout: float = DEFAULT_CONNECT_TIMEOUT_S,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> "HalfDuplexTelnet":
        # validate before opening a socket that would otherwise leak
        SessionState(ping_option)
        validate_chunk_size(chunk_size)
        transport = TelnetSocket.connect(host, port, timeout=timeout)
        return cls(transport, ping_option=ping_option, chunk_size=chunk_size)

    @property
    def ping_option(self) -> int:
        return self.state.ping_option

    def set_handler(self, handler: SignalHandler | None) -> None:
        self.state.set_handler(handler)

    def _check_open(self) -> None:
        if self.closed:
            raise Disconnected("session is closed")

    def send(self, data: bytes | str) -> None:
        self._check_open()
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            self.transport.send(data)
        except OSError as exc:
            self.close()
            raise Disconnected(f"Disconnected from server: {exc}", cause=exc) from exc

    def read(self) -> bytes:
        self._check_open()
        try:
            return self.synchronizer.read()
        except Exception:
            # a failed cycle may have consumed part of the stream, pong included
            self.close()
            raise

    def command(self, line: bytes | str) -> bytes:
        if isinstance(line, str):
            line = line.encode("utf-8")
        self.send(line.rstrip(b"\r\n") + b"\r\n")
        return self.read()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.transport.close()
        logger.info("session closed")

    def __enter__(self) -> "HalfDuplexTelnet":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
