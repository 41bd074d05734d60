from __future__ import annotations

import logging
import socket
from typing import Callable, Optional, Protocol

from .codec import (
    Command,
    Negotiation,
    Subnegotiation,
    TelnetCommand,
    TelnetDecoder,
    escape,
)
from .constants import DEFAULT_CHUNK_SIZE, DEFAULT_CONNECT_TIMEOUT_S

logger = logging.getLogger(__name__)

NegotiationCallback = Callable[[Negotiation], Optional[bytes]]


class Transport(Protocol):
    """What the synchronizer needs from the byte stream.

    ``recv`` returns data-channel bytes only, possibly empty when a chunk held
    nothing but telnet signals. Signals found in the chunk go to
    ``negotiation_callback`` before ``recv`` returns. An orderly close raises
    ``EOFError``; socket failures raise ``OSError``.
    """

    negotiation_callback: NegotiationCallback | None

    def request_option(self, option: int) -> None: ...

    def recv(self, bufsize: int = DEFAULT_CHUNK_SIZE) -> bytes: ...

    def send(self, data: bytes) -> None: ...

    def close(self) -> None: ...


class TelnetSocket:
    def __init__(self, sock: socket.socket, negotiation_callback: NegotiationCallback | None = None):
        self.sock = sock
        self.negotiation_callback = negotiation_callback
        self.decoder = TelnetDecoder()

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        timeout: float = DEFAULT_CONNECT_TIMEOUT_S,
        negotiation_callback: NegotiationCallback | None = None,
    ) -> "TelnetSocket":
        sock = socket.create_connection((host, port), timeout=timeout)
        # reads block until the remote answers; no timeout past connect
        sock.settimeout(None)
        logger.info("connected to %s:%d", host, port)
        return cls(sock, negotiation_callback)

    def send(self, data: bytes) -> None:
        self.sock.sendall(escape(data))

    def _negotiate(self, command: TelnetCommand, option: int) -> None:
        neg = Negotiation(command, option)
        logger.debug("sent %s", neg)
        self.sock.sendall(neg.to_bytes())

    def do(self, option: int) -> None:
        self._negotiate(TelnetCommand.DO, option)

    def dont(self, option: int) -> None:
        self._negotiate(TelnetCommand.DONT, option)

    def will(self, option: int) -> None:
        self._negotiate(TelnetCommand.WILL, option)

    def wont(self, option: int) -> None:
        self._negotiate(TelnetCommand.WONT, option)

    def request_option(self, option: int) -> None:
        self.do(option)

    def recv(self, bufsize: int = DEFAULT_CHUNK_SIZE) -> bytes:
        raw = self.sock.recv(bufsize)
        if raw == b"":
            raise EOFError("connection closed by remote")

        data, events = self.decoder.feed(raw)
        for event in events:
            if isinstance(event, Negotiation):
                self._handle_negotiation(event)
            elif isinstance(event, Subnegotiation):
                logger.debug("ignoring subnegotiation for option %d (%d bytes)", event.option, len(event.payload))
            elif isinstance(event, Command):
                logger.debug("ignoring command %s", event.command.name)
        return data

    def _handle_negotiation(self, neg: Negotiation) -> None:
        logger.debug("received %s", neg)
        reply: bytes | None = None
        if self.negotiation_callback is not None:
            reply = self.negotiation_callback(neg)

        if reply is None:
            refusal = neg.refusal()
            if refusal is None:
                return
            logger.debug("sent %s", refusal)
            reply = refusal.to_bytes()

        if reply:
            self.sock.sendall(reply)

    def close(self) -> None:
        self.sock.close()
