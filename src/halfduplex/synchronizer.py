from __future__ import annotations

import enum
import logging

from .constants import DEFAULT_CHUNK_SIZE
from .errors import Disconnected
from .session import SessionState, validate_chunk_size
from .transport import Transport

logger = logging.getLogger(__name__)


class SyncPhase(enum.Enum):
    AWAITING_ACK = "awaiting_ack"
    ACK_OBSERVED = "ack_observed"


class Synchronizer:
    """Reads everything the remote has sent since the last read.

    Sends ``IAC DO <ping option>`` and reads until the remote answers it. Most
    servers refuse an option they don't know right away, so by the time the
    answer arrives the output of the last command is usually already in front
    of it. This holds well for interactive programs but it is not a framing
    guarantee: a server that answers while its subprocess is still writing
    cuts the output short. A remote that never answers blocks ``read``
    forever.
    """

    def __init__(self, transport: Transport, state: SessionState, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.transport = transport
        self.state = state
        self.chunk_size = validate_chunk_size(chunk_size)

    @property
    def phase(self) -> SyncPhase:
        return SyncPhase.ACK_OBSERVED if self.state.got_pong else SyncPhase.AWAITING_ACK

    def read(self) -> bytes:
        self.state.got_pong = False
        logger.debug("ping: DO %d", self.state.ping_option)
        self.transport.request_option(self.state.ping_option)

        buffer = bytearray()
        while True:
            try:
                chunk = self.transport.recv(self.chunk_size)
            except InterruptedError:
                logger.debug("read interrupted; retrying")
                continue
            except EOFError as exc:
                raise Disconnected(f"Disconnected from server: {exc}") from exc
            except OSError as exc:
                raise Disconnected(f"Disconnected from server: {exc}", cause=exc) from exc

            buffer += chunk
            if self.phase is SyncPhase.ACK_OBSERVED:
                logger.debug("read complete; %d bytes", len(buffer))
                return bytes(buffer)
