from __future__ import annotations

import logging

from .codec import Negotiation
from .session import SessionState

logger = logging.getLogger(__name__)


class SignalDispatcher:
    """Negotiation callback installed on the transport.

    A negotiation for the ping option, whatever its command, is the pong: it
    marks the state and is still forwarded to the external handler. Returning
    ``None`` leaves the reply to the transport's default policy; ``b""``
    suppresses any reply.
    """

    def __init__(self, state: SessionState):
        self.state = state

    def on_signal(self, neg: Negotiation) -> bytes | None:
        handler = self.state.handler

        if neg.option == self.state.ping_option:
            if not self.state.got_pong:
                logger.debug("pong: %s", neg)
            self.state.got_pong = True
            if handler is None:
                return b""
            return handler(neg)

        if handler is None:
            return None
        return handler(neg)

    __call__ = on_signal
