"""Half-duplex reads over an interactive telnet session.

Telnet gives no way to tell when the remote has finished answering. This
package estimates it by sending an unknown option request (the "ping") after
each command and reading until the remote refuses it (the "pong"):
- ``codec``: telnet command framing, IAC escaping, incremental decoding
- ``transport``: the socket side, with a refuse-everything negotiation policy
- ``dispatcher`` / ``synchronizer``: ping/pong detection and the read loop
- ``client``: the user-facing session
"""

from .client import HalfDuplexTelnet
from .codec import Negotiation, TelnetCommand
from .errors import ConfigurationError, Disconnected, HalfDuplexError

__all__ = [
    "ConfigurationError",
    "Disconnected",
    "HalfDuplexError",
    "HalfDuplexTelnet",
    "Negotiation",
    "TelnetCommand",
]
