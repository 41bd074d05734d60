from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from .constants import (
    AO,
    AYT,
    BRK,
    DM,
    DO,
    DONT,
    EC,
    EL,
    GA,
    IAC,
    IP,
    NOP,
    SB,
    SE,
    WILL,
    WONT,
)


class TelnetCommand(enum.IntEnum):
    SE = SE
    NOP = NOP
    DM = DM
    BRK = BRK
    IP = IP
    AO = AO
    AYT = AYT
    EC = EC
    EL = EL
    GA = GA
    SB = SB
    WILL = WILL
    WONT = WONT
    DO = DO
    DONT = DONT


_REFUSALS = {
    TelnetCommand.DO: TelnetCommand.WONT,
    TelnetCommand.WILL: TelnetCommand.DONT,
}


@dataclass(frozen=True, slots=True)
class Negotiation:
    command: TelnetCommand
    option: int

    def __str__(self) -> str:
        return f"{self.command.name} {self.option}"

    def to_bytes(self) -> bytes:
        return bytes((IAC, int(self.command), self.option))

    def refusal(self) -> "Negotiation | None":
        """Reply that declines this request, or None if no reply is due."""
        reply = _REFUSALS.get(self.command)
        if reply is None:
            return None
        return Negotiation(reply, self.option)


@dataclass(frozen=True, slots=True)
class Command:
    command: TelnetCommand

    def to_bytes(self) -> bytes:
        return bytes((IAC, int(self.command)))


@dataclass(frozen=True, slots=True)
class Subnegotiation:
    option: int
    payload: bytes = b""

    def to_bytes(self) -> bytes:
        return bytes((IAC, SB, self.option)) + escape(self.payload) + bytes((IAC, SE))


TelnetEvent = Union[Negotiation, Command, Subnegotiation]


def escape(data: bytes) -> bytes:
    return data.replace(b"\xff", b"\xff\xff")


@dataclass(slots=True)
class TelnetDecoder:
    """Splits a raw telnet stream into data-channel bytes and telnet events.

    Sequences cut by a chunk boundary are held back until the next ``feed``.
    """

    _pending: bytes = field(default=b"", repr=False)

    def feed(self, chunk: bytes) -> Tuple[bytes, List[TelnetEvent]]:
        raw = self._pending + chunk
        self._pending = b""

        data = bytearray()
        events: List[TelnetEvent] = []
        i = 0
        n = len(raw)
        while i < n:
            byte = raw[i]
            if byte != IAC:
                data.append(byte)
                i += 1
                continue

            if i + 1 >= n:
                self._pending = raw[i:]
                break
            cmd = raw[i + 1]

            if cmd == IAC:
                data.append(IAC)
                i += 2
                continue

            if cmd in (DO, DONT, WILL, WONT):
                if i + 2 >= n:
                    self._pending = raw[i:]
                    break
                events.append(Negotiation(TelnetCommand(cmd), raw[i + 2]))
                i += 3
                continue

            if cmd == SB:
                end = _find_se(raw, i + 2)
                if end == -1:
                    self._pending = raw[i:]
                    break
                body = raw[i + 2 : end].replace(b"\xff\xff", b"\xff")
                if body:
                    events.append(Subnegotiation(body[0], body[1:]))
                i = end + 2
                continue

            # bytes below SE are not commands; the pair is dropped
            if cmd >= SE:
                events.append(Command(TelnetCommand(cmd)))
            i += 2

        return bytes(data), events

    @property
    def pending(self) -> bytes:
        return self._pending


def _find_se(raw: bytes, start: int) -> int:
    # IAC SE terminates, IAC IAC is an escaped data byte inside the block
    i = start
    n = len(raw)
    while i < n - 1:
        if raw[i] == IAC:
            if raw[i + 1] == SE:
                return i
            i += 2
            continue
        i += 1
    return -1
