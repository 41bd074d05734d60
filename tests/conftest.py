from __future__ import annotations

import socket
import threading

import pytest

from halfduplex.transport import TelnetSocket

CLOSE = object()


class FakeRemote(threading.Thread):
    """Telnet server stand-in: answers each ``IAC DO <option>`` with the next
    scripted reply followed by ``IAC WONT <option>``. A ``CLOSE`` entry hangs
    up instead."""

    def __init__(self, sock: socket.socket, replies, option: int = 99):
        super().__init__(daemon=True)
        self.sock = sock
        self.replies = list(replies)
        self.ping = bytes((255, 253, option))
        self.pong = bytes((255, 252, option))
        self.received = bytearray()

    def run(self) -> None:
        pending = b""
        try:
            while self.replies:
                chunk = self.sock.recv(4096)
                if not chunk:
                    return
                self.received += chunk
                pending += chunk
                while self.replies and self.ping in pending:
                    pending = pending.split(self.ping, 1)[1]
                    reply = self.replies.pop(0)
                    if reply is CLOSE:
                        self.sock.close()
                        return
                    self.sock.sendall(reply + self.pong)
        except OSError:
            return

    @property
    def data_received(self) -> bytes:
        return bytes(self.received).replace(self.ping, b"")


@pytest.fixture
def fake_remote():
    socks = []

    def start(replies, option: int = 99):
        local, remote = socket.socketpair()
        local.settimeout(5)
        remote.settimeout(5)
        socks.extend([local, remote])
        server = FakeRemote(remote, replies, option)
        server.start()
        return TelnetSocket(local), server

    yield start
    for s in socks:
        s.close()
