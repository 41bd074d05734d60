from __future__ import annotations

import errno

import pytest

from halfduplex.codec import Negotiation, TelnetCommand
from halfduplex.dispatcher import SignalDispatcher
from halfduplex.errors import ConfigurationError, Disconnected
from halfduplex.session import SessionState
from halfduplex.synchronizer import Synchronizer, SyncPhase

EOF_ = object()


def pong(option=99):
    return Negotiation(TelnetCommand.WONT, option)


class ScriptedTransport:
    """Each recv plays one step: a list of data bytes and negotiations,
    an exception to raise, or EOF_."""

    def __init__(self, steps):
        self.steps = list(steps)
        self.negotiation_callback = None
        self.requested = []
        self.replies = []
        self.bufsizes = []

    def request_option(self, option):
        self.requested.append(option)

    def recv(self, bufsize=4096):
        self.bufsizes.append(bufsize)
        step = self.steps.pop(0)
        if step is EOF_:
            raise EOFError("connection closed by remote")
        if isinstance(step, BaseException):
            raise step
        data = b""
        for item in step:
            if isinstance(item, Negotiation):
                self.replies.append(self.negotiation_callback(item))
            else:
                data += item
        return data

    def send(self, data):
        pass

    def close(self):
        pass


def make(steps, option=99, chunk_size=4096):
    state = SessionState(option)
    transport = ScriptedTransport(steps)
    transport.negotiation_callback = SignalDispatcher(state)
    return Synchronizer(transport, state, chunk_size=chunk_size), transport, state


def test_immediate_pong_returns_empty():
    sync, transport, state = make([[pong()]])
    assert sync.read() == b""
    assert transport.requested == [99]
    assert state.got_pong is True
    assert sync.phase is SyncPhase.ACK_OBSERVED


def test_data_interleaved_with_signals():
    steps = [
        [b"hello "],
        [Negotiation(TelnetCommand.DO, 24), b"wor"],
        [Negotiation(TelnetCommand.WILL, 1)],
        [b"ld\r\n", Negotiation(TelnetCommand.DONT, 31)],
        [b"$ ", pong()],
    ]
    sync, transport, _ = make(steps)
    assert sync.read() == b"hello world\r\n$ "
    assert transport.steps == []
    # non-ping signals left to the transport default policy, ping reply suppressed
    assert transport.replies == [None, None, None, b""]


def test_stops_at_pong_and_leaves_rest_for_next_read():
    sync, transport, _ = make([[b"a", pong()], [b"b"], [pong()]])
    assert sync.read() == b"a"
    assert transport.steps == [[b"b"], [pong()]]
    assert sync.read() == b"b"


def test_uses_configured_option_and_chunk_size():
    sync, transport, _ = make([[pong(200)]], option=200, chunk_size=512)
    assert sync.read() == b""
    assert transport.requested == [200]
    assert transport.bufsizes == [512]


def test_other_option_is_not_a_pong():
    sync, _, _ = make([[pong(98), b"x"], [pong(99)]])
    assert sync.read() == b"x"


def test_interrupted_read_is_retried():
    sync, _, _ = make([[b"a"], InterruptedError(errno.EINTR, "interrupted"), [b"b", pong()]])
    assert sync.read() == b"ab"


def test_close_before_pong_raises():
    sync, _, state = make([[b"partial"], EOF_])
    with pytest.raises(Disconnected) as info:
        sync.read()
    assert info.value.cause is None
    assert isinstance(info.value.__cause__, EOFError)
    assert state.got_pong is False
    assert sync.phase is SyncPhase.AWAITING_ACK


def test_socket_error_before_pong_carries_cause():
    err = ConnectionResetError(errno.ECONNRESET, "reset by peer")
    sync, _, _ = make([[b"partial"], err])
    with pytest.raises(Disconnected) as info:
        sync.read()
    assert info.value.cause is err
    assert info.value.__cause__ is err


def test_consecutive_reads_are_independent():
    sync, transport, state = make([[b"one", pong()], [b"two"], [pong()]])
    assert sync.read() == b"one"
    assert state.got_pong is True

    # the previous cycle's pong must not end the next one early
    assert sync.read() == b"two"
    assert transport.requested == [99, 99]
    assert transport.steps == []


def test_flag_reset_before_ping_is_sent():
    state = SessionState(99)
    state.got_pong = True
    seen = []

    class Recording(ScriptedTransport):
        def request_option(self, option):
            seen.append(state.got_pong)
            super().request_option(option)

    transport = Recording([[pong()]])
    transport.negotiation_callback = SignalDispatcher(state)
    Synchronizer(transport, state).read()
    assert seen == [False]


def test_handler_error_propagates():
    sync, _, state = make([[pong()]])

    def boom(neg):
        raise RuntimeError("handler failed")

    state.set_handler(boom)
    with pytest.raises(RuntimeError):
        sync.read()


@pytest.mark.parametrize("size", [0, -1])
def test_rejects_non_positive_chunk_size(size):
    with pytest.raises(ConfigurationError):
        make([[pong()]], chunk_size=size)
