import pytest

from tinymovr_can.protocol import ValueType, arbitration_id, encode
from tinymovr_can.watchdog import Watchdog


class FakeBus:
    def __init__(self, node_id=2, replies=None):
        self.node_id = node_id
        self.replies = dict(replies or {})
        self.sent = []
        self.pending = []

    def send(self, arb_id, data, rtr):
        self.sent.append((arb_id, data, rtr))
        if rtr:
            for endpoint, payload in self.replies.items():
                if arbitration_id(self.node_id, endpoint) == arb_id:
                    self.pending.append((arb_id, payload))

    def recv(self):
        return self.pending.pop(0) if self.pending else None

    def delay(self, us):
        pass

    def watchdog(self):
        return Watchdog(self.node_id, self.send, self.recv, self.delay, 0)


def test_enable_writes_single_byte():
    bus = FakeBus()
    bus.watchdog().enabled = True
    assert bus.sent == [(arbitration_id(2, 94), b"\x01", False)]


def test_disable_writes_zero_byte():
    bus = FakeBus()
    bus.watchdog().enabled = False
    assert bus.sent == [(arbitration_id(2, 94), b"\x00", False)]


def test_enabled_read():
    bus = FakeBus(replies={94: b"\x01"})
    wd = Watchdog(2, bus.send, bus.recv, bus.delay, 0)
    assert wd.enabled is True
    assert bus.sent == [(arbitration_id(2, 94), b"", True)]


def test_triggered_read_only():
    bus = FakeBus(replies={95: b"\x01"})
    wd = Watchdog(2, bus.send, bus.recv, bus.delay, 0)
    assert wd.triggered is True
    with pytest.raises(AttributeError):
        wd.triggered = False


def test_timeout_roundtrip():
    bus = FakeBus(replies={96: encode(ValueType.FLOAT, 0.5)})
    wd = bus.watchdog()
    assert wd.timeout == 0.5
    wd.timeout = 1.5
    assert bus.sent[-1] == (arbitration_id(2, 96), encode(ValueType.FLOAT, 1.5), False)


def test_missing_reply_gives_false():
    bus = FakeBus()
    wd = Watchdog(2, bus.send, bus.recv, bus.delay, 0)
    assert wd.triggered is False
    assert bus.sent == [(arbitration_id(2, 95), b"", True)]