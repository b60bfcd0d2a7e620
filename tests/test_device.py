import pytest

from tinymovr_can.device import (
    PROTOCOL_HASH,
    ControllerMode,
    ControllerState,
    Errors,
    Tinymovr,
    Warnings,
)
from tinymovr_can.protocol import ValueType, arbitration_id, encode


class FakeBus:
    def __init__(self, node_id=1, replies=None):
        self.node_id = node_id
        self.replies = dict(replies or {})
        self.sent = []
        self.pending = []
        self.delays = []

    def send(self, arb_id, data, rtr):
        self.sent.append((arb_id, data, rtr))
        if rtr:
            for endpoint, payload in self.replies.items():
                if arbitration_id(self.node_id, endpoint) == arb_id:
                    self.pending.append((arb_id, payload))

    def recv(self):
        return self.pending.pop(0) if self.pending else None

    def delay(self, us):
        self.delays.append(us)

    def device(self, delay_us=0):
        return Tinymovr(self.node_id, self.send, self.recv, self.delay, delay_us)


def test_protocol_hash_matches_constant():
    bus = FakeBus(replies={0: encode(ValueType.UINT32, 641680925)})
    assert bus.device().protocol_hash == PROTOCOL_HASH


def test_protocol_hash_read_only():
    bus = FakeBus()
    tm = Tinymovr(1, bus.send, bus.recv, bus.delay, 0)
    with pytest.raises(AttributeError):
        tm.protocol_hash = 1
    assert bus.sent == []


@pytest.mark.parametrize("name,endpoint", [("uid", 1), ("hw_revision", 3), ("config_size", 15)])
def test_uint32_attributes(name, endpoint):
    bus = FakeBus(replies={endpoint: encode(ValueType.UINT32, 4242)})
    assert getattr(bus.device(), name) == 4242
    assert bus.sent == [(arbitration_id(1, endpoint), b"", True)]


@pytest.mark.parametrize("name,endpoint", [("Vbus", 4), ("Ibus", 5), ("power", 6), ("temp", 7)])
def test_float_attributes(name, endpoint):
    bus = FakeBus(replies={endpoint: encode(ValueType.FLOAT, 24.5)})
    assert getattr(bus.device(), name) == 24.5


def test_calibrated_and_flags():
    bus = FakeBus(
        replies={
            8: b"\x01",
            9: encode(ValueType.UINT8, Errors.UNDERVOLTAGE),
            10: encode(ValueType.UINT8, Warnings.DRIVER_FAULT | Warnings.DRV54_DISABLE),
        }
    )
    tm = bus.device()
    assert tm.calibrated is True
    assert Errors(tm.errors) == Errors.UNDERVOLTAGE
    warnings = Warnings(tm.warnings)
    assert Warnings.DRV54_DISABLE in warnings
    assert Warnings.CHARGE_PUMP_FAULT not in warnings


def test_fw_version_string():
    bus = FakeBus(replies={2: b"2.1.0"})
    tm = Tinymovr(1, bus.send, bus.recv, bus.delay, 0)
    assert tm.fw_version == "2.1.0"
    assert bus.sent == [(arbitration_id(1, 2), b"", True)]


def test_fw_version_without_reply():
    bus = FakeBus()
    tm = Tinymovr(1, bus.send, bus.recv, bus.delay, 0)
    assert tm.fw_version == ""


@pytest.mark.parametrize(
    "method,endpoint",
    [("save_config", 11), ("erase_config", 12), ("reset", 13), ("enter_dfu", 14)],
)
def test_commands_send_remote_requests(method, endpoint):
    bus = FakeBus()
    getattr(bus.device(), method)()
    assert bus.sent == [(arbitration_id(1, endpoint), b"", True)]


def test_subsystems_reach_same_device():
    bus = FakeBus(node_id=7, replies={18: encode(ValueType.UINT8, ControllerState.CL_CONTROL)})
    tm = bus.device()
    assert tm.controller.state == ControllerState.CL_CONTROL
    tm.controller.mode = ControllerMode.POSITION
    assert bus.sent[-1] == (arbitration_id(7, 19), encode(ValueType.UINT8, 2), False)
    for sub in (tm.scheduler, tm.comms, tm.motor, tm.sensors, tm.traj_planner, tm.homing, tm.watchdog):
        assert sub.can_node_id == 7


def test_nested_sensor_endpoint():
    bus = FakeBus(replies={55: encode(ValueType.FLOAT, 8192.0)})
    assert bus.device().sensors.user_frame.position_estimate == 8192.0


def test_delay_value_used_for_replies():
    bus = FakeBus(replies={1: encode(ValueType.UINT32, 99)})
    assert bus.device(delay_us=300).uid == 99
    assert bus.delays == [300]


def test_option_values_fixed_by_protocol():
    bus = FakeBus(node_id=3)
    tm = Tinymovr(3, bus.send, bus.recv, bus.delay, 0)
    tm.controller.state = ControllerState.CL_CONTROL
    tm.controller.mode = ControllerMode.HOMING
    assert bus.sent == [
        (arbitration_id(3, 18), b"\x02", False),
        (arbitration_id(3, 19), b"\x04", False),
    ]