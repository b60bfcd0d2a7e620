import socket
from unittest.mock import patch

import pytest

from tinymovr_can.socketcan import (
    CAN_EFF_FLAG,
    CAN_EFF_MASK,
    CanFrame,
    SocketCan,
    SocketCanError,
    SocketCanStatus,
    SocketMode,
    can_dlc2len,
    can_len2dlc,
    pack_frame,
    unpack_frame,
)


class FakeSocket:
    def __init__(self, *args):
        self.args = args
        self.options = {}
        self.bound = None
        self.sent = []
        self.incoming = []
        self.closed = False

    def setsockopt(self, level, option, value):
        self.options[(level, option)] = value

    def bind(self, address):
        self.bound = address

    def send(self, data):
        self.sent.append(bytes(data))
        return len(data)

    def recv(self, size):
        if not self.incoming:
            raise BlockingIOError("timed out")
        return self.incoming.pop(0)

    def close(self):
        self.closed = True


@pytest.fixture
def opened():
    fakes = []

    def factory(*args):
        fake = FakeSocket(*args)
        fakes.append(fake)
        return fake

    with patch("socket.socket", side_effect=factory), patch(
        "socket.if_nametoindex", return_value=3
    ):
        can = SocketCan()
        can.open("vcan0", 5)
        yield can, fakes[0]
        can.close()


def test_status_values():
    error = SocketCanError(SocketCanStatus.BIND_ERROR, "bind failed")
    assert error.status == 1 << 9
    assert SocketCanStatus(1) is SocketCanStatus.OK


def test_dlc_tables():
    assert can_dlc2len(9) == 12
    assert can_dlc2len(15) == 64
    assert can_len2dlc(13) == 10
    assert can_len2dlc(65) == 0xF


@pytest.mark.parametrize("length", range(65))
def test_dlc_round_trip_covers_length(length):
    padded = can_dlc2len(can_len2dlc(length))
    assert padded >= length
    assert can_len2dlc(padded) == can_len2dlc(length)


def test_pack_sizes_follow_mode():
    frame = CanFrame(0x10, b"\x01\x02")
    assert len(pack_frame(frame, SocketMode.CAN_MTU)) == SocketMode.CAN_MTU
    assert len(pack_frame(frame, SocketMode.CANFD_MTU)) == SocketMode.CANFD_MTU


def test_extended_flag_set_for_long_ids():
    frame = unpack_frame(pack_frame(CanFrame(0x800, b"")))
    assert frame.id & CAN_EFF_FLAG
    assert frame.id & CAN_EFF_MASK == 0x800


def test_standard_id_round_trip():
    frame = CanFrame(0x123, b"\x01\x02\x03", 0)
    assert unpack_frame(pack_frame(frame)) == frame


def test_fd_length_is_padded():
    frame = CanFrame(0x20, bytes(range(9)))
    back = unpack_frame(pack_frame(frame, SocketMode.CANFD_MTU))
    assert back.length == can_dlc2len(can_len2dlc(9))
    assert back.data[:9] == frame.data


def test_unpack_wrong_size_raises():
    with pytest.raises(SocketCanError) as info:
        unpack_frame(b"\x00" * 10)
    assert info.value.status is SocketCanStatus.READ_ERROR


def test_frame_too_long_rejected():
    with pytest.raises(ValueError):
        CanFrame(1, bytes(65))


def test_write_when_closed_raises():
    with pytest.raises(SocketCanError) as info:
        SocketCan().write(CanFrame(1, b""))
    assert info.value.status is SocketCanStatus.WRITE_ERROR


def test_read_when_closed_raises():
    with pytest.raises(SocketCanError) as info:
        SocketCan().read()
    assert info.value.status is SocketCanStatus.READ_ERROR


def test_open_binds_interface(opened):
    can, fake = opened
    assert fake.bound == ("vcan0",)
    assert can.interface_name == "vcan0"


def test_write_sends_packed_frame(opened):
    can, fake = opened
    frame = CanFrame(0x123, b"\x01\x02")
    can.write(frame)
    assert fake.sent == [pack_frame(frame, SocketMode.CAN_MTU)]


def test_read_returns_frame(opened):
    can, fake = opened
    frame = CanFrame(0x55, b"\x0a\x0b")
    fake.incoming.append(pack_frame(frame))
    assert can.read() == frame


def test_read_timeout_raises(opened):
    can, _fake = opened
    with pytest.raises(SocketCanError) as info:
        can.read()
    assert info.value.status is SocketCanStatus.READ_ERROR


def test_open_unknown_interface_raises():
    with patch("socket.socket", side_effect=FakeSocket), patch(
        "socket.if_nametoindex", side_effect=OSError("no such device")
    ):
        with pytest.raises(SocketCanError) as info:
            SocketCan().open("missing0")
    assert info.value.status is SocketCanStatus.INTERFACE_NAME_TO_IDX_ERROR


def test_context_manager_closes():
    fakes = []

    def factory(*args):
        fakes.append(FakeSocket(*args))
        return fakes[-1]

    socket_can = SocketCan()
    with patch("socket.socket", side_effect=factory), patch(
        "socket.if_nametoindex", return_value=3
    ):
        with socket_can as entered:
            entered.open("vcan0")
    assert entered is socket_can
    assert fakes[0].closed is True