"""Raw SocketCAN access with classic and flexible data-rate frames."""

from __future__ import annotations

import enum
import socket
import struct
from dataclasses import dataclass
from typing import Optional

CAN_EFF_FLAG = 0x80000000
CAN_RTR_FLAG = 0x40000000
CAN_ERR_FLAG = 0x20000000
CAN_EFF_MASK = 0x1FFFFFFF

_AF_CAN = getattr(socket, "AF_CAN", 29)
_CAN_RAW = getattr(socket, "CAN_RAW", 1)
_SOL_CAN_RAW = getattr(socket, "SOL_CAN_RAW", 101)
_CAN_RAW_FILTER = getattr(socket, "CAN_RAW_FILTER", 1)
_CAN_RAW_FD_FRAMES = getattr(socket, "CAN_RAW_FD_FRAMES", 5)
_SOL_SOCKET = getattr(socket, "SOL_SOCKET", 1)
_SO_RCVTIMEO = getattr(socket, "SO_RCVTIMEO", 20)
_SIOCGIFMTU = 0x8921
_IFNAMSIZ = 16

_FRAME_FORMAT = "=IBBBB64s"

_DLC2LEN = (0, 1, 2, 3, 4, 5, 6, 7, 8, 12, 16, 20, 24, 32, 48, 64)
_LEN2DLC = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8)
    + (9,) * 4
    + (10,) * 4
    + (11,) * 4
    + (12,) * 4
    + (13,) * 8
    + (14,) * 16
    + (15,) * 16
)


class SocketMode(enum.IntEnum):
    """Frame size the socket transfers."""

    CAN_MTU = 16
    CANFD_MTU = 72


class SocketCanStatus(enum.IntEnum):
    OK = 1 << 0
    SOCKET_CREATE_ERROR = 1 << 2
    INTERFACE_NAME_TO_IDX_ERROR = 1 << 3
    MTU_ERROR = 1 << 4
    CANFD_NOT_SUPPORTED = 1 << 5
    ENABLE_FD_SUPPORT_ERROR = 1 << 6
    WRITE_ERROR = 1 << 7
    READ_ERROR = 1 << 8
    BIND_ERROR = 1 << 9


class SocketCanError(Exception):
    """A SocketCAN operation failed."""

    def __init__(self, status: SocketCanStatus, message: Optional[str] = None) -> None:
        self.status = status
        self.message = message or status.name
        super().__init__(self.message)


@dataclass
class CanFrame:
    """A CAN frame: identifier with flag bits, payload and FD flags."""

    id: int = 0
    data: bytes = b""
    flags: int = 0

    def __post_init__(self) -> None:
        self.data = bytes(self.data)
        if len(self.data) > 64:
            raise ValueError("a CAN frame carries at most 64 bytes")

    @property
    def length(self) -> int:
        return len(self.data)


def can_dlc2len(dlc: int) -> int:
    """Data length for a data length code."""
    return _DLC2LEN[dlc & 0x0F]


def can_len2dlc(length: int) -> int:
    """Smallest data length code that holds ``length`` bytes."""
    if length > 64:
        return 0xF
    return _LEN2DLC[length]


def pack_frame(frame: CanFrame, mode: SocketMode = SocketMode.CAN_MTU) -> bytes:
    """Lay out a frame as the kernel expects it for the given mode."""
    mode = SocketMode(mode)
    can_id = frame.id
    if frame.id > 0x7FF:
        can_id |= CAN_EFF_FLAG
    length = frame.length
    if mode is SocketMode.CANFD_MTU:
        length = can_dlc2len(can_len2dlc(length))
    raw = struct.pack(
        _FRAME_FORMAT, can_id & 0xFFFFFFFF, length, frame.flags & 0xFF, 0, 0, frame.data
    )
    return raw[: int(mode)]


def unpack_frame(raw: bytes) -> CanFrame:
    """Parse a frame read from the kernel."""
    raw = bytes(raw)
    if len(raw) not in (SocketMode.CAN_MTU, SocketMode.CANFD_MTU):
        raise SocketCanError(SocketCanStatus.READ_ERROR, f"unexpected frame size {len(raw)}")
    can_id, length, flags, _res0, _res1, data = struct.unpack(
        _FRAME_FORMAT, raw.ljust(SocketMode.CANFD_MTU, b"\x00")
    )
    available = len(raw) - 8
    return CanFrame(id=can_id, data=data[: min(length, available, 64)], flags=flags)


class SocketCan:
    """A raw CAN socket bound to one interface."""

    def __init__(self) -> None:
        self._socket: Optional[socket.socket] = None
        self._interface = ""
        self._read_timeout_ms = 3
        self._mode = SocketMode.CAN_MTU

    @property
    def interface_name(self) -> str:
        return self._interface

    @property
    def mode(self) -> SocketMode:
        return self._mode

    def open(
        self,
        can_interface: str,
        read_timeout_ms: int = 3,
        mode: SocketMode = SocketMode.CAN_MTU,
    ) -> None:
        """Open and bind the socket; raises ``SocketCanError`` on failure."""
        self.close()
        self._interface = can_interface
        self._mode = SocketMode(mode)
        self._read_timeout_ms = read_timeout_ms

        try:
            sock = socket.socket(_AF_CAN, socket.SOCK_RAW, _CAN_RAW)
        except OSError as exc:
            raise SocketCanError(SocketCanStatus.SOCKET_CREATE_ERROR, str(exc)) from exc

        try:
            self._configure(sock)
        except BaseException:
            sock.close()
            raise
        self._socket = sock

    def _configure(self, sock: socket.socket) -> None:
        name = self._interface.encode()[: _IFNAMSIZ - 1]
        try:
            index = socket.if_nametoindex(name.decode())
        except OSError as exc:
            raise SocketCanError(SocketCanStatus.INTERFACE_NAME_TO_IDX_ERROR, str(exc)) from exc
        if not index:
            raise SocketCanError(SocketCanStatus.INTERFACE_NAME_TO_IDX_ERROR)

        if self._mode is SocketMode.CANFD_MTU:
            try:
                import fcntl

                request = struct.pack("16si20x", name, 0)
                reply = fcntl.ioctl(sock.fileno(), _SIOCGIFMTU, request)
                mtu = struct.unpack_from("i", reply, _IFNAMSIZ)[0]
            except (OSError, ImportError) as exc:
                raise SocketCanError(SocketCanStatus.MTU_ERROR, str(exc)) from exc
            if mtu != SocketMode.CANFD_MTU:
                raise SocketCanError(SocketCanStatus.CANFD_NOT_SUPPORTED)
            try:
                sock.setsockopt(_SOL_CAN_RAW, _CAN_RAW_FD_FRAMES, 1)
            except OSError as exc:
                raise SocketCanError(SocketCanStatus.ENABLE_FD_SUPPORT_ERROR, str(exc)) from exc

        try:
            sock.setsockopt(
                _SOL_SOCKET, _SO_RCVTIMEO, struct.pack("@ll", 0, self._read_timeout_ms * 1000)
            )
        except OSError:
            pass

        try:
            sock.bind((self._interface,))
        except OSError as exc:
            raise SocketCanError(SocketCanStatus.BIND_ERROR, str(exc)) from exc

        can_filter = struct.pack("=II", ~0x00000700 & 0xFFFFFFFF, 0x1FFFFF00)
        try:
            sock.setsockopt(_SOL_CAN_RAW, _CAN_RAW_FILTER, can_filter)
        except OSError as exc:
            raise SocketCanError(SocketCanStatus.SOCKET_CREATE_ERROR, str(exc)) from exc

    def write(self, frame: CanFrame) -> None:
        """Send a frame; raises ``SocketCanError`` on failure."""
        if self._socket is None:
            raise SocketCanError(SocketCanStatus.WRITE_ERROR, "socket is not open")
        raw = pack_frame(frame, self._mode)
        try:
            sent = self._socket.send(raw)
        except OSError as exc:
            raise SocketCanError(SocketCanStatus.WRITE_ERROR, str(exc)) from exc
        if sent != len(raw):
            raise SocketCanError(SocketCanStatus.WRITE_ERROR, "short write")

    def read(self) -> CanFrame:
        """Receive one frame; raises ``SocketCanError`` on failure or timeout."""
        if self._socket is None:
            raise SocketCanError(SocketCanStatus.READ_ERROR, "socket is not open")
        try:
            raw = self._socket.recv(SocketMode.CANFD_MTU)
        except OSError as exc:
            raise SocketCanError(SocketCanStatus.READ_ERROR, str(exc)) from exc
        return unpack_frame(raw)

    def close(self) -> None:
        """Close the socket if it is open."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def __enter__(self) -> "SocketCan":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()