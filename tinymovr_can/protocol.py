"""Endpoint addressing, value encoding and the request/reply node of the CAN protocol."""

from __future__ import annotations

import enum
import struct
from typing import Callable, Optional, Tuple, Union

CAN_EP_SIZE = 12
CAN_EP_MASK = (1 << CAN_EP_SIZE) - 1
CAN_SEQ_SIZE = 9
CAN_SEQ_MASK = ((1 << CAN_SEQ_SIZE) - 1) << CAN_EP_SIZE
CAN_DEV_SIZE = 8
CAN_DEV_MASK = ((1 << CAN_DEV_SIZE) - 1) << (CAN_EP_SIZE + CAN_SEQ_SIZE)

Value = Union[bool, int, float]
SendCallback = Callable[[int, bytes, bool], None]
RecvCallback = Callable[[], Optional[Tuple[int, bytes]]]
DelayCallback = Callable[[int], None]


class ValueType(enum.Enum):
    """Wire types an endpoint can carry."""

    BOOL = "bool"
    UINT8 = "uint8"
    INT8 = "int8"
    UINT16 = "uint16"
    INT16 = "int16"
    UINT32 = "uint32"
    INT32 = "int32"
    UINT64 = "uint64"
    FLOAT = "float"

    @property
    def size(self) -> int:
        """Number of bytes the type occupies on the wire."""
        if self is ValueType.BOOL:
            return 1
        if self is ValueType.FLOAT:
            return 4
        return _INT_LAYOUT[self][0]

    @property
    def zero(self) -> Value:
        """The value reported when a device does not answer."""
        if self is ValueType.BOOL:
            return False
        if self is ValueType.FLOAT:
            return 0.0
        return 0


_INT_LAYOUT = {
    ValueType.UINT8: (1, False),
    ValueType.INT8: (1, True),
    ValueType.UINT16: (2, False),
    ValueType.INT16: (2, True),
    ValueType.UINT32: (4, False),
    ValueType.INT32: (4, True),
    ValueType.UINT64: (8, False),
}


def encode(value_type: ValueType, value: Value) -> bytes:
    """Encode a value little-endian; integers are truncated to the type's width."""
    if value_type is ValueType.BOOL:
        return b"\x01" if value else b"\x00"
    if value_type is ValueType.FLOAT:
        return struct.pack("<f", float(value))
    size, _signed = _INT_LAYOUT[value_type]
    return (int(value) & ((1 << (8 * size)) - 1)).to_bytes(size, "little")


def decode(value_type: ValueType, data: bytes) -> Value:
    """Decode a little-endian value from the start of ``data``."""
    data = bytes(data)
    if len(data) < value_type.size:
        raise ValueError(
            f"{value_type.value} needs {value_type.size} bytes, got {len(data)}"
        )
    if value_type is ValueType.BOOL:
        return data[0] != 0
    if value_type is ValueType.FLOAT:
        return struct.unpack_from("<f", data)[0]
    size, signed = _INT_LAYOUT[value_type]
    return int.from_bytes(data[:size], "little", signed=signed)


def arbitration_id(node_id: int, endpoint_id: int) -> int:
    """Combine a device id and an endpoint id into a CAN arbitration id."""
    return (((node_id & 0xFF) << (CAN_EP_SIZE + CAN_SEQ_SIZE)) & CAN_DEV_MASK) | (
        endpoint_id & CAN_EP_MASK
    )


class Node:
    """A device reachable through send, receive and delay callbacks.

    ``send_cb(arbitration_id, data, rtr)`` transmits a frame,
    ``recv_cb()`` returns ``(arbitration_id, data)`` or ``None`` when nothing
    is pending, and ``delay_us_cb(us)`` waits.
    """

    def __init__(
        self,
        can_node_id: int,
        send_cb: SendCallback,
        recv_cb: RecvCallback,
        delay_us_cb: DelayCallback,
        delay_us_value: int,
    ) -> None:
        self.can_node_id = can_node_id & 0xFF
        self.send_cb = send_cb
        self.recv_cb = recv_cb
        self.delay_us_cb = delay_us_cb
        self.delay_us_value = delay_us_value

    def send(self, endpoint_id: int, data: bytes = b"", rtr: bool = False) -> None:
        """Send ``data`` to an endpoint of this device."""
        self.send_cb(arbitration_id(self.can_node_id, endpoint_id), bytes(data), rtr)

    def recv(self, endpoint_id: int, delay_us: int = 0) -> Optional[bytes]:
        """Wait ``delay_us``, then drain frames until one from the endpoint arrives."""
        if delay_us > 0:
            self.delay_us_cb(delay_us)
        wanted = arbitration_id(self.can_node_id, endpoint_id)
        while (frame := self.recv_cb()) is not None:
            frame_id, data = frame
            if frame_id == wanted:
                return bytes(data)
        return None

    def read_value(self, endpoint_id: int, value_type: ValueType) -> Value:
        """Request an endpoint's value; the type's zero if no reply arrives."""
        self.send(endpoint_id, b"", True)
        reply = self.recv(endpoint_id, self.delay_us_value)
        if reply is None:
            return value_type.zero
        return decode(value_type, reply)

    def write_value(self, endpoint_id: int, value_type: ValueType, value: Value) -> None:
        """Write a value to an endpoint."""
        self.send(endpoint_id, encode(value_type, value), False)


class Attribute:
    """Descriptor binding a ``Node`` attribute to a remote endpoint."""

    def __init__(self, endpoint_id: int, value_type: ValueType, writable: bool = True) -> None:
        self.endpoint_id = endpoint_id
        self.value_type = value_type
        self.writable = writable
        self.name = f"endpoint {endpoint_id}"

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Optional[Node], owner: Optional[type] = None):
        if instance is None:
            return self
        return instance.read_value(self.endpoint_id, self.value_type)

    def __set__(self, instance: Node, value: Value) -> None:
        if not self.writable:
            raise AttributeError(f"{self.name} is read-only")
        instance.write_value(self.endpoint_id, self.value_type, value)