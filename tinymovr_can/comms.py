"""Communication settings of a device."""

from __future__ import annotations

from .protocol import (
    Attribute,
    DelayCallback,
    Node,
    RecvCallback,
    SendCallback,
    ValueType,
)


class Can(Node):
    """CAN bus rate, device id and heartbeat setting."""

    rate = Attribute(45, ValueType.UINT32)
    id = Attribute(46, ValueType.UINT32)
    heartbeat = Attribute(47, ValueType.BOOL)


class Comms(Node):
    """Group of communication interfaces."""

    def __init__(
        self,
        can_node_id: int,
        send_cb: SendCallback,
        recv_cb: RecvCallback,
        delay_us_cb: DelayCallback,
        delay_us_value: int,
    ) -> None:
        super().__init__(can_node_id, send_cb, recv_cb, delay_us_cb, delay_us_value)
        self.can = Can(can_node_id, send_cb, recv_cb, delay_us_cb, delay_us_value)