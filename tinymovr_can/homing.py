"""Homing procedure and the stall detection it relies on."""

from __future__ import annotations

from .protocol import (
    Attribute,
    DelayCallback,
    Node,
    RecvCallback,
    SendCallback,
    ValueType,
)


class StallDetect(Node):
    """Thresholds that decide when the motor has stalled against an end stop."""

    velocity = Attribute(90, ValueType.FLOAT)
    delta_pos = Attribute(91, ValueType.FLOAT)
    t = Attribute(92, ValueType.FLOAT)


class Homing(Node):
    """Homing speed, timeout and retraction distance."""

    velocity = Attribute(86, ValueType.FLOAT)
    max_homing_t = Attribute(87, ValueType.FLOAT)
    retract_dist = Attribute(88, ValueType.FLOAT)
    warnings = Attribute(89, ValueType.UINT8, writable=False)

    def __init__(
        self,
        can_node_id: int,
        send_cb: SendCallback,
        recv_cb: RecvCallback,
        delay_us_cb: DelayCallback,
        delay_us_value: int,
    ) -> None:
        super().__init__(can_node_id, send_cb, recv_cb, delay_us_cb, delay_us_value)
        self.stall_detect = StallDetect(
            can_node_id, send_cb, recv_cb, delay_us_cb, delay_us_value
        )

    def home(self) -> None:
        """Start the homing procedure."""
        self.send(93, b"", True)