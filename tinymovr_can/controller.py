"""Controller endpoints: state, mode, and the position, velocity, current and voltage loops."""

from __future__ import annotations

from .protocol import (
    Attribute,
    DelayCallback,
    Node,
    RecvCallback,
    SendCallback,
    ValueType,
    encode,
)


class Position(Node):
    """Position loop setpoint and gain."""

    setpoint = Attribute(22, ValueType.FLOAT)
    p_gain = Attribute(23, ValueType.FLOAT)


class Velocity(Node):
    """Velocity loop setpoint, limit and gains."""

    setpoint = Attribute(24, ValueType.FLOAT)
    limit = Attribute(25, ValueType.FLOAT)
    p_gain = Attribute(26, ValueType.FLOAT)
    i_gain = Attribute(27, ValueType.FLOAT)
    deadband = Attribute(28, ValueType.FLOAT)
    increment = Attribute(29, ValueType.FLOAT)


class Current(Node):
    """Current loop setpoints, limits and estimates."""

    iq_setpoint = Attribute(30, ValueType.FLOAT)
    id_setpoint = Attribute(31, ValueType.FLOAT, writable=False)
    iq_limit = Attribute(32, ValueType.FLOAT)
    iq_estimate = Attribute(33, ValueType.FLOAT, writable=False)
    bandwidth = Attribute(34, ValueType.FLOAT)
    iq_p_gain = Attribute(35, ValueType.FLOAT, writable=False)
    max_ibus_regen = Attribute(36, ValueType.FLOAT)
    max_ibrake = Attribute(37, ValueType.FLOAT)


class Voltage(Node):
    """Voltage output of the current loop."""

    vq_setpoint = Attribute(38, ValueType.FLOAT, writable=False)


class Controller(Node):
    """Controller state, mode, flags and the nested control loops."""

    state = Attribute(18, ValueType.UINT8)
    mode = Attribute(19, ValueType.UINT8)
    warnings = Attribute(20, ValueType.UINT8, writable=False)
    errors = Attribute(21, ValueType.UINT8, writable=False)

    def __init__(
        self,
        can_node_id: int,
        send_cb: SendCallback,
        recv_cb: RecvCallback,
        delay_us_cb: DelayCallback,
        delay_us_value: int,
    ) -> None:
        super().__init__(can_node_id, send_cb, recv_cb, delay_us_cb, delay_us_value)
        args = (can_node_id, send_cb, recv_cb, delay_us_cb, delay_us_value)
        self.position = Position(*args)
        self.velocity = Velocity(*args)
        self.current = Current(*args)
        self.voltage = Voltage(*args)

    def _call(self, endpoint_id: int) -> None:
        self.send(endpoint_id, b"", True)

    def calibrate(self) -> None:
        """Start motor and sensor calibration."""
        self._call(39)

    def idle(self) -> None:
        """Put the controller into the idle state."""
        self._call(40)

    def position_mode(self) -> None:
        """Enter closed-loop position control."""
        self._call(41)

    def velocity_mode(self) -> None:
        """Enter closed-loop velocity control."""
        self._call(42)

    def current_mode(self) -> None:
        """Enter closed-loop current control."""
        self._call(43)

    def set_pos_vel_setpoints(self, pos_setpoint: float, vel_setpoint: float) -> float:
        """Set position and velocity setpoints together and return the reply value."""
        payload = encode(ValueType.FLOAT, pos_setpoint) + encode(ValueType.FLOAT, vel_setpoint)
        self.send(44, payload, False)
        return self.read_value(17, ValueType.FLOAT)