"""Sensor endpoints: user frame, sensor setup and sensor selection."""

from __future__ import annotations

from .protocol import (
    Attribute,
    DelayCallback,
    Node,
    RecvCallback,
    SendCallback,
    ValueType,
)


class UserFrame(Node):
    """Position and velocity in the user's frame, with offset and multiplier."""

    position_estimate = Attribute(55, ValueType.FLOAT, writable=False)
    velocity_estimate = Attribute(56, ValueType.FLOAT, writable=False)
    offset = Attribute(57, ValueType.FLOAT)
    multiplier = Attribute(58, ValueType.FLOAT)


class Onboard(Node):
    """The onboard magnetic sensor."""

    calibrated = Attribute(59, ValueType.BOOL, writable=False)
    errors = Attribute(60, ValueType.UINT8, writable=False)


class ExternalSpi(Node):
    """An external sensor on the SPI bus."""

    type = Attribute(61, ValueType.UINT8)
    rate = Attribute(62, ValueType.UINT8)
    calibrated = Attribute(63, ValueType.BOOL, writable=False)
    errors = Attribute(64, ValueType.UINT8, writable=False)


class Hall(Node):
    """Hall effect sensors."""

    calibrated = Attribute(65, ValueType.BOOL, writable=False)
    errors = Attribute(66, ValueType.UINT8, writable=False)


class Setup(Node):
    """Configuration of every available sensor."""

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
        self.onboard = Onboard(*args)
        self.external_spi = ExternalSpi(*args)
        self.hall = Hall(*args)


class PositionSensor(Node):
    """The sensor used for position feedback."""

    connection = Attribute(67, ValueType.UINT8)
    bandwidth = Attribute(68, ValueType.FLOAT)
    raw_angle = Attribute(69, ValueType.INT32, writable=False)
    position_estimate = Attribute(70, ValueType.FLOAT, writable=False)
    velocity_estimate = Attribute(71, ValueType.FLOAT, writable=False)


class CommutationSensor(Node):
    """The sensor used for motor commutation."""

    connection = Attribute(72, ValueType.UINT8)
    bandwidth = Attribute(73, ValueType.FLOAT)
    raw_angle = Attribute(74, ValueType.INT32, writable=False)
    position_estimate = Attribute(75, ValueType.FLOAT, writable=False)
    velocity_estimate = Attribute(76, ValueType.FLOAT, writable=False)


class Select(Node):
    """Which sensors serve position feedback and commutation."""

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
        self.position_sensor = PositionSensor(*args)
        self.commutation_sensor = CommutationSensor(*args)


class Sensors(Node):
    """All sensor related endpoints of a device."""

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
        self.user_frame = UserFrame(*args)
        self.setup = Setup(*args)
        self.select = Select(*args)