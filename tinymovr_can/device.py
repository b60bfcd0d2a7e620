"""A complete device: top-level endpoints, flags, options and every subsystem."""

from __future__ import annotations

import enum

from .comms import Comms
from .controller import Controller
from .homing import Homing
from .motor import Motor
from .protocol import (
    Attribute,
    DelayCallback,
    Node,
    RecvCallback,
    SendCallback,
    ValueType,
)
from .scheduler import Scheduler
from .sensors import Sensors
from .traj_planner import TrajPlanner
from .watchdog import Watchdog

PROTOCOL_HASH = 641680925


class Errors(enum.IntFlag):
    NONE = 0
    UNDERVOLTAGE = 1 << 0


class Warnings(enum.IntFlag):
    NONE = 0
    DRIVER_FAULT = 1 << 0
    CHARGE_PUMP_FAULT_STAT = 1 << 1
    CHARGE_PUMP_FAULT = 1 << 2
    DRV10_DISABLE = 1 << 3
    DRV32_DISABLE = 1 << 4
    DRV54_DISABLE = 1 << 5


class SchedulerWarnings(enum.IntFlag):
    NONE = 0
    CONTROL_BLOCK_REENTERED = 1 << 0


class ControllerWarnings(enum.IntFlag):
    NONE = 0
    VELOCITY_LIMITED = 1 << 0
    CURRENT_LIMITED = 1 << 1
    MODULATION_LIMITED = 1 << 2


class ControllerErrors(enum.IntFlag):
    NONE = 0
    CURRENT_LIMIT_EXCEEDED = 1 << 0
    PRE_CL_I_SD_EXCEEDED = 1 << 1


class MotorErrors(enum.IntFlag):
    NONE = 0
    PHASE_RESISTANCE_OUT_OF_RANGE = 1 << 0
    PHASE_INDUCTANCE_OUT_OF_RANGE = 1 << 1
    POLE_PAIRS_CALCULATION_DID_NOT_CONVERGE = 1 << 2
    POLE_PAIRS_OUT_OF_RANGE = 1 << 3
    ABNORMAL_CALIBRATION_VOLTAGE = 1 << 4


class OnboardErrors(enum.IntFlag):
    NONE = 0
    CALIBRATION_FAILED = 1 << 0
    READING_UNSTABLE = 1 << 1


class ExternalSpiErrors(enum.IntFlag):
    NONE = 0
    CALIBRATION_FAILED = 1 << 0
    READING_UNSTABLE = 1 << 1


class HallErrors(enum.IntFlag):
    NONE = 0
    CALIBRATION_FAILED = 1 << 0
    READING_UNSTABLE = 1 << 1


class TrajPlannerErrors(enum.IntFlag):
    NONE = 0
    INVALID_INPUT = 1 << 0
    VCRUISE_OVER_LIMIT = 1 << 1


class HomingWarnings(enum.IntFlag):
    NONE = 0
    HOMING_TIMEOUT = 1 << 0


class ControllerState(enum.IntEnum):
    IDLE = 0
    CALIBRATE = 1
    CL_CONTROL = 2


class ControllerMode(enum.IntEnum):
    CURRENT = 0
    VELOCITY = 1
    POSITION = 2
    TRAJECTORY = 3
    HOMING = 4


class MotorType(enum.IntEnum):
    HIGH_CURRENT = 0
    GIMBAL = 1


class ExternalSpiType(enum.IntEnum):
    MA7XX = 0
    AS5047 = 1
    AMT22 = 2


class ExternalSpiRate(enum.IntEnum):
    RATE_1_5MBPS = 0
    RATE_3MBPS = 1
    RATE_6MBPS = 2
    RATE_8MBPS = 3
    RATE_12MBPS = 4


class PositionSensorConnection(enum.IntEnum):
    ONBOARD = 0
    EXTERNAL_SPI = 1
    HALL = 2


class CommutationSensorConnection(enum.IntEnum):
    ONBOARD = 0
    EXTERNAL_SPI = 1
    HALL = 2


class Tinymovr(Node):
    """A motor controller on the bus, with all of its subsystems."""

    protocol_hash = Attribute(0, ValueType.UINT32, writable=False)
    uid = Attribute(1, ValueType.UINT32, writable=False)
    hw_revision = Attribute(3, ValueType.UINT32, writable=False)
    Vbus = Attribute(4, ValueType.FLOAT, writable=False)
    Ibus = Attribute(5, ValueType.FLOAT, writable=False)
    power = Attribute(6, ValueType.FLOAT, writable=False)
    temp = Attribute(7, ValueType.FLOAT, writable=False)
    calibrated = Attribute(8, ValueType.BOOL, writable=False)
    errors = Attribute(9, ValueType.UINT8, writable=False)
    warnings = Attribute(10, ValueType.UINT8, writable=False)
    config_size = Attribute(15, ValueType.UINT32, writable=False)

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
        self.scheduler = Scheduler(*args)
        self.controller = Controller(*args)
        self.comms = Comms(*args)
        self.motor = Motor(*args)
        self.sensors = Sensors(*args)
        self.traj_planner = TrajPlanner(*args)
        self.homing = Homing(*args)
        self.watchdog = Watchdog(*args)

    @property
    def fw_version(self) -> str:
        """Firmware version string; empty when the device does not answer."""
        self.send(2, b"", True)
        reply = self.recv(2, self.delay_us_value)
        if reply is None:
            return ""
        return reply.decode("ascii", errors="replace").rstrip("\x00")

    def save_config(self) -> None:
        """Store the current configuration in non-volatile memory."""
        self.send(11, b"", True)

    def erase_config(self) -> None:
        """Erase the stored configuration."""
        self.send(12, b"", True)

    def reset(self) -> None:
        """Restart the device."""
        self.send(13, b"", True)

    def enter_dfu(self) -> None:
        """Restart the device into its firmware update loader."""
        self.send(14, b"", True)