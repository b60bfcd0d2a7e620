"""Joint-level hardware interface driving a set of servos over one SocketCAN bus."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .device import PROTOCOL_HASH, Tinymovr
from .socketcan import (
    CAN_EFF_MASK,
    CAN_RTR_FLAG,
    CanFrame,
    SocketCan,
    SocketCanError,
    SocketCanStatus,
)

HW_IF_POSITION = "position"
HW_IF_VELOCITY = "velocity"
HW_IF_EFFORT = "effort"

_log = logging.getLogger("TinymovrHardware")

_STATUS_MESSAGES = {
    SocketCanStatus.OK: "No error",
    SocketCanStatus.SOCKET_CREATE_ERROR: "SocketCAN socket creation error",
    SocketCanStatus.INTERFACE_NAME_TO_IDX_ERROR: "SocketCAN interface name to index error",
    SocketCanStatus.MTU_ERROR: "SocketCAN maximum transfer unit error",
    SocketCanStatus.CANFD_NOT_SUPPORTED: (
        "SocketCAN flexible data-rate not supported on this interface"
    ),
    SocketCanStatus.ENABLE_FD_SUPPORT_ERROR: (
        "Error enabling SocketCAN flexible-data-rate support"
    ),
    SocketCanStatus.WRITE_ERROR: "SocketCAN write error",
    SocketCanStatus.READ_ERROR: "SocketCAN read error",
    SocketCanStatus.BIND_ERROR: "SocketCAN bind error",
}


def socketcan_error_message(status: int) -> str:
    """Human readable text for a SocketCAN status."""
    try:
        return _STATUS_MESSAGES[SocketCanStatus(status)]
    except (ValueError, KeyError):
        return "Unknown SocketCAN error"


class CallbackReturn(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


class ReturnType(enum.Enum):
    OK = "ok"
    ERROR = "error"


@dataclass
class JointInfo:
    """A joint and its string parameters (``id``, ``delay_us``, ``rads_to_ticks``)."""

    name: str
    parameters: Dict[str, str] = field(default_factory=dict)


@dataclass
class HardwareInfo:
    """Hardware-level parameters and the joints the hardware drives."""

    hardware_parameters: Dict[str, str] = field(default_factory=dict)
    joints: List[JointInfo] = field(default_factory=list)
    name: str = ""


class InterfaceHandle:
    """A named view onto one slot of a state or command vector."""

    def __init__(self, prefix_name: str, interface_name: str, values: List[float], index: int):
        self.prefix_name = prefix_name
        self.interface_name = interface_name
        self._values = values
        self._index = index

    @property
    def name(self) -> str:
        return f"{self.prefix_name}/{self.interface_name}"

    @property
    def value(self) -> float:
        return self._values[self._index]

    @value.setter
    def value(self, new_value: float) -> None:
        self._values[self._index] = float(new_value)

    def __repr__(self) -> str:
        return f"InterfaceHandle({self.name!r}, value={self.value!r})"


class TinymovrHardware:
    """Exposes position, velocity and effort of each joint's servo."""

    def __init__(
        self,
        socket_can: Optional[SocketCan] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.socket_can = socket_can if socket_can is not None else SocketCan()
        self.sleep = sleep if sleep is not None else time.sleep
        self.info = HardwareInfo()
        self.can_interface_name = ""
        self.servos: List[Tinymovr] = []
        self.rads_to_ticks: List[float] = []
        self.position_states: List[float] = []
        self.velocity_states: List[float] = []
        self.effort_states: List[float] = []
        self.position_commands: List[float] = []
        self.velocity_commands: List[float] = []
        self.effort_commands: List[float] = []

    def _send(self, arbitration_id: int, data: bytes, rtr: bool) -> None:
        _log.debug("Attempting to write CAN frame with arbitration_id: %d", arbitration_id)
        frame_id = arbitration_id | CAN_RTR_FLAG if rtr else arbitration_id
        try:
            self.socket_can.write(CanFrame(id=frame_id, data=data))
        except SocketCanError as exc:
            raise RuntimeError(socketcan_error_message(exc.status)) from exc
        _log.debug("CAN frame with arbitration_id: %d written successfully.", arbitration_id)

    def _recv(self) -> Optional[Tuple[int, bytes]]:
        _log.debug("Attempting to read CAN frame...")
        try:
            frame = self.socket_can.read()
        except SocketCanError:
            return None
        frame_id = frame.id & CAN_EFF_MASK
        _log.debug("CAN frame with arbitration_id: %d read successfully.", frame_id)
        return frame_id, frame.data

    def _delay_us(self, us: int) -> None:
        self.sleep(us / 1_000_000)

    def on_init(self, info: HardwareInfo) -> CallbackReturn:
        """Read parameters and create one servo per joint."""
        self.info = info
        _log.info("on_init() running...")

        try:
            self.can_interface_name = info.hardware_parameters["can_interface_name"]
        except KeyError:
            _log.critical(
                "Required hardware parameter 'can_interface_name' not set in URDF."
            )
            return CallbackReturn.ERROR

        count = len(info.joints)
        self.position_states = [0.0] * count
        self.velocity_states = [0.0] * count
        self.effort_states = [0.0] * count
        self.position_commands = [0.0] * count
        self.velocity_commands = [0.0] * count
        self.effort_commands = [0.0] * count
        self.rads_to_ticks = [0.0] * count
        self.servos = []

        for index, joint in enumerate(info.joints):
            try:
                node_id = int(joint.parameters["id"])
                delay_us = int(joint.parameters["delay_us"])
                self.rads_to_ticks[index] = float(joint.parameters["rads_to_ticks"])
            except KeyError as exc:
                _log.critical(
                    "Missing required parameter for joint '%s': %s", joint.name, exc
                )
                return CallbackReturn.ERROR
            _log.info(
                "Initializing joint '%s' (id: %d, delay: %d us, rads_to_ticks: %f)",
                joint.name,
                node_id,
                delay_us,
                self.rads_to_ticks[index],
            )
            self.servos.append(
                Tinymovr(node_id, self._send, self._recv, self._delay_us, delay_us)
            )

        _log.info("on_init() finished successfully.")
        return CallbackReturn.SUCCESS

    def _handles(self, vectors: List[Tuple[str, List[float]]]) -> List[InterfaceHandle]:
        return [
            InterfaceHandle(joint.name, interface, values, index)
            for index, joint in enumerate(self.info.joints)
            for interface, values in vectors
        ]

    def export_state_interfaces(self) -> List[InterfaceHandle]:
        """Position, velocity and effort state handles of every joint."""
        _log.info("export_state_interfaces() running...")
        return self._handles(
            [
                (HW_IF_POSITION, self.position_states),
                (HW_IF_VELOCITY, self.velocity_states),
                (HW_IF_EFFORT, self.effort_states),
            ]
        )

    def export_command_interfaces(self) -> List[InterfaceHandle]:
        """Position, velocity and effort command handles of every joint."""
        _log.info("export_command_interfaces() running...")
        return self._handles(
            [
                (HW_IF_POSITION, self.position_commands),
                (HW_IF_VELOCITY, self.velocity_commands),
                (HW_IF_EFFORT, self.effort_commands),
            ]
        )

    def on_activate(self, previous_state=None) -> CallbackReturn:
        """Open the bus, check every servo and switch it to closed-loop position control."""
        _log.info("Activating Hardware...")
        try:
            self.socket_can.open(self.can_interface_name)
        except SocketCanError:
            _log.critical("Could not open CAN interface '%s'", self.can_interface_name)
            return CallbackReturn.ERROR
        _log.info("Socketcan opened successfully on '%s'.", self.can_interface_name)

        _log.debug("Asserting spec compatibility...")
        for servo in self.servos:
            if servo.protocol_hash != PROTOCOL_HASH:
                _log.critical("Protocol hash mismatch for servo ID %d", servo.uid)
                return CallbackReturn.ERROR
        _log.debug("Spec compatibility OK.")

        _log.debug("Asserting calibrated...")
        for servo in self.servos:
            if not servo.calibrated:
                _log.critical("Servo ID %d is not calibrated.", servo.uid)
                return CallbackReturn.ERROR
        _log.debug("Calibration OK.")

        for servo in self.servos:
            _log.debug("Setting state and mode for servo ID %d", servo.uid)
            servo.controller.state = 2
            servo.controller.mode = 2
            self.sleep(0.001)
            if servo.controller.state != 2 or servo.controller.mode != 2:
                _log.error("Failed to set mode for servo ID %d.", servo.uid)

        _log.info("Hardware activated successfully.")
        return CallbackReturn.SUCCESS

    def on_deactivate(self, previous_state=None) -> CallbackReturn:
        """Idle every servo and close the bus."""
        _log.info("Deactivating Hardware...")
        try:
            for servo in self.servos:
                servo.controller.state = 0
                self.sleep(0.001)
        except Exception as exc:  # noqa: BLE001 - deactivation always proceeds
            _log.error("Error during deactivation: %s", exc)
        self.socket_can.close()
        _log.info("Hardware deactivated successfully.")
        return CallbackReturn.SUCCESS

    def read(self, time=None, period=None) -> ReturnType:
        """Refresh joint states from the servos."""
        try:
            for index, servo in enumerate(self.servos):
                ticks_to_rads = 1.0 / self.rads_to_ticks[index]
                user_frame = servo.sensors.user_frame
                self.position_states[index] = user_frame.position_estimate * ticks_to_rads
                self.velocity_states[index] = user_frame.velocity_estimate * ticks_to_rads
                self.effort_states[index] = servo.controller.current.iq_estimate
        except Exception as exc:  # noqa: BLE001
            _log.error("Error during read: %s", exc)
            return ReturnType.ERROR
        return ReturnType.OK

    def write(self, time=None, period=None) -> ReturnType:
        """Send joint commands to the servos."""
        try:
            for index, servo in enumerate(self.servos):
                scale = self.rads_to_ticks[index]
                servo.controller.position.setpoint = self.position_commands[index] * scale
                servo.controller.velocity.setpoint = self.velocity_commands[index] * scale
                servo.controller.current.iq_setpoint = self.effort_commands[index]
        except Exception as exc:  # noqa: BLE001
            _log.error("Error during write: %s", exc)
            return ReturnType.ERROR
        return ReturnType.OK