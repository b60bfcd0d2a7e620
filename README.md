# tinymovr_can

A Python library for talking to Tinymovr servo controllers on a CAN bus.

## What is in the package

- `tinymovr_can.protocol` handles the wire protocol.
  - `arbitration_id(node_id, endpoint_id)` builds a CAN arbitration ID.
  - `encode` and `decode` convert values to and from little-endian bytes. The supported types are listed in `ValueType`.
  - `Node` is the base class for a device. It sends requests and receives replies through callbacks that you supply.
  - `Attribute` is a descriptor that maps a Python attribute to a remote endpoint.
- `tinymovr_can.socketcan` is a raw SocketCAN transport for Linux.
  - `SocketCan` is the socket. It can be used as a context manager.
  - `CanFrame` holds one frame. `SocketMode` selects classic CAN or CAN FD frame sizes.
  - `can_dlc2len` and `can_len2dlc` convert between data length codes and byte counts.
  - `pack_frame` and `unpack_frame` convert frames to and from the kernel's frame layout.
  - The constants `CAN_EFF_FLAG`, `CAN_RTR_FLAG`, `CAN_ERR_FLAG` and `CAN_EFF_MASK` are the frame identifier flags and mask.
  - Failures raise `SocketCanError`, which carries a `SocketCanStatus`.
- `tinymovr_can.device` has the `Tinymovr` device object and the expected `PROTOCOL_HASH`.
  - The device's top-level endpoints are attributes: `protocol_hash`, `uid`, `fw_version`, `hw_revision`, `Vbus`, `Ibus`, `power`, `temp`, `calibrated`, `errors`, `warnings` and `config_size`.
  - Its subsystems are sub-objects: `scheduler`, `controller`, `comms`, `motor`, `sensors`, `traj_planner`, `homing` and `watchdog`.
  - The module also holds the flag and option enums, such as `ControllerState`, `ControllerMode`, `MotorType`, `MotorErrors` and `ExternalSpiRate`.
- Each subsystem has its own module: `controller`, `comms`, `sensors`, `motor`, `scheduler`, `traj_planner`, `homing` and `watchdog`.
- `tinymovr_can.hardware` has `TinymovrHardware`. This is a joint-level interface that drives a set of servos over one SocketCAN bus and converts between radians and encoder ticks.

## Installation

```
pip install .
```

There are no runtime dependencies. The SocketCAN transport needs Linux with a CAN interface that is configured and up, for example `can0`.

## Talking to a single device

A device object needs three callables:

- a send callback `(arbitration_id, data, rtr)`;
- a receive callback that returns `(arbitration_id, data)`, or `None` when no frame is pending;
- a delay callback that takes a number of microseconds.

```python
import time

from tinymovr_can.device import ControllerMode, ControllerState, Tinymovr
from tinymovr_can.socketcan import (
    CAN_EFF_MASK,
    CAN_RTR_FLAG,
    CanFrame,
    SocketCan,
    SocketCanError,
)

with SocketCan() as bus:
    bus.open("can0")

    def send(arbitration_id, data, rtr):
        frame_id = arbitration_id | CAN_RTR_FLAG if rtr else arbitration_id
        bus.write(CanFrame(id=frame_id, data=bytes(data)))

    def recv():
        try:
            frame = bus.read()
        except SocketCanError:
            return None
        return frame.id & CAN_EFF_MASK, frame.data

    def delay_us(us):
        time.sleep(us / 1_000_000)

    servo = Tinymovr(1, send, recv, delay_us, 200)
    print("uid:", servo.uid, "firmware:", servo.fw_version, "calibrated:", servo.calibrated)

    servo.controller.state = ControllerState.CL_CONTROL
    servo.controller.mode = ControllerMode.POSITION
    servo.controller.position.setpoint = 8192.0
    print("position:", servo.sensors.user_frame.position_estimate)
```

### Reading and writing attributes

- Reading an attribute sends a remote request, waits for the configured delay, and then drains received frames until the reply arrives.
- If no reply arrives, the read returns the type's zero value: `False`, `0` or `0.0`.
- A reply that is too short for its type raises `ValueError`.
- Assigning to an attribute sends the new value.
- Assigning to a read-only attribute raises `AttributeError`.

### Commands

Commands are ordinary methods, for example:

- `servo.controller.calibrate()`, `idle()`, `position_mode()`, `velocity_mode()` and `current_mode()`
- `servo.controller.set_pos_vel_setpoints(pos, vel)`
- `servo.traj_planner.move_to(pos)` and `move_to_tlimit(pos)`
- `servo.homing.home()`
- `servo.save_config()`, `erase_config()`, `reset()` and `enter_dfu()`

### SocketCAN behaviour

- `SocketCan.open(interface, read_timeout_ms=3, mode=SocketMode.CAN_MTU)` binds the socket and installs a receive filter.
- `read()` raises `SocketCanError` when no frame arrives within the read timeout.
- Frame IDs above `0x7FF` are sent as extended frames.

## Joint-level interface

`TinymovrHardware(socket_can=None, sleep=None)` takes two optional arguments:

- a `SocketCan`, which defaults to a new one;
- a sleep function, which defaults to `time.sleep`.

### Configuration

Describe the hardware with a `HardwareInfo`:

- `hardware_parameters` must contain `can_interface_name`.
- Each `JointInfo` needs the string parameters `id`, `delay_us` and `rads_to_ticks`.

### Lifecycle

- `on_init(info)` creates one servo per joint. It returns `CallbackReturn.ERROR` if a required parameter is missing.
- `export_state_interfaces()` and `export_command_interfaces()` return one `InterfaceHandle` per joint for each of position, velocity and effort. Each handle is named `"<joint>/<interface>"` and has a read/write `value`.
- `on_activate()` opens the bus and checks each servo's protocol hash and calibration. It then puts each servo into closed-loop position control.
- `read()` converts servo positions and velocities from ticks to radians and reports the Iq estimate as effort.
- `write()` converts position and velocity commands from radians to ticks and sends the effort command as the Iq setpoint.
- `on_deactivate()` sets every servo to idle and closes the bus.
- `read()` and `write()` return `ReturnType.OK` or `ReturnType.ERROR`.
- `socketcan_error_message(status)` gives a readable text for a `SocketCanStatus`.

## What the package does not do

- There is no command-line tool.
- `TinymovrHardware` is a plain Python class. It is not registered with, or loaded by, any robot control framework. Your own code calls its lifecycle methods.

## Running the tests

```
pip install ".[test]"
pytest
```