"""Tinymovr servo controller access over CAN: protocol, SocketCAN transport, device and joint-level interface."""

__version__ = "0.1.0"
__all__ = [
    "protocol",
    "socketcan",
    "controller",
    "comms",
    "sensors",
    "motor",
    "scheduler",
    "traj_planner",
    "homing",
    "watchdog",
    "device",
    "hardware",
]