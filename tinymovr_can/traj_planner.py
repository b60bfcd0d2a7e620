"""Trajectory planner limits, timings and moves."""

from __future__ import annotations

from .protocol import Attribute, Node, ValueType, encode


class TrajPlanner(Node):
    """Acceleration, velocity and time limits of planned moves."""

    max_accel = Attribute(77, ValueType.FLOAT)
    max_decel = Attribute(78, ValueType.FLOAT)
    max_vel = Attribute(79, ValueType.FLOAT)
    t_accel = Attribute(80, ValueType.FLOAT)
    t_decel = Attribute(81, ValueType.FLOAT)
    t_total = Attribute(82, ValueType.FLOAT)
    errors = Attribute(85, ValueType.UINT8, writable=False)

    def move_to(self, pos_setpoint: float) -> None:
        """Plan a move to a position within the acceleration and velocity limits."""
        self.send(83, encode(ValueType.FLOAT, pos_setpoint), False)

    def move_to_tlimit(self, pos_setpoint: float) -> None:
        """Plan a move to a position within the time limits."""
        self.send(84, encode(ValueType.FLOAT, pos_setpoint), False)