"""Communication watchdog."""

from __future__ import annotations

from .protocol import Attribute, Node, ValueType


class Watchdog(Node):
    """Stops the motor when no message arrives within the timeout."""

    enabled = Attribute(94, ValueType.BOOL)
    triggered = Attribute(95, ValueType.BOOL, writable=False)
    timeout = Attribute(96, ValueType.FLOAT)