"""Scheduler load and warnings."""

from __future__ import annotations

from .protocol import Attribute, Node, ValueType


class Scheduler(Node):
    """Control loop load and scheduling warnings."""

    load = Attribute(16, ValueType.UINT32, writable=False)
    warnings = Attribute(17, ValueType.UINT8, writable=False)