"""Motor parameters and calibration status."""

from __future__ import annotations

from .protocol import Attribute, Node, ValueType


class Motor(Node):
    """Phase resistance and inductance, pole pairs, type and calibration current."""

    R = Attribute(48, ValueType.FLOAT)
    L = Attribute(49, ValueType.FLOAT)
    pole_pairs = Attribute(50, ValueType.UINT8)
    type = Attribute(51, ValueType.UINT8)
    calibrated = Attribute(52, ValueType.BOOL, writable=False)
    I_cal = Attribute(53, ValueType.FLOAT)
    errors = Attribute(54, ValueType.UINT8, writable=False)