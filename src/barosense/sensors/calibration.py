"""
Factory calibration coefficients for the BMP3xx.

The sensor stores its trim values as a 21-byte little-endian block starting
at register ``CAL_DATA``::

  T1 u16, T2 u16, T3 i8,
  P1 i16, P2 i16, P3 i8, P4 i8, P5 u16, P6 u16, P7 i8, P8 i8,
  P9 i16, P10 i8, P11 i8

Each raw field is turned into a float by dividing by a power of two (some
pressure terms are offset by 2^14 first). The exponents follow the
datasheet's fixed-point calibration format.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Dict

from .registers import CALIBRATION_LENGTH

logger = logging.getLogger(__name__)

_LAYOUT = struct.Struct("<HHbhhbbHHbbhbb")

# field name -> (bias subtracted from the raw integer, power-of-two divisor exponent)
_SCALES: Dict[str, tuple[int, int]] = {
    "T1": (0, -8),
    "T2": (0, 30),
    "T3": (0, 48),
    "P1": (2 ** 14, 20),
    "P2": (2 ** 14, 29),
    "P3": (0, 32),
    "P4": (0, 37),
    "P5": (0, -3),
    "P6": (0, 6),
    "P7": (0, 8),
    "P8": (0, 15),
    "P9": (0, 48),
    "P10": (0, 48),
    "P11": (0, 65),
}


@dataclass(frozen=True)
class CalibrationCoefficients:
    T1: float
    T2: float
    T3: float
    P1: float = 0.0
    P2: float = 0.0
    P3: float = 0.0
    P4: float = 0.0
    P5: float = 0.0
    P6: float = 0.0
    P7: float = 0.0
    P8: float = 0.0
    P9: float = 0.0
    P10: float = 0.0
    P11: float = 0.0


def decode_calibration(data: bytes | bytearray) -> CalibrationCoefficients:
    """
    Decode the raw calibration block into :class:`CalibrationCoefficients`.

    ``data`` shorter than 21 bytes is zero-padded, longer input is truncated.
    Whether a short block is acceptable is decided by the caller.
    """
    block = bytes(data[:CALIBRATION_LENGTH]).ljust(CALIBRATION_LENGTH, b"\x00")
    raw = _LAYOUT.unpack(block)

    values = {}
    for name, raw_value in zip(_SCALES, raw):
        bias, exponent = _SCALES[name]
        values[name] = (raw_value - bias) / 2.0 ** exponent

    cal = CalibrationCoefficients(**values)
    logger.debug("Decoded BMP3xx calibration: %s", values)
    return cal
