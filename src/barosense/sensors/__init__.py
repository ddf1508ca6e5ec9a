"""Sensor protocol, calibration and compensation for the BMP3xx family.

:mod:`registers` holds the register map, :mod:`calibration` decodes the
factory trim block, :mod:`compensation` turns raw ADC codes into physical
units and :mod:`bmp3xx` sequences the bus transfers.
"""

from .bmp3xx import BMP3xx, SessionState
from .calibration import CalibrationCoefficients, decode_calibration
from .compensation import RawSample, SensorReading, compensate, unpack_raw_sample
from .errors import IdentityError, IoError, NotReadyError, SensorError

__all__ = [
    "BMP3xx",
    "CalibrationCoefficients",
    "IdentityError",
    "IoError",
    "NotReadyError",
    "RawSample",
    "SensorError",
    "SensorReading",
    "SessionState",
    "compensate",
    "decode_calibration",
    "unpack_raw_sample",
]
