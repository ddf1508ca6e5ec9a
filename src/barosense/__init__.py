"""barosense: async driver core for Bosch BMP3xx barometric sensors."""

from .sensors import (
    BMP3xx,
    CalibrationCoefficients,
    IdentityError,
    IoError,
    NotReadyError,
    RawSample,
    SensorError,
    SensorReading,
    SessionState,
)

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
]
