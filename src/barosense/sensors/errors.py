"""Exceptions raised by the BMP3xx driver."""

from __future__ import annotations

from typing import Optional


class SensorError(Exception):
    """Base class for all driver errors."""


class IdentityError(SensorError):
    """The chip-ID register did not return the expected value."""

    def __init__(self, chip_id: int, expected: int) -> None:
        super().__init__(
            f"Unexpected BMP3xx chip ID: 0x{chip_id:02x} (expected 0x{expected:02x})"
        )
        self.chip_id = chip_id
        self.expected = expected


class IoError(SensorError, OSError):
    """A bus transfer failed, timed out, or returned too few bytes."""

    def __init__(self, message: str, register: Optional[int] = None) -> None:
        super().__init__(message)
        self.register = register


class NotReadyError(SensorError):
    """The session is faulted or was reset and has not been initialized again."""
