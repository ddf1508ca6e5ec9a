"""
BMP3xx register map and protocol constants.

Register offsets follow the Bosch BMP388/BMP390 datasheet. The calibration
block at ``CAL_DATA`` is 21 bytes long and is decoded by
:mod:`barosense.sensors.calibration`.
"""

from __future__ import annotations

# ---------------------------
# Register offsets
# ---------------------------
CHIP_ID        = 0x00
STATUS         = 0x03
PRESSURE_DATA  = 0x04
TEMP_DATA      = 0x07
HUMIDITY_DATA  = 0x09
CONTROL        = 0x1B
OSR            = 0x1C
ODR            = 0x1D
CONFIG         = 0x1F
CAL_DATA       = 0x31
CMD            = 0x7E

# ---------------------------
# Protocol constants
# ---------------------------
DEFAULT_I2C_ADDRESS = 0x76
EXPECTED_CHIP_ID    = 0x50
SOFT_RESET_CMD      = 0xB6
FORCED_READ_CMD     = 0x13

CALIBRATION_LENGTH  = 21
DATA_LENGTH         = 6     # pressure (3 bytes) then temperature (3 bytes)

# Temperature x2 oversampling, pressure x16, recommended per datasheet table 5.
DEFAULT_CONTROL     = 0b001100
CONVERSION_DELAY_S  = 0.050

SEA_LEVEL_HPA       = 1013.25

OSR_SETTINGS = (1, 2, 4, 8, 16, 32)          # pressure and temperature oversampling
IIR_SETTINGS = (0, 2, 4, 8, 16, 32, 64, 128)  # IIR filter coefficients (unused by default)


def osr_index(factor: int) -> int:
    """Return the register code for an oversampling factor (1, 2, 4, ... 32)."""
    try:
        return OSR_SETTINGS.index(int(factor))
    except ValueError:
        raise ValueError(
            f"oversampling must be one of {OSR_SETTINGS}, got {factor!r}"
        ) from None


def control_byte(osr_temperature: int = 2, osr_pressure: int = 16) -> int:
    """
    Build the control byte written during initialization.

    The temperature code sits in bits 3..5 and the pressure code in bits 0..2,
    so the defaults (x2, x16) give ``DEFAULT_CONTROL``.
    """
    return (osr_index(osr_temperature) << 3) | osr_index(osr_pressure)


def conversion_time_s(osr_temperature: int = 2, osr_pressure: int = 16) -> float:
    """
    Maximum measurement time for a forced conversion, from the datasheet.

    t = 234 µs + (392 µs + osr_p * 2020 µs) + (163 µs + osr_t * 2020 µs)
    """
    osr_p = OSR_SETTINGS[osr_index(osr_pressure)]
    osr_t = OSR_SETTINGS[osr_index(osr_temperature)]
    micros = 234 + (392 + osr_p * 2020) + (163 + osr_t * 2020)
    return micros / 1e6
