"""
Raw sample decoding and the BMP3xx compensation polynomials.

A single block read at ``PRESSURE_DATA`` returns six bytes::

  [p_xlsb, p_lsb, p_msb, t_xlsb, t_lsb, t_msb]

so each 24-bit ADC code is assembled with its most-significant byte last.
Temperature is compensated first because the pressure polynomial consumes
the compensated temperature, not the raw code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from .calibration import CalibrationCoefficients
from .errors import IoError
from .registers import DATA_LENGTH, PRESSURE_DATA


@dataclass(frozen=True)
class RawSample:
    pressure: int
    temperature: int
    humidity: Optional[int] = None


@dataclass(frozen=True)
class SensorReading:
    temperature_C: float
    pressure_hPa: float
    humidity: Optional[float] = None

    def as_dict(self) -> Dict[str, float]:
        data = {"temperature_C": self.temperature_C, "pressure_hPa": self.pressure_hPa}
        if self.humidity is not None:
            data["humidity"] = self.humidity
        return data


def uint24(msb: int, lsb: int, xlsb: int) -> int:
    return (msb << 16) | (lsb << 8) | xlsb


def unpack_raw_sample(buffer: Sequence[int]) -> RawSample:
    """Assemble a :class:`RawSample` from the six data bytes."""
    if len(buffer) < DATA_LENGTH:
        raise IoError(
            f"Read only {len(buffer)} / {DATA_LENGTH} data bytes",
            register=PRESSURE_DATA,
        )
    return RawSample(
        pressure=uint24(buffer[2], buffer[1], buffer[0]),
        temperature=uint24(buffer[5], buffer[4], buffer[3]),
    )


def compensate_temperature(adc_t: int, cal: CalibrationCoefficients) -> float:
    td1 = adc_t - cal.T1
    td2 = td1 * cal.T2
    return td2 + (td1 * td1) * cal.T3


def compensate_pressure(adc_p: int, temperature: float, cal: CalibrationCoefficients) -> float:
    """Return pressure in Pa for ``adc_p`` at the compensated ``temperature``."""
    t = temperature
    adc_p = float(adc_p)
    po1 = cal.P5 + cal.P6 * t + cal.P7 * t ** 2 + cal.P8 * t ** 3
    po2 = adc_p * (cal.P1 + cal.P2 * t + cal.P3 * t ** 2 + cal.P4 * t ** 3)
    pd1 = adc_p ** 2
    pd2 = cal.P9 + cal.P10 * t
    po3 = pd1 * pd2 + cal.P11 * adc_p ** 3
    return po1 + po2 + po3


def compensate(raw: RawSample, cal: CalibrationCoefficients) -> SensorReading:
    """Turn raw ADC codes into a :class:`SensorReading` (°C and hPa)."""
    temperature = compensate_temperature(raw.temperature, cal)
    pressure_pa = compensate_pressure(raw.pressure, temperature, cal)
    return SensorReading(temperature_C=temperature, pressure_hPa=pressure_pa / 100.0)
