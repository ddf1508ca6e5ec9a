"""
Unit conversions and derived weather quantities.

All helpers are NumPy ufunc based, so they accept arrays of readings and
return an array of the same shape. Scalar inputs return a plain ``float``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from ..sensors.registers import SEA_LEVEL_HPA

HPA_TO_INHG = 0.02952998751
M_TO_FT = 3.28084


def _result(values: np.ndarray) -> np.ndarray | float:
    if np.ndim(values) == 0:
        return float(values)
    return values


def celsius_to_fahrenheit(temperature_c: ArrayLike) -> np.ndarray | float:
    return _result(np.asarray(temperature_c, dtype=float) * 9 / 5 + 32)


def hectopascal_to_inches_of_mercury(pressure_hpa: ArrayLike) -> np.ndarray | float:
    return _result(np.asarray(pressure_hpa, dtype=float) * HPA_TO_INHG)


def meters_to_feet(meters: ArrayLike) -> np.ndarray | float:
    return _result(np.asarray(meters, dtype=float) * M_TO_FT)


def heat_index_celsius(temperature_c: ArrayLike, humidity: ArrayLike) -> np.ndarray | float:
    """Heat index in °C from temperature (°C) and relative humidity (%)."""
    t = np.asarray(temperature_c, dtype=float)
    rh = np.asarray(humidity, dtype=float)
    return _result(
        -8.784695
        + 1.61139411 * t
        + 2.33854900 * rh
        + -0.14611605 * t * rh
        + -0.01230809 * t ** 2
        + -0.01642482 * rh ** 2
        + 0.00221173 * t ** 2 * rh
        + 0.00072546 * t * rh ** 2
        + -0.00000358 * t ** 2 * rh ** 2
    )


def dew_point_celsius(temperature_c: ArrayLike, humidity: ArrayLike) -> np.ndarray | float:
    """Dew point in °C (Magnus formula, 243.04 °C / 17.625)."""
    t = np.asarray(temperature_c, dtype=float)
    rh = np.asarray(humidity, dtype=float)
    log_rh = np.log(rh / 100.0)
    gamma = (17.625 * t) / (243.04 + t)
    return _result(243.04 * (log_rh + gamma) / (17.625 - log_rh - gamma))


def altitude_meters(
    pressure_hpa: ArrayLike, sea_level_hpa: float | None = SEA_LEVEL_HPA
) -> np.ndarray | float:
    """
    Pressure altitude in metres relative to ``sea_level_hpa``.

    A missing or zero sea-level pressure falls back to 1013.25 hPa.
    """
    if not sea_level_hpa:
        sea_level_hpa = SEA_LEVEL_HPA
    p = np.asarray(pressure_hpa, dtype=float)
    return _result((1.0 - np.power(p / sea_level_hpa, 1 / 5.2553)) * 145366.45 * 0.3048)
