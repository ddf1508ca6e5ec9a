"""Runtime configuration for the BMP3xx driver and reader."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from ..sensors import registers as reg


@dataclass(slots=True)
class DriverConfig:
    """
    Tuning knobs for how the sensor is addressed, configured and polled.

    ``conversion_delay_s`` may be ``"auto"`` to derive the wait from the
    configured oversampling instead of the fixed 50 ms.
    """

    bus: int = 1
    address: int = reg.DEFAULT_I2C_ADDRESS

    osr_temperature: int = 2
    osr_pressure: int = 16
    conversion_delay_s: float | str = reg.CONVERSION_DELAY_S

    # Per-operation bus timeout; 0 disables it.
    op_timeout_s: float = 1.0
    short_read_policy: str = "warn"

    sea_level_hpa: float = reg.SEA_LEVEL_HPA
    poll_interval_s: float = 2.0

    def sanitized(self) -> DriverConfig:
        """Return a copy with values coerced and validated."""
        policy = str(self.short_read_policy).strip().lower()
        if policy not in {"warn", "strict"}:
            raise ValueError(f"short_read_policy must be 'warn' or 'strict', got {policy!r}")

        delay: float | str = self.conversion_delay_s
        if isinstance(delay, str) and delay.strip().lower() == "auto":
            delay = "auto"
        else:
            delay = max(0.0, float(delay))

        # Raises ValueError for unsupported oversampling factors.
        reg.control_byte(int(self.osr_temperature), int(self.osr_pressure))

        return DriverConfig(
            bus=int(self.bus),
            address=_parse_address(self.address),
            osr_temperature=int(self.osr_temperature),
            osr_pressure=int(self.osr_pressure),
            conversion_delay_s=delay,
            op_timeout_s=max(0.0, float(self.op_timeout_s or 0.0)),
            short_read_policy=policy,
            sea_level_hpa=float(self.sea_level_hpa),
            poll_interval_s=max(0.0, float(self.poll_interval_s)),
        )

    def resolved_conversion_delay_s(self) -> float:
        if self.conversion_delay_s == "auto":
            return reg.conversion_time_s(self.osr_temperature, self.osr_pressure)
        return float(self.conversion_delay_s)


def _parse_address(value: Any) -> int:
    """Accept ``0x76``, ``118`` or the string ``"0x76"``."""
    if isinstance(value, str):
        text = value.strip().lower()
        address = int(text, 16) if text.startswith("0x") else int(text)
    else:
        address = int(value)
    if not 0x03 <= address <= 0x77:
        raise ValueError(f"I2C address out of range: 0x{address:02x}")
    return address


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`DriverConfig`."""
    return {f.name for f in fields(DriverConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten a top-level ``bmp3xx`` section into the root mapping."""
    if "bmp3xx" in data and isinstance(data["bmp3xx"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "bmp3xx":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> DriverConfig:
    """Build :class:`DriverConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return DriverConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return DriverConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> DriverConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`DriverConfig`.
    """
    if path is None:
        return DriverConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return DriverConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["DriverConfig", "config_from_mapping", "load_config"]
