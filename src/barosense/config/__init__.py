"""Configuration objects and helpers for barosense.

Settings live in a small YAML file (optionally under a ``bmp3xx:`` section)
and are loaded into the typed :class:`~barosense.config.runtime.DriverConfig`.
"""

from .runtime import DriverConfig, config_from_mapping, load_config

__all__ = ["DriverConfig", "config_from_mapping", "load_config"]
