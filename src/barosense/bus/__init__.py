"""I²C transports. :class:`SMBusTransport` talks to ``/dev/i2c-N`` via smbus2."""

from .transport import BusTransport, SMBusTransport

__all__ = ["BusTransport", "SMBusTransport"]
