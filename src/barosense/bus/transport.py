"""
Async I²C transports consumed by the BMP3xx driver.

:class:`BusTransport` is the contract: byte writes, byte reads and block
reads addressed by 7-bit device address and register offset. Failures are
raised as :class:`~barosense.sensors.errors.IoError`.

:class:`SMBusTransport` implements it on top of ``smbus2``. The blocking
SMBus calls run in a worker thread via :func:`asyncio.to_thread`, each
bounded by an optional timeout. Transfers are serialized by a lock held for
the whole SMBus call, so a timed-out transfer still occupies the bus until it
returns, and a transfer whose caller gave up while waiting is never issued.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Optional, Protocol, TypeVar

from smbus2 import SMBus

from ..sensors.errors import IoError
from ..tools.debug import time_block

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BusTransport(Protocol):
    async def write_byte(self, address: int, register: int, value: int) -> None: ...

    async def read_byte(self, address: int, register: int) -> int: ...

    async def read_block(self, address: int, register: int, length: int) -> bytes: ...


class SMBusTransport:
    """smbus2-backed transport for a single Linux I²C bus (``/dev/i2c-N``)."""

    def __init__(self, bus: int = 1, *, op_timeout_s: Optional[float] = 1.0) -> None:
        self.bus_number = bus
        self.op_timeout_s = op_timeout_s if op_timeout_s else None
        self._bus: Optional[SMBus] = None
        self._transfer_lock = threading.Lock()

    # ------------------------------------------------------------------ lifecycle
    def open(self) -> SMBus:
        if self._bus is None:
            try:
                self._bus = SMBus(self.bus_number)
            except OSError as exc:
                raise IoError(f"Cannot open i2c-{self.bus_number}: {exc}") from exc
            logger.debug("Opened i2c-%d", self.bus_number)
        return self._bus

    def close(self) -> None:
        if self._bus is not None:
            self._bus.close()
            self._bus = None

    async def __aenter__(self) -> "SMBusTransport":
        self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ transfers
    def _transfer(
        self, abandoned: threading.Event, fn: Callable[..., T], bus: SMBus, *args: Any
    ) -> T:
        # Runs in the worker thread. The lock is held until the SMBus call
        # returns, even if the awaiting coroutine already timed out.
        with self._transfer_lock:
            if abandoned.is_set():
                raise IoError("transfer abandoned after timeout")
            return fn(bus, *args)

    async def _call(self, label: str, register: int, fn: Callable[..., T], *args: Any) -> T:
        bus = self.open()
        abandoned = threading.Event()
        try:
            with time_block(f"i2c-{self.bus_number} {label} reg 0x{register:02x}"):
                return await asyncio.wait_for(
                    asyncio.to_thread(self._transfer, abandoned, fn, bus, *args),
                    timeout=self.op_timeout_s,
                )
        except asyncio.TimeoutError as exc:
            abandoned.set()
            raise IoError(
                f"{label} on i2c-{self.bus_number} reg 0x{register:02x} timed out "
                f"after {self.op_timeout_s:.3f} s",
                register=register,
            ) from exc
        except OSError as exc:
            if isinstance(exc, IoError):
                raise
            raise IoError(
                f"{label} on i2c-{self.bus_number} reg 0x{register:02x} failed: {exc}",
                register=register,
            ) from exc

    async def write_byte(self, address: int, register: int, value: int) -> None:
        await self._call(
            "write_byte",
            register,
            lambda bus, a, r, v: bus.write_byte_data(a, r, v & 0xFF),
            address,
            register,
            value,
        )

    async def read_byte(self, address: int, register: int) -> int:
        return await self._call(
            "read_byte", register, lambda bus, a, r: bus.read_byte_data(a, r), address, register
        )

    async def read_block(self, address: int, register: int, length: int) -> bytes:
        data = await self._call(
            "read_block",
            register,
            lambda bus, a, r, n: bus.read_i2c_block_data(a, r, n),
            address,
            register,
            length,
        )
        return bytes(data)
