"""
BMP3xx protocol state machine.

One :class:`BMP3xx` owns one device on one bus address. It is not safe to
share between concurrent callers; serialize calls (one request in flight).

Lifecycle::

  UNINITIALIZED --initialize()--> CALIBRATED --reset()--> UNINITIALIZED
        \\                              |
         `------- failure ----------> FAULTED

Reads issued while UNINITIALIZED run :meth:`BMP3xx.initialize` first, once.
After an explicit :meth:`BMP3xx.reset`, or while FAULTED, reads raise
:class:`NotReadyError` until ``initialize()`` is called again.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import TYPE_CHECKING, Optional

from . import registers as reg
from .calibration import CalibrationCoefficients, decode_calibration
from .compensation import RawSample, SensorReading, compensate, unpack_raw_sample
from .errors import IdentityError, IoError, NotReadyError

if TYPE_CHECKING:
    from ..bus.transport import BusTransport
    from ..config.runtime import DriverConfig

logger = logging.getLogger(__name__)

SHORT_READ_POLICIES = ("warn", "strict")


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    CALIBRATED = "calibrated"
    FAULTED = "faulted"


class BMP3xx:
    """
    Driver for a Bosch BMP388/BMP390 on an async :class:`BusTransport`.

    Parameters
    ----------
    transport:
        Bus used for every register transfer.
    address:
        7-bit I²C address (default 0x76).
    control:
        Oversampling/mode byte written at the end of initialization.
    conversion_delay_s:
        Wait between the forced-read command and the data read.
    short_read_policy:
        ``"warn"`` logs a short calibration read and decodes the zero-padded
        block; ``"strict"`` raises :class:`IoError`.
    """

    def __init__(
        self,
        transport: "BusTransport",
        address: int = reg.DEFAULT_I2C_ADDRESS,
        *,
        control: int = reg.DEFAULT_CONTROL,
        conversion_delay_s: float = reg.CONVERSION_DELAY_S,
        short_read_policy: str = "warn",
    ) -> None:
        if short_read_policy not in SHORT_READ_POLICIES:
            raise ValueError(
                f"short_read_policy must be one of {SHORT_READ_POLICIES}, got {short_read_policy!r}"
            )
        self.transport = transport
        self.address = address
        self.control = control
        self.conversion_delay_s = float(conversion_delay_s)
        self.short_read_policy = short_read_policy

        self._state = SessionState.UNINITIALIZED
        self._cal: Optional[CalibrationCoefficients] = None
        self._reset_pending = False

    @classmethod
    def from_config(cls, transport: "BusTransport", config: "DriverConfig") -> "BMP3xx":
        return cls(
            transport,
            config.address,
            control=reg.control_byte(config.osr_temperature, config.osr_pressure),
            conversion_delay_s=config.resolved_conversion_delay_s(),
            short_read_policy=config.short_read_policy,
        )

    # ------------------------------------------------------------------ state
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def calibration(self) -> Optional[CalibrationCoefficients]:
        return self._cal

    # ------------------------------------------------------------------ init
    async def read_chip_id(self) -> int:
        await self.transport.write_byte(self.address, reg.CHIP_ID, 0)
        chip_id = await self.transport.read_byte(self.address, reg.CHIP_ID)
        if chip_id != reg.EXPECTED_CHIP_ID:
            raise IdentityError(chip_id, reg.EXPECTED_CHIP_ID)
        logger.info("Found BMP3xx chip ID 0x%02x at address 0x%02x", chip_id, self.address)
        return chip_id

    async def load_calibration(self) -> CalibrationCoefficients:
        block = await self.transport.read_block(
            self.address, reg.CAL_DATA, reg.CALIBRATION_LENGTH
        )
        if len(block) < reg.CALIBRATION_LENGTH:
            message = f"Expected {reg.CALIBRATION_LENGTH} calibration bytes, got {len(block)}"
            if self.short_read_policy == "strict":
                raise IoError(message, register=reg.CAL_DATA)
            logger.warning("%s; decoding zero-padded block", message)
        return decode_calibration(block)

    async def initialize(self) -> int:
        """
        Verify the chip ID, load calibration and write the control byte.

        Returns the chip ID. On any failure the session becomes FAULTED, the
        partially loaded calibration is dropped and the error propagates.
        """
        self._cal = None
        try:
            chip_id = await self.read_chip_id()
            cal = await self.load_calibration()
            await self.transport.write_byte(self.address, reg.CONTROL, self.control)
        except BaseException as exc:
            self._state = SessionState.FAULTED
            logger.warning("BMP3xx at 0x%02x faulted during initialize: %s", self.address, exc)
            raise

        self._cal = cal
        self._reset_pending = False
        self._state = SessionState.CALIBRATED
        return chip_id

    async def reset(self) -> None:
        """
        Issue the soft-reset command and drop calibration.

        Calibration is cleared even if the command write fails. ``initialize()``
        must be called again before further reads.
        """
        self._cal = None
        self._state = SessionState.UNINITIALIZED
        self._reset_pending = True
        await self.transport.write_byte(self.address, reg.CMD, reg.SOFT_RESET_CMD)

    # ------------------------------------------------------------------ reads
    async def _ensure_ready(self) -> CalibrationCoefficients:
        if self._state is SessionState.FAULTED:
            raise NotReadyError("BMP3xx session is faulted; call initialize() to recover")
        if self._reset_pending:
            raise NotReadyError("BMP3xx was reset; call initialize() before reading")
        if self._state is SessionState.UNINITIALIZED:
            await self.initialize()
        assert self._cal is not None
        return self._cal

    async def trigger_measurement(self) -> None:
        """Start a forced conversion and wait out the conversion time."""
        await self._ensure_ready()
        await self.transport.write_byte(self.address, reg.CONTROL, reg.FORCED_READ_CMD)
        await asyncio.sleep(self.conversion_delay_s)

    async def read_raw(self) -> RawSample:
        data = await self.transport.read_block(self.address, reg.PRESSURE_DATA, reg.DATA_LENGTH)
        raw = unpack_raw_sample(data)
        logger.debug("Raw T: %d, raw P: %d", raw.temperature, raw.pressure)
        return raw

    async def get_compensated_reading(self) -> SensorReading:
        """Read and compensate the current data registers (no trigger)."""
        cal = await self._ensure_ready()
        raw = await self.read_raw()
        return compensate(raw, cal)

    async def read_sensor_data(self) -> SensorReading:
        """Trigger a conversion, wait, then read and compensate."""
        await self.trigger_measurement()
        return await self.get_compensated_reading()
