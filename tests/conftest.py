import pathlib
import struct
import sys
from typing import Dict, List, Optional, Tuple

import pytest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from barosense.sensors import registers as reg  # noqa: E402
from barosense.sensors.errors import IoError  # noqa: E402

# T = (adc_T - 27500 * 256) / 2**16, P(Pa) = 4 * T + adc_P / 128
CAL_BLOCK = struct.pack(
    "<HHbhhbbHHbbhbb",
    27500,  # T1 -> 7_040_000
    16384,  # T2 -> 2**-16
    0,
    24576,  # P1 -> 2**-7
    16384,  # P2 -> 0
    0,
    0,
    0,
    256,  # P6 -> 4.0
    0,
    0,
    0,
    0,
    0,
)

# adc_P = 0xC5E680 (12_969_600), adc_T = 0x846C00 (8_678_400): 25.0 °C, 1014.25 hPa
DATA_BLOCK = bytes([0x80, 0xE6, 0xC5, 0x00, 0x6C, 0x84])

# Typical-magnitude trim values with every term populated (signed fields negative
# where BMP388 parts usually are).
FULL_CAL_BLOCK = struct.pack(
    "<HHbhhbbHHbbhbb",
    27500,  # T1
    19000,  # T2
    -7,  # T3
    -1500,  # P1
    -3000,  # P2
    35,  # P3
    1,  # P4
    25000,  # P5
    30000,  # P6
    3,  # P7
    -6,  # P8
    16000,  # P9
    5,  # P10
    -60,  # P11
)

# adc_P = 0x602160 (6_300_000), adc_T = 0x7E7ED0 (8_290_000): ~22.0801 °C, ~997.722 hPa
FULL_DATA_BLOCK = bytes([0x60, 0x21, 0x60, 0xD0, 0x7E, 0x7E])


class FakeBus:
    """In-memory BusTransport with scripted failures and a transfer log."""

    def __init__(
        self,
        chip_id: int = reg.EXPECTED_CHIP_ID,
        cal_block: bytes = CAL_BLOCK,
        data_block: bytes = DATA_BLOCK,
    ) -> None:
        self.chip_id = chip_id
        self.blocks: Dict[int, bytes] = {
            reg.CAL_DATA: cal_block,
            reg.PRESSURE_DATA: data_block,
        }
        self.log: List[Tuple] = []
        self.failures: Dict[Tuple[str, int], int] = {}
        self.chip_id_reads = 0

    def fail(self, op: str, register: int, times: int = 1) -> None:
        self.failures[(op, register)] = times

    def _maybe_fail(self, op: str, register: int) -> None:
        remaining = self.failures.get((op, register), 0)
        if remaining:
            self.failures[(op, register)] = remaining - 1
            raise IoError(f"{op} 0x{register:02x} failed", register=register)

    async def write_byte(self, address: int, register: int, value: int) -> None:
        self.log.append(("write", address, register, value))
        self._maybe_fail("write", register)

    async def read_byte(self, address: int, register: int) -> int:
        self.log.append(("read", address, register))
        self._maybe_fail("read", register)
        if register == reg.CHIP_ID:
            self.chip_id_reads += 1
            return self.chip_id
        return 0

    async def read_block(self, address: int, register: int, length: int) -> bytes:
        self.log.append(("block", address, register, length))
        self._maybe_fail("block", register)
        return self.blocks.get(register, b"")[:length]

    def writes(self, register: Optional[int] = None) -> List[int]:
        return [
            entry[3]
            for entry in self.log
            if entry[0] == "write" and (register is None or entry[2] == register)
        ]


@pytest.fixture
def fake_bus() -> FakeBus:
    return FakeBus()
