from __future__ import annotations

import asyncio
import json

import pytest

from barosense.config.runtime import DriverConfig
from barosense.sensors import registers as reg
from barosense.sensors.bmp3xx import BMP3xx
from barosense.tools import reader
from barosense.tools.reader import poll, resolve_config

from conftest import FakeBus


def _cfg() -> DriverConfig:
    return DriverConfig(poll_interval_s=0.0, conversion_delay_s=0.0)


def test_poll_emits_readings_with_altitude(fake_bus: FakeBus) -> None:
    rows = []
    sensor = BMP3xx.from_config(fake_bus, _cfg())

    status = asyncio.run(poll(sensor, _cfg(), count=2, emit=rows.append))

    assert status == 0
    assert len(rows) == 2
    assert set(rows[0]) == {"temperature_C", "pressure_hPa", "altitude_m"}
    assert rows[0]["temperature_C"] == pytest.approx(25.0)
    # 1014.25 hPa is slightly below sea level at the standard reference.
    assert rows[0]["altitude_m"] < 0.0


def test_poll_keeps_going_after_read_error(fake_bus: FakeBus) -> None:
    rows = []
    fake_bus.fail("block", reg.PRESSURE_DATA)
    sensor = BMP3xx.from_config(fake_bus, _cfg())

    asyncio.run(poll(sensor, _cfg(), count=1, emit=rows.append))

    assert len(rows) == 1
    data_reads = [e for e in fake_bus.log if e[0] == "block" and e[2] == reg.PRESSURE_DATA]
    assert len(data_reads) == 2


def test_poll_retries_initialize_after_fault() -> None:
    bus = FakeBus()
    bus.fail("read", reg.CHIP_ID)
    rows = []
    sensor = BMP3xx.from_config(bus, _cfg())

    asyncio.run(poll(sensor, _cfg(), count=1, emit=rows.append))

    assert len(rows) == 1
    assert bus.chip_id_reads == 1


def test_poll_exit_on_init_failure() -> None:
    sensor = BMP3xx.from_config(FakeBus(chip_id=0x11), _cfg())
    rows = []

    status = asyncio.run(
        poll(sensor, _cfg(), count=1, exit_on_init_failure=True, emit=rows.append)
    )

    assert status == 1
    assert rows == []


def test_cli_options_override_config(tmp_path) -> None:
    path = tmp_path / "barosense.yaml"
    path.write_text("bmp3xx:\n  bus: 0\n  address: 0x77\n  sea_level_hpa: 990\n", encoding="utf-8")
    args = reader._build_arg_parser().parse_args(
        ["--config", str(path), "--address", "0x76", "--interval", "0.5"]
    )

    cfg = resolve_config(args)

    assert cfg.bus == 0
    assert cfg.address == 0x76
    assert cfg.sea_level_hpa == 990.0
    assert cfg.poll_interval_s == 0.5


def test_main_prints_json_lines(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    class FakeTransport(FakeBus):
        def __init__(self, bus: int, op_timeout_s=None) -> None:
            super().__init__()

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info) -> None:
            return None

    monkeypatch.setattr(reader, "SMBusTransport", FakeTransport)

    status = reader.main(["--count", "1", "--interval", "0"])

    assert status == 0
    row = json.loads(capsys.readouterr().out.strip())
    assert row["pressure_hPa"] == pytest.approx(1014.25)


def test_poll_rows_are_json_serializable(fake_bus: FakeBus) -> None:
    rows = []
    sensor = BMP3xx.from_config(fake_bus, _cfg())

    asyncio.run(poll(sensor, _cfg(), count=1, emit=rows.append))

    assert type(rows[0]["altitude_m"]) is float
    assert json.loads(json.dumps(rows[0])) == rows[0]
