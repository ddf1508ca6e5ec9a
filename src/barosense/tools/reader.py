"""
Command-line BMP3xx reader.

Initializes the sensor, then triggers a reading every ``--interval`` seconds
and prints one JSON line per reading (temperature, pressure and altitude
against ``--sea-level``). Read errors are logged and polling continues.

Configuration via YAML
----------------------
``--config /path/to/barosense.yaml`` supplies defaults (optionally under a
``bmp3xx:`` section); explicit command-line options are applied on top.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from typing import Callable, Optional, Sequence

from ..analysis.conversions import altitude_meters
from ..bus.transport import SMBusTransport
from ..config.runtime import DriverConfig, load_config
from ..sensors.bmp3xx import BMP3xx
from ..sensors.errors import SensorError

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read a BMP3xx barometric sensor over I2C")
    parser.add_argument("--config", type=str, help="YAML config file")
    parser.add_argument("--bus", type=int, help="I2C bus number (default: 1)")
    parser.add_argument("--address", type=str, help="I2C address, e.g. 0x76")
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between readings (default: 2.0)",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=0,
        help="Stop after this many successful readings (default: run until Ctrl-C)",
    )
    parser.add_argument(
        "--sea-level",
        type=float,
        help="Sea-level pressure in hPa used for altitude (default: 1013.25)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity on stderr",
    )
    parser.add_argument(
        "--exit-on-init-failure",
        action="store_true",
        help="Exit with status 1 if the first initialize() fails instead of re-polling",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> DriverConfig:
    """Read defaults from ``--config`` and apply explicit CLI options on top."""
    cfg = load_config(args.config)
    overrides = {}
    if args.bus is not None:
        overrides["bus"] = args.bus
    if args.address is not None:
        overrides["address"] = args.address
    if args.interval is not None:
        overrides["poll_interval_s"] = args.interval
    if args.sea_level is not None:
        overrides["sea_level_hpa"] = args.sea_level
    return replace(cfg, **overrides).sanitized()


async def poll(
    sensor: BMP3xx,
    cfg: DriverConfig,
    *,
    count: int = 0,
    exit_on_init_failure: bool = False,
    emit: Callable[[dict], None] | None = None,
) -> int:
    """
    Initialize ``sensor`` and emit readings until ``count`` is reached.

    A failed initialize is retried on the next poll unless
    ``exit_on_init_failure`` is set, in which case 1 is returned.
    """
    emit = emit or (lambda row: print(json.dumps(row), flush=True))

    try:
        await sensor.initialize()
        logger.info("BMP3xx initialization succeeded")
    except SensorError as exc:
        logger.error("BMP3xx initialization failed: %s", exc)
        if exit_on_init_failure:
            return 1

    done = 0
    while not count or done < count:
        try:
            if sensor.calibration is None:
                await sensor.initialize()
            reading = await sensor.read_sensor_data()
        except SensorError as exc:
            logger.error("BMP3xx read error: %s", exc)
        else:
            row = reading.as_dict()
            row["altitude_m"] = altitude_meters(reading.pressure_hPa, cfg.sea_level_hpa)
            emit(row)
            done += 1
            if count and done >= count:
                break
        await asyncio.sleep(cfg.poll_interval_s)
    return 0


async def _run(cfg: DriverConfig, count: int, exit_on_init_failure: bool) -> int:
    async with SMBusTransport(cfg.bus, op_timeout_s=cfg.op_timeout_s) as transport:
        sensor = BMP3xx.from_config(transport, cfg)
        return await poll(
            sensor, cfg, count=count, exit_on_init_failure=exit_on_init_failure
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        cfg = resolve_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        return asyncio.run(_run(cfg, args.count, args.exit_on_init_failure))
    except KeyboardInterrupt:
        # Allow clean exit on Ctrl+C
        return 0
    except SensorError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
