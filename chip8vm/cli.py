#!/usr/bin/env python3
"""Command-line entry point: run a ROM file on the CHIP-8 VM."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import BACKEND_CHOICES, VMConfig
from .errors import HostAdapterError, VMError
from .host import create_host
from .machine import Chip8
from .scheduler import Scheduler

logger = logging.getLogger("chip8vm")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8vm", description="Run a CHIP-8 ROM"
    )
    parser.add_argument("rom", metavar="ROM_FILE", help="The ROM file to run")
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        default=None,
        help="Log every executed instruction (default: off)",
    )
    parser.add_argument(
        "-l",
        "--library",
        choices=BACKEND_CHOICES,
        default=None,
        help="Host backend to use (default: pygame)",
    )
    parser.add_argument(
        "-H",
        "--hertz",
        type=float,
        default=None,
        help="Instruction frequency in Hz (default: 500)",
    )
    parser.add_argument(
        "-w", "--width", type=int, default=None, help="Window width (default: 640)"
    )
    parser.add_argument(
        "--height", type=int, default=None, help="Window height (default: 320)"
    )
    parser.add_argument(
        "--stack-limit",
        type=int,
        default=None,
        help="Maximum call depth (default: 16)",
    )
    parser.add_argument("--config", type=str, help="JSON configuration file")
    parser.add_argument(
        "--max-seconds",
        type=float,
        default=None,
        help="Stop after this many seconds of wall time",
    )
    parser.add_argument(
        "--frames-dir",
        type=str,
        default=None,
        help="Write PNG frames here (headless backend only)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> VMConfig:
    """Defaults < environment < config file < command line."""
    config = VMConfig.from_env()
    if args.config:
        config = config.merged_with_file(args.config)
    return config.with_overrides(
        rom=args.rom,
        debug=args.debug,
        backend=args.library,
        hertz=args.hertz,
        window_width=args.width,
        window_height=args.height,
        stack_limit=args.stack_limit,
    )


def run(
    config: VMConfig,
    *,
    max_seconds: Optional[float] = None,
    frames_dir: Optional[str] = None,
) -> int:
    """Run ``config.rom`` to completion and return a process exit status."""
    rom_path = Path(config.rom) if config.rom else None
    if rom_path is None or not rom_path.is_file():
        logger.error("ROM file does not exist: %s", config.rom)
        return 1

    machine = Chip8(stack_limit=config.stack_limit, trace=config.debug)
    try:
        machine.load_rom_file(rom_path)
    except VMError as exc:
        logger.error("Cannot load ROM %s: %s", rom_path, exc)
        return 1

    if frames_dir is not None and config.backend != "headless":
        logger.warning(
            "--frames-dir is only used by the headless backend; ignoring it for %s",
            config.backend,
        )
        frames_dir = None

    try:
        host = create_host(
            config.backend,
            window_width=config.window_width,
            window_height=config.window_height,
            frames_dir=frames_dir,
        )
    except HostAdapterError as exc:
        logger.error("Cannot start %s backend: %s", config.backend, exc)
        return 1

    logger.info(
        "Running %s with %s backend at %.0f Hz",
        rom_path.name,
        host.name,
        config.hertz,
    )
    with host:
        scheduler = Scheduler(
            machine,
            host,
            hertz=config.hertz,
            timer_hz=config.timer_hz,
            max_catchup_ms=config.max_catchup_ms,
        )
        try:
            scheduler.run(max_seconds=max_seconds)
        except VMError as exc:
            logger.error("VM halted: %s", exc)
            logger.debug("%s", machine.cpu.snapshot().describe())
            return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
    except (OSError, ValueError) as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error("Invalid configuration: %s", exc)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Configuration: %s", config)
    return run(config, max_seconds=args.max_seconds, frames_dir=args.frames_dir)


if __name__ == "__main__":
    sys.exit(main())
