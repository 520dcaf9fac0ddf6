"""
emuchip8 -- CHIP-8 interpreter.

Command-line entry point.  Parses arguments, creates the machine from a
ROM file, and launches the pygame window.

Usage examples::

    # Run a ROM with the default scale and speed
    emuchip8 roms/pong.ch8

    # Larger window, slower machine
    emuchip8 roms/pong.ch8 --scale 15 --delay 4

    # Show ROM metadata without launching
    emuchip8 roms/pong.ch8 --info

    # Dump registers for the first 20 cycles
    emuchip8 roms/pong.ch8 --debug 20
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from emuchip8.core.errors import Chip8Error
from emuchip8.core.logger import ConsoleLogger, ILogger
from emuchip8.core.machine import Chip8
from emuchip8.core.opcodes import mnemonic
from emuchip8.platform.window import MAX_SCALE, MIN_SCALE, Window
from emuchip8.shell.services.machine_factory import MachineFactory


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="emuchip8",
        description=(
            "CHIP-8 interpreter.  Load a ROM file and run it in a pygame window."
        ),
    )

    parser.add_argument(
        "rom",
        help="Path to the program image (.ch8, .c8, .rom, .bin)",
    )

    # Display
    parser.add_argument(
        "--scale", "-s",
        type=int,
        default=10,
        help=f"Display scale factor ({MIN_SCALE}-{MAX_SCALE}).  Default: 10.",
    )

    # Pacing
    parser.add_argument(
        "--delay", "-d",
        type=float,
        default=2.0,
        metavar="MS",
        help="Milliseconds between machine cycles.  Default: 2.",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the RND instruction (default: random).",
    )

    # Debugging / info
    parser.add_argument(
        "--info",
        action="store_true",
        default=False,
        help="Print ROM metadata and exit without launching the emulator.",
    )

    parser.add_argument(
        "--debug",
        type=int,
        default=None,
        metavar="N",
        help="Run N cycles headless, printing machine state after each, and exit.",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        default=False,
        help="Print every executed instruction and unknown opcodes to the console.",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
    )

    return parser


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(verbosity: int) -> None:
    """Set up the root logger based on requested verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Info mode
# ---------------------------------------------------------------------------

def _print_rom_info(rom_path: str) -> int:
    """Print human-readable metadata for a ROM."""
    try:
        info = MachineFactory.describe(rom_path)
    except OSError as exc:
        print(f"Error reading ROM: {exc}", file=sys.stderr)
        return 1
    except Chip8Error as exc:
        print(f"Invalid ROM: {exc}", file=sys.stderr)
        return 1

    print("CHIP-8 ROM Information")
    print("=" * 40)
    for key, value in info.items():
        label = key.replace("_", " ").title()
        print(f"  {label:20s}: {value}")
    print("=" * 40)
    return 0


# ---------------------------------------------------------------------------
# Debug mode
# ---------------------------------------------------------------------------

def _format_state(machine: Chip8) -> str:
    s = machine.state
    regs = " ".join(f"{val:02X}" for val in s.v)
    return (
        f"  PC=${s.pc:04X} I=${s.index:04X} SP={s.sp} "
        f"DT={s.delay_timer:3d} ST={s.sound_timer:3d}\n"
        f"  V: {regs}"
    )


def _run_debug(machine: Chip8, cycles: int) -> int:
    """Run *cycles* cycles headless and print machine state after each."""
    print("=" * 60)
    print("CHIP-8 Debug Trace")
    print("=" * 60)
    print(f"Machine: {machine!r}")

    for n in range(1, cycles + 1):
        pc = machine.state.pc
        try:
            machine.step()
        except Chip8Error as exc:
            print(f"\n--- Cycle {n} ---")
            print(f"  Machine error: {exc}")
            return 1
        op = machine.state.opcode
        print(f"\n--- Cycle {n}: ${pc:04X}  {op:04X}  {mnemonic(op)} ---")
        print(_format_state(machine))

    print(f"\nDisplay ({machine.display.lit_count()} pixels lit):")
    print(machine.display.to_text())
    print("=" * 60)
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` to use ``sys.argv``.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger("emuchip8.main")

    # Validate the ROM path early.
    rom_path: str = os.path.expanduser(args.rom)
    if not os.path.isfile(rom_path):
        print(f"Error: ROM file not found: {rom_path}", file=sys.stderr)
        return 1

    # Info-only mode.
    if args.info:
        return _print_rom_info(rom_path)

    core_logger: Optional[ILogger] = ConsoleLogger(3) if args.trace else None

    # Create the emulated machine.
    try:
        machine = MachineFactory.create(
            rom_path=rom_path,
            seed=args.seed,
            core_logger=core_logger,
        )
    except OSError as exc:
        print(f"Error reading ROM: {exc}", file=sys.stderr)
        return 1
    except Chip8Error as exc:
        print(f"Invalid ROM: {exc}", file=sys.stderr)
        return 1
    machine.trace_unknown_opcodes = args.trace

    # Debug mode: run a few cycles and print diagnostics.
    if args.debug is not None:
        return _run_debug(machine, args.debug)

    # Launch the window.
    logger.info("Starting emulation ...")
    try:
        window = Window(
            machine,
            scale=args.scale,
            cycle_delay_ms=args.delay,
            title=f"CHIP-8 - {os.path.basename(rom_path)}",
        )
        window.run()
    except Chip8Error as exc:
        print(f"Machine error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.exception("Fatal error during emulation")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    logger.info("Exited cleanly")
    return 0


if __name__ == "__main__":
    sys.exit(main())
