"""
Machine creation factory for emuchip8.

Creates a loaded, ready-to-run :class:`~emuchip8.core.machine.Chip8`
from a ROM file path.

Typical usage::

    machine = MachineFactory.create("pong.ch8")
    machine = MachineFactory.create("test.ch8", seed=1234)
"""

from __future__ import annotations

import logging
from typing import Optional

from emuchip8.core.logger import ILogger
from emuchip8.core.machine import Chip8
from emuchip8.shell.services.rom_bytes_service import RomBytesService

logger = logging.getLogger(__name__)


class MachineFactory:
    """Create an emulated CHIP-8 machine from a ROM file."""

    @staticmethod
    def create(
        rom_path: str,
        seed: Optional[int] = None,
        core_logger: Optional[ILogger] = None,
    ) -> Chip8:
        """Build and return a machine with the ROM loaded at 0x200.

        Parameters
        ----------
        rom_path:
            Filesystem path to the program image.
        seed:
            Optional seed for the RND instruction.  ``None`` seeds from
            the operating system.
        core_logger:
            Optional :class:`ILogger` for the machine core.

        Returns
        -------
        Chip8
            A machine whose first :meth:`~Chip8.step` executes the
            instruction at 0x200.

        Raises
        ------
        FileNotFoundError
            If *rom_path* does not exist.
        OSError
            If the file cannot be read.
        RomSizeError
            If the image is larger than program space.
        """
        logger.info("Loading ROM: %s", rom_path)
        rom_bytes = RomBytesService.read(rom_path)
        logger.info("ROM size: %d bytes", len(rom_bytes))

        machine = Chip8(seed=seed, logger=core_logger)
        machine.load_program(rom_bytes)
        logger.info("Machine created: %r", machine)

        return machine

    @staticmethod
    def describe(rom_path: str) -> dict[str, str]:
        """Return a human-readable description of a ROM file.

        See :meth:`RomBytesService.describe`.
        """
        return RomBytesService.describe(rom_path)
