"""
ROM loading service for emuchip8.

CHIP-8 program images are raw bytes: no header, no metadata.  The
service reads them from disk, checks that they fit into program space,
and produces a short description for the ``--info`` command.

I/O failures are left to propagate as the ``OSError`` raised by
``open`` so callers can tell "could not read the file" apart from
"the file is not a usable program" (:class:`RomSizeError`).
"""

from __future__ import annotations

import os

from emuchip8.core.constants import MAX_PROGRAM_SIZE, PROGRAM_START
from emuchip8.core.errors import RomSizeError
from emuchip8.core.opcodes import mnemonic


# Extensions commonly used for CHIP-8 program images.
_ROM_EXTENSIONS: frozenset[str] = frozenset({".ch8", ".c8", ".rom", ".bin"})


class RomBytesService:
    """Static utility for loading ROM files."""

    # -- reading -----------------------------------------------------------

    @staticmethod
    def read(path: str) -> bytes:
        """Read a program image from *path*.

        Returns:
            The raw image bytes.

        Raises:
            FileNotFoundError: If *path* does not exist.
            OSError: On general I/O failure.
            RomSizeError: If the image does not fit at 0x200.
        """
        with open(path, "rb") as fh:
            data = fh.read()
        RomBytesService.check_size(data)
        return data

    @staticmethod
    def check_size(data: bytes) -> None:
        """Raise :class:`RomSizeError` if *data* is larger than program space."""
        if len(data) > MAX_PROGRAM_SIZE:
            raise RomSizeError(len(data), MAX_PROGRAM_SIZE)

    # -- description -------------------------------------------------------

    @staticmethod
    def describe(path: str) -> dict[str, str]:
        """Return a human-readable description of a ROM file.

        Returns a dict with keys: ``title``, ``rom_size``, ``free_space``,
        ``end_address``, ``first_instruction``.
        """
        data = RomBytesService.read(path)
        size = len(data)

        if size >= 2:
            first = f"{(data[0] << 8) | data[1]:04X}  {mnemonic((data[0] << 8) | data[1])}"
        else:
            first = "(none)"

        return {
            "title": RomBytesService.title(path),
            "rom_size": f"{size} bytes",
            "free_space": f"{MAX_PROGRAM_SIZE - size} bytes",
            "end_address": f"${PROGRAM_START + max(size, 1) - 1:03X}",
            "first_instruction": first,
        }

    @staticmethod
    def title(path: str) -> str:
        """Derive a display title from the file name."""
        base = os.path.basename(path)
        stem, ext = os.path.splitext(base)
        if ext.lower() in _ROM_EXTENSIONS:
            base = stem
        return base.replace("_", " ").strip() or base
