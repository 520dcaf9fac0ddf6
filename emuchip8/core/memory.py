"""
Memory -- the 4 KB address space of the CHIP-8 machine.

Unlike a masked RAM chip, addresses are *not* wrapped: every access
outside ``0x000-0xFFF`` raises :class:`MemoryAccessError` so that a
runaway program counter or index register shows up as an error instead
of silently aliasing low memory.
"""

from __future__ import annotations

from typing import Iterable

from emuchip8.core.constants import MEMORY_SIZE
from emuchip8.core.errors import MemoryAccessError


class Memory:
    """4096 bytes of byte-addressable RAM with bounds checking."""

    SIZE: int = MEMORY_SIZE

    def __init__(self) -> None:
        self._data: bytearray = bytearray(self.SIZE)

    def reset(self) -> None:
        """Clear the RAM contents to all zeros."""
        self._data[:] = bytes(self.SIZE)

    def __len__(self) -> int:
        return self.SIZE

    def __getitem__(self, addr: int) -> int:
        if not 0 <= addr < self.SIZE:
            raise MemoryAccessError(f"Read from ${addr:04X} outside memory")
        return self._data[addr]

    def __setitem__(self, addr: int, value: int) -> None:
        if not 0 <= addr < self.SIZE:
            raise MemoryAccessError(f"Write to ${addr:04X} outside memory")
        self._data[addr] = value & 0xFF

    # ------------------------------------------------------------------
    # Block helpers
    # ------------------------------------------------------------------

    def check_range(self, addr: int, length: int) -> None:
        """Raise :class:`MemoryAccessError` unless ``[addr, addr+length)``
        lies entirely inside memory.  A zero length is always valid."""
        if length <= 0:
            return
        if addr < 0 or addr + length > self.SIZE:
            raise MemoryAccessError(
                f"Access to ${addr:04X}-${addr + length - 1:04X} outside memory"
            )

    def load(self, addr: int, data: Iterable[int]) -> None:
        """Copy *data* into memory starting at *addr*.

        The whole range is validated before anything is written.
        """
        block = bytes(data)
        self.check_range(addr, len(block))
        self._data[addr:addr + len(block)] = block

    def read_block(self, addr: int, length: int) -> bytes:
        """Return *length* bytes starting at *addr*."""
        self.check_range(addr, length)
        return bytes(self._data[addr:addr + length])

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word at *addr*."""
        self.check_range(addr, 2)
        return (self._data[addr] << 8) | self._data[addr + 1]

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def get_snapshot(self) -> bytes:
        """Return an immutable copy of the RAM contents."""
        return bytes(self._data)

    def restore_snapshot(self, data: bytes) -> None:
        """Restore RAM contents from a previous snapshot.

        Raises:
            ValueError: If *data* is not exactly :attr:`SIZE` bytes.
        """
        if len(data) != self.SIZE:
            raise ValueError(
                f"Snapshot size mismatch: expected {self.SIZE}, got {len(data)}"
            )
        self._data[:] = data

    def __repr__(self) -> str:
        return f"Memory(size={self.SIZE})"
