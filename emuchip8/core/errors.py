"""
Exception types raised by the CHIP-8 core.

Host I/O failures (missing ROM file, unreadable file) are *not* part of
this hierarchy; they surface as the ``OSError`` raised by ``open``.
"""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for all errors raised by the emulated machine."""


class RomSizeError(Chip8Error):
    """The program image does not fit into program space."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"Program image is {size} bytes; at most {limit} bytes fit at 0x200"
        )
        self.size = size
        self.limit = limit


class MachineError(Chip8Error):
    """A fatal runtime state error.

    Attributes:
        pc: The program counter *after* the fetch advance, or ``None``
            when the error happened during the fetch itself.
        opcode: The instruction word being executed, if any.
    """

    def __init__(self, message: str, pc: Optional[int] = None,
                 opcode: Optional[int] = None) -> None:
        super().__init__(message)
        self.pc = pc
        self.opcode = opcode

    def __str__(self) -> str:
        text = super().__str__()
        if self.opcode is not None:
            text += f" (opcode ${self.opcode:04X})"
        if self.pc is not None:
            text += f" (pc ${self.pc:04X})"
        return text


class StackOverflowError(MachineError):
    """A subroutine call was made with every stack slot in use."""


class StackUnderflowError(MachineError):
    """A subroutine return was executed with an empty stack."""


class MemoryAccessError(MachineError):
    """An address outside 0x000-0xFFF was read or written."""


class MachineHaltedError(Chip8Error):
    """``step()`` was called on a machine stopped by a fatal error."""
