"""emuchip8 -- CHIP-8 interpreter."""

from emuchip8.core.machine import Chip8

__all__ = ["Chip8"]
