"""
MachineState -- every piece of mutable CHIP-8 state in one aggregate.

The state object is plain data.  The cycle driver
(:class:`~emuchip8.core.machine.Chip8`) owns exactly one instance and
passes it to each instruction handler; nothing else keeps a reference
to its parts between cycles.

Fields
------

=============  ============================================  ==========
Field          Meaning                                       Power-on
=============  ============================================  ==========
v              V0-VF, 8-bit each; VF doubles as flags        zeros
memory         4 KB :class:`Memory`                          zeros
index          I register (16-bit)                           0
pc             program counter                               0x200
stack          16 return addresses                           zeros
sp             stack pointer, 0-16                           0
delay_timer    8-bit, ticks down once per cycle              0
sound_timer    8-bit, ticks down once per cycle              0
keypad         :class:`Keypad` snapshot                      released
display        :class:`DisplayBuffer`                        all off
opcode         last fetched instruction word                 0
rng            random source for RND, seeded once            --
=============  ============================================  ==========
"""

from __future__ import annotations

import random
from typing import List, Optional

from emuchip8.core.constants import (
    PROGRAM_START,
    REGISTER_COUNT,
    STACK_DEPTH,
)
from emuchip8.core.display import DisplayBuffer
from emuchip8.core.keypad import Keypad
from emuchip8.core.memory import Memory


class MachineState:
    """Register file, memory, stack, timers, keypad and display."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.v: bytearray = bytearray(REGISTER_COUNT)
        self.memory: Memory = Memory()
        self.index: int = 0
        self.pc: int = PROGRAM_START
        self.stack: List[int] = [0] * STACK_DEPTH
        self.sp: int = 0
        self.delay_timer: int = 0
        self.sound_timer: int = 0
        self.keypad: Keypad = Keypad()
        self.display: DisplayBuffer = DisplayBuffer()
        self.opcode: int = 0

        # One generator per machine; RND never reseeds it.
        self.rng: random.Random = random.Random(seed)

    def clear(self) -> None:
        """Return every field except :attr:`rng` to its power-on value."""
        self.v[:] = bytes(REGISTER_COUNT)
        self.memory.reset()
        self.index = 0
        self.pc = PROGRAM_START
        self.stack[:] = [0] * STACK_DEPTH
        self.sp = 0
        self.delay_timer = 0
        self.sound_timer = 0
        self.keypad.clear_all()
        self.display.clear()
        self.opcode = 0

    def __repr__(self) -> str:
        regs = " ".join(f"V{i:X}={val:02X}" for i, val in enumerate(self.v))
        return (
            f"MachineState(PC=${self.pc:04X} I=${self.index:04X} SP={self.sp} "
            f"DT={self.delay_timer} ST={self.sound_timer} {regs})"
        )
