"""
Chip8 -- the cycle driver for the emulated CHIP-8 machine.

A :class:`Chip8` owns one :class:`~emuchip8.core.state.MachineState`
and advances it one instruction at a time:

* :meth:`Chip8.load_program` -- copy a program image to 0x200.
* :meth:`Chip8.step` -- one fetch/decode/execute cycle plus one timer
  tick.  This is the only unit of execution; the pacing loop decides
  when to call it.
* :meth:`Chip8.reset` -- power-cycle the machine and reload the last
  program.

Runtime state errors (stack overflow/underflow, memory access outside
0x000-0xFFF) are fatal for the instance: the machine records
:attr:`Chip8.halted`, logs the error and re-raises it.  Further calls to
:meth:`step` raise :class:`MachineHaltedError` until :meth:`reset`.
"""

from __future__ import annotations

from typing import Iterable, Optional

from emuchip8.core import instructions
from emuchip8.core.constants import (
    FONTSET,
    FONTSET_START_ADDRESS,
    INDEX_MASK,
    MAX_PROGRAM_SIZE,
    MEMORY_SIZE,
    PROGRAM_START,
    REGISTER_COUNT,
    STACK_DEPTH,
)
from emuchip8.core.display import DisplayBuffer
from emuchip8.core.errors import MachineError, MachineHaltedError, RomSizeError
from emuchip8.core.keypad import Keypad
from emuchip8.core.logger import DEFAULT_LOGGER, ILogger
from emuchip8.core.opcodes import Opcode, decode, mnemonic
from emuchip8.core.state import MachineState
from emuchip8.core.types import Instruction


class Chip8:
    """A complete CHIP-8 machine.

    Parameters
    ----------
    seed:
        Seed for the RND instruction's generator.  ``None`` seeds from
        the operating system once, when the machine is created.
    logger:
        Core logger; defaults to the shared :class:`NullLogger`.
    """

    def __init__(self, seed: Optional[int] = None,
                 logger: Optional[ILogger] = None) -> None:
        self.state: MachineState = MachineState(seed)
        self.logger: ILogger = logger if logger is not None else DEFAULT_LOGGER

        # Run-state.
        self.halted: bool = False
        self.cycle_count: int = 0

        # When True, unmapped opcodes are reported through the logger.
        self.trace_unknown_opcodes: bool = False

        self._program: bytes = b""

        self.load_fontset()

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def display(self) -> DisplayBuffer:
        return self.state.display

    @property
    def keypad(self) -> Keypad:
        return self.state.keypad

    @property
    def program(self) -> bytes:
        """The most recently loaded program image."""
        return self._program

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_fontset(self) -> None:
        """Copy the built-in font pack to 0x050."""
        self.state.memory.load(FONTSET_START_ADDRESS, FONTSET)

    def load_program(self, data: Iterable[int]) -> None:
        """Copy a raw program image into memory at 0x200.

        Program space is cleared first so no bytes from an earlier
        program survive.

        Raises:
            RomSizeError: If the image is larger than program space.
                Nothing is written in that case.
        """
        image = bytes(data)
        if len(image) > MAX_PROGRAM_SIZE:
            raise RomSizeError(len(image), MAX_PROGRAM_SIZE)
        self.state.memory.load(PROGRAM_START, bytes(MAX_PROGRAM_SIZE))
        self.state.memory.load(PROGRAM_START, image)
        self._program = image
        self.logger.log(2, f"Loaded {len(image)} byte program at ${PROGRAM_START:03X}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return to the power-on state and reload the current program.

        The random generator keeps its sequence; it is seeded once per
        machine, not per reset.
        """
        self.state.clear()
        self.halted = False
        self.cycle_count = 0
        self.load_fontset()
        if self._program:
            self.state.memory.load(PROGRAM_START, self._program)

    # ------------------------------------------------------------------
    # Execute
    # ------------------------------------------------------------------

    def step(self) -> None:
        """Execute exactly one instruction and tick both timers once.

        Raises:
            MachineHaltedError: If an earlier cycle failed.
            MachineError: On a fatal runtime state error; the machine is
                halted afterwards.
        """
        if self.halted:
            raise MachineHaltedError("Machine halted; call reset() to restart")

        s = self.state
        s.keypad.capture()
        op: Optional[Opcode] = None

        try:
            # -- Fetch --
            s.opcode = s.memory.read_word(s.pc)
            op = Opcode(s.opcode)
            s.pc += 2

            # -- Decode and dispatch --
            ins = decode(op)
            if ins == Instruction.NOP and self.trace_unknown_opcodes:
                self.logger.log(
                    2, f"Unknown opcode ${op.word:04X} at ${(s.pc - 2) & 0xFFFF:04X}"
                )
            elif self.logger.level >= 3:
                self.logger.log(3, f"${(s.pc - 2) & 0xFFFF:04X}  {op.word:04X}  {mnemonic(op)}")
            instructions.execute(s, op, ins)
        except MachineError as exc:
            if exc.pc is None:
                exc.pc = s.pc
            if exc.opcode is None and op is not None:
                exc.opcode = op.word
            self.halted = True
            self.logger.log(1, f"Machine halted: {exc}")
            raise

        # -- Timers --
        if s.delay_timer > 0:
            s.delay_timer -= 1
        if s.sound_timer > 0:
            s.sound_timer -= 1

        self.cycle_count += 1

    def run(self, cycles: int) -> int:
        """Call :meth:`step` *cycles* times and return the count executed."""
        executed = 0
        for _ in range(cycles):
            self.step()
            executed += 1
        return executed

    # ------------------------------------------------------------------
    # Serialisation helpers (save-state support)
    # ------------------------------------------------------------------

    def get_snapshot(self) -> dict:
        """Return a serialisable snapshot of the whole machine."""
        s = self.state
        return {
            "v": bytes(s.v),
            "memory": s.memory.get_snapshot(),
            "index": s.index,
            "pc": s.pc,
            "stack": list(s.stack),
            "sp": s.sp,
            "delay_timer": s.delay_timer,
            "sound_timer": s.sound_timer,
            "display": s.display.get_snapshot(),
            "opcode": s.opcode,
            "halted": self.halted,
            "cycle_count": self.cycle_count,
        }

    def restore_snapshot(self, snapshot: dict) -> None:
        """Restore machine state from :meth:`get_snapshot` output.

        Raises:
            ValueError: If the snapshot does not describe a valid machine.
                Nothing is restored in that case.
        """
        self._check_snapshot(snapshot)
        s = self.state
        s.v[:] = snapshot["v"]
        s.memory.restore_snapshot(snapshot["memory"])
        s.index = snapshot["index"]
        s.pc = snapshot["pc"]
        s.stack[:] = snapshot["stack"]
        s.sp = snapshot["sp"]
        s.delay_timer = snapshot["delay_timer"]
        s.sound_timer = snapshot["sound_timer"]
        s.display.restore_snapshot(snapshot["display"])
        s.opcode = snapshot["opcode"]
        self.halted = snapshot.get("halted", False)
        self.cycle_count = snapshot.get("cycle_count", 0)

    def _check_snapshot(self, snapshot: dict) -> None:
        if len(snapshot["v"]) != REGISTER_COUNT:
            raise ValueError(
                f"Snapshot has {len(snapshot['v'])} registers, expected {REGISTER_COUNT}"
            )
        if len(snapshot["stack"]) != STACK_DEPTH:
            raise ValueError(
                f"Snapshot stack has {len(snapshot['stack'])} slots, expected {STACK_DEPTH}"
            )
        if not 0 <= snapshot["sp"] <= STACK_DEPTH:
            raise ValueError(f"Snapshot stack pointer {snapshot['sp']} out of range")
        if not 0 <= snapshot["pc"] <= 0xFFFF:
            raise ValueError(f"Snapshot program counter ${snapshot['pc']:04X} out of range")
        if not 0 <= snapshot["index"] <= INDEX_MASK:
            raise ValueError(f"Snapshot index register {snapshot['index']:#x} out of range")
        if len(snapshot["memory"]) != MEMORY_SIZE:
            raise ValueError(
                f"Snapshot memory is {len(snapshot['memory'])} bytes, expected {MEMORY_SIZE}"
            )
        if len(snapshot["display"]) != self.state.display.pixels.nbytes:
            raise ValueError("Snapshot display size mismatch")

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        s = self.state
        return (
            f"Chip8(PC=${s.pc:04X} I=${s.index:04X} SP={s.sp} "
            f"cycles={self.cycle_count} halted={self.halted})"
        )
