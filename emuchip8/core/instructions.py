"""
The CHIP-8 base instruction set.

Every instruction is a function ``i_xxx(s, op)`` that mutates the
:class:`~emuchip8.core.state.MachineState` *s* according to the decoded
:class:`~emuchip8.core.opcodes.Opcode` *op*.  The program counter has
already been advanced past the instruction when a handler runs, so
jumps overwrite ``s.pc`` and skips add another 2.

Instructions that set VF as a flag (ADD, SUB, SUBN, SHR, SHL) write the
flag first and the result second.  With ``x == 0xF`` the result is what
remains in VF.

Handlers validate before mutating: when one raises, the state is left
exactly as the cycle driver handed it over.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from emuchip8.core.constants import (
    FLAG_REGISTER,
    FONT_GLYPH_SIZE,
    FONTSET_START_ADDRESS,
    INDEX_MASK,
    STACK_DEPTH,
    VIDEO_HEIGHT,
)
from emuchip8.core.errors import StackOverflowError, StackUnderflowError
from emuchip8.core.opcodes import Opcode
from emuchip8.core.state import MachineState
from emuchip8.core.types import Instruction

Handler = Callable[[MachineState, Opcode], None]


# ---------------------------------------------------------------------------
# 0 family -- display / subroutine return
# ---------------------------------------------------------------------------

def i_nop(s: MachineState, op: Opcode) -> None:
    """Unmapped or reserved opcode."""


def i_cls(s: MachineState, op: Opcode) -> None:
    """00E0 -- clear the display."""
    s.display.clear()


def i_ret(s: MachineState, op: Opcode) -> None:
    """00EE -- return from subroutine."""
    if s.sp == 0:
        raise StackUnderflowError("Return with empty call stack", s.pc, op.word)
    s.sp -= 1
    s.pc = s.stack[s.sp]


# ---------------------------------------------------------------------------
# Flow control
# ---------------------------------------------------------------------------

def i_jp(s: MachineState, op: Opcode) -> None:
    """1nnn -- jump to nnn."""
    s.pc = op.nnn


def i_call(s: MachineState, op: Opcode) -> None:
    """2nnn -- call subroutine at nnn."""
    if s.sp >= STACK_DEPTH:
        raise StackOverflowError(
            f"Call depth exceeds {STACK_DEPTH} frames", s.pc, op.word
        )
    s.stack[s.sp] = s.pc
    s.sp += 1
    s.pc = op.nnn


def i_jp_v0(s: MachineState, op: Opcode) -> None:
    """Bnnn -- jump to V0 + nnn."""
    s.pc = s.v[0] + op.nnn


# ---------------------------------------------------------------------------
# Conditional skips
# ---------------------------------------------------------------------------

def i_se_byte(s: MachineState, op: Opcode) -> None:
    """3xkk -- skip if Vx == kk."""
    if s.v[op.x] == op.kk:
        s.pc += 2


def i_sne_byte(s: MachineState, op: Opcode) -> None:
    """4xkk -- skip if Vx != kk."""
    if s.v[op.x] != op.kk:
        s.pc += 2


def i_se_reg(s: MachineState, op: Opcode) -> None:
    """5xy0 -- skip if Vx == Vy."""
    if s.v[op.x] == s.v[op.y]:
        s.pc += 2


def i_sne_reg(s: MachineState, op: Opcode) -> None:
    """9xy0 -- skip if Vx != Vy."""
    if s.v[op.x] != s.v[op.y]:
        s.pc += 2


def i_skp(s: MachineState, op: Opcode) -> None:
    """Ex9E -- skip if key Vx is pressed."""
    if s.keypad.is_pressed(s.v[op.x]):
        s.pc += 2


def i_sknp(s: MachineState, op: Opcode) -> None:
    """ExA1 -- skip if key Vx is not pressed."""
    if not s.keypad.is_pressed(s.v[op.x]):
        s.pc += 2


# ---------------------------------------------------------------------------
# Register loads and arithmetic
# ---------------------------------------------------------------------------

def i_ld_byte(s: MachineState, op: Opcode) -> None:
    """6xkk"""
    s.v[op.x] = op.kk


def i_add_byte(s: MachineState, op: Opcode) -> None:
    """7xkk -- wrapping add, VF untouched."""
    s.v[op.x] = (s.v[op.x] + op.kk) & 0xFF


def i_ld_reg(s: MachineState, op: Opcode) -> None:
    """8xy0"""
    s.v[op.x] = s.v[op.y]


def i_or(s: MachineState, op: Opcode) -> None:
    """8xy1"""
    s.v[op.x] |= s.v[op.y]


def i_and(s: MachineState, op: Opcode) -> None:
    """8xy2"""
    s.v[op.x] &= s.v[op.y]


def i_xor(s: MachineState, op: Opcode) -> None:
    """8xy3"""
    s.v[op.x] ^= s.v[op.y]


def i_add_reg(s: MachineState, op: Opcode) -> None:
    """8xy4 -- VF = carry."""
    total = s.v[op.x] + s.v[op.y]
    s.v[FLAG_REGISTER] = 1 if total > 0xFF else 0
    s.v[op.x] = total & 0xFF


def i_sub(s: MachineState, op: Opcode) -> None:
    """8xy5 -- Vx = Vx - Vy, VF = NOT borrow."""
    vx, vy = s.v[op.x], s.v[op.y]
    s.v[FLAG_REGISTER] = 1 if vx >= vy else 0
    s.v[op.x] = (vx - vy) & 0xFF


def i_shr(s: MachineState, op: Opcode) -> None:
    """8xy6 -- VF = bit shifted out.  Vy is ignored."""
    vx = s.v[op.x]
    s.v[FLAG_REGISTER] = vx & 0x01
    s.v[op.x] = vx >> 1


def i_subn(s: MachineState, op: Opcode) -> None:
    """8xy7 -- Vx = Vy - Vx, VF = NOT borrow."""
    vx, vy = s.v[op.x], s.v[op.y]
    s.v[FLAG_REGISTER] = 1 if vy >= vx else 0
    s.v[op.x] = (vy - vx) & 0xFF


def i_shl(s: MachineState, op: Opcode) -> None:
    """8xyE -- VF = bit shifted out.  Vy is ignored."""
    vx = s.v[op.x]
    s.v[FLAG_REGISTER] = (vx >> 7) & 0x01
    s.v[op.x] = (vx << 1) & 0xFF


def i_rnd(s: MachineState, op: Opcode) -> None:
    """Cxkk -- Vx = random byte AND kk."""
    s.v[op.x] = s.rng.getrandbits(8) & op.kk


# ---------------------------------------------------------------------------
# Index register
# ---------------------------------------------------------------------------

def i_ld_i(s: MachineState, op: Opcode) -> None:
    """Annn"""
    s.index = op.nnn


def i_add_i(s: MachineState, op: Opcode) -> None:
    """Fx1E -- no overflow flag."""
    s.index = (s.index + s.v[op.x]) & INDEX_MASK


def i_ld_f(s: MachineState, op: Opcode) -> None:
    """Fx29 -- point I at the font glyph for Vx."""
    s.index = FONTSET_START_ADDRESS + FONT_GLYPH_SIZE * s.v[op.x]


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------

def i_drw(s: MachineState, op: Opcode) -> None:
    """Dxyn -- draw an n-row sprite from memory[I] at (Vx, Vy).

    Only the rows that land on screen are read from memory.
    """
    vx, vy = s.v[op.x], s.v[op.y]
    visible_rows = max(0, min(op.n, VIDEO_HEIGHT - vy % VIDEO_HEIGHT))
    sprite = s.memory.read_block(s.index, visible_rows)
    s.v[FLAG_REGISTER] = 0
    if s.display.draw_sprite(vx, vy, sprite):
        s.v[FLAG_REGISTER] = 1


# ---------------------------------------------------------------------------
# Timers and keypad
# ---------------------------------------------------------------------------

def i_ld_vx_dt(s: MachineState, op: Opcode) -> None:
    """Fx07"""
    s.v[op.x] = s.delay_timer


def i_ld_dt_vx(s: MachineState, op: Opcode) -> None:
    """Fx15"""
    s.delay_timer = s.v[op.x]


def i_ld_st_vx(s: MachineState, op: Opcode) -> None:
    """Fx18"""
    s.sound_timer = s.v[op.x]


def i_ld_vx_k(s: MachineState, op: Opcode) -> None:
    """Fx0A -- wait for a key.

    There is no scheduler to suspend into, so the instruction polls:
    with no key down it rewinds the program counter and runs again on
    the next cycle.
    """
    key = s.keypad.first_pressed()
    if key is None:
        s.pc -= 2
    else:
        s.v[op.x] = key


# ---------------------------------------------------------------------------
# Memory transfer
# ---------------------------------------------------------------------------

def i_ld_b(s: MachineState, op: Opcode) -> None:
    """Fx33 -- BCD of Vx into memory[I], [I+1], [I+2]."""
    s.memory.check_range(s.index, 3)
    value = s.v[op.x]
    s.memory[s.index] = value // 100
    s.memory[s.index + 1] = (value // 10) % 10
    s.memory[s.index + 2] = value % 10


def i_ld_mem_vx(s: MachineState, op: Opcode) -> None:
    """Fx55 -- store V0..Vx (inclusive) at memory[I]."""
    s.memory.load(s.index, s.v[:op.x + 1])


def i_ld_vx_mem(s: MachineState, op: Opcode) -> None:
    """Fx65 -- load V0..Vx (inclusive) from memory[I]."""
    s.v[:op.x + 1] = s.memory.read_block(s.index, op.x + 1)


# ---------------------------------------------------------------------------
# Handler table
# ---------------------------------------------------------------------------

def _build_handler_table() -> Mapping[Instruction, Handler]:
    """Map every :class:`Instruction` to its handler.

    Raises:
        RuntimeError: If any instruction tag lacks a handler.
    """
    I = Instruction
    table = {
        I.NOP: i_nop,
        I.CLS: i_cls,
        I.RET: i_ret,
        I.JP: i_jp,
        I.CALL: i_call,
        I.SE_BYTE: i_se_byte,
        I.SNE_BYTE: i_sne_byte,
        I.SE_REG: i_se_reg,
        I.LD_BYTE: i_ld_byte,
        I.ADD_BYTE: i_add_byte,
        I.LD_REG: i_ld_reg,
        I.OR: i_or,
        I.AND: i_and,
        I.XOR: i_xor,
        I.ADD_REG: i_add_reg,
        I.SUB: i_sub,
        I.SHR: i_shr,
        I.SUBN: i_subn,
        I.SHL: i_shl,
        I.SNE_REG: i_sne_reg,
        I.LD_I: i_ld_i,
        I.JP_V0: i_jp_v0,
        I.RND: i_rnd,
        I.DRW: i_drw,
        I.SKP: i_skp,
        I.SKNP: i_sknp,
        I.LD_VX_DT: i_ld_vx_dt,
        I.LD_VX_K: i_ld_vx_k,
        I.LD_DT_VX: i_ld_dt_vx,
        I.LD_ST_VX: i_ld_st_vx,
        I.ADD_I: i_add_i,
        I.LD_F: i_ld_f,
        I.LD_B: i_ld_b,
        I.LD_MEM_VX: i_ld_mem_vx,
        I.LD_VX_MEM: i_ld_vx_mem,
    }
    missing = [ins.name for ins in Instruction if ins not in table]
    if missing:
        raise RuntimeError(f"No handler for instructions: {', '.join(missing)}")
    return MappingProxyType(table)


HANDLERS: Mapping[Instruction, Handler] = _build_handler_table()


def execute(s: MachineState, op: Opcode, ins: Instruction) -> None:
    """Run the handler for the already-decoded instruction *ins*."""
    HANDLERS[ins](s, op)
