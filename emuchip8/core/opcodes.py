"""
Opcode decoding and the two-level dispatch tables.

A CHIP-8 instruction is a big-endian 16-bit word split into four
nibbles::

    F X Y N        family, x, y, n
        K K        kk  -- low byte
      N N N        nnn -- low 12 bits (an address)

The top nibble (``family``) selects a slot in :data:`PRIMARY_TABLE`.
Twelve slots identify their instruction directly.  The remaining four
(0, 8, E and F) are *indirect*: the instruction is chosen by a second
lookup in a secondary table keyed by ``n`` (tables 0, 8 and E) or by
``kk`` (table F).  Any secondary slot without an entry decodes to
:attr:`Instruction.NOP`.

All tables are built once at import and are read-only afterwards.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple, Union

from emuchip8.core.types import Instruction


class Opcode:
    """A fetched instruction word and its decoded fields."""

    __slots__ = ("word", "family", "x", "y", "n", "kk", "nnn")

    def __init__(self, word: int) -> None:
        word &= 0xFFFF
        self.word: int = word
        self.family: int = (word & 0xF000) >> 12
        self.x: int = (word & 0x0F00) >> 8
        self.y: int = (word & 0x00F0) >> 4
        self.n: int = word & 0x000F
        self.kk: int = word & 0x00FF
        self.nnn: int = word & 0x0FFF

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Opcode):
            return self.word == other.word
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.word)

    def __repr__(self) -> str:
        return f"Opcode(${self.word:04X})"


# ---------------------------------------------------------------------------
# Secondary tables
# ---------------------------------------------------------------------------

def _freeze(entries: dict[int, Instruction]) -> Mapping[int, Instruction]:
    return MappingProxyType(dict(entries))


# Family 0, keyed by n.  0nnn (machine-code call) is not supported.
TABLE_0: Mapping[int, Instruction] = _freeze({
    0x0: Instruction.CLS,
    0xE: Instruction.RET,
})

# Family 8, keyed by n.
TABLE_8: Mapping[int, Instruction] = _freeze({
    0x0: Instruction.LD_REG,
    0x1: Instruction.OR,
    0x2: Instruction.AND,
    0x3: Instruction.XOR,
    0x4: Instruction.ADD_REG,
    0x5: Instruction.SUB,
    0x6: Instruction.SHR,
    0x7: Instruction.SUBN,
    0xE: Instruction.SHL,
})

# Family E, keyed by n.
TABLE_E: Mapping[int, Instruction] = _freeze({
    0x1: Instruction.SKNP,
    0xE: Instruction.SKP,
})

# Family F, keyed by kk.
TABLE_F: Mapping[int, Instruction] = _freeze({
    0x07: Instruction.LD_VX_DT,
    0x0A: Instruction.LD_VX_K,
    0x15: Instruction.LD_DT_VX,
    0x18: Instruction.LD_ST_VX,
    0x1E: Instruction.ADD_I,
    0x29: Instruction.LD_F,
    0x33: Instruction.LD_B,
    0x55: Instruction.LD_MEM_VX,
    0x65: Instruction.LD_VX_MEM,
})


class _Indirect:
    """Marks a primary slot that re-dispatches on a secondary key."""

    __slots__ = ("name", "table", "use_low_byte")

    def __init__(self, name: str, table: Mapping[int, Instruction],
                 use_low_byte: bool) -> None:
        self.name = name
        self.table = table
        self.use_low_byte = use_low_byte

    def key(self, op: Opcode) -> int:
        return op.kk if self.use_low_byte else op.n

    def __repr__(self) -> str:
        return f"_Indirect({self.name})"


PrimaryEntry = Union[Instruction, _Indirect]

# ---------------------------------------------------------------------------
# Primary table (indexed by the top nibble)
# ---------------------------------------------------------------------------

PRIMARY_TABLE: Tuple[PrimaryEntry, ...] = (
    _Indirect("0", TABLE_0, use_low_byte=False),  # 0x0
    Instruction.JP,                               # 0x1
    Instruction.CALL,                             # 0x2
    Instruction.SE_BYTE,                          # 0x3
    Instruction.SNE_BYTE,                         # 0x4
    Instruction.SE_REG,                           # 0x5
    Instruction.LD_BYTE,                          # 0x6
    Instruction.ADD_BYTE,                         # 0x7
    _Indirect("8", TABLE_8, use_low_byte=False),  # 0x8
    Instruction.SNE_REG,                          # 0x9
    Instruction.LD_I,                             # 0xA
    Instruction.JP_V0,                            # 0xB
    Instruction.RND,                              # 0xC
    Instruction.DRW,                              # 0xD
    _Indirect("E", TABLE_E, use_low_byte=False),  # 0xE
    _Indirect("F", TABLE_F, use_low_byte=True),   # 0xF
)

assert len(PRIMARY_TABLE) == 16, "Primary table must have one slot per nibble"


def is_indirect(family: int) -> bool:
    """Return ``True`` if primary slot *family* uses a secondary table."""
    return isinstance(PRIMARY_TABLE[family & 0xF], _Indirect)


def decode(op: Union[Opcode, int]) -> Instruction:
    """Map an opcode to its :class:`Instruction` tag.

    Unknown and reserved encodings decode to :attr:`Instruction.NOP`.
    """
    if not isinstance(op, Opcode):
        op = Opcode(op)
    entry = PRIMARY_TABLE[op.family]
    if isinstance(entry, _Indirect):
        return entry.table.get(entry.key(op), Instruction.NOP)
    return entry


# ---------------------------------------------------------------------------
# Disassembly
# ---------------------------------------------------------------------------

def mnemonic(op: Union[Opcode, int]) -> str:
    """Render an opcode as assembler text, e.g. ``"LD VA, 0x05"``."""
    if not isinstance(op, Opcode):
        op = Opcode(op)
    ins = decode(op)
    x, y = op.x, op.y
    I = Instruction

    if ins == I.NOP:
        return f"NOP 0x{op.word:04X}"
    if ins == I.CLS:
        return "CLS"
    if ins == I.RET:
        return "RET"
    if ins == I.JP:
        return f"JP 0x{op.nnn:03X}"
    if ins == I.CALL:
        return f"CALL 0x{op.nnn:03X}"
    if ins == I.SE_BYTE:
        return f"SE V{x:X}, 0x{op.kk:02X}"
    if ins == I.SNE_BYTE:
        return f"SNE V{x:X}, 0x{op.kk:02X}"
    if ins == I.SE_REG:
        return f"SE V{x:X}, V{y:X}"
    if ins == I.LD_BYTE:
        return f"LD V{x:X}, 0x{op.kk:02X}"
    if ins == I.ADD_BYTE:
        return f"ADD V{x:X}, 0x{op.kk:02X}"
    if ins == I.SNE_REG:
        return f"SNE V{x:X}, V{y:X}"
    if ins == I.LD_I:
        return f"LD I, 0x{op.nnn:03X}"
    if ins == I.JP_V0:
        return f"JP V0, 0x{op.nnn:03X}"
    if ins == I.RND:
        return f"RND V{x:X}, 0x{op.kk:02X}"
    if ins == I.DRW:
        return f"DRW V{x:X}, V{y:X}, {op.n}"
    if ins in _REG_REG:
        return f"{_REG_REG[ins]} V{x:X}, V{y:X}"
    return _X_ONLY[ins].format(x=f"V{x:X}")


_REG_REG: Mapping[Instruction, str] = MappingProxyType({
    Instruction.LD_REG: "LD",
    Instruction.OR: "OR",
    Instruction.AND: "AND",
    Instruction.XOR: "XOR",
    Instruction.ADD_REG: "ADD",
    Instruction.SUB: "SUB",
    Instruction.SHR: "SHR",
    Instruction.SUBN: "SUBN",
    Instruction.SHL: "SHL",
})

_X_ONLY: Mapping[Instruction, str] = MappingProxyType({
    Instruction.SKP: "SKP {x}",
    Instruction.SKNP: "SKNP {x}",
    Instruction.LD_VX_DT: "LD {x}, DT",
    Instruction.LD_VX_K: "LD {x}, K",
    Instruction.LD_DT_VX: "LD DT, {x}",
    Instruction.LD_ST_VX: "LD ST, {x}",
    Instruction.ADD_I: "ADD I, {x}",
    Instruction.LD_F: "LD F, {x}",
    Instruction.LD_B: "LD B, {x}",
    Instruction.LD_MEM_VX: "LD [I], {x}",
    Instruction.LD_VX_MEM: "LD {x}, [I]",
})
