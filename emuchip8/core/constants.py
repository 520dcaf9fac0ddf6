"""
Layout constants and the built-in font pack for the CHIP-8 machine.

Memory map
----------

=============  =========================================
Range          Contents
=============  =========================================
0x000 - 0x1FF  Reserved for the interpreter
0x050 - 0x09F  Font pack (16 glyphs x 5 bytes)
0x200 - 0xFFF  Program image and program data
=============  =========================================
"""

from __future__ import annotations

from typing import Tuple


# ---------------------------------------------------------------------------
# Memory
# ---------------------------------------------------------------------------

MEMORY_SIZE: int = 4096
PROGRAM_START: int = 0x200
MAX_PROGRAM_SIZE: int = MEMORY_SIZE - PROGRAM_START

# ---------------------------------------------------------------------------
# Registers / stack
# ---------------------------------------------------------------------------

REGISTER_COUNT: int = 16
FLAG_REGISTER: int = 0xF
STACK_DEPTH: int = 16
KEY_COUNT: int = 16

# The index register is 16 bits wide even though memory only needs 12.
INDEX_MASK: int = 0xFFFF

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

VIDEO_WIDTH: int = 64
VIDEO_HEIGHT: int = 32
SPRITE_WIDTH: int = 8

# ---------------------------------------------------------------------------
# Font pack
# ---------------------------------------------------------------------------

FONTSET_START_ADDRESS: int = 0x050
FONT_GLYPH_SIZE: int = 5

# fmt: off
FONTSET: Tuple[int, ...] = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)
# fmt: on

FONTSET_SIZE: int = len(FONTSET)

assert FONTSET_SIZE == 16 * FONT_GLYPH_SIZE, f"Font pack must be 80 bytes, got {FONTSET_SIZE}"
