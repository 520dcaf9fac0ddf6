from __future__ import annotations

import pytest

from emuchip8.core import instructions as ins
from emuchip8.core.constants import FONTSET_START_ADDRESS, PROGRAM_START
from emuchip8.core.errors import MemoryAccessError, StackOverflowError, StackUnderflowError
from emuchip8.core.opcodes import Opcode, decode
from emuchip8.core.state import MachineState

VF = 0xF


@pytest.fixture
def s() -> MachineState:
    return MachineState(seed=42)


def run(s: MachineState, word: int) -> None:
    """Execute *word* as if it had just been fetched from ``s.pc``."""
    op = Opcode(word)
    s.pc += 2
    ins.execute(s, op, decode(op))


# ---------------------------------------------------------------------------
# Arithmetic flags
# ---------------------------------------------------------------------------

def test_add_reg_all_pairs(s):
    op = Opcode(0x8014)
    for a in range(256):
        for b in range(256):
            s.v[0], s.v[1] = a, b
            ins.i_add_reg(s, op)
            assert s.v[0] == (a + b) % 256
            assert s.v[VF] == (1 if a + b > 255 else 0)


def test_sub_all_pairs(s):
    op = Opcode(0x8015)
    for a in range(256):
        for b in range(256):
            s.v[0], s.v[1] = a, b
            ins.i_sub(s, op)
            assert s.v[0] == (a - b) % 256
            assert s.v[VF] == (1 if a >= b else 0)


def test_subn_all_pairs(s):
    op = Opcode(0x8017)
    for a in range(256):
        for b in range(256):
            s.v[0], s.v[1] = a, b
            ins.i_subn(s, op)
            assert s.v[0] == (b - a) % 256
            assert s.v[VF] == (1 if b >= a else 0)


def test_shifts_all_values(s):
    shr, shl = Opcode(0x8016), Opcode(0x801E)
    for v in range(256):
        s.v[0] = v
        ins.i_shr(s, shr)
        assert s.v[0] == v >> 1
        assert s.v[VF] == v & 1

        s.v[0] = v
        ins.i_shl(s, shl)
        assert s.v[0] == (v << 1) % 256
        assert s.v[VF] == (v >> 7) & 1


def test_shifts_ignore_vy(s):
    s.v[0], s.v[1] = 0x02, 0xFF
    ins.i_shr(s, Opcode(0x8016))
    assert s.v[0] == 0x01
    assert s.v[1] == 0xFF


def test_flag_register_as_destination_keeps_result(s):
    s.v[VF], s.v[0] = 200, 100
    ins.i_add_reg(s, Opcode(0x8F04))
    assert s.v[VF] == (300 & 0xFF)

    s.v[VF], s.v[0] = 0x81, 0
    ins.i_shl(s, Opcode(0x8F0E))
    assert s.v[VF] == 0x02


def test_add_byte_wraps_and_leaves_flag(s):
    s.v[0], s.v[VF] = 0xFF, 7
    ins.i_add_byte(s, Opcode(0x7002))
    assert s.v[0] == 0x01
    assert s.v[VF] == 7


def test_bitwise_ops(s):
    s.v[0], s.v[1] = 0b1100, 0b1010
    ins.i_or(s, Opcode(0x8011))
    assert s.v[0] == 0b1110
    s.v[0] = 0b1100
    ins.i_and(s, Opcode(0x8012))
    assert s.v[0] == 0b1000
    s.v[0] = 0b1100
    ins.i_xor(s, Opcode(0x8013))
    assert s.v[0] == 0b0110
    ins.i_ld_reg(s, Opcode(0x8010))
    assert s.v[0] == 0b1010


# ---------------------------------------------------------------------------
# Flow control
# ---------------------------------------------------------------------------

def test_jump(s):
    run(s, 0x1ABC)
    assert s.pc == 0xABC


def test_jump_plus_v0(s):
    s.v[0] = 4
    run(s, 0xB300)
    assert s.pc == 0x304


def test_call_then_return_restores_pc(s):
    s.pc = 0x300
    run(s, 0x2456)
    assert s.pc == 0x456
    assert s.sp == 1
    assert s.stack[0] == 0x302
    run(s, 0x00EE)
    assert s.pc == 0x302
    assert s.sp == 0


def test_call_depth_limit(s):
    for _ in range(16):
        run(s, 0x2200)
    assert s.sp == 16
    with pytest.raises(StackOverflowError):
        run(s, 0x2200)
    assert s.sp == 16


def test_return_on_empty_stack(s):
    with pytest.raises(StackUnderflowError) as info:
        run(s, 0x00EE)
    assert info.value.opcode == 0x00EE
    assert s.sp == 0


@pytest.mark.parametrize(
    "word, vx, vy, skips",
    [
        (0x3012, 0x12, 0, True),
        (0x3012, 0x13, 0, False),
        (0x4012, 0x12, 0, False),
        (0x4012, 0x13, 0, True),
        (0x5010, 7, 7, True),
        (0x5010, 7, 8, False),
        (0x9010, 7, 7, False),
        (0x9010, 7, 8, True),
    ],
)
def test_conditional_skips(s, word, vx, vy, skips):
    s.v[0], s.v[1] = vx, vy
    run(s, word)
    assert s.pc == PROGRAM_START + (4 if skips else 2)


def test_key_skips_read_captured_state(s):
    s.v[0] = 0x5
    s.keypad.press(0x5)
    run(s, 0xE09E)
    assert s.pc == PROGRAM_START + 2  # not captured yet

    s.keypad.capture()
    s.pc = PROGRAM_START
    run(s, 0xE09E)
    assert s.pc == PROGRAM_START + 4

    s.pc = PROGRAM_START
    run(s, 0xE0A1)
    assert s.pc == PROGRAM_START + 2


def test_key_index_above_fifteen_reads_released(s):
    s.v[0] = 0x20
    for key in range(16):
        s.keypad.press(key)
    s.keypad.capture()
    run(s, 0xE0A1)
    assert s.pc == PROGRAM_START + 4


# ---------------------------------------------------------------------------
# Index register and memory transfer
# ---------------------------------------------------------------------------

def test_font_address(s):
    s.v[0] = 0
    run(s, 0xF029)
    assert s.index == FONTSET_START_ADDRESS
    s.v[0] = 9
    run(s, 0xF029)
    assert s.index == FONTSET_START_ADDRESS + 45


def test_add_index_wraps_at_16_bits(s):
    s.index = 0xFFFF
    s.v[0] = 2
    s.v[VF] = 0
    run(s, 0xF01E)
    assert s.index == 0x0001
    assert s.v[VF] == 0


def test_bcd(s):
    s.index = 0x300
    s.v[3] = 254
    run(s, 0xF333)
    assert s.memory.read_block(0x300, 3) == bytes((2, 5, 4))


def test_bcd_out_of_range_writes_nothing(s):
    s.index = 0xFFE
    s.v[0] = 123
    with pytest.raises(MemoryAccessError):
        run(s, 0xF033)
    assert s.memory.read_block(0xFFE, 2) == b"\x00\x00"


def test_store_and_load_registers_inclusive(s):
    s.index = 0x400
    s.v[:4] = bytes((1, 2, 3, 4))
    run(s, 0xF255)
    assert s.memory.read_block(0x400, 4) == bytes((1, 2, 3, 0))
    assert s.index == 0x400

    s.v[:4] = bytes(4)
    run(s, 0xF365)
    assert bytes(s.v[:4]) == bytes((1, 2, 3, 0))
    assert s.index == 0x400


def test_store_registers_past_end_of_memory(s):
    s.index = 0xFFF
    with pytest.raises(MemoryAccessError):
        run(s, 0xF155)


def test_random_is_masked_and_reproducible():
    a, b = MachineState(seed=7), MachineState(seed=7)
    for _ in range(50):
        run(a, 0xC00F)
        run(b, 0xC00F)
        assert a.v[0] == b.v[0]
        assert a.v[0] & 0xF0 == 0

    run(a, 0xC100)
    assert a.v[1] == 0


# ---------------------------------------------------------------------------
# Timers and keypad wait
# ---------------------------------------------------------------------------

def test_timer_loads(s):
    s.v[0] = 60
    run(s, 0xF015)
    run(s, 0xF018)
    assert s.delay_timer == 60
    assert s.sound_timer == 60
    s.delay_timer = 33
    run(s, 0xF107)
    assert s.v[1] == 33


def test_wait_for_key_rewinds_until_pressed(s):
    run(s, 0xF30A)
    assert s.pc == PROGRAM_START

    s.keypad.press(0xB)
    s.keypad.press(0x9)
    s.keypad.capture()
    run(s, 0xF30A)
    assert s.pc == PROGRAM_START + 2
    assert s.v[3] == 0x9


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------

def test_clear_screen(s):
    s.display.fill()
    run(s, 0x00E0)
    assert s.display.lit_count() == 0


def test_draw_twice_restores_display_and_reports_collision(s):
    s.index = FONTSET_START_ADDRESS
    s.memory.load(FONTSET_START_ADDRESS, bytes((0xF0, 0x90, 0x90, 0x90, 0xF0)))
    s.v[0], s.v[1] = 10, 5

    run(s, 0xD015)
    assert s.v[VF] == 0
    assert s.display.lit_count() == 14

    run(s, 0xD015)
    assert s.v[VF] == 1
    assert s.display.lit_count() == 0


def test_draw_origin_wraps(s):
    s.index = 0x300
    s.memory[0x300] = 0x80
    s.v[0], s.v[1] = 64 + 3, 32 + 2
    run(s, 0xD011)
    assert s.display.is_on(3, 2)
    assert s.display.lit_count() == 1


def test_draw_clips_at_edges(s):
    s.index = 0x300
    s.memory.load(0x300, bytes((0xFF, 0xFF, 0xFF, 0xFF)))
    s.v[0], s.v[1] = 60, 30
    run(s, 0xD014)
    assert s.display.lit_count() == 4 * 2
    assert not s.display.is_on(0, 0)
    assert not s.display.is_on(0, 30)


def test_draw_reads_only_visible_rows(s):
    # Rows past the bottom edge are clipped, so they are never fetched.
    s.index = 0xFFE
    s.memory.load(0xFFE, bytes((0x80, 0x80)))
    s.v[0], s.v[1] = 0, 30
    run(s, 0xD015)
    assert s.display.lit_count() == 2


def test_draw_out_of_range_sprite_leaves_state(s):
    s.index = 0xFFE
    s.v[0], s.v[1] = 0, 0
    s.v[VF] = 9
    with pytest.raises(MemoryAccessError):
        run(s, 0xD015)
    assert s.v[VF] == 9
    assert s.display.lit_count() == 0


def test_draw_zero_rows_clears_flag(s):
    s.v[VF] = 1
    run(s, 0xD010)
    assert s.v[VF] == 0
    assert s.display.lit_count() == 0


def test_draw_collision_on_first_row_only_sets_flag(s):
    s.index = 0x300
    s.memory.load(0x300, bytes((0x80, 0x40)))
    s.v[0], s.v[1] = 0, 0

    run(s, 0xD011)
    assert s.v[VF] == 0

    # Second draw collides on row 0, lights a fresh pixel on row 1.
    run(s, 0xD012)
    assert s.v[VF] == 1
    assert not s.display.is_on(0, 0)
    assert s.display.is_on(1, 1)
