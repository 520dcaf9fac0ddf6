from __future__ import annotations

import pytest

from emuchip8.core.constants import (
    FONTSET,
    FONTSET_START_ADDRESS,
    MAX_PROGRAM_SIZE,
    MEMORY_SIZE,
    PROGRAM_START,
)
from emuchip8.core.errors import (
    MachineHaltedError,
    MemoryAccessError,
    RomSizeError,
    StackOverflowError,
    StackUnderflowError,
)
from emuchip8.core.logger import RecordingLogger
from emuchip8.core.machine import Chip8


# ---------------------------------------------------------------------------
# Power-on and loading
# ---------------------------------------------------------------------------

def test_power_on_state(machine):
    s = machine.state
    assert s.pc == PROGRAM_START
    assert s.sp == 0
    assert s.index == 0
    assert bytes(s.v) == bytes(16)
    assert s.delay_timer == s.sound_timer == 0
    assert machine.display.lit_count() == 0
    assert not machine.halted


def test_fontset_loaded_at_font_base(machine):
    data = machine.state.memory.read_block(FONTSET_START_ADDRESS, len(FONTSET))
    assert data == bytes(FONTSET)


def test_load_program_places_bytes(machine):
    image = bytes(range(1, 40))
    machine.load_program(image)
    mem = machine.state.memory
    for i, byte in enumerate(image):
        assert mem[PROGRAM_START + i] == byte
    assert mem.read_block(PROGRAM_START + len(image), MEMORY_SIZE - PROGRAM_START - len(image)) == bytes(
        MEMORY_SIZE - PROGRAM_START - len(image)
    )
    assert machine.program == image


def test_load_program_clears_previous_program(machine):
    machine.load_program(b"\xAA" * 100)
    machine.load_program(b"\x55" * 10)
    mem = machine.state.memory
    assert mem.read_block(PROGRAM_START, 10) == b"\x55" * 10
    assert mem.read_block(PROGRAM_START + 10, 90) == bytes(90)


def test_load_program_accepts_full_program_space(machine):
    machine.load_program(b"\x01" * MAX_PROGRAM_SIZE)
    assert machine.state.memory[MEMORY_SIZE - 1] == 0x01


def test_oversized_program_is_rejected_before_writing(machine):
    machine.load_program(b"\x12\x00")
    with pytest.raises(RomSizeError) as info:
        machine.load_program(b"\xFF" * (MAX_PROGRAM_SIZE + 1))
    assert info.value.size == MAX_PROGRAM_SIZE + 1
    assert machine.state.memory.read_block(PROGRAM_START, 4) == b"\x12\x00\x00\x00"
    assert machine.program == b"\x12\x00"


# ---------------------------------------------------------------------------
# Cycle behaviour
# ---------------------------------------------------------------------------

def test_load_then_add(load):
    machine = load(0x6A05, 0x7A03)
    machine.step()
    assert machine.state.v[0xA] == 5
    machine.step()
    assert machine.state.v[0xA] == 8
    assert machine.state.pc == PROGRAM_START + 4
    assert machine.cycle_count == 2


def test_clear_screen_from_all_on(load):
    machine = load(0x00E0)
    machine.display.fill()
    machine.step()
    assert machine.display.lit_count() == 0


def test_delay_timer_never_goes_negative(load):
    machine = load(0x0123, 0x0123)
    machine.state.delay_timer = 1
    machine.step()
    assert machine.state.delay_timer == 0
    machine.step()
    assert machine.state.delay_timer == 0


def test_timers_tick_after_execution(load):
    # LD V0, 5 / LD DT, V0 / LD V1, DT
    machine = load(0x6005, 0xF015, 0xF107)
    machine.state.sound_timer = 3
    machine.run(2)
    assert machine.state.delay_timer == 4
    machine.step()
    assert machine.state.v[1] == 4
    assert machine.state.delay_timer == 3
    assert machine.state.sound_timer == 0


def test_unknown_opcode_is_a_nop(load):
    machine = load(0x0123, 0x8AB9)
    before = machine.get_snapshot()
    machine.run(2)
    after = machine.get_snapshot()
    assert after["pc"] == PROGRAM_START + 4
    assert after["v"] == before["v"]
    assert after["index"] == before["index"]


def test_call_and_return(load):
    # 0x200: CALL 0x206 / 0x202: JP 0x202 / 0x204: NOP / 0x206: RET
    machine = load(0x2206, 0x1202, 0x0123, 0x00EE)
    machine.step()
    assert machine.state.pc == 0x206
    machine.step()
    assert machine.state.pc == 0x202
    assert machine.state.sp == 0


def test_wait_for_key_spins_until_key_captured(load):
    machine = load(0xF50A, 0x1202)
    machine.run(3)
    assert machine.state.pc == PROGRAM_START
    assert machine.cycle_count == 3

    machine.keypad.press(0xC)
    machine.step()
    assert machine.state.v[5] == 0xC
    assert machine.state.pc == PROGRAM_START + 2


def test_timers_keep_running_while_waiting_for_key(load):
    machine = load(0xF00A)
    machine.state.delay_timer = 10
    machine.run(4)
    assert machine.state.delay_timer == 6


def test_draw_font_glyph(load):
    # LD V0, 7 / LD F, V0 / DRW V1, V1, 5
    machine = load(0x6007, 0xF029, 0xD115)
    machine.run(3)
    assert machine.state.index == FONTSET_START_ADDRESS + 35
    # Glyph 7: F0 10 20 40 40
    assert machine.display.to_text().splitlines()[0].startswith("####....")
    assert machine.display.is_on(3, 1)
    assert machine.display.is_on(2, 2)
    assert machine.display.is_on(1, 4)
    assert machine.state.v[0xF] == 0


# ---------------------------------------------------------------------------
# Fatal errors
# ---------------------------------------------------------------------------

def test_stack_overflow_halts_machine(load):
    machine = load(0x2200)
    machine.run(16)
    with pytest.raises(StackOverflowError) as info:
        machine.step()
    assert info.value.opcode == 0x2200
    assert info.value.pc == PROGRAM_START + 2
    assert machine.halted
    assert machine.cycle_count == 16

    with pytest.raises(MachineHaltedError):
        machine.step()


def test_stack_underflow_halts_machine(load):
    machine = load(0x00EE)
    with pytest.raises(StackUnderflowError) as info:
        machine.step()
    assert "00EE" in str(info.value)
    assert machine.halted


def test_fetch_past_end_of_memory(load):
    machine = load(0x1FFF)
    machine.step()
    with pytest.raises(MemoryAccessError) as info:
        machine.step()
    assert info.value.opcode is None
    assert info.value.pc == 0xFFF


def test_error_does_not_tick_timers(load):
    machine = load(0x00EE)
    machine.state.delay_timer = 5
    with pytest.raises(StackUnderflowError):
        machine.step()
    assert machine.state.delay_timer == 5


def test_reset_recovers_from_halt(load):
    machine = load(0x6A05, 0x00EE)
    machine.step()
    with pytest.raises(StackUnderflowError):
        machine.step()

    machine.reset()
    assert not machine.halted
    assert machine.cycle_count == 0
    assert machine.state.pc == PROGRAM_START
    assert machine.state.v[0xA] == 0
    assert machine.state.memory.read_block(PROGRAM_START, 4) == b"\x6A\x05\x00\xEE"
    assert machine.state.memory.read_block(FONTSET_START_ADDRESS, 5) == bytes(FONTSET[:5])
    machine.step()
    assert machine.state.v[0xA] == 5


def test_reset_does_not_reseed_random_generator():
    machine = Chip8(seed=99)
    machine.load_program(bytes((0xC0, 0xFF)))
    machine.step()
    before = machine.state.rng.getstate()

    machine.reset()
    assert machine.state.rng.getstate() == before


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def test_trace_logging():
    logger = RecordingLogger(3)
    machine = Chip8(seed=1, logger=logger)
    machine.load_program(bytes((0x6A, 0x05, 0x01, 0x23)))
    machine.trace_unknown_opcodes = True
    machine.run(2)

    assert "Loaded 4 byte program at $200" in logger.messages(2)
    assert "$0200  6A05  LD VA, 0x05" in logger.messages(3)
    assert "Unknown opcode $0123 at $0202" in logger.messages(2)


def test_halt_is_logged():
    logger = RecordingLogger(1)
    machine = Chip8(logger=logger)
    machine.load_program(bytes((0x00, 0xEE)))
    with pytest.raises(StackUnderflowError):
        machine.step()
    assert len(logger.messages(1)) == 1
    assert logger.messages(1)[0].startswith("Machine halted")


def test_quiet_logger_records_nothing():
    logger = RecordingLogger(0)
    machine = Chip8(logger=logger)
    machine.load_program(bytes((0x01, 0x23)))
    machine.trace_unknown_opcodes = True
    machine.step()
    assert logger.records == []


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

def test_snapshot_restore(load):
    machine = load(0x6A05, 0xA300, 0xD005, 0x2208, 0x7A01)
    machine.run(4)
    snap = machine.get_snapshot()

    machine.step()
    machine.display.clear()
    assert machine.state.v[0xA] == 6

    machine.restore_snapshot(snap)
    assert machine.state.v[0xA] == 5
    assert machine.state.pc == 0x208
    assert machine.state.sp == 1
    assert machine.state.index == 0x300
    assert machine.cycle_count == 4
    assert machine.get_snapshot() == snap


@pytest.mark.parametrize(
    "field, value",
    [
        ("v", b"\x00" * 4),
        ("v", b"\x00" * 17),
        ("stack", [0] * 15),
        ("sp", 17),
        ("sp", -1),
        ("pc", 0x10000),
        ("index", -1),
        ("memory", b"\x00" * 100),
        ("display", b"\x00"),
    ],
)
def test_restore_rejects_malformed_snapshot(load, field, value):
    machine = load(0x6F01)
    snap = machine.get_snapshot()
    snap[field] = value
    before = machine.get_snapshot()

    with pytest.raises(ValueError):
        machine.restore_snapshot(snap)

    assert machine.get_snapshot() == before
    machine.step()
    assert machine.state.v[0xF] == 1
