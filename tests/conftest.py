"""
Shared pytest fixtures for the emuchip8 test suite.

pygame is forced onto its dummy video and audio drivers so that the
platform tests run headless.
"""

from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from typing import Callable, Iterable

import pytest

from emuchip8.core.machine import Chip8


def program_bytes(words: Iterable[int]) -> bytes:
    """Encode 16-bit opcode words as a big-endian program image."""
    out = bytearray()
    for word in words:
        out += bytes(((word >> 8) & 0xFF, word & 0xFF))
    return bytes(out)


@pytest.fixture
def machine() -> Chip8:
    return Chip8(seed=1234)


@pytest.fixture
def load(machine: Chip8) -> Callable[..., Chip8]:
    """Load opcode words at 0x200 and return the machine."""

    def _load(*words: int) -> Chip8:
        machine.load_program(program_bytes(words))
        return machine

    return _load


@pytest.fixture
def rom_file(tmp_path) -> Callable[..., str]:
    """Write a program image to a temporary file and return its path."""

    def _rom_file(data: bytes, name: str = "test_rom.ch8") -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _rom_file
