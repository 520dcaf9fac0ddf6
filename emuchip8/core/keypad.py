"""
Keypad -- the 16-key hexadecimal pad with double-buffered state.

Host code (the input handler) writes into a *staging* buffer through
:meth:`Keypad.press`, :meth:`Keypad.release` and :meth:`Keypad.set_key`
whenever physical key events arrive.  At the start of every machine
cycle the core calls :meth:`Keypad.capture` which snapshots the staging
buffer into the *captured* buffer; the instruction handlers only ever
read the captured buffer.  A key change therefore never becomes
visible halfway through an instruction.

Key layout (original COSMAC VIP pad)::

    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F
"""

from __future__ import annotations

from typing import List, Optional

from emuchip8.core.constants import KEY_COUNT


class Keypad:
    """Sixteen boolean keys indexed 0x0-0xF."""

    def __init__(self) -> None:
        self._next_state: List[bool] = [False] * KEY_COUNT
        self._state: List[bool] = [False] * KEY_COUNT

    # ------------------------------------------------------------------
    # Cycle-boundary snapshot
    # ------------------------------------------------------------------

    def capture(self) -> None:
        """Copy the staging buffer to the captured buffer."""
        self._state[:] = self._next_state

    # ------------------------------------------------------------------
    # Host-side input injection (staging buffer)
    # ------------------------------------------------------------------

    def set_key(self, key: int, down: bool) -> None:
        """Mark *key* as pressed (``down=True``) or released.

        Keys outside 0x0-0xF are ignored.
        """
        if 0 <= key < KEY_COUNT:
            self._next_state[key] = bool(down)

    def press(self, key: int) -> None:
        self.set_key(key, True)

    def release(self, key: int) -> None:
        self.set_key(key, False)

    def clear_all(self) -> None:
        """Release every key in both buffers."""
        for i in range(KEY_COUNT):
            self._next_state[i] = False
            self._state[i] = False

    # ------------------------------------------------------------------
    # Sampling (captured buffer)
    # ------------------------------------------------------------------

    def is_pressed(self, key: int) -> bool:
        """Return ``True`` if *key* is down in the captured state.

        Indices outside 0x0-0xF read as not pressed.
        """
        if 0 <= key < KEY_COUNT:
            return self._state[key]
        return False

    def first_pressed(self) -> Optional[int]:
        """Lowest-numbered key that is down, or ``None``."""
        for key in range(KEY_COUNT):
            if self._state[key]:
                return key
        return None

    def snapshot(self) -> List[bool]:
        """Return a copy of the captured key states."""
        return list(self._state)

    def pending(self) -> List[bool]:
        """Return a copy of the staging key states."""
        return list(self._next_state)

    def __repr__(self) -> str:
        down = [f"{k:X}" for k in range(KEY_COUNT) if self._state[k]]
        return f"Keypad(pressed=[{', '.join(down)}])"
