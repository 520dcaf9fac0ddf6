"""
Input handler for emuchip8.
Maps keyboard keys to the machine's 16-key hexadecimal pad.

Keyboard layout
---------------

The left-hand block of a QWERTY keyboard stands in for the original
4x4 pad::

    Keyboard        CHIP-8 pad
    1 2 3 4         1 2 3 C
    Q W E R         4 5 6 D
    A S D F         7 8 9 E
    Z X C V         A 0 B F

Escape (or closing the window) requests quit.
"""

from __future__ import annotations

import logging

import pygame

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Keyboard -> keypad index
# ---------------------------------------------------------------------------

KEY_MAP: dict[int, int] = {
    pygame.K_x: 0x0,
    pygame.K_1: 0x1,
    pygame.K_2: 0x2,
    pygame.K_3: 0x3,
    pygame.K_q: 0x4,
    pygame.K_w: 0x5,
    pygame.K_e: 0x6,
    pygame.K_a: 0x7,
    pygame.K_s: 0x8,
    pygame.K_d: 0x9,
    pygame.K_z: 0xA,
    pygame.K_c: 0xB,
    pygame.K_4: 0xC,
    pygame.K_r: 0xD,
    pygame.K_f: 0xE,
    pygame.K_v: 0xF,
}


class InputHandler:
    """Translates pygame keyboard events into keypad state.

    Parameters
    ----------
    machine:
        The emulated machine.  Expected interface:

        * ``keypad.set_key(key: int, down: bool)``
    """

    def __init__(self, machine: object) -> None:
        self._machine = machine
        self._quit_requested: bool = False

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def quit_requested(self) -> bool:
        """``True`` if the user pressed Escape or closed the window."""
        return self._quit_requested

    def poll(self) -> None:
        """Pump the pygame event queue and process all pending events.

        This should be called once per iteration of the main loop.
        """
        for event in pygame.event.get():
            self.handle_event(event)

    def handle_event(self, event: pygame.event.Event) -> None:
        """Process a single pygame event."""
        if event.type == pygame.QUIT:
            self._quit_requested = True
            return

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self._quit_requested = True
                return
            self._on_key(event.key, down=True)
        elif event.type == pygame.KEYUP:
            self._on_key(event.key, down=False)

    def clear_all(self) -> None:
        """Release every keypad key."""
        for key in KEY_MAP.values():
            self._send(key, False)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _on_key(self, pygame_key: int, *, down: bool) -> None:
        key = KEY_MAP.get(pygame_key)
        if key is None:
            return
        logger.debug("Key %X %s", key, "down" if down else "up")
        self._send(key, down)

    def _send(self, key: int, down: bool) -> None:
        """Forward a key change to the machine's keypad staging buffer."""
        self._machine.keypad.set_key(key, down)  # type: ignore[attr-defined]
