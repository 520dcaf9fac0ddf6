"""
Main application window for emuchip8.
Uses pygame to create a display and drive the real-time pacing loop.

The core executes exactly one instruction per :meth:`Chip8.step` call
and knows nothing about wall-clock time.  This window decides *when* to
call it: once every ``cycle_delay_ms`` milliseconds, re-rendering the
display after each executed cycle.

Typical usage::

    from emuchip8.platform.window import Window

    machine = MachineFactory.create("pong.ch8")
    window = Window(machine, scale=10, cycle_delay_ms=2)
    window.run()
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import pygame

from emuchip8.core.errors import Chip8Error
from emuchip8.platform.input_handler import InputHandler
from emuchip8.shell.frame_renderer import DEFAULT_BACKGROUND, DEFAULT_FOREGROUND, RGB, FrameRenderer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE: str = "CHIP-8 Emulator"

# Minimum / maximum allowed display scale factors.
MIN_SCALE: int = 1
MAX_SCALE: int = 20

# Idle time between loop iterations while waiting for the next cycle.
_IDLE_SLEEP_S: float = 0.0001


class Window:
    """Pygame window that owns the emulation main loop.

    Parameters
    ----------
    machine:
        A loaded :class:`~emuchip8.core.machine.Chip8`.
    scale:
        Integer scale factor applied to the native 64x32 resolution.
    cycle_delay_ms:
        Minimum wall-clock time between two machine cycles.  ``0`` runs
        one cycle per loop iteration.
    title:
        Window caption; defaults to the emulator name.
    """

    def __init__(
        self,
        machine: object,
        scale: int = 10,
        cycle_delay_ms: float = 2.0,
        *,
        title: Optional[str] = None,
        foreground: RGB = DEFAULT_FOREGROUND,
        background: RGB = DEFAULT_BACKGROUND,
    ) -> None:
        # ---- basic state -------------------------------------------------
        self._machine = machine
        self._scale: int = max(MIN_SCALE, min(MAX_SCALE, scale))
        self._cycle_delay: float = max(0.0, cycle_delay_ms) / 1000.0
        self._running: bool = False
        self._title: str = title or _WINDOW_TITLE

        # ---- init pygame display -----------------------------------------
        if not pygame.get_init():
            pygame.init()

        self._frame_renderer: FrameRenderer = FrameRenderer(
            machine, foreground=foreground, background=background
        )
        self._input: InputHandler = InputHandler(machine)

        self._display_width: int = self._frame_renderer.width * self._scale
        self._display_height: int = self._frame_renderer.height * self._scale

        self._screen: pygame.Surface = pygame.display.set_mode(
            (self._display_width, self._display_height)
        )
        pygame.display.set_caption(self._title)

        # ---- performance counters ----------------------------------------
        self._cycles: int = 0
        self._cps_cycles: int = 0
        self._cps_update_time: float = 0.0
        self._cps_display: float = 0.0
        self._last_cycle_time: float = 0.0

        logger.info(
            "Window: %dx%d display (scale=%d, %.2f ms/cycle)",
            self._display_width,
            self._display_height,
            self._scale,
            self._cycle_delay * 1000.0,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def scale(self) -> int:
        return self._scale

    @property
    def cycles(self) -> int:
        """Machine cycles executed by this window so far."""
        return self._cycles

    @property
    def cps(self) -> float:
        """Measured cycles per second (updated once per second)."""
        return self._cps_display

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Enter the main emulation loop.

        Blocks until the user closes the window, presses Escape, or
        *max_cycles* cycles have run.  A machine error stops the loop and
        propagates to the caller after the window is shut down.
        """
        self._running = True
        self._cps_update_time = time.monotonic()
        self._last_cycle_time = 0.0
        self._cps_cycles = 0

        logger.info("Entering main loop")

        try:
            while self._running:
                self._tick()
                if max_cycles is not None and self._cycles >= max_cycles:
                    self._running = False
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        except Chip8Error:
            logger.error("Emulation stopped by machine error after %d cycles", self._cycles)
            raise
        finally:
            self._running = False
            self._shutdown()

    # ------------------------------------------------------------------
    # Per-iteration tick
    # ------------------------------------------------------------------

    def _tick(self) -> None:
        """Execute one iteration of the main loop."""
        # ---- input -------------------------------------------------------
        self._input.poll()
        if self._input.quit_requested:
            self._running = False
            return

        now = time.monotonic()
        if now - self._last_cycle_time < self._cycle_delay:
            time.sleep(_IDLE_SLEEP_S)
            return
        self._last_cycle_time = now

        # ---- emulation ---------------------------------------------------
        self._machine.step()  # type: ignore[attr-defined]
        self._cycles += 1

        # ---- video -------------------------------------------------------
        self.present()
        self._update_cps()

    def present(self) -> None:
        """Render the display buffer and flip it to the window."""
        surface = self._frame_renderer.render()
        scaled = pygame.transform.scale(surface, self._screen.get_size())
        self._screen.blit(scaled, (0, 0))
        pygame.display.flip()

    # ------------------------------------------------------------------
    # Cycle-rate tracking
    # ------------------------------------------------------------------

    def _update_cps(self) -> None:
        """Update the cycles-per-second counter roughly once per second."""
        self._cps_cycles += 1
        now = time.monotonic()
        elapsed = now - self._cps_update_time
        if elapsed >= 1.0:
            self._cps_display = self._cps_cycles / elapsed
            self._cps_cycles = 0
            self._cps_update_time = now
            pygame.display.set_caption(
                f"{self._title}  [{self._cps_display:.0f} cycles/s]"
            )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        """Clean up pygame."""
        logger.info("Shutting down after %d cycles", self._cycles)
        pygame.quit()
