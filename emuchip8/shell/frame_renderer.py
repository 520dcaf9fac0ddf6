"""
Frame renderer for emuchip8.
Converts the machine's 64x32 display buffer into an RGB pygame Surface.

The core stores one 32-bit value per pixel (0 = off, 0xFFFFFFFF = on).
The renderer reduces that to a boolean grid, looks each cell up in a
two-entry colour table and blits the result into a pygame Surface
suitable for scaling onto the window.

Performance notes
-----------------
The look-up uses **numpy** fancy indexing on the whole grid at once and
``pygame.surfarray.blit_array`` to copy the pixels, so a frame costs a
handful of array operations rather than 2048 Python-level writes.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
import pygame

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

DEFAULT_FOREGROUND: RGB = (0xFF, 0xFF, 0xFF)
DEFAULT_BACKGROUND: RGB = (0x00, 0x00, 0x00)


class FrameRenderer:
    """Convert a machine's :class:`DisplayBuffer` into a pygame Surface.

    Parameters
    ----------
    machine:
        The emulated machine.  Expected attribute:

        * ``display`` -- a :class:`~emuchip8.core.display.DisplayBuffer`
    foreground:
        Colour of lit pixels.
    background:
        Colour of unlit pixels.
    """

    def __init__(
        self,
        machine: object,
        foreground: RGB = DEFAULT_FOREGROUND,
        background: RGB = DEFAULT_BACKGROUND,
    ) -> None:
        self._machine = machine
        display = machine.display  # type: ignore[attr-defined]
        self._width: int = display.WIDTH
        self._height: int = display.HEIGHT

        # Row 0 = off colour, row 1 = on colour.
        self._lut: np.ndarray = np.zeros((2, 3), dtype=np.uint8)
        self.set_colours(foreground, background)

        # Create the output surface (RGB, no alpha needed).
        self._surface: pygame.Surface = pygame.Surface((self._width, self._height))

        logger.info("FrameRenderer: %dx%d", self._width, self._height)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        """Width of the rendered surface in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Height of the rendered surface in pixels."""
        return self._height

    @property
    def surface(self) -> pygame.Surface:
        """The internal pygame Surface (updated on each :meth:`render` call)."""
        return self._surface

    def render(self) -> pygame.Surface:
        """Render the current display buffer and return the surface.

        The same :class:`pygame.Surface` object is reused every frame.
        """
        lit = self._machine.display.lit()  # type: ignore[attr-defined]

        # (H, W) bool -> (H, W, 3) uint8
        rgb = self._lut[lit.astype(np.intp)]

        # pygame surfarray expects (W, H, 3) -- transpose width and height.
        pygame.surfarray.blit_array(self._surface, rgb.transpose(1, 0, 2))
        return self._surface

    def set_colours(self, foreground: RGB, background: RGB) -> None:
        """Replace the on/off colours.

        Raises:
            ValueError: If a colour is not three components in 0..255.
        """
        for colour in (foreground, background):
            if len(colour) != 3 or any(not 0 <= c <= 255 for c in colour):
                raise ValueError(f"Invalid RGB colour: {colour!r}")
        self._lut[0] = background
        self._lut[1] = foreground
