"""
DisplayBuffer -- the 64x32 monochrome pixel grid of the CHIP-8 machine.

Each cell holds a 32-bit value so that a renderer can hand the buffer
straight to a texture: ``PIXEL_OFF`` (0) or ``PIXEL_ON`` (0xFFFFFFFF).
The grid is stored row-major as a ``numpy.uint32`` array of shape
``(VIDEO_HEIGHT, VIDEO_WIDTH)``, so ``pixels[y, x]`` addresses a cell.

Only two instructions mutate the buffer: CLS (:meth:`clear`) and DRW
(:meth:`draw_sprite`).  Renderers read it between machine cycles.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from emuchip8.core.constants import SPRITE_WIDTH, VIDEO_HEIGHT, VIDEO_WIDTH

PIXEL_OFF = np.uint32(0)
PIXEL_ON = np.uint32(0xFFFFFFFF)


class DisplayBuffer:
    """Holds the machine's pixel grid and implements sprite drawing."""

    WIDTH: int = VIDEO_WIDTH
    HEIGHT: int = VIDEO_HEIGHT

    def __init__(self) -> None:
        self.pixels: np.ndarray = np.zeros((self.HEIGHT, self.WIDTH), dtype=np.uint32)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Turn every pixel off."""
        self.pixels.fill(PIXEL_OFF)

    def draw_sprite(self, x: int, y: int, rows: Sequence[int]) -> bool:
        """XOR an 8-pixel-wide sprite onto the grid.

        Args:
            x: Left column; reduced modulo the display width.
            y: Top row; reduced modulo the display height.
            rows: One byte per sprite row, most significant bit leftmost.

        Returns:
            ``True`` if any pixel was switched from on to off.

        The sprite origin wraps, the sprite body does not: rows at or past
        the bottom edge and columns at or past the right edge are clipped.
        """
        x0 = x % self.WIDTH
        y0 = y % self.HEIGHT
        pixels = self.pixels
        collision = False

        for row, sprite_byte in enumerate(rows):
            py = y0 + row
            if py >= self.HEIGHT:
                break
            for column in range(SPRITE_WIDTH):
                if not sprite_byte & (0x80 >> column):
                    continue
                px = x0 + column
                if px >= self.WIDTH:
                    break
                if pixels[py, px] == PIXEL_ON:
                    collision = True
                pixels[py, px] ^= PIXEL_ON

        return collision

    def fill(self) -> None:
        """Turn every pixel on."""
        self.pixels.fill(PIXEL_ON)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def is_on(self, x: int, y: int) -> bool:
        """Return ``True`` if the pixel at column *x*, row *y* is lit."""
        return bool(self.pixels[y, x] != PIXEL_OFF)

    def lit(self) -> np.ndarray:
        """Return a boolean ``(HEIGHT, WIDTH)`` array of lit pixels."""
        return self.pixels != PIXEL_OFF

    def lit_count(self) -> int:
        """Number of pixels currently on."""
        return int(np.count_nonzero(self.pixels))

    def snapshot(self) -> np.ndarray:
        """Return an independent copy of the pixel grid."""
        return self.pixels.copy()

    def to_text(self, on: str = "#", off: str = ".") -> str:
        """Render the grid as text, one line per row."""
        return "\n".join(
            "".join(on if cell else off for cell in row) for row in self.lit()
        )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def get_snapshot(self) -> bytes:
        """Return the raw pixel bytes (native-endian uint32, row-major)."""
        return self.pixels.tobytes()

    def restore_snapshot(self, data: bytes) -> None:
        """Restore the grid from :meth:`get_snapshot` output.

        Raises:
            ValueError: If *data* has the wrong length.
        """
        expected = self.pixels.nbytes
        if len(data) != expected:
            raise ValueError(
                f"Snapshot size mismatch: expected {expected}, got {len(data)}"
            )
        self.pixels[:] = np.frombuffer(data, dtype=np.uint32).reshape(
            (self.HEIGHT, self.WIDTH)
        )

    def __repr__(self) -> str:
        return (
            f"DisplayBuffer(width={self.WIDTH}, height={self.HEIGHT}, "
            f"lit={self.lit_count()})"
        )
