"""64x32 monochrome frame buffer with XOR sprite blitting."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
from PIL import Image

WIDTH = 64
HEIGHT = 32
SPRITE_WIDTH = 8

Color = Tuple[int, int, int]

ON_COLOR: Color = (255, 255, 255)
OFF_COLOR: Color = (0, 0, 0)


class FrameBuffer:
    """One bit per pixel raster, stored as a ``(HEIGHT, WIDTH)`` uint8 array."""

    def __init__(self, width: int = WIDTH, height: int = HEIGHT) -> None:
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width), dtype=np.uint8)
        # Set whenever a blit or clear touches the raster; cleared by hosts.
        self.dirty = True

    @property
    def pixels(self) -> np.ndarray:
        """Read-only copy of the raster, indexed ``[row, column]``."""
        view = self._pixels.copy()
        view.setflags(write=False)
        return view

    def pixel(self, x: int, y: int) -> int:
        return int(self._pixels[y % self.height, x % self.width])

    def lit_count(self) -> int:
        return int(self._pixels.sum())

    def clear(self) -> None:
        self._pixels.fill(0)
        self.dirty = True

    def draw_sprite(self, x: int, y: int, rows: Sequence[int]) -> bool:
        """XOR ``rows`` onto the raster at (x, y), wrapping at the edges.

        Each row byte covers eight columns, most significant bit first.
        Returns True if any lit pixel was turned off.
        """
        collision = False
        for row_index, row_bits in enumerate(rows):
            py = (y + row_index) % self.height
            for bit in range(SPRITE_WIDTH):
                if not (row_bits >> (SPRITE_WIDTH - 1 - bit)) & 1:
                    continue
                px = (x + bit) % self.width
                if self._pixels[py, px]:
                    collision = True
                self._pixels[py, px] ^= 1
        self.dirty = True
        return collision

    def render_text(self, on: str = "#", off: str = "-") -> str:
        """ASCII rendering of the raster, one line per row."""
        return "\n".join(
            "".join(on if value else off for value in row) for row in self._pixels
        )

    def to_image(
        self,
        zoom: int = 1,
        on_color: Color = ON_COLOR,
        off_color: Color = OFF_COLOR,
    ) -> Image.Image:
        """Render the raster as an RGB Pillow image scaled by ``zoom``."""
        if zoom < 1:
            raise ValueError(f"Zoom must be >= 1, got {zoom}")
        rgb = np.empty((self.height, self.width, 3), dtype=np.uint8)
        rgb[self._pixels == 1] = on_color
        rgb[self._pixels == 0] = off_color
        image = Image.fromarray(rgb)
        if zoom != 1:
            image = image.resize(
                (self.width * zoom, self.height * zoom), Image.Resampling.NEAREST
            )
        return image

    def save_png(self, filename: str, zoom: int = 4) -> None:
        self.to_image(zoom=zoom).save(filename)


__all__ = ["FrameBuffer", "WIDTH", "HEIGHT", "SPRITE_WIDTH", "ON_COLOR", "OFF_COLOR"]
