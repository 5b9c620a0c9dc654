"""Display subsystem for the CHIP-8 VM."""

from .framebuffer import (
    HEIGHT,
    OFF_COLOR,
    ON_COLOR,
    SPRITE_WIDTH,
    WIDTH,
    FrameBuffer,
)

__all__ = [
    "FrameBuffer",
    "WIDTH",
    "HEIGHT",
    "SPRITE_WIDTH",
    "ON_COLOR",
    "OFF_COLOR",
]
