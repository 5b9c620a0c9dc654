"""pygame window, keyboard and beeper backend."""

from __future__ import annotations

import logging
import os
import time
from typing import Dict, Optional

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import numpy as np
import pygame

from ..display import FrameBuffer, OFF_COLOR, ON_COLOR
from ..errors import HostAdapterError
from ..keypad import InputState
from .base import AudioAdapter, DisplayAdapter, Host, InputAdapter

logger = logging.getLogger(__name__)

WINDOW_TITLE = "chip8vm"
PRESENT_HZ = 60.0
BEEP_HZ = 440
SAMPLE_RATE = 44100

# Conventional QWERTY layout of the COSMAC VIP hex keypad.
KEY_MAP: Dict[int, int] = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


class PygameSurface:
    """The pygame window shared by the display and input adapters."""

    def __init__(self, width: int, height: int, title: str = WINDOW_TITLE) -> None:
        try:
            pygame.display.init()
            self.window = pygame.display.set_mode((width, height))
        except pygame.error as exc:
            raise HostAdapterError(f"pygame display init failed: {exc}") from exc
        pygame.display.set_caption(title)
        self.size = (width, height)

    def close(self) -> None:
        pygame.quit()


class PygameDisplay(DisplayAdapter):
    """Scales the frame buffer into the window at most ``max_fps`` times a second."""

    def __init__(
        self,
        surface: PygameSurface,
        max_fps: float = PRESENT_HZ,
        clock=time.perf_counter,
    ) -> None:
        self.surface = surface
        self.min_interval = 1.0 / max_fps
        self._clock = clock
        self._last_present: Optional[float] = None

    def present(self, frame: FrameBuffer) -> None:
        now = self._clock()
        if (
            self._last_present is not None
            and now - self._last_present < self.min_interval
        ):
            return
        self._last_present = now

        # surfarray expects (width, height, 3)
        pixels = frame.pixels.T
        rgb = np.empty(pixels.shape + (3,), dtype=np.uint8)
        rgb[pixels == 1] = ON_COLOR
        rgb[pixels == 0] = OFF_COLOR
        try:
            small = pygame.surfarray.make_surface(rgb)
            scaled = pygame.transform.scale(small, self.surface.size)
            self.surface.window.blit(scaled, (0, 0))
            pygame.display.flip()
        except pygame.error as exc:
            raise HostAdapterError(f"pygame present failed: {exc}") from exc
        frame.dirty = False


class PygameInput(InputAdapter):
    """Translates pygame keyboard events into keypad state."""

    def __init__(self, surface: PygameSurface) -> None:
        self.surface = surface

    def poll(self, keys: InputState) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type not in (pygame.KEYDOWN, pygame.KEYUP):
                continue
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return False
            key = KEY_MAP.get(event.key)
            if key is not None:
                keys[key] = event.type == pygame.KEYDOWN
        return True


class PygameAudio(AudioAdapter):
    """Loops a square-wave tone through ``pygame.mixer`` while the beep is on."""

    def __init__(self, tone_hz: int = BEEP_HZ) -> None:
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 1, 512)
            pygame.mixer.init()
        except pygame.error as exc:
            raise HostAdapterError(f"pygame mixer init failed: {exc}") from exc
        rate, _, channels = pygame.mixer.get_init()
        period = max(2, int(round(rate / tone_hz)))
        t = np.arange(period)
        wave = np.where(t < period // 2, 1, -1).astype(np.int16) * 8192
        if channels > 1:
            wave = np.repeat(wave[:, None], channels, axis=1)
        self.sound = pygame.mixer.Sound(array=np.ascontiguousarray(wave))
        self.playing = False

    def start_beep(self) -> None:
        if not self.playing:
            self.sound.play(loops=-1)
            self.playing = True

    def stop_beep(self) -> None:
        if self.playing:
            self.sound.stop()
            self.playing = False

    def close(self) -> None:
        self.stop_beep()


def create_pygame_host(width: int, height: int) -> Host:
    logger.info("Creating pygame host %dx%d", width, height)
    surface = PygameSurface(width, height)
    try:
        audio = PygameAudio()
    except HostAdapterError:
        surface.close()
        raise
    return Host(
        name="pygame",
        display=PygameDisplay(surface),
        input=PygameInput(surface),
        audio=audio,
        surface=surface,
    )


__all__ = [
    "KEY_MAP",
    "PygameSurface",
    "PygameDisplay",
    "PygameInput",
    "PygameAudio",
    "create_pygame_host",
]
