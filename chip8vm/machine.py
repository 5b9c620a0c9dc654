"""A single CHIP-8 machine: memory, interpreter, frame buffer and keypad."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional, Union

from .cpu import Interpreter
from .display import FrameBuffer
from .keypad import InputState
from .memory import MEMORY_SIZE, PROGRAM_START, Memory
from .state import DEFAULT_STACK_LIMIT

logger = logging.getLogger(__name__)


class Chip8:
    """CHIP-8 machine wiring (one instance per ROM session)."""

    PROGRAM_START = PROGRAM_START
    MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START

    def __init__(
        self,
        *,
        stack_limit: Optional[int] = DEFAULT_STACK_LIMIT,
        rng: Optional[random.Random] = None,
        trace: bool = False,
    ) -> None:
        self.memory = Memory()
        self.framebuffer = FrameBuffer()
        self.keypad = InputState()
        self.cpu = Interpreter(
            self.memory,
            self.framebuffer,
            self.keypad,
            stack_limit=stack_limit,
            rng=rng,
            trace=trace,
        )

    @property
    def timers(self):
        return self.cpu.timers

    def load_rom(self, data: bytes) -> int:
        """Copy ``data`` to 0x200 and return the number of bytes loaded."""
        size = self.memory.load_program(data, self.PROGRAM_START)
        logger.info("Loaded %d byte ROM at 0x%03X", size, self.PROGRAM_START)
        return size

    def load_rom_file(self, path: Union[str, Path]) -> int:
        with open(path, "rb") as f:
            data = f.read()
        return self.load_rom(data)

    def step(self) -> None:
        self.cpu.step()

    def reset(self) -> None:
        """Reset CPU state and the display; loaded program memory is kept."""
        self.cpu.reset()
        self.framebuffer.clear()
        self.keypad.release_all()


__all__ = ["Chip8"]
