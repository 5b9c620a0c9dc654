"""Register file, call stack and the delay/sound timers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import StackOverflow, StackUnderflow
from .memory import PROGRAM_START

NUM_REGISTERS = 16
DEFAULT_STACK_LIMIT = 16
FLAG_REGISTER = 0xF


@dataclass
class RegisterFile:
    """General registers V0-VF plus the address register and program counter."""

    v: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    i: int = 0
    pc: int = PROGRAM_START

    def reset(self) -> None:
        self.v = [0] * NUM_REGISTERS
        self.i = 0
        self.pc = PROGRAM_START

    def read(self, index: int) -> int:
        return self.v[index]

    def write(self, index: int, value: int) -> None:
        self.v[index] = value & 0xFF

    @property
    def vf(self) -> int:
        return self.v[FLAG_REGISTER]

    @vf.setter
    def vf(self, value: int) -> None:
        self.v[FLAG_REGISTER] = value & 0xFF


class CallStack:
    """Return-address stack with an optional depth limit.

    ``limit=None`` lets the stack grow without bound.
    """

    def __init__(self, limit: Optional[int] = DEFAULT_STACK_LIMIT) -> None:
        if limit is not None and limit < 1:
            raise ValueError(f"Stack limit must be positive, got {limit}")
        self.limit = limit
        self._entries: List[int] = []

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, address: int, pc: int) -> None:
        if self.limit is not None and len(self._entries) >= self.limit:
            raise StackOverflow(pc, self.limit)
        self._entries.append(address & 0xFFFF)

    def pop(self, pc: int) -> int:
        if not self._entries:
            raise StackUnderflow(pc)
        return self._entries.pop()

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> Tuple[int, ...]:
        return tuple(self._entries)


@dataclass
class Timers:
    """Delay and sound counters, both decremented at 60 Hz down to zero."""

    delay: int = 0
    sound: int = 0

    def tick(self) -> None:
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1

    def reset(self) -> None:
        self.delay = 0
        self.sound = 0

    @property
    def beeping(self) -> bool:
        return self.sound > 0


__all__ = [
    "RegisterFile",
    "CallStack",
    "Timers",
    "NUM_REGISTERS",
    "DEFAULT_STACK_LIMIT",
    "FLAG_REGISTER",
]
