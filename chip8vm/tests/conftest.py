"""Shared pytest fixtures for the CHIP-8 VM tests."""

from __future__ import annotations

import random
from typing import Callable

import pytest

from chip8vm.machine import Chip8


class ManualClock:
    """Nanosecond clock that only moves when ``sleep`` is called."""

    def __init__(self, start_ns: int = 0) -> None:
        self.now_ns = start_ns
        self.sleeps = 0

    def __call__(self) -> int:
        return self.now_ns

    def sleep(self, seconds: float) -> None:
        self.sleeps += 1
        self.now_ns += int(round(seconds * 1_000_000_000))

    def advance_ms(self, ms: float) -> None:
        self.now_ns += int(ms * 1_000_000)


@pytest.fixture
def machine() -> Chip8:
    return Chip8(rng=random.Random(1234))


@pytest.fixture
def load_program(machine: Chip8) -> Callable[[bytes], Chip8]:
    def _load(program: bytes) -> Chip8:
        machine.load_rom(bytes(program))
        return machine

    return _load


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()
