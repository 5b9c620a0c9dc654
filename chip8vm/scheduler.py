"""Fixed-frequency run loop interleaving execution, timers and host I/O."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .host import Host
from .machine import Chip8

logger = logging.getLogger(__name__)

NS_PER_SECOND = 1_000_000_000
NS_PER_MS = 1_000_000

DEFAULT_HERTZ = 500.0
TIMER_HZ = 60
MAX_CATCHUP_MS = 3000


class StopReason(Enum):
    QUIT = "quit"
    MAX_STEPS = "max_steps"
    MAX_SECONDS = "max_seconds"
    STOPPED = "stopped"


@dataclass
class RunStats:
    """Counters reported at the end of :meth:`Scheduler.run`."""

    steps: int = 0
    iterations: int = 0
    timer_ticks: int = 0
    frames_presented: int = 0
    elapsed_ns: int = 0
    stop_reason: Optional[StopReason] = None

    @property
    def elapsed_seconds(self) -> float:
        return self.elapsed_ns / NS_PER_SECOND


class TimerAccumulator:
    """Converts wall-clock deltas into whole timer ticks.

    The accumulator is held as ``nanoseconds * timer_hz`` so that one tick
    corresponds to exactly ``NS_PER_SECOND`` units and no rounding drift
    builds up over long runs.
    """

    def __init__(
        self, timer_hz: int = TIMER_HZ, max_catchup_ms: int = MAX_CATCHUP_MS
    ) -> None:
        if timer_hz <= 0:
            raise ValueError(f"Timer frequency must be positive, got {timer_hz}")
        self.timer_hz = int(timer_hz)
        self.max_delta_ns = int(max_catchup_ms) * NS_PER_MS
        self._acc = 0

    def reset(self) -> None:
        self._acc = 0

    def advance(self, delta_ns: int) -> int:
        """Add ``delta_ns`` (capped) and return the number of ticks now due."""
        delta_ns = max(0, min(int(delta_ns), self.max_delta_ns))
        self._acc += delta_ns * self.timer_hz
        ticks, self._acc = divmod(self._acc, NS_PER_SECOND)
        return ticks


class Scheduler:
    """Drives a :class:`Chip8` against a :class:`Host`.

    Each iteration services the 60 Hz timers, polls input, executes exactly
    one instruction, presents the frame buffer, updates the beeper and then
    sleeps until the next instruction slot.
    """

    def __init__(
        self,
        machine: Chip8,
        host: Host,
        *,
        hertz: float = DEFAULT_HERTZ,
        timer_hz: int = TIMER_HZ,
        max_catchup_ms: int = MAX_CATCHUP_MS,
        clock: Callable[[], int] = time.perf_counter_ns,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if hertz <= 0:
            raise ValueError(f"Instruction frequency must be positive, got {hertz}")
        self.machine = machine
        self.host = host
        self.hertz = float(hertz)
        self.period_ns = int(round(NS_PER_SECOND / self.hertz))
        self.timers = TimerAccumulator(timer_hz, max_catchup_ms)
        self._clock = clock
        self._sleep = sleep
        self._beeping = False
        self.running = False

    def stop(self) -> None:
        """Ask the loop to exit after the current iteration."""
        self.running = False

    def run(
        self,
        *,
        max_steps: Optional[int] = None,
        max_seconds: Optional[float] = None,
    ) -> RunStats:
        """Run until quit, a limit is reached or the VM raises.

        VM errors propagate to the caller; the beeper is silenced either way.
        """
        stats = RunStats()
        limit_ns = (
            int(max_seconds * NS_PER_SECOND) if max_seconds is not None else None
        )
        start = last = self._clock()
        self.timers.reset()
        self.running = True
        try:
            while self.running:
                now = self._clock()
                ticks = self.timers.advance(now - last)
                last = now
                for _ in range(ticks):
                    self.machine.timers.tick()
                stats.timer_ticks += ticks

                if limit_ns is not None and now - start >= limit_ns:
                    stats.stop_reason = StopReason.MAX_SECONDS
                    break
                if max_steps is not None and stats.steps >= max_steps:
                    stats.stop_reason = StopReason.MAX_STEPS
                    break

                if not self.host.input.poll(self.machine.keypad):
                    stats.stop_reason = StopReason.QUIT
                    break

                self.machine.step()
                stats.steps += 1

                self.host.display.present(self.machine.framebuffer)
                stats.frames_presented += 1
                self._update_beeper()

                stats.iterations += 1
                self._pace(now)
            else:
                stats.stop_reason = StopReason.STOPPED
        finally:
            self.running = False
            self._silence()
            stats.elapsed_ns = self._clock() - start

        logger.info(
            "Run finished (%s): %d steps, %d timer ticks in %.3fs",
            stats.stop_reason.value if stats.stop_reason else "unknown",
            stats.steps,
            stats.timer_ticks,
            stats.elapsed_seconds,
        )
        return stats

    def _update_beeper(self) -> None:
        beeping = self.machine.timers.beeping
        if beeping and not self._beeping:
            self.host.audio.start_beep()
        elif not beeping and self._beeping:
            self.host.audio.stop_beep()
        self._beeping = beeping

    def _silence(self) -> None:
        if self._beeping:
            self.host.audio.stop_beep()
            self._beeping = False

    def _pace(self, iteration_start: int) -> None:
        remaining = iteration_start + self.period_ns - self._clock()
        if remaining > 0:
            self._sleep(remaining / NS_PER_SECOND)


__all__ = [
    "Scheduler",
    "RunStats",
    "StopReason",
    "TimerAccumulator",
    "DEFAULT_HERTZ",
    "TIMER_HZ",
    "MAX_CATCHUP_MS",
]
