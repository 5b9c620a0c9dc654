from __future__ import annotations

import pytest

from chip8vm.errors import StackUnderflow
from chip8vm.host import create_headless_host
from chip8vm.host.base import InputAdapter
from chip8vm.scheduler import (
    MAX_CATCHUP_MS,
    Scheduler,
    StopReason,
    TimerAccumulator,
)

JUMP_TO_SELF = [0x12, 0x00]


def make_scheduler(machine, clock, host=None, **kwargs) -> Scheduler:
    host = host if host is not None else create_headless_host()
    kwargs.setdefault("hertz", 1000)
    return Scheduler(machine, host, clock=clock, sleep=clock.sleep, **kwargs)


class TestTimerAccumulator:
    def test_sixty_ticks_per_second(self) -> None:
        acc = TimerAccumulator()
        ticks = sum(acc.advance(1_000_000) for _ in range(1000))
        assert ticks == 60

    def test_no_drift_with_uneven_deltas(self) -> None:
        acc = TimerAccumulator()
        ticks = sum(acc.advance(delta) for delta in [7_000_000, 13_000_000] * 500)
        assert ticks == 600

    def test_catch_up_is_capped(self) -> None:
        acc = TimerAccumulator()
        assert acc.advance(3_600 * 1_000_000_000) == MAX_CATCHUP_MS * 60 // 1000

    def test_negative_delta_is_ignored(self) -> None:
        acc = TimerAccumulator()
        assert acc.advance(-5_000_000_000) == 0

    def test_rejects_bad_frequency(self) -> None:
        with pytest.raises(ValueError):
            TimerAccumulator(timer_hz=0)


def test_timers_run_at_60hz_regardless_of_cpu_speed(load_program, clock) -> None:
    vm = load_program(JUMP_TO_SELF)
    vm.timers.delay = 60
    stats = make_scheduler(vm, clock).run(max_seconds=1.0)
    assert stats.stop_reason is StopReason.MAX_SECONDS
    assert stats.timer_ticks == 60
    assert stats.steps == 1000
    assert vm.timers.delay == 0


def test_timers_do_not_depend_on_instruction_rate(load_program, clock) -> None:
    vm = load_program(JUMP_TO_SELF)
    vm.timers.delay = 200
    stats = make_scheduler(vm, clock, hertz=50).run(max_seconds=2.0)
    assert stats.steps == 100
    assert vm.timers.delay == 80


def test_stall_only_catches_up_to_the_cap(load_program, clock) -> None:
    vm = load_program(JUMP_TO_SELF)
    vm.timers.delay = 255

    class StallingInput(InputAdapter):
        def __init__(self) -> None:
            self.polls = 0

        def poll(self, keys) -> bool:
            self.polls += 1
            if self.polls == 1:
                clock.advance_ms(10_000)
            return self.polls <= 2

    host = create_headless_host()
    host.input = StallingInput()
    stats = make_scheduler(vm, clock, host=host).run()
    assert stats.stop_reason is StopReason.QUIT
    assert stats.timer_ticks == 180
    assert vm.timers.delay == 255 - 180


def test_max_steps(load_program, clock) -> None:
    vm = load_program(JUMP_TO_SELF)
    stats = make_scheduler(vm, clock).run(max_steps=25)
    assert stats.stop_reason is StopReason.MAX_STEPS
    assert stats.steps == 25
    assert vm.cpu.instruction_count == 25


def test_quit_from_input(load_program, clock) -> None:
    vm = load_program(JUMP_TO_SELF)
    host = create_headless_host(quit_after=5)
    stats = make_scheduler(vm, clock, host=host).run()
    assert stats.stop_reason is StopReason.QUIT
    assert stats.steps == 5
    assert host.display.present_count == 5


def test_stop_ends_loop(load_program, clock) -> None:
    vm = load_program(JUMP_TO_SELF)
    scheduler = make_scheduler(vm, clock)

    class StopAfterThree(InputAdapter):
        def __init__(self) -> None:
            self.polls = 0

        def poll(self, keys) -> bool:
            self.polls += 1
            if self.polls == 3:
                scheduler.stop()
            return True

    scheduler.host.input = StopAfterThree()
    stats = scheduler.run()
    assert stats.stop_reason is StopReason.STOPPED
    assert stats.steps == 3


def test_paces_to_instruction_frequency(load_program, clock) -> None:
    vm = load_program(JUMP_TO_SELF)
    stats = make_scheduler(vm, clock, hertz=500).run(max_steps=10)
    assert clock.now_ns == 10 * 2_000_000
    assert stats.elapsed_seconds == pytest.approx(0.02)


def test_scripted_keys_reach_the_program(load_program, clock) -> None:
    # LD V3, K then JP self
    vm = load_program([0xF3, 0x0A, 0x12, 0x02])
    host = create_headless_host(script=[(), (), (0xB,)], quit_after=6)
    make_scheduler(vm, clock, host=host).run()
    assert vm.cpu.regs.v[3] == 0xB
    assert vm.cpu.pc == 0x202


def test_beeper_follows_sound_timer(load_program, clock) -> None:
    # LD V0, 2; LD ST, V0; JP self
    vm = load_program([0x60, 0x02, 0xF0, 0x18, 0x12, 0x04])
    host = create_headless_host()
    make_scheduler(vm, clock, host=host).run(max_seconds=0.1)
    assert host.audio.events == ["start", "stop"]
    assert host.audio.playing is False


def test_vm_error_propagates_and_silences_beeper(load_program, clock) -> None:
    # LD V0, 10; LD ST, V0; RET with empty stack
    vm = load_program([0x60, 0x0A, 0xF0, 0x18, 0x00, 0xEE])
    host = create_headless_host()
    with pytest.raises(StackUnderflow):
        make_scheduler(vm, clock, host=host).run(max_seconds=1.0)
    assert host.audio.events == ["start", "stop"]
    assert vm.timers.sound == 10


def test_rejects_bad_frequency(machine, clock) -> None:
    with pytest.raises(ValueError):
        make_scheduler(machine, clock, hertz=0)


def test_timers_keep_running_while_waiting_for_key(load_program, clock) -> None:
    vm = load_program([0xF3, 0x0A])
    vm.timers.delay = 30
    vm.timers.sound = 30
    host = create_headless_host()
    stats = make_scheduler(vm, clock, host=host).run(max_seconds=0.5)
    assert stats.steps == 500
    assert stats.timer_ticks == 30
    assert vm.timers.delay == 0
    assert vm.timers.sound == 0
    assert vm.cpu.pc == 0x200
    assert host.audio.events == ["start", "stop"]
