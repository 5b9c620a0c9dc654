import pytest

from chip8vm.errors import IntegerOverflow, OutOfBoundsAccess
from chip8vm.machine import Chip8
from chip8vm.memory import FONT_SPRITES


def test_load_rom_places_program_at_0x200(machine) -> None:
    assert machine.load_rom(b"\x12\x34\x56") == 3
    assert machine.memory.read_bytes(0x200, 3) == b"\x12\x34\x56"
    assert machine.memory.read_bytes(0, len(FONT_SPRITES)) == FONT_SPRITES
    assert machine.cpu.pc == Chip8.PROGRAM_START


def test_largest_rom_fits(machine) -> None:
    assert machine.load_rom(bytes(Chip8.MAX_ROM_SIZE)) == 0xE00


def test_oversized_rom_is_rejected(machine) -> None:
    with pytest.raises(OutOfBoundsAccess):
        machine.load_rom(bytes(Chip8.MAX_ROM_SIZE + 1))


def test_rom_past_address_space(machine) -> None:
    with pytest.raises(IntegerOverflow):
        machine.load_rom(bytes(0x10000))


def test_load_rom_file(machine, tmp_path) -> None:
    rom = tmp_path / "game.ch8"
    rom.write_bytes(b"\x00\xE0")
    assert machine.load_rom_file(rom) == 2
    machine.step()
    assert machine.cpu.pc == 0x202


def test_reset_keeps_program(load_program) -> None:
    vm = load_program([0x60, 0x07, 0xA0, 0x00, 0xD0, 0x05])
    for _ in range(3):
        vm.step()
    vm.keypad.press(1)
    vm.timers.delay = 9
    vm.reset()
    assert vm.cpu.regs.v[0] == 0
    assert vm.timers.delay == 0
    assert vm.framebuffer.lit_count() == 0
    assert vm.keypad.pressed_keys() == ()
    assert vm.memory.read_byte(0x200) == 0x60


def test_stack_limit_is_passed_through() -> None:
    assert Chip8(stack_limit=4).cpu.stack.limit == 4
    assert Chip8(stack_limit=None).cpu.stack.limit is None
