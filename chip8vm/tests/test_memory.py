from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from chip8vm.errors import IntegerOverflow, OutOfBoundsAccess, VMError
from chip8vm.memory import (
    FONT_SPRITES,
    MEMORY_SIZE,
    PROGRAM_START,
    Memory,
    glyph_address,
)


@given(
    address=st.integers(min_value=0, max_value=MEMORY_SIZE - 1),
    value=st.integers(min_value=0, max_value=0xFF),
)
def test_write_then_read_returns_value(address: int, value: int) -> None:
    mem = Memory()
    mem.write_byte(address, value)
    assert mem.read_byte(address) == value


@given(address=st.integers(min_value=MEMORY_SIZE, max_value=0xFFFF))
def test_out_of_range_access_is_reported(address: int) -> None:
    mem = Memory()
    with pytest.raises(OutOfBoundsAccess) as excinfo:
        mem.read_byte(address)
    assert excinfo.value.address == address
    with pytest.raises(OutOfBoundsAccess):
        mem.write_byte(address, 0x12)


def test_negative_address_is_out_of_bounds() -> None:
    with pytest.raises(OutOfBoundsAccess):
        Memory().read_byte(-1)


def test_font_is_loaded_at_zero() -> None:
    mem = Memory()
    assert len(FONT_SPRITES) == 80
    assert mem.read_bytes(0, 80) == FONT_SPRITES
    # glyph "0" and glyph "F"
    assert mem.read_bytes(0, 5) == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])
    assert mem.read_bytes(75, 5) == bytes([0xF0, 0x80, 0xF0, 0x80, 0x80])
    assert mem.read_byte(80) == 0


def test_glyph_address_uses_low_nibble() -> None:
    assert glyph_address(0x5) == 25
    assert glyph_address(0xF) == 75
    assert glyph_address(0x1A) == 50


def test_write_bytes_and_read_bytes() -> None:
    mem = Memory()
    mem.write_bytes(0x300, b"\x01\x02\x03")
    assert mem.read_bytes(0x300, 3) == b"\x01\x02\x03"
    assert mem.read_bytes(0x300, 0) == b""


def test_read_bytes_past_end_is_out_of_bounds() -> None:
    mem = Memory()
    assert mem.read_bytes(MEMORY_SIZE - 2, 2) == b"\x00\x00"
    with pytest.raises(OutOfBoundsAccess) as excinfo:
        mem.read_bytes(MEMORY_SIZE - 2, 3)
    assert excinfo.value.length == 3


def test_write_bytes_past_end_leaves_memory_untouched() -> None:
    mem = Memory()
    with pytest.raises(OutOfBoundsAccess):
        mem.write_bytes(MEMORY_SIZE - 1, b"\xAA\xBB")
    assert mem.read_byte(MEMORY_SIZE - 1) == 0


def test_write_bytes_detects_address_overflow() -> None:
    mem = Memory()
    with pytest.raises(IntegerOverflow) as excinfo:
        mem.write_bytes(0xFFFF, b"\x01\x02")
    assert isinstance(excinfo.value, VMError)
    assert "write_bytes" in str(excinfo.value)


def test_load_program_places_rom_at_program_start() -> None:
    mem = Memory()
    assert mem.load_program(b"\x12\x00") == 2
    assert mem.read_bytes(PROGRAM_START, 2) == b"\x12\x00"


def test_load_program_rejects_oversized_rom() -> None:
    mem = Memory()
    with pytest.raises(OutOfBoundsAccess):
        mem.load_program(bytes(MEMORY_SIZE - PROGRAM_START + 1))


def test_write_byte_masks_value() -> None:
    mem = Memory()
    mem.write_byte(0x200, 0x1FF)
    assert mem.read_byte(0x200) == 0xFF


def test_dump_formats_hex() -> None:
    mem = Memory()
    assert mem.dump(0, 2) == "0000: F0 90"
