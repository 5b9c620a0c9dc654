"""Flat 4 KiB memory with the built-in hexadecimal font."""

from __future__ import annotations

from typing import Iterable

from .errors import IntegerOverflow, OutOfBoundsAccess

MEMORY_SIZE = 0x1000
ADDRESS_LIMIT = 0x10000  # 16-bit address space seen by I and PC
PROGRAM_START = 0x200
FONT_START = 0x000
GLYPH_HEIGHT = 5

# 16 glyphs (0-F), five rows each, MSB is the leftmost pixel.
FONT_SPRITES = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)


def glyph_address(digit: int) -> int:
    """Return the address of the font glyph for the low nibble of ``digit``."""
    return FONT_START + (digit & 0xF) * GLYPH_HEIGHT


class Memory:
    """Bounds-checked byte-addressable RAM.

    Every accessor raises :class:`OutOfBoundsAccess` (or
    :class:`IntegerOverflow` for bulk writes whose end address does not fit
    the 16-bit address space) instead of truncating or wrapping.
    """

    def __init__(self, size: int = MEMORY_SIZE) -> None:
        self._data = bytearray(size)
        self._data[FONT_START : FONT_START + len(FONT_SPRITES)] = FONT_SPRITES

    @property
    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def _check_range(self, operation: str, address: int, length: int) -> None:
        if address < 0 or length < 0 or address + length > len(self._data):
            raise OutOfBoundsAccess(operation, address, length)

    def read_byte(self, address: int) -> int:
        self._check_range("read_byte", address, 1)
        return self._data[address]

    def read_bytes(self, address: int, length: int) -> bytes:
        self._check_range("read_bytes", address, length)
        return bytes(self._data[address : address + length])

    def write_byte(self, address: int, value: int) -> None:
        self._check_range("write_byte", address, 1)
        self._data[address] = value & 0xFF

    def write_bytes(self, address: int, data: Iterable[int]) -> None:
        payload = bytes(data)
        if address + len(payload) > ADDRESS_LIMIT:
            raise IntegerOverflow("write_bytes", address, len(payload))
        self._check_range("write_bytes", address, len(payload))
        self._data[address : address + len(payload)] = payload

    def load_program(self, data: bytes, start: int = PROGRAM_START) -> int:
        """Copy a ROM image into memory and return the number of bytes written."""
        self.write_bytes(start, data)
        return len(data)

    def dump(self, address: int, length: int = 16) -> str:
        """Hex dump of ``length`` bytes, used by debug logging."""
        chunk = self.read_bytes(address, length)
        return f"{address:04X}: " + " ".join(f"{b:02X}" for b in chunk)


__all__ = [
    "Memory",
    "MEMORY_SIZE",
    "ADDRESS_LIMIT",
    "PROGRAM_START",
    "FONT_START",
    "FONT_SPRITES",
    "GLYPH_HEIGHT",
    "glyph_address",
]
