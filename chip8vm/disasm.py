"""Opcode field decoding and a mnemonic disassembler for trace output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple


@dataclass(frozen=True)
class DecodedOpcode:
    """A 16-bit instruction word split into its operand fields."""

    opcode: int

    @property
    def family(self) -> int:
        return (self.opcode >> 12) & 0xF

    @property
    def nnn(self) -> int:
        return self.opcode & 0x0FFF

    @property
    def nn(self) -> int:
        return self.opcode & 0x00FF

    @property
    def n(self) -> int:
        return self.opcode & 0x000F

    @property
    def x(self) -> int:
        return (self.opcode >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.opcode >> 4) & 0xF


def decode(opcode: int) -> DecodedOpcode:
    return DecodedOpcode(opcode & 0xFFFF)


_ALU_MNEMONICS = {
    0x0: "LD V{x:X}, V{y:X}",
    0x1: "OR V{x:X}, V{y:X}",
    0x2: "AND V{x:X}, V{y:X}",
    0x3: "XOR V{x:X}, V{y:X}",
    0x4: "ADD V{x:X}, V{y:X}",
    0x5: "SUB V{x:X}, V{y:X}",
    0x6: "SHR V{x:X}",
    0x7: "SUBN V{x:X}, V{y:X}",
    0xE: "SHL V{x:X}",
}

_MISC_MNEMONICS = {
    0x07: "LD V{x:X}, DT",
    0x0A: "LD V{x:X}, K",
    0x15: "LD DT, V{x:X}",
    0x18: "LD ST, V{x:X}",
    0x1E: "ADD I, V{x:X}",
    0x29: "LD F, V{x:X}",
    0x33: "LD B, V{x:X}",
    0x55: "LD [I], V{x:X}",
    0x65: "LD V{x:X}, [I]",
}


def mnemonic(opcode: int) -> Optional[str]:
    """Return the assembler mnemonic for ``opcode``, or None if it is invalid."""
    d = decode(opcode)
    fields = {"x": d.x, "y": d.y}
    family = d.family

    if family == 0x0:
        if d.opcode == 0x00E0:
            return "CLS"
        if d.opcode == 0x00EE:
            return "RET"
        return None
    if family == 0x1:
        return f"JP 0x{d.nnn:03X}"
    if family == 0x2:
        return f"CALL 0x{d.nnn:03X}"
    if family == 0x3:
        return f"SE V{d.x:X}, 0x{d.nn:02X}"
    if family == 0x4:
        return f"SNE V{d.x:X}, 0x{d.nn:02X}"
    if family == 0x5:
        return f"SE V{d.x:X}, V{d.y:X}" if d.n == 0 else None
    if family == 0x6:
        return f"LD V{d.x:X}, 0x{d.nn:02X}"
    if family == 0x7:
        return f"ADD V{d.x:X}, 0x{d.nn:02X}"
    if family == 0x8:
        template = _ALU_MNEMONICS.get(d.n)
        return template.format(**fields) if template else None
    if family == 0x9:
        return f"SNE V{d.x:X}, V{d.y:X}" if d.n == 0 else None
    if family == 0xA:
        return f"LD I, 0x{d.nnn:03X}"
    if family == 0xB:
        return f"JP V0, 0x{d.nnn:03X}"
    if family == 0xC:
        return f"RND V{d.x:X}, 0x{d.nn:02X}"
    if family == 0xD:
        return f"DRW V{d.x:X}, V{d.y:X}, {d.n}"
    if family == 0xE:
        if d.nn == 0x9E:
            return f"SKP V{d.x:X}"
        if d.nn == 0xA1:
            return f"SKNP V{d.x:X}"
        return None
    template = _MISC_MNEMONICS.get(d.nn)
    return template.format(**fields) if template else None


def disassemble(
    data: bytes, base: int = 0x200
) -> Iterator[Tuple[int, int, str]]:
    """Yield ``(address, opcode, text)`` for each word in ``data``.

    Invalid words are rendered as ``DW 0xNNNN`` so data embedded in a ROM
    does not stop the listing. A trailing odd byte is ignored.
    """
    for offset in range(0, len(data) - 1, 2):
        opcode = (data[offset] << 8) | data[offset + 1]
        text = mnemonic(opcode) or f"DW 0x{opcode:04X}"
        yield base + offset, opcode, text


__all__ = ["DecodedOpcode", "decode", "mnemonic", "disassemble"]
