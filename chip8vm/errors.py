"""Exception hierarchy for the CHIP-8 virtual machine."""

from __future__ import annotations

from typing import Optional


class VMError(Exception):
    """Base class for every error raised by the VM core or its host adapters."""


class OutOfBoundsAccess(VMError):
    """Raised when a memory access falls outside the addressable range."""

    def __init__(self, operation: str, address: int, length: int = 1) -> None:
        self.operation = operation
        self.address = address
        self.length = length
        super().__init__(
            f"{operation}: out of bounds access at 0x{address:04X} (length {length})"
        )


class IntegerOverflow(VMError):
    """Raised when ``address + length`` does not fit the address space."""

    def __init__(self, operation: str, address: int, length: int) -> None:
        self.operation = operation
        self.address = address
        self.length = length
        super().__init__(
            f"{operation}: address 0x{address:04X} + length {length} overflows"
        )


class StackUnderflow(VMError):
    """Raised on a subroutine return with an empty call stack."""

    def __init__(self, pc: int) -> None:
        self.pc = pc
        super().__init__(f"return with empty call stack at PC=0x{pc:04X}")


class StackOverflow(VMError):
    """Raised when a call would exceed the configured stack depth."""

    def __init__(self, pc: int, limit: int) -> None:
        self.pc = pc
        self.limit = limit
        super().__init__(
            f"call stack overflow at PC=0x{pc:04X} (limit {limit} entries)"
        )


class UnrecognizedOpcode(VMError):
    """Raised when the decoder meets an opcode outside the instruction set."""

    def __init__(self, opcode: int, pc: Optional[int] = None) -> None:
        self.opcode = opcode
        self.pc = pc
        where = f" at PC=0x{pc:04X}" if pc is not None else ""
        super().__init__(f"unrecognized opcode 0x{opcode:04X}{where}")


class InvalidKeyCode(VMError):
    """Raised when an instruction names a key outside 0x0-0xF."""

    def __init__(self, key: int, pc: Optional[int] = None) -> None:
        self.key = key
        self.pc = pc
        where = f" at PC=0x{pc:04X}" if pc is not None else ""
        super().__init__(f"invalid key code 0x{key:02X}{where}")


class HostAdapterError(VMError):
    """Raised when a display, input or audio backend fails."""


__all__ = [
    "VMError",
    "OutOfBoundsAccess",
    "IntegerOverflow",
    "StackUnderflow",
    "StackOverflow",
    "UnrecognizedOpcode",
    "InvalidKeyCode",
    "HostAdapterError",
]
