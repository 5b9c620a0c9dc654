"""CHIP-8 virtual machine package."""

from .config import VMConfig
from .cpu import CPUState, Interpreter
from .display import FrameBuffer
from .errors import (
    HostAdapterError,
    IntegerOverflow,
    InvalidKeyCode,
    OutOfBoundsAccess,
    StackOverflow,
    StackUnderflow,
    UnrecognizedOpcode,
    VMError,
)
from .keypad import InputState
from .machine import Chip8
from .memory import Memory
from .scheduler import RunStats, Scheduler, StopReason

__version__ = "0.1.0"

__all__ = [
    "Chip8",
    "Interpreter",
    "CPUState",
    "Memory",
    "FrameBuffer",
    "InputState",
    "Scheduler",
    "RunStats",
    "StopReason",
    "VMConfig",
    "VMError",
    "OutOfBoundsAccess",
    "IntegerOverflow",
    "StackUnderflow",
    "StackOverflow",
    "UnrecognizedOpcode",
    "InvalidKeyCode",
    "HostAdapterError",
]
