"""CHIP-8 instruction interpreter: fetch, decode and execute one opcode per step."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .disasm import DecodedOpcode, decode, mnemonic
from .display import FrameBuffer
from .errors import UnrecognizedOpcode
from .keypad import InputState
from .memory import Memory, glyph_address
from .state import DEFAULT_STACK_LIMIT, CallStack, RegisterFile, Timers

logger = logging.getLogger(__name__)

INSTRUCTION_SIZE = 2
ADDRESS_MASK = 0xFFFF

Handler = Callable[[DecodedOpcode], None]


@dataclass(frozen=True)
class CPUState:
    """Immutable view of the interpreter registers, stack and timers."""

    v: Tuple[int, ...]
    i: int
    pc: int
    stack: Tuple[int, ...]
    delay_timer: int
    sound_timer: int
    instruction_count: int

    def describe(self) -> str:
        regs = " ".join(f"V{idx:X}={val:02X}" for idx, val in enumerate(self.v))
        return (
            f"PC={self.pc:04X} I={self.i:04X} DT={self.delay_timer:02X} "
            f"ST={self.sound_timer:02X} SP={len(self.stack)} {regs}"
        )


class Interpreter:
    """Executes CHIP-8 instructions against memory, frame buffer and keypad."""

    def __init__(
        self,
        memory: Memory,
        framebuffer: FrameBuffer,
        keypad: InputState,
        *,
        stack_limit: Optional[int] = DEFAULT_STACK_LIMIT,
        rng: Optional[random.Random] = None,
        trace: bool = False,
    ) -> None:
        self.memory = memory
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.regs = RegisterFile()
        self.stack = CallStack(stack_limit)
        self.timers = Timers()
        self.rng = rng if rng is not None else random.Random()
        self.trace = trace
        self.instruction_count = 0

        self._families: Dict[int, Handler] = {
            0x0: self._op_system,
            0x1: self._op_jump,
            0x2: self._op_call,
            0x3: self._op_skip_eq_imm,
            0x4: self._op_skip_ne_imm,
            0x5: self._op_skip_eq_reg,
            0x6: self._op_load_imm,
            0x7: self._op_add_imm,
            0x8: self._op_alu,
            0x9: self._op_skip_ne_reg,
            0xA: self._op_load_i,
            0xB: self._op_jump_v0,
            0xC: self._op_random,
            0xD: self._op_draw,
            0xE: self._op_keys,
            0xF: self._op_misc,
        }
        self._alu: Dict[int, Handler] = {
            0x0: self._alu_load,
            0x1: self._alu_or,
            0x2: self._alu_and,
            0x3: self._alu_xor,
            0x4: self._alu_add,
            0x5: self._alu_sub,
            0x6: self._alu_shr,
            0x7: self._alu_subn,
            0xE: self._alu_shl,
        }
        self._misc: Dict[int, Handler] = {
            0x07: self._misc_read_delay,
            0x0A: self._misc_wait_key,
            0x15: self._misc_set_delay,
            0x18: self._misc_set_sound,
            0x1E: self._misc_add_i,
            0x29: self._misc_font,
            0x33: self._misc_bcd,
            0x55: self._misc_store,
            0x65: self._misc_load,
        }

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def pc(self) -> int:
        return self.regs.pc

    def reset(self) -> None:
        """Restore power-on register, stack and timer state."""
        self.regs.reset()
        self.stack.clear()
        self.timers.reset()
        self.instruction_count = 0

    def fetch(self) -> int:
        pc = self.regs.pc
        high = self.memory.read_byte(pc)
        low = self.memory.read_byte(pc + 1)
        return (high << 8) | low

    def step(self) -> None:
        """Execute the instruction at PC.

        Raises a :class:`~chip8vm.errors.VMError` subclass on any fault; the
        register state is left as it was when the fault was detected.
        """
        opcode = self.fetch()
        if self.trace:
            logger.debug(
                "%04X: %04X  %s", self.regs.pc, opcode, mnemonic(opcode) or "???"
            )
        decoded = decode(opcode)
        self._families[decoded.family](decoded)
        self.instruction_count += 1
        if self.trace:
            logger.debug("%s", self.snapshot().describe())

    def snapshot(self) -> CPUState:
        return CPUState(
            v=tuple(self.regs.v),
            i=self.regs.i,
            pc=self.regs.pc,
            stack=self.stack.entries(),
            delay_timer=self.timers.delay,
            sound_timer=self.timers.sound,
            instruction_count=self.instruction_count,
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _advance(self, words: int = 1) -> None:
        self.regs.pc = (self.regs.pc + INSTRUCTION_SIZE * words) & ADDRESS_MASK

    def _skip_if(self, condition: bool) -> None:
        self._advance(2 if condition else 1)

    def _unrecognized(self, d: DecodedOpcode) -> None:
        raise UnrecognizedOpcode(d.opcode, self.regs.pc)

    # ------------------------------------------------------------------ #
    # Instruction families
    # ------------------------------------------------------------------ #

    def _op_system(self, d: DecodedOpcode) -> None:
        if d.opcode == 0x00E0:
            self.framebuffer.clear()
            self._advance()
        elif d.opcode == 0x00EE:
            self.regs.pc = self.stack.pop(self.regs.pc)
        else:
            # 0nnn machine-code calls are not part of the interpreted set.
            self._unrecognized(d)

    def _op_jump(self, d: DecodedOpcode) -> None:
        self.regs.pc = d.nnn

    def _op_call(self, d: DecodedOpcode) -> None:
        self.stack.push(self.regs.pc + INSTRUCTION_SIZE, self.regs.pc)
        self.regs.pc = d.nnn

    def _op_skip_eq_imm(self, d: DecodedOpcode) -> None:
        self._skip_if(self.regs.read(d.x) == d.nn)

    def _op_skip_ne_imm(self, d: DecodedOpcode) -> None:
        self._skip_if(self.regs.read(d.x) != d.nn)

    def _op_skip_eq_reg(self, d: DecodedOpcode) -> None:
        if d.n != 0:
            self._unrecognized(d)
        self._skip_if(self.regs.read(d.x) == self.regs.read(d.y))

    def _op_skip_ne_reg(self, d: DecodedOpcode) -> None:
        if d.n != 0:
            self._unrecognized(d)
        self._skip_if(self.regs.read(d.x) != self.regs.read(d.y))

    def _op_load_imm(self, d: DecodedOpcode) -> None:
        self.regs.write(d.x, d.nn)
        self._advance()

    def _op_add_imm(self, d: DecodedOpcode) -> None:
        self.regs.write(d.x, self.regs.read(d.x) + d.nn)
        self._advance()

    def _op_alu(self, d: DecodedOpcode) -> None:
        handler = self._alu.get(d.n)
        if handler is None:
            self._unrecognized(d)
            return
        handler(d)
        self._advance()

    def _op_load_i(self, d: DecodedOpcode) -> None:
        self.regs.i = d.nnn
        self._advance()

    def _op_jump_v0(self, d: DecodedOpcode) -> None:
        self.regs.pc = self.regs.read(0) + d.nnn

    def _op_random(self, d: DecodedOpcode) -> None:
        self.regs.write(d.x, self.rng.getrandbits(8) & d.nn)
        self._advance()

    def _op_draw(self, d: DecodedOpcode) -> None:
        rows = self.memory.read_bytes(self.regs.i, d.n)
        collision = self.framebuffer.draw_sprite(
            self.regs.read(d.x), self.regs.read(d.y), rows
        )
        self.regs.vf = 1 if collision else 0
        self._advance()

    def _op_keys(self, d: DecodedOpcode) -> None:
        if d.nn == 0x9E:
            key = self.regs.read(d.x)
            self._skip_if(self.keypad.is_pressed(key, self.regs.pc))
        elif d.nn == 0xA1:
            key = self.regs.read(d.x)
            self._skip_if(not self.keypad.is_pressed(key, self.regs.pc))
        else:
            self._unrecognized(d)

    def _op_misc(self, d: DecodedOpcode) -> None:
        handler = self._misc.get(d.nn)
        if handler is None:
            self._unrecognized(d)
            return
        handler(d)

    # ------------------------------------------------------------------ #
    # 8xyN register arithmetic
    # ------------------------------------------------------------------ #

    def _alu_load(self, d: DecodedOpcode) -> None:
        self.regs.write(d.x, self.regs.read(d.y))

    def _alu_or(self, d: DecodedOpcode) -> None:
        self.regs.write(d.x, self.regs.read(d.x) | self.regs.read(d.y))

    def _alu_and(self, d: DecodedOpcode) -> None:
        self.regs.write(d.x, self.regs.read(d.x) & self.regs.read(d.y))

    def _alu_xor(self, d: DecodedOpcode) -> None:
        self.regs.write(d.x, self.regs.read(d.x) ^ self.regs.read(d.y))

    def _alu_add(self, d: DecodedOpcode) -> None:
        total = self.regs.read(d.x) + self.regs.read(d.y)
        self.regs.write(d.x, total)
        self.regs.vf = 1 if total > 0xFF else 0

    def _alu_sub(self, d: DecodedOpcode) -> None:
        vx, vy = self.regs.read(d.x), self.regs.read(d.y)
        self.regs.write(d.x, vx - vy)
        self.regs.vf = 1 if vx > vy else 0

    def _alu_shr(self, d: DecodedOpcode) -> None:
        vx = self.regs.read(d.x)
        self.regs.vf = vx & 0x1
        self.regs.write(d.x, vx >> 1)

    def _alu_subn(self, d: DecodedOpcode) -> None:
        vx, vy = self.regs.read(d.x), self.regs.read(d.y)
        self.regs.write(d.x, vy - vx)
        self.regs.vf = 1 if vy > vx else 0

    def _alu_shl(self, d: DecodedOpcode) -> None:
        vx = self.regs.read(d.x)
        self.regs.vf = vx >> 7
        self.regs.write(d.x, vx << 1)

    # ------------------------------------------------------------------ #
    # FxNN timers, keypad wait, index register and block transfers
    # ------------------------------------------------------------------ #

    def _misc_read_delay(self, d: DecodedOpcode) -> None:
        self.regs.write(d.x, self.timers.delay)
        self._advance()

    def _misc_wait_key(self, d: DecodedOpcode) -> None:
        key = self.keypad.first_pressed()
        if key is None:
            # PC stays put so the same instruction runs again next tick.
            return
        self.regs.write(d.x, key)
        self._advance()

    def _misc_set_delay(self, d: DecodedOpcode) -> None:
        self.timers.delay = self.regs.read(d.x)
        self._advance()

    def _misc_set_sound(self, d: DecodedOpcode) -> None:
        self.timers.sound = self.regs.read(d.x)
        self._advance()

    def _misc_add_i(self, d: DecodedOpcode) -> None:
        self.regs.i = (self.regs.i + self.regs.read(d.x)) & ADDRESS_MASK
        self._advance()

    def _misc_font(self, d: DecodedOpcode) -> None:
        self.regs.i = glyph_address(self.regs.read(d.x))
        self._advance()

    def _misc_bcd(self, d: DecodedOpcode) -> None:
        value = self.regs.read(d.x)
        self.memory.write_bytes(
            self.regs.i, (value // 100, (value // 10) % 10, value % 10)
        )
        self._advance()

    def _misc_store(self, d: DecodedOpcode) -> None:
        self.memory.write_bytes(self.regs.i, self.regs.v[: d.x + 1])
        self.regs.i = (self.regs.i + d.x + 1) & ADDRESS_MASK
        self._advance()

    def _misc_load(self, d: DecodedOpcode) -> None:
        values = self.memory.read_bytes(self.regs.i, d.x + 1)
        for index, value in enumerate(values):
            self.regs.write(index, value)
        self.regs.i = (self.regs.i + d.x + 1) & ADDRESS_MASK
        self._advance()


__all__ = ["Interpreter", "CPUState", "INSTRUCTION_SIZE"]
