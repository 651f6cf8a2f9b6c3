"""CHIP-8 CPU core: registers, timers and the opcode dispatch table."""

from __future__ import annotations

from dataclasses import dataclass, field
import enum
import random
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from chip8emu.cpu.decoder import Instruction, OpcodeKind, decode

if TYPE_CHECKING:  # pragma: no cover - typing only
    from chip8emu.chip8.hardware import Chip8Hardware

ENTRY_POINT = 0x200
MEMORY_LIMIT = 0x1000
STACK_SIZE = 16
REGISTER_COUNT = 16
FLAG = 0xF


class MachineFault(RuntimeError):
    """Fatal condition raised while executing an instruction."""

    def __init__(self, message: str, *, address: int, opcode: int) -> None:
        super().__init__(f"{message} at {address:04X} (opcode {opcode:04X})")
        self.reason = message
        self.address = address
        self.opcode = opcode


class StackOverflowError(MachineFault):
    """CALL with all sixteen stack slots in use."""


class StackUnderflowError(MachineFault):
    """RET with an empty stack."""


@dataclass
class CPURegisters:
    """General purpose registers, I, PC and the call stack."""

    v: List[int] = field(default_factory=lambda: [0x00] * REGISTER_COUNT)
    index: int = 0
    program_counter: int = ENTRY_POINT
    stack: List[int] = field(default_factory=lambda: [0x0000] * STACK_SIZE)
    stack_pointer: int = 0


@dataclass
class CPUTimers:
    delay: int = 0
    sound: int = 0

    def tick(self) -> None:
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1


@dataclass
class CPUStatus:
    waiting_for_key: bool = False


class StepStatus(enum.Enum):
    EXECUTED = "executed"
    WAITING_FOR_KEY = "waiting for key"
    UNKNOWN_OPCODE = "unknown opcode"
    HALTED = "halted"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single step."""

    address: int
    opcode: Optional[int]
    instruction: Optional[Instruction]
    status: StepStatus


class Chip8CPU:
    """Interpreter core operating on the hardware bundle it is given."""

    def __init__(self, hardware: "Chip8Hardware", *, rng: Optional[random.Random] = None) -> None:
        self.hardware = hardware
        self.registers = CPURegisters()
        self.timers = CPUTimers()
        self.status = CPUStatus()
        self._rng = rng if rng is not None else random.Random()
        self._opcode_table: Dict[OpcodeKind, Callable[[Instruction], None]] = {}
        self._init_opcode_table()

    @property
    def memory(self):
        return self.hardware.memory

    @property
    def display(self):
        return self.hardware.display

    @property
    def keypad(self):
        return self.hardware.keypad

    # ------------------------------------------------------------------
    # Fetch / decode / execute
    # ------------------------------------------------------------------
    def step(self) -> StepResult:
        """Run one instruction and tick both timers once."""

        address = self.registers.program_counter
        if address >= MEMORY_LIMIT:
            self.status.waiting_for_key = False
            self.timers.tick()
            return StepResult(address, None, None, StepStatus.HALTED)

        self.status.waiting_for_key = False
        opcode = self._fetch_op()
        instruction = decode(opcode)
        try:
            self._opcode_table[instruction.kind](instruction)
        except MachineFault:
            self.registers.program_counter = address
            raise
        self.timers.tick()

        if instruction.kind is OpcodeKind.UNKNOWN:
            status = StepStatus.UNKNOWN_OPCODE
        elif self.status.waiting_for_key:
            status = StepStatus.WAITING_FOR_KEY
        else:
            status = StepStatus.EXECUTED
        return StepResult(address, opcode, instruction, status)

    def _fetch_op(self) -> int:
        opcode = self.memory.load16(self.registers.program_counter)
        self.registers.program_counter = (self.registers.program_counter + 2) & 0xFFFF
        return opcode

    def _skip(self) -> None:
        self.registers.program_counter = (self.registers.program_counter + 2) & 0xFFFF

    def _init_opcode_table(self) -> None:
        self._opcode_table.clear()
        self._register_opcode(OpcodeKind.CLS, self._opcode_cls)
        self._register_opcode(OpcodeKind.RET, self._opcode_ret)
        self._register_opcode(OpcodeKind.JP, self._opcode_jp)
        self._register_opcode(OpcodeKind.CALL, self._opcode_call)
        self._register_opcode(OpcodeKind.SE_IMM, self._opcode_se_imm)
        self._register_opcode(OpcodeKind.SNE_IMM, self._opcode_sne_imm)
        self._register_opcode(OpcodeKind.SE_REG, self._opcode_se_reg)
        self._register_opcode(OpcodeKind.LD_IMM, self._opcode_ld_imm)
        self._register_opcode(OpcodeKind.ADD_IMM, self._opcode_add_imm)
        self._register_opcode(OpcodeKind.LD_REG, self._opcode_ld_reg)
        self._register_opcode(OpcodeKind.OR, self._opcode_or)
        self._register_opcode(OpcodeKind.AND, self._opcode_and)
        self._register_opcode(OpcodeKind.XOR, self._opcode_xor)
        self._register_opcode(OpcodeKind.ADD_REG, self._opcode_add_reg)
        self._register_opcode(OpcodeKind.SUB, self._opcode_sub)
        self._register_opcode(OpcodeKind.SHR, self._opcode_shr)
        self._register_opcode(OpcodeKind.SUBN, self._opcode_subn)
        self._register_opcode(OpcodeKind.SHL, self._opcode_shl)
        self._register_opcode(OpcodeKind.SNE_REG, self._opcode_sne_reg)
        self._register_opcode(OpcodeKind.LD_I, self._opcode_ld_i)
        self._register_opcode(OpcodeKind.JP_V0, self._opcode_jp_v0)
        self._register_opcode(OpcodeKind.RND, self._opcode_rnd)
        self._register_opcode(OpcodeKind.DRW, self._opcode_drw)
        self._register_opcode(OpcodeKind.SKP, self._opcode_skp)
        self._register_opcode(OpcodeKind.SKNP, self._opcode_sknp)
        self._register_opcode(OpcodeKind.LD_VX_DT, self._opcode_ld_vx_dt)
        self._register_opcode(OpcodeKind.LD_VX_K, self._opcode_ld_vx_k)
        self._register_opcode(OpcodeKind.LD_DT_VX, self._opcode_ld_dt_vx)
        self._register_opcode(OpcodeKind.LD_ST_VX, self._opcode_ld_st_vx)
        self._register_opcode(OpcodeKind.ADD_I, self._opcode_add_i)
        self._register_opcode(OpcodeKind.LD_F, self._opcode_ld_f)
        self._register_opcode(OpcodeKind.LD_BCD, self._opcode_ld_bcd)
        self._register_opcode(OpcodeKind.STORE, self._opcode_store)
        self._register_opcode(OpcodeKind.LOAD, self._opcode_load)
        self._register_opcode(OpcodeKind.UNKNOWN, self._opcode_unknown)

    def _register_opcode(self, kind: OpcodeKind, handler: Callable[[Instruction], None]) -> None:
        self._opcode_table[kind] = handler

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------
    def _opcode_cls(self, ins: Instruction) -> None:
        self.display.clear()

    def _opcode_ret(self, ins: Instruction) -> None:
        regs = self.registers
        if regs.stack_pointer == 0:
            raise StackUnderflowError(
                "stack underflow", address=(regs.program_counter - 2) & 0xFFFF, opcode=ins.raw
            )
        regs.stack_pointer -= 1
        regs.program_counter = regs.stack[regs.stack_pointer]

    def _opcode_jp(self, ins: Instruction) -> None:
        self.registers.program_counter = ins.nnn

    def _opcode_call(self, ins: Instruction) -> None:
        regs = self.registers
        if regs.stack_pointer == STACK_SIZE:
            raise StackOverflowError(
                "stack overflow", address=(regs.program_counter - 2) & 0xFFFF, opcode=ins.raw
            )
        regs.stack[regs.stack_pointer] = regs.program_counter
        regs.stack_pointer += 1
        regs.program_counter = ins.nnn

    def _opcode_se_imm(self, ins: Instruction) -> None:
        if self.registers.v[ins.x] == ins.nn:
            self._skip()

    def _opcode_sne_imm(self, ins: Instruction) -> None:
        if self.registers.v[ins.x] != ins.nn:
            self._skip()

    def _opcode_se_reg(self, ins: Instruction) -> None:
        if self.registers.v[ins.x] == self.registers.v[ins.y]:
            self._skip()

    def _opcode_sne_reg(self, ins: Instruction) -> None:
        if self.registers.v[ins.x] != self.registers.v[ins.y]:
            self._skip()

    def _opcode_jp_v0(self, ins: Instruction) -> None:
        self.registers.program_counter = ins.nnn + self.registers.v[0]

    def _opcode_unknown(self, ins: Instruction) -> None:
        return

    # ------------------------------------------------------------------
    # Register arithmetic
    # ------------------------------------------------------------------
    def _opcode_ld_imm(self, ins: Instruction) -> None:
        self.registers.v[ins.x] = ins.nn

    def _opcode_add_imm(self, ins: Instruction) -> None:
        v = self.registers.v
        v[ins.x] = (v[ins.x] + ins.nn) & 0xFF

    def _opcode_ld_reg(self, ins: Instruction) -> None:
        v = self.registers.v
        v[ins.x] = v[ins.y]

    def _opcode_or(self, ins: Instruction) -> None:
        v = self.registers.v
        v[ins.x] = (v[ins.x] | v[ins.y]) & 0xFF

    def _opcode_and(self, ins: Instruction) -> None:
        v = self.registers.v
        v[ins.x] = v[ins.x] & v[ins.y]

    def _opcode_xor(self, ins: Instruction) -> None:
        v = self.registers.v
        v[ins.x] = (v[ins.x] ^ v[ins.y]) & 0xFF

    # The flag is computed from the operands first and written to VF before
    # the result, so for x == F the result wins.
    def _opcode_add_reg(self, ins: Instruction) -> None:
        v = self.registers.v
        total = v[ins.x] + v[ins.y]
        v[FLAG] = 1 if total > 0xFF else 0
        v[ins.x] = total & 0xFF

    def _opcode_sub(self, ins: Instruction) -> None:
        v = self.registers.v
        a, b = v[ins.x], v[ins.y]
        v[FLAG] = 1 if a >= b else 0
        v[ins.x] = (a - b) & 0xFF

    def _opcode_subn(self, ins: Instruction) -> None:
        v = self.registers.v
        a, b = v[ins.x], v[ins.y]
        v[FLAG] = 1 if b >= a else 0
        v[ins.x] = (b - a) & 0xFF

    def _opcode_shr(self, ins: Instruction) -> None:
        v = self.registers.v
        value = v[ins.x]
        v[FLAG] = value & 0x01
        v[ins.x] = value >> 1

    def _opcode_shl(self, ins: Instruction) -> None:
        v = self.registers.v
        value = v[ins.x]
        v[FLAG] = 1 if value & 0x80 else 0
        v[ins.x] = (value << 1) & 0xFF

    def _opcode_rnd(self, ins: Instruction) -> None:
        self.registers.v[ins.x] = self._rng.randrange(0x100) & ins.nn

    # ------------------------------------------------------------------
    # Index register and memory
    # ------------------------------------------------------------------
    def _opcode_ld_i(self, ins: Instruction) -> None:
        self.registers.index = ins.nnn

    def _opcode_add_i(self, ins: Instruction) -> None:
        regs = self.registers
        regs.index = (regs.index + regs.v[ins.x]) & 0xFFFF

    def _opcode_ld_f(self, ins: Instruction) -> None:
        self.registers.index = self.memory.glyph_address(self.registers.v[ins.x])

    def _opcode_ld_bcd(self, ins: Instruction) -> None:
        value = self.registers.v[ins.x]
        index = self.registers.index
        self.memory.store8(index, value // 100)
        self.memory.store8(index + 1, (value // 10) % 10)
        self.memory.store8(index + 2, value % 10)

    def _opcode_store(self, ins: Instruction) -> None:
        regs = self.registers
        for offset in range(ins.x + 1):
            self.memory.store8(regs.index + offset, regs.v[offset])

    def _opcode_load(self, ins: Instruction) -> None:
        regs = self.registers
        for offset in range(ins.x + 1):
            regs.v[offset] = self.memory.load8(regs.index + offset)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------
    def _opcode_drw(self, ins: Instruction) -> None:
        regs = self.registers
        sprite = self.memory.load_block(regs.index, ins.n)
        collision = self.display.draw_sprite(regs.v[ins.x], regs.v[ins.y], sprite)
        regs.v[FLAG] = 1 if collision else 0

    # ------------------------------------------------------------------
    # Keypad and timers
    # ------------------------------------------------------------------
    def _opcode_skp(self, ins: Instruction) -> None:
        if self.keypad.is_pressed(self.registers.v[ins.x]):
            self._skip()

    def _opcode_sknp(self, ins: Instruction) -> None:
        key = self.registers.v[ins.x]
        if key < 0x10 and not self.keypad.is_pressed(key):
            self._skip()

    def _opcode_ld_vx_k(self, ins: Instruction) -> None:
        key = self.keypad.first_pressed()
        if key is None:
            # Re-run this instruction on the next step.
            self.registers.program_counter = (self.registers.program_counter - 2) & 0xFFFF
            self.status.waiting_for_key = True
            return
        self.registers.v[ins.x] = key

    def _opcode_ld_vx_dt(self, ins: Instruction) -> None:
        self.registers.v[ins.x] = self.timers.delay

    def _opcode_ld_dt_vx(self, ins: Instruction) -> None:
        self.timers.delay = self.registers.v[ins.x]

    def _opcode_ld_st_vx(self, ins: Instruction) -> None:
        self.timers.sound = self.registers.v[ins.x]


__all__ = [
    "CPURegisters",
    "CPUStatus",
    "CPUTimers",
    "Chip8CPU",
    "MachineFault",
    "StackOverflowError",
    "StackUnderflowError",
    "StepResult",
    "StepStatus",
]
