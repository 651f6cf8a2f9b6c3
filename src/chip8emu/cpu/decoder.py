"""CHIP-8 instruction decoding and mnemonics."""

from __future__ import annotations

from dataclasses import dataclass
import enum


class OpcodeKind(enum.Enum):
    """Every instruction form the interpreter understands, plus UNKNOWN."""

    CLS = "00E0"
    RET = "00EE"
    JP = "1nnn"
    CALL = "2nnn"
    SE_IMM = "3xnn"
    SNE_IMM = "4xnn"
    SE_REG = "5xy0"
    LD_IMM = "6xnn"
    ADD_IMM = "7xnn"
    LD_REG = "8xy0"
    OR = "8xy1"
    AND = "8xy2"
    XOR = "8xy3"
    ADD_REG = "8xy4"
    SUB = "8xy5"
    SHR = "8xy6"
    SUBN = "8xy7"
    SHL = "8xyE"
    SNE_REG = "9xy0"
    LD_I = "Annn"
    JP_V0 = "Bnnn"
    RND = "Cxnn"
    DRW = "Dxyn"
    SKP = "Ex9E"
    SKNP = "ExA1"
    LD_VX_DT = "Fx07"
    LD_VX_K = "Fx0A"
    LD_DT_VX = "Fx15"
    LD_ST_VX = "Fx18"
    ADD_I = "Fx1E"
    LD_F = "Fx29"
    LD_BCD = "Fx33"
    STORE = "Fx55"
    LOAD = "Fx65"
    UNKNOWN = "????"


@dataclass(frozen=True)
class Instruction:
    """Decoded instruction with its operand fields."""

    kind: OpcodeKind
    raw: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int


_ARITHMETIC = {
    0x0: OpcodeKind.LD_REG,
    0x1: OpcodeKind.OR,
    0x2: OpcodeKind.AND,
    0x3: OpcodeKind.XOR,
    0x4: OpcodeKind.ADD_REG,
    0x5: OpcodeKind.SUB,
    0x6: OpcodeKind.SHR,
    0x7: OpcodeKind.SUBN,
    0xE: OpcodeKind.SHL,
}

_MISC = {
    0x07: OpcodeKind.LD_VX_DT,
    0x0A: OpcodeKind.LD_VX_K,
    0x15: OpcodeKind.LD_DT_VX,
    0x18: OpcodeKind.LD_ST_VX,
    0x1E: OpcodeKind.ADD_I,
    0x29: OpcodeKind.LD_F,
    0x33: OpcodeKind.LD_BCD,
    0x55: OpcodeKind.STORE,
    0x65: OpcodeKind.LOAD,
}

_SIMPLE = {
    0x1: OpcodeKind.JP,
    0x2: OpcodeKind.CALL,
    0x3: OpcodeKind.SE_IMM,
    0x4: OpcodeKind.SNE_IMM,
    0x6: OpcodeKind.LD_IMM,
    0x7: OpcodeKind.ADD_IMM,
    0xA: OpcodeKind.LD_I,
    0xB: OpcodeKind.JP_V0,
    0xC: OpcodeKind.RND,
    0xD: OpcodeKind.DRW,
}


def decode(opcode: int) -> Instruction:
    """Split a 16-bit opcode into its fields and classify it."""

    opcode &= 0xFFFF
    family = (opcode >> 12) & 0x0F
    x = (opcode >> 8) & 0x0F
    y = (opcode >> 4) & 0x0F
    n = opcode & 0x000F
    nn = opcode & 0x00FF
    nnn = opcode & 0x0FFF

    kind = OpcodeKind.UNKNOWN
    if family in _SIMPLE:
        kind = _SIMPLE[family]
    elif family == 0x0:
        if opcode == 0x00E0:
            kind = OpcodeKind.CLS
        elif opcode == 0x00EE:
            kind = OpcodeKind.RET
    elif family == 0x5 and n == 0x0:
        kind = OpcodeKind.SE_REG
    elif family == 0x8:
        kind = _ARITHMETIC.get(n, OpcodeKind.UNKNOWN)
    elif family == 0x9 and n == 0x0:
        kind = OpcodeKind.SNE_REG
    elif family == 0xE:
        if nn == 0x9E:
            kind = OpcodeKind.SKP
        elif nn == 0xA1:
            kind = OpcodeKind.SKNP
    elif family == 0xF:
        kind = _MISC.get(nn, OpcodeKind.UNKNOWN)

    return Instruction(kind=kind, raw=opcode, x=x, y=y, n=n, nn=nn, nnn=nnn)


def mnemonic(instruction: Instruction) -> str:
    """Human readable form used by the execution trace."""

    kind = instruction.kind
    x, y = instruction.x, instruction.y
    nn, nnn = instruction.nn, instruction.nnn
    formats = {
        OpcodeKind.CLS: "CLS",
        OpcodeKind.RET: "RET",
        OpcodeKind.JP: f"JP {nnn:03X}",
        OpcodeKind.CALL: f"CALL {nnn:03X}",
        OpcodeKind.SE_IMM: f"SE V{x:X}, {nn:02X}",
        OpcodeKind.SNE_IMM: f"SNE V{x:X}, {nn:02X}",
        OpcodeKind.SE_REG: f"SE V{x:X}, V{y:X}",
        OpcodeKind.LD_IMM: f"LD V{x:X}, {nn:02X}",
        OpcodeKind.ADD_IMM: f"ADD V{x:X}, {nn:02X}",
        OpcodeKind.LD_REG: f"LD V{x:X}, V{y:X}",
        OpcodeKind.OR: f"OR V{x:X}, V{y:X}",
        OpcodeKind.AND: f"AND V{x:X}, V{y:X}",
        OpcodeKind.XOR: f"XOR V{x:X}, V{y:X}",
        OpcodeKind.ADD_REG: f"ADD V{x:X}, V{y:X}",
        OpcodeKind.SUB: f"SUB V{x:X}, V{y:X}",
        OpcodeKind.SHR: f"SHR V{x:X}",
        OpcodeKind.SUBN: f"SUBN V{x:X}, V{y:X}",
        OpcodeKind.SHL: f"SHL V{x:X}",
        OpcodeKind.SNE_REG: f"SNE V{x:X}, V{y:X}",
        OpcodeKind.LD_I: f"LD I, {nnn:03X}",
        OpcodeKind.JP_V0: f"JP V0, {nnn:03X}",
        OpcodeKind.RND: f"RND V{x:X}, {nn:02X}",
        OpcodeKind.DRW: f"DRW V{x:X}, V{y:X}, {instruction.n:X}",
        OpcodeKind.SKP: f"SKP V{x:X}",
        OpcodeKind.SKNP: f"SKNP V{x:X}",
        OpcodeKind.LD_VX_DT: f"LD V{x:X}, DT",
        OpcodeKind.LD_VX_K: f"LD V{x:X}, K",
        OpcodeKind.LD_DT_VX: f"LD DT, V{x:X}",
        OpcodeKind.LD_ST_VX: f"LD ST, V{x:X}",
        OpcodeKind.ADD_I: f"ADD I, V{x:X}",
        OpcodeKind.LD_F: f"LD F, V{x:X}",
        OpcodeKind.LD_BCD: f"LD B, V{x:X}",
        OpcodeKind.STORE: f"LD [I], V{x:X}",
        OpcodeKind.LOAD: f"LD V{x:X}, [I]",
    }
    return formats.get(kind, f"unknown opcode {instruction.raw:04X}")


__all__ = ["Instruction", "OpcodeKind", "decode", "mnemonic"]
