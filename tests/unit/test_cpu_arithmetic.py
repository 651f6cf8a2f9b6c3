"""Flag behaviour of the 8xy_ arithmetic group."""

from __future__ import annotations

import pytest

from chip8emu.chip8.machine import Chip8Machine


def _run_single(opcode: int, vx: int, vy: int, *, x: int = 0, y: int = 1) -> Chip8Machine:
    machine = Chip8Machine()
    machine.load("alu.ch8", bytes([opcode >> 8, opcode & 0xFF]))
    machine.registers.v[x] = vx
    machine.registers.v[y] = vy
    machine.step()
    return machine


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [
        (0x10, 0x20, 0x30, 0),
        (0xFF, 0x01, 0x00, 1),
        (0xF0, 0x20, 0x10, 1),
        (0x7F, 0x80, 0xFF, 0),
    ],
)
def test_add_with_carry(vx: int, vy: int, result: int, flag: int) -> None:
    machine = _run_single(0x8014, vx, vy)
    assert machine.registers.v[0] == result
    assert machine.registers.v[0xF] == flag


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [
        (0x30, 0x10, 0x20, 1),
        (0x10, 0x10, 0x00, 1),
        (0x10, 0x30, 0xE0, 0),
    ],
)
def test_sub(vx: int, vy: int, result: int, flag: int) -> None:
    machine = _run_single(0x8015, vx, vy)
    assert machine.registers.v[0] == result
    assert machine.registers.v[0xF] == flag


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [
        (0x10, 0x30, 0x20, 1),
        (0x10, 0x10, 0x00, 1),
        (0x30, 0x10, 0xE0, 0),
    ],
)
def test_subn(vx: int, vy: int, result: int, flag: int) -> None:
    machine = _run_single(0x8017, vx, vy)
    assert machine.registers.v[0] == result
    assert machine.registers.v[0xF] == flag


@pytest.mark.parametrize("vx, result, flag", [(0x05, 0x02, 1), (0x04, 0x02, 0), (0xFF, 0x7F, 1)])
def test_shift_right(vx: int, result: int, flag: int) -> None:
    machine = _run_single(0x8016, vx, 0x00)
    assert machine.registers.v[0] == result
    assert machine.registers.v[0xF] == flag


@pytest.mark.parametrize("vx, result, flag", [(0x81, 0x02, 1), (0x41, 0x82, 0), (0xFF, 0xFE, 1)])
def test_shift_left(vx: int, result: int, flag: int) -> None:
    machine = _run_single(0x801E, vx, 0x00)
    assert machine.registers.v[0] == result
    assert machine.registers.v[0xF] == flag


def test_add_into_vf_keeps_result_over_flag() -> None:
    machine = _run_single(0x8F14, 0x10, 0xF5, x=0xF, y=1)
    assert machine.registers.v[0xF] == 0x05


def test_logic_ops_leave_vf_alone() -> None:
    for opcode, expected in ((0x8011, 0x3C | 0x0F), (0x8012, 0x3C & 0x0F), (0x8013, 0x3C ^ 0x0F)):
        machine = Chip8Machine()
        machine.load("alu.ch8", bytes([opcode >> 8, opcode & 0xFF]))
        machine.registers.v[0] = 0x3C
        machine.registers.v[1] = 0x0F
        machine.registers.v[0xF] = 0x55
        machine.step()
        assert machine.registers.v[0] == expected
        assert machine.registers.v[0xF] == 0x55


def _expected(op: int, a: int, b: int) -> tuple[int, int]:
    if op == 0x4:
        total = a + b
        return total & 0xFF, 1 if total > 0xFF else 0
    if op == 0x5:
        return (a - b) & 0xFF, 1 if a >= b else 0
    return a >> 1, a & 0x01


@pytest.mark.parametrize("op", [0x4, 0x5, 0x6])
@pytest.mark.parametrize("x, y", [(0x0, 0x1), (0x3, 0x7), (0xE, 0x2), (0x5, 0x5), (0x1, 0x1)])
@pytest.mark.parametrize("a, b", [(0x80, 0x80), (0xFF, 0x01), (0x10, 0x30), (0x00, 0x00)])
def test_flag_ops_on_any_register_pair(op: int, x: int, y: int, a: int, b: int) -> None:
    if x == y:
        b = a
    opcode = 0x8000 | (x << 8) | (y << 4) | op
    machine = _run_single(opcode, a, b, x=x, y=y)
    result, flag = _expected(op, a, b)
    assert machine.registers.v[x] == result
    assert machine.registers.v[0xF] == flag
    if x != y:
        assert machine.registers.v[y] == b


def test_add_register_to_itself() -> None:
    machine = _run_single(0x8114, 0x80, 0x80, x=1, y=1)
    assert machine.registers.v[1] == 0x00
    assert machine.registers.v[0xF] == 1


def test_copy_register() -> None:
    machine = Chip8Machine()
    machine.load("alu.ch8", bytes([0x80, 0x30]))
    machine.registers.v[0] = 0x12
    machine.registers.v[3] = 0xAB
    machine.registers.v[0xF] = 0x42
    machine.step()
    assert machine.registers.v[0] == 0xAB
    assert machine.registers.v[3] == 0xAB
    assert machine.registers.v[0xF] == 0x42


def test_add_to_index_wraps_at_16_bits() -> None:
    machine = Chip8Machine()
    machine.load("alu.ch8", bytes([0xF0, 0x1E]))
    machine.registers.index = 0xFFF0
    machine.registers.v[0] = 0xFF
    machine.registers.v[0xF] = 0x42
    machine.step()
    assert machine.registers.index == 0x00EF
    assert machine.registers.v[0xF] == 0x42
