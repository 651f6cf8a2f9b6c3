"""Headless regression checks for small CHIP-8 programs."""

from __future__ import annotations

import importlib.util
from pathlib import Path
import sys

from chip8emu.cpu.cpu import StepStatus

_HELPER_PATH = Path(__file__).resolve().parents[1] / "helpers" / "headless.py"
_SPEC = importlib.util.spec_from_file_location("headless_helper", _HELPER_PATH)
_MODULE = importlib.util.module_from_spec(_SPEC)
assert _SPEC is not None and _SPEC.loader is not None
sys.modules[_SPEC.name] = _MODULE
_SPEC.loader.exec_module(_MODULE)  # type: ignore[arg-type]

KeyEvent = _MODULE.KeyEvent
run_program = _MODULE.run_program


def _program(*opcodes: int) -> bytes:
    return b"".join(bytes([opcode >> 8, opcode & 0xFF]) for opcode in opcodes)


# Draws the digits 1, 2 and 3 side by side, then spins.
DIGITS_PROGRAM = _program(
    0x00E0,  # 200 CLS
    0x6000,  # 202 LD V0, 00   x
    0x6100,  # 204 LD V1, 00   y
    0x6201,  # 206 LD V2, 01   digit
    0xF229,  # 208 LD F, V2
    0xD015,  # 20A DRW V0, V1, 5
    0x7005,  # 20C ADD V0, 05
    0x7201,  # 20E ADD V2, 01
    0x3204,  # 210 SE V2, 04
    0x1208,  # 212 JP 208
    0x1214,  # 214 JP 214
)


def test_digit_rendering_program() -> None:
    machine, pc_history = run_program(DIGITS_PROGRAM, steps=40)

    assert pc_history[-1] == 0x214
    assert pc_history[-2] == 0x214
    assert machine.registers.v[0xF] == 0

    text = machine.hardware.display.render_text().splitlines()
    # Rows of glyphs 1 (20 60 20 20 70), 2 (F0 10 F0 80 F0), 3 (F0 10 F0 10 F0).
    assert text[0][:15] == "..#..####.####."
    assert text[1][:15] == ".##.....#....#."
    assert text[4][:15] == ".###.####.####."
    assert all(row == "." * 64 for row in text[5:])


# Waits for a key, stores it in V5, then counts it down to zero.
KEY_COUNTDOWN_PROGRAM = _program(
    0xF50A,  # 200 LD V5, K
    0x3500,  # 202 SE V5, 00
    0x1208,  # 204 JP 208
    0x120E,  # 206 JP 20E
    0x6601,  # 208 LD V6, 01
    0x8565,  # 20A SUB V5, V6
    0x1202,  # 20C JP 202
    0x120E,  # 20E JP 20E
)


def test_wait_for_key_then_countdown() -> None:
    events = [KeyEvent(step=5, key=0x3, pressed=True), KeyEvent(step=6, key=0x3, pressed=False)]
    machine, pc_history = run_program(KEY_COUNTDOWN_PROGRAM, steps=40, events=events)

    assert pc_history[:5] == [0x200] * 5
    assert pc_history[5] == 0x202
    assert pc_history[-1] == 0x20E
    assert machine.registers.v[5] == 0


def test_pc_leaving_memory_halts() -> None:
    machine, pc_history = run_program(_program(0x1FFE), steps=1)
    machine.hardware.memory.store_block(0xFFE, [0x60, 0x42])

    machine.step()
    result = machine.step()

    assert pc_history == [0xFFE]
    assert machine.registers.v[0] == 0x42
    assert result.status is StepStatus.HALTED
    assert machine.step().status is StepStatus.HALTED


def test_logo_style_program_clears_then_draws() -> None:
    program = _program(
        0x00E0,  # 200 CLS
        0xA000,  # 202 LD I, 000   glyph 0
        0x6008,  # 204 LD V0, 08
        0xD005,  # 206 DRW V0, V0, 5
        0x1206,  # 208 JP 206
    )
    machine, _ = run_program(program, steps=0)
    display = machine.hardware.display
    for y in range(display.HEIGHT):
        for x in range(0, display.WIDTH, 8):
            display.draw_sprite(x, y, [0xFF])
    assert all(machine.screen_pixels())

    machine.step()
    assert not any(machine.screen_pixels())

    machine.step()
    machine.step()
    machine.step()
    assert machine.registers.v[0xF] == 0
    assert machine.pixel_set_at(8, 8)
    assert machine.pixel_set_at(11, 12)
    assert not machine.pixel_set_at(9, 9)
    assert sum(machine.screen_pixels()) == 14

    machine.step()
    assert machine.registers.program_counter == 0x206
    machine.step()
    assert machine.registers.v[0xF] == 1
    assert not any(machine.screen_pixels())
