"""CHIP-8 memory map: font area, reserved interpreter space and program RAM."""

from __future__ import annotations

from typing import Sequence

from chip8emu.memory import RAM

RAM_SIZE = 0x1000
ENTRY_POINT = 0x200
ROM_MAX_SIZE = RAM_SIZE - ENTRY_POINT

FONT_START = 0x000
FONT_GLYPH_BYTES = 5

# 4x5 hexadecimal digit glyphs, 0 through F.
FONT: Sequence[int] = (
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
)


class Chip8Memory(RAM):
    """4 KiB RAM with the font table installed at the bottom."""

    def __init__(self) -> None:
        super().__init__(0x0000, RAM_SIZE)
        self.store_block(FONT_START, FONT)

    def load_program(self, data: bytes) -> None:
        if len(data) > ROM_MAX_SIZE:
            raise ValueError(
                f"program is {len(data)} bytes, at most {ROM_MAX_SIZE} bytes fit"
            )
        self.store_block(ENTRY_POINT, data)

    @staticmethod
    def glyph_address(digit: int) -> int:
        return FONT_START + (digit & 0xFF) * FONT_GLYPH_BYTES
