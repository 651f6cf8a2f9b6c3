"""File loading helpers for the CHIP-8 emulator."""

from chip8emu.emulator.file.program import (
    ProgramLoadError,
    Rom,
    RomTooLargeError,
    check_rom_size,
    load_rom,
)

__all__ = [
    "ProgramLoadError",
    "Rom",
    "RomTooLargeError",
    "check_rom_size",
    "load_rom",
]
