"""ROM file loading tests."""

from __future__ import annotations

import pytest

from chip8emu.chip8.memory import ROM_MAX_SIZE
from chip8emu.emulator.file import ProgramLoadError, Rom, RomTooLargeError, load_rom


def test_load_rom_reads_bytes_and_base_name(tmp_path) -> None:
    path = tmp_path / "games" / "pong.ch8"
    path.parent.mkdir()
    path.write_bytes(bytes([0x00, 0xE0, 0x12, 0x00]))

    rom = load_rom(path)

    assert rom.name == "pong.ch8"
    assert rom.data == bytes([0x00, 0xE0, 0x12, 0x00])
    assert rom.size == 4
    assert rom.path == path


def test_load_rom_missing_file(tmp_path) -> None:
    with pytest.raises(ProgramLoadError):
        load_rom(tmp_path / "missing.ch8")


def test_load_rom_too_large(tmp_path) -> None:
    path = tmp_path / "big.ch8"
    path.write_bytes(bytes(ROM_MAX_SIZE + 1))
    with pytest.raises(RomTooLargeError) as excinfo:
        load_rom(path)
    assert excinfo.value.size == ROM_MAX_SIZE + 1
    assert "big.ch8" in str(excinfo.value)
    assert isinstance(excinfo.value, ProgramLoadError)


def test_empty_rom_is_allowed() -> None:
    rom = Rom(name="empty.ch8", data=b"")
    assert rom.size == 0
