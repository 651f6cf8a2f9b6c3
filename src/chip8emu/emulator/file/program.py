"""ROM image loading for CHIP-8 programs."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

from chip8emu.chip8.memory import ROM_MAX_SIZE


class ProgramLoadError(RuntimeError):
    """Raised when a ROM image cannot be read."""


class RomTooLargeError(ProgramLoadError):
    """Raised when a ROM image does not fit above the entry point."""

    def __init__(self, name: str, size: int) -> None:
        super().__init__(
            f"rom {name} is too large: {size} bytes, max size is {ROM_MAX_SIZE} bytes"
        )
        self.name = name
        self.size = size


@dataclass(frozen=True)
class Rom:
    """Raw CHIP-8 program image; there is no header or magic."""

    name: str
    data: bytes
    path: Optional[Path] = None

    def __post_init__(self) -> None:
        check_rom_size(self.name, self.data)

    @property
    def size(self) -> int:
        return len(self.data)


def check_rom_size(name: str, data: bytes) -> None:
    if len(data) > ROM_MAX_SIZE:
        raise RomTooLargeError(name, len(data))


def load_rom(path: str | os.PathLike[str]) -> Rom:
    """Read a ROM file and name it after the file's base name."""

    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise ProgramLoadError(f"read data from rom file {file_path}: {exc}") from exc
    return Rom(name=file_path.name, data=data, path=file_path)
