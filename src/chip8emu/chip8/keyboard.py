"""CHIP-8 hexadecimal keypad state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

KEYPAD_SIZE = 0x10


@dataclass
class Chip8Keypad:
    """Sixteen boolean keys, 0x0 through 0xF.

    Indices outside the keypad are ignored on write and read as released.
    """

    _keys: List[bool] = field(default_factory=lambda: [False] * KEYPAD_SIZE)

    def set_key(self, index: int, pressed: bool) -> None:
        if not (0 <= index < KEYPAD_SIZE):
            return
        self._keys[index] = bool(pressed)

    def press(self, index: int) -> None:
        self.set_key(index, True)

    def release(self, index: int) -> None:
        self.set_key(index, False)

    def is_pressed(self, index: int) -> bool:
        if not (0 <= index < KEYPAD_SIZE):
            return False
        return self._keys[index]

    def first_pressed(self) -> Optional[int]:
        for index, pressed in enumerate(self._keys):
            if pressed:
                return index
        return None
