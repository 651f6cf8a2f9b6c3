"""On-screen keypad shown below the CHIP-8 display."""

from __future__ import annotations

from typing import List, Tuple

Rect = Tuple[int, int, int, int]

# Keys in the order they appear on the physical 4x4 pad.
#
#   1 2 3 C
#   4 5 6 D
#   7 8 9 E
#   A 0 B F
KEYPAD_LAYOUT: Tuple[int, ...] = (
    0x1, 0x2, 0x3, 0xC,
    0x4, 0x5, 0x6, 0xD,
    0x7, 0x8, 0x9, 0xE,
    0xA, 0x0, 0xB, 0xF,
)


class KeypadOverlay:
    """Draws the keypad state; sizes are in CHIP-8 pixels before scaling."""

    BUTTONS_PER_ROW = 4
    BUTTON_SIZE = 4
    BUTTON_GAP = 1
    PANEL_HEIGHT = 22
    PRESSED_COLOR = (0x65, 0xF0, 0x57)
    RELEASED_COLOR = (0x99, 0x99, 0x99)

    def __init__(self, machine, scale: int = 1, *, visible: bool = False) -> None:
        if scale <= 0:
            raise ValueError("scale must be positive")
        self._machine = machine
        self._scale = scale
        self.visible = visible

    def toggle(self) -> bool:
        self.visible = not self.visible
        return self.visible

    def extra_height(self) -> int:
        """Window height needed below the display, in host pixels."""

        return self.PANEL_HEIGHT * self._scale if self.visible else 0

    def button_rects(self) -> List[Tuple[int, Rect]]:
        width, height = self._machine.screen_size()
        pitch = self.BUTTON_SIZE + self.BUTTON_GAP
        grid_width = self.BUTTONS_PER_ROW * pitch - self.BUTTON_GAP
        offset_x = (width - grid_width) >> 1
        offset_y = height + 1

        rects: List[Tuple[int, Rect]] = []
        for position, key in enumerate(KEYPAD_LAYOUT):
            column = position % self.BUTTONS_PER_ROW
            row = position // self.BUTTONS_PER_ROW
            x = (offset_x + column * pitch) * self._scale
            y = (offset_y + row * pitch) * self._scale
            size = self.BUTTON_SIZE * self._scale
            rects.append((key, (x, y, size, size)))
        return rects

    def render(self, screen) -> None:
        """Render the keypad onto the given pygame surface."""

        if not self.visible:
            return
        for key, rect in self.button_rects():
            color = self.PRESSED_COLOR if self._machine.key_pressed(key) else self.RELEASED_COLOR
            screen.fill(color, rect)
