"""CHIP-8 monochrome framebuffer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

Color = Tuple[int, int, int, int]


@dataclass
class Chip8Display:
    WIDTH: int = 64
    HEIGHT: int = 32

    _pixels: List[bool] = field(default_factory=lambda: [False] * (64 * 32))

    def __post_init__(self) -> None:
        if len(self._pixels) != self.WIDTH * self.HEIGHT:
            self._pixels = [False] * (self.WIDTH * self.HEIGHT)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def size(self) -> Tuple[int, int]:
        return self.WIDTH, self.HEIGHT

    def pixel_set_at(self, x: int, y: int) -> bool:
        if not (0 <= x < self.WIDTH and 0 <= y < self.HEIGHT):
            raise ValueError("pixel coordinate out of range")
        return self._pixels[y * self.WIDTH + x]

    def pixels(self) -> Tuple[bool, ...]:
        return tuple(self._pixels)

    def rows(self) -> List[List[bool]]:
        return [
            self._pixels[y * self.WIDTH:(y + 1) * self.WIDTH]
            for y in range(self.HEIGHT)
        ]

    # ------------------------------------------------------------------
    # Mutation (00E0 / Dxyn)
    # ------------------------------------------------------------------
    def clear(self) -> None:
        self._pixels = [False] * (self.WIDTH * self.HEIGHT)

    def draw_sprite(self, x: int, y: int, sprite: Iterable[int]) -> bool:
        """XOR ``sprite`` rows onto the screen at (``x``, ``y``).

        The origin wraps into the screen; pixels past the right or bottom
        edge are clipped. Returns True when a lit pixel was switched off.
        """

        origin_x = x % self.WIDTH
        origin_y = y % self.HEIGHT
        collision = False
        for row, value in enumerate(sprite):
            pos_y = origin_y + row
            if pos_y >= self.HEIGHT:
                break
            for bit in range(8):
                pos_x = origin_x + bit
                if pos_x >= self.WIDTH:
                    break
                if not (value >> (7 - bit)) & 0x01:
                    continue
                index = pos_y * self.WIDTH + pos_x
                if self._pixels[index]:
                    collision = True
                self._pixels[index] = not self._pixels[index]
        return collision

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render_text(self, on: str = "#", off: str = ".") -> str:
        return "\n".join(
            "".join(on if pixel else off for pixel in row) for row in self.rows()
        )

    def render_pygame_surface(
        self,
        scaling: int = 1,
        fg: Color = (0xFF, 0xFF, 0xFF, 0xFF),
        bg: Color = (0x00, 0x00, 0x00, 0xFF),
    ):
        """Render the framebuffer into a pygame Surface.

        Parameters
        ----------
        scaling:
            Integer scale factor applied to both axes.
        fg, bg:
            RGBA colors for lit and dark cells.

        Returns
        -------
        pygame.Surface
            Surface of ``WIDTH * scaling`` by ``HEIGHT * scaling`` pixels.

        Raises
        ------
        RuntimeError
            If pygame is not available.
        """

        if scaling <= 0:
            raise ValueError("scaling factor must be positive")

        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required for render_pygame_surface") from exc

        surface = pygame.Surface((self.WIDTH * scaling, self.HEIGHT * scaling))
        surface.fill(bg)
        for y, row in enumerate(self.rows()):
            for x, pixel in enumerate(row):
                if pixel:
                    surface.fill(fg, (x * scaling, y * scaling, scaling, scaling))
        return surface
