"""Beeper that sounds while the CHIP-8 sound timer is running."""

from __future__ import annotations

from array import array
from dataclasses import dataclass, field
import math
from typing import List, Tuple

VOLUME_MIN = 0.0
VOLUME_MAX = 1.0


@dataclass
class Chip8Beeper:
    """Sine tone generator driven by the machine's sound timer."""

    history: List[Tuple[str, Tuple[float, ...]]] = field(default_factory=list)
    sample_rate: int = 44100
    frequency: float = 440.0
    volume: float = VOLUME_MAX
    enable_audio: bool = False

    def __post_init__(self) -> None:
        self._audio_initialized: bool = False
        self._channel = None
        self._sound = None
        self._playing: bool = False
        self.volume = clamp_volume(self.volume)

    @property
    def playing(self) -> bool:
        return self._playing

    # ------------------------------------------------------------------
    # Machine callbacks
    # ------------------------------------------------------------------

    def update(self, active: bool) -> None:
        """Start or stop the tone on sound timer transitions."""

        if active and not self._playing:
            self.start()
        elif not active and self._playing:
            self.stop()

    def start(self) -> None:
        self.history.append(("start", tuple()))
        self._playing = True
        if not self._ensure_mixer():
            return
        if self._sound is None:
            import pygame  # type: ignore

            self._sound = pygame.mixer.Sound(buffer=self._render_tone())
        self._channel.set_volume(self.volume)
        self._channel.play(self._sound, loops=-1)

    def stop(self) -> None:
        self.history.append(("stop", tuple()))
        self._playing = False
        if self._channel is not None:
            self._channel.stop()

    # ------------------------------------------------------------------
    # Volume
    # ------------------------------------------------------------------

    def set_volume(self, volume: float) -> None:
        self.volume = clamp_volume(volume)
        self.history.append(("set_volume", (self.volume,)))
        if self._channel is not None:
            self._channel.set_volume(self.volume)

    # ------------------------------------------------------------------
    # Audio helpers
    # ------------------------------------------------------------------

    def _ensure_mixer(self) -> bool:
        if not self.enable_audio:
            return False
        if self._audio_initialized:
            return True
        try:
            import pygame  # type: ignore

            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=self.sample_rate, size=-16, channels=1)
            self._channel = pygame.mixer.Channel(0)
            self._audio_initialized = True
        except Exception as exc:
            print(f"audio disabled: {exc}")
            self.enable_audio = False
            self._channel = None
            self._audio_initialized = False
        return self._audio_initialized

    def _render_tone(self, duration: float = 1.0) -> array:
        samples = int(self.sample_rate * duration)
        buffer = array("h", [0] * samples)
        for index in range(samples):
            value = math.sin(2.0 * math.pi * self.frequency * index / self.sample_rate)
            buffer[index] = int(value * 32767)
        return buffer


def clamp_volume(volume: float) -> float:
    return max(VOLUME_MIN, min(VOLUME_MAX, round(volume, 6)))


__all__ = ["Chip8Beeper", "VOLUME_MAX", "VOLUME_MIN", "clamp_volume"]
