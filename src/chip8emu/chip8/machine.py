"""CHIP-8 machine wiring: hardware, CPU core and run state."""

from __future__ import annotations

import enum
import random
from typing import Optional, Tuple

from chip8emu.chip8.hardware import Chip8Hardware
from chip8emu.chip8.memory import ENTRY_POINT
from chip8emu.chip8.sound import VOLUME_MAX, clamp_volume
from chip8emu.cpu.cpu import (
    CPURegisters,
    CPUTimers,
    Chip8CPU,
    MachineFault,
    StepResult,
    StepStatus,
)
from chip8emu.cpu.decoder import mnemonic
from chip8emu.emulator.file import Rom, check_rom_size


class RunState(enum.Enum):
    RUNNING = "running"
    PAUSED = "paused"
    QUIT = "quit"

    def __str__(self) -> str:
        return self.value


class Chip8Machine:
    """Owns all interpreter state and advances it one tick per ``step``.

    Pacing is left to the caller; ``DEFAULT_TPS`` is the rate the front end
    drives ``step`` at.
    """

    DEFAULT_TPS = 60
    VOLUME_STEP = 0.2

    def __init__(self, *, rng: Optional[random.Random] = None) -> None:
        self.hardware = Chip8Hardware()
        self.cpu = Chip8CPU(self.hardware, rng=rng)
        self.state: RunState = RunState.RUNNING
        self.volume: float = VOLUME_MAX
        self.rom_name: str = ""
        self._trace = False

    # ------------------------------------------------------------------
    # Program loading
    # ------------------------------------------------------------------
    def load(self, rom_name: str, rom_bytes: bytes) -> None:
        """Copy a program to the entry point; oversized images change nothing."""

        check_rom_size(rom_name, rom_bytes)
        self.hardware.memory.load_program(bytes(rom_bytes))
        self.cpu.registers.program_counter = ENTRY_POINT
        self.rom_name = rom_name

    def load_rom(self, rom: Rom) -> None:
        self.load(rom.name, rom.data)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def step(self) -> StepResult:
        if self.state is not RunState.RUNNING:
            status = StepStatus.PAUSED if self.state is RunState.PAUSED else StepStatus.STOPPED
            return StepResult(self.cpu.registers.program_counter, None, None, status)

        try:
            result = self.cpu.step()
        except MachineFault as exc:
            if self._trace:
                print(f"{exc.address:04X}: {exc.opcode:04X} {exc.reason}", flush=True)
            raise
        if self._trace:
            print(format_trace(result), flush=True)
        return result

    def enable_trace(self, enabled: bool) -> None:
        self._trace = enabled

    # ------------------------------------------------------------------
    # Run state and pass-through flags
    # ------------------------------------------------------------------
    def toggle_pause(self) -> RunState:
        if self.state is RunState.RUNNING:
            self.state = RunState.PAUSED
        elif self.state is RunState.PAUSED:
            self.state = RunState.RUNNING
        return self.state

    def quit(self) -> None:
        self.state = RunState.QUIT

    def adjust_volume(self, delta: float) -> float:
        self.volume = clamp_volume(self.volume + delta)
        return self.volume

    def volume_up(self) -> float:
        return self.adjust_volume(self.VOLUME_STEP)

    def volume_down(self) -> float:
        return self.adjust_volume(-self.VOLUME_STEP)

    @property
    def tps(self) -> int:
        return self.DEFAULT_TPS

    def window_title(self) -> str:
        return f"CHIP-8 Emulator: {self.rom_name} {self.state}"

    # ------------------------------------------------------------------
    # Input / output accessors
    # ------------------------------------------------------------------
    def set_key(self, index: int, pressed: bool) -> None:
        """Update one keypad slot; indices outside 0x0-0xF are ignored."""

        self.hardware.keypad.set_key(index, pressed)

    def key_pressed(self, index: int) -> bool:
        return self.hardware.keypad.is_pressed(index)

    def screen_size(self) -> Tuple[int, int]:
        return self.hardware.display.size

    def pixel_set_at(self, x: int, y: int) -> bool:
        return self.hardware.display.pixel_set_at(x, y)

    def screen_pixels(self) -> Tuple[bool, ...]:
        return self.hardware.display.pixels()

    @property
    def sound_active(self) -> bool:
        return self.cpu.timers.sound > 0

    @property
    def registers(self) -> CPURegisters:
        return self.cpu.registers

    @property
    def timers(self) -> CPUTimers:
        return self.cpu.timers

    def read_memory(self, address: int, length: int = 1) -> bytes:
        return bytes(self.hardware.memory.load_block(address, length))


def format_trace(result: StepResult) -> str:
    if result.status is StepStatus.HALTED or result.instruction is None:
        return f"{result.address:04X}: ---- {result.status.value}"
    line = f"{result.address:04X}: {result.opcode:04X} {mnemonic(result.instruction)}"
    if result.status is StepStatus.WAITING_FOR_KEY:
        line += " (waiting for key)"
    return line


__all__ = ["Chip8Machine", "RunState", "format_trace"]
