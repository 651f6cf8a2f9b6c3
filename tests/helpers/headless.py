"""Headless execution helpers for CHIP-8 programs."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import List, Sequence

from chip8emu.chip8.machine import Chip8Machine


@dataclass(frozen=True)
class KeyEvent:
    """Represents a keypad event scheduled by step count."""

    step: int
    key: int
    pressed: bool


def run_program(
    program: bytes,
    *,
    steps: int,
    events: Sequence[KeyEvent] | None = None,
    seed: int | None = 0,
    name: str = "test.ch8",
) -> tuple[Chip8Machine, List[int]]:
    """Execute a CHIP-8 program headlessly and capture PC history."""

    rng = random.Random(seed) if seed is not None else None
    machine = Chip8Machine(rng=rng)
    machine.load(name, program)

    pc_history: List[int] = []
    scheduled = sorted(events or [], key=lambda evt: evt.step)
    index = 0

    for step in range(steps):
        while index < len(scheduled) and scheduled[index].step <= step:
            evt = scheduled[index]
            machine.set_key(evt.key, evt.pressed)
            index += 1

        machine.step()
        pc_history.append(machine.registers.program_counter)

    return machine, pc_history
