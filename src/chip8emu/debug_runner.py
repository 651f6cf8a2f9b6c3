"""Headless runner for CHIP-8 ROM diagnostics."""

from __future__ import annotations

import argparse
import random
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from chip8emu.chip8.machine import Chip8Machine
from chip8emu.chip8.memory import RAM_SIZE
from chip8emu.cpu.cpu import MachineFault, StepStatus
from chip8emu.emulator.file import ProgramLoadError, load_rom


DEFAULT_MAX_STEPS = 600
ADDRESS_MASK = RAM_SIZE - 1

EXIT_OK = 0
EXIT_LOAD_FAILED = 1
EXIT_STEP_LIMIT = 2
EXIT_FAULT = 4


@dataclass(frozen=True)
class DumpRange:
    """Inclusive memory range used for dumping."""

    start: int
    end: int


@dataclass
class RunOutcome:
    steps: int = 0
    break_hit: bool = False
    halted: bool = False
    limit_hit: bool = False


def _parse_hex(value: str, *, limit: int = ADDRESS_MASK) -> int:
    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not text:
        raise ValueError("empty hexadecimal value")
    result = int(text, 16)
    if not (0 <= result <= limit):
        raise ValueError("hex value out of range")
    return result


def _parse_range(spec: str) -> DumpRange:
    start_str, sep, end_str = spec.partition(":")
    if not sep:
        raise ValueError("range specification must contain ':'")
    start = _parse_hex(start_str)
    end = _parse_hex(end_str)
    if end < start:
        raise ValueError("range end must be >= start")
    return DumpRange(start, end)


def _merge_ranges(ranges: Sequence[DumpRange]) -> List[DumpRange]:
    if not ranges:
        return [DumpRange(0x0000, ADDRESS_MASK)]
    ordered = sorted(ranges, key=lambda r: (r.start, r.end))
    merged: List[DumpRange] = []
    for current in ordered:
        if not merged:
            merged.append(current)
            continue
        last = merged[-1]
        if current.start <= last.end + 1:
            merged[-1] = DumpRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def _format_hex_dump(machine: Chip8Machine, dump_ranges: Sequence[DumpRange]) -> str:
    lines: List[str] = []
    header = "ADDR " + " ".join(f"+{offset:X}" for offset in range(16))
    for index, dump_range in enumerate(dump_ranges):
        if index:
            lines.append("")
        lines.append(header)
        start_line = dump_range.start & ~0x0F
        end_line = dump_range.end | 0x0F
        for base in range(start_line, end_line + 1, 16):
            row = [f"{base & ADDRESS_MASK:04X}"]
            row.extend(f"{value:02X}" for value in machine.read_memory(base, 16))
            lines.append(" ".join(row))
    return "\n".join(lines)


def _write_dump(machine: Chip8Machine, dump_ranges: Sequence[DumpRange], *, target: Path | None, fmt: str) -> None:
    ranges = _merge_ranges(dump_ranges)
    if fmt == "bin":
        data = bytearray()
        for dump_range in ranges:
            data.extend(machine.read_memory(dump_range.start, dump_range.end - dump_range.start + 1))
        if target is None:
            sys.stdout.buffer.write(bytes(data))
            return
        target.write_bytes(bytes(data))
        return

    text = _format_hex_dump(machine, ranges)
    if target is None:
        print(text)
    else:
        target.write_text(text + "\n")


def _execute_program(
    machine: Chip8Machine,
    *,
    max_steps: int | None,
    breakpoints: Sequence[int],
) -> RunOutcome:
    outcome = RunOutcome()
    break_set = set(breakpoints)

    while max_steps is None or outcome.steps < max_steps:
        result = machine.step()
        outcome.steps += 1
        if result.status is StepStatus.HALTED:
            outcome.halted = True
            return outcome
        if break_set and machine.registers.program_counter in break_set:
            outcome.break_hit = True
            return outcome

    outcome.limit_hit = True
    return outcome


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8emu-debug-runner",
        description="Headless CHIP-8 runner for ROM diagnostics.",
    )
    parser.add_argument("--rom", type=str, required=True, help="CHIP-8 ROM image")
    parser.add_argument(
        "--steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        help="Maximum steps (ticks) to execute (0 or negative disables the limit)",
    )
    parser.add_argument(
        "--break-pc",
        action="append",
        default=[],
        help="Break when PC reaches the given hex address (repeatable)",
    )
    parser.add_argument(
        "--press",
        action="append",
        default=[],
        help="Hold the given hex keypad key down for the whole run (repeatable)",
    )
    parser.add_argument(
        "--dump",
        type=str,
        default=None,
        help="File path for memory dump (defaults to stdout)",
    )
    parser.add_argument(
        "--dump-range",
        action="append",
        default=[],
        help="Memory range to dump in START:END hex form (inclusive). Repeat to add multiple ranges.",
    )
    parser.add_argument(
        "--dump-format",
        choices=("hex", "bin", "none"),
        default="hex",
        help="Dump format (hex table, raw binary or no dump)",
    )
    parser.add_argument("--screen", action="store_true", help="Print the framebuffer as text after the run")
    parser.add_argument("--trace", action="store_true", help="Print every executed instruction")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random number instruction")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    breakpoints: List[int] = []
    for spec in args.break_pc:
        try:
            breakpoints.append(_parse_hex(spec, limit=0xFFFF))
        except ValueError as exc:
            parser.error(f"invalid breakpoint address '{spec}': {exc}")

    keys: List[int] = []
    for spec in args.press:
        try:
            keys.append(_parse_hex(spec, limit=0xF))
        except ValueError as exc:
            parser.error(f"invalid key '{spec}': {exc}")

    dump_ranges: List[DumpRange] = []
    for spec in args.dump_range:
        try:
            dump_ranges.append(_parse_range(spec))
        except ValueError as exc:
            parser.error(f"invalid dump range '{spec}': {exc}")

    try:
        rom = load_rom(args.rom)
    except ProgramLoadError as exc:
        print(f"Failed to load rom: {exc}", file=sys.stderr)
        return EXIT_LOAD_FAILED

    rng = random.Random(args.seed) if args.seed is not None else None
    machine = Chip8Machine(rng=rng)
    machine.load_rom(rom)
    machine.enable_trace(args.trace)
    for key in keys:
        machine.set_key(key, True)

    step_limit = args.steps if args.steps > 0 else None
    exit_code = EXIT_OK
    try:
        outcome = _execute_program(machine, max_steps=step_limit, breakpoints=breakpoints)
    except MachineFault as exc:
        print(f"Execution stopped: {exc}", file=sys.stderr)
        outcome = None
        exit_code = EXIT_FAULT

    if args.dump_format != "none":
        dump_target = Path(args.dump) if args.dump is not None else None
        _write_dump(machine, dump_ranges, target=dump_target, fmt=args.dump_format)
    if args.screen:
        print(machine.hardware.display.render_text())

    if outcome is None:
        return exit_code
    if outcome.halted:
        print("Execution stopped: program counter left memory", file=sys.stderr)
        return EXIT_OK
    if outcome.limit_hit and step_limit is not None:
        print("Execution stopped: step limit reached", file=sys.stderr)
        return EXIT_STEP_LIMIT
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
