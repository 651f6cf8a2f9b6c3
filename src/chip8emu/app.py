"""CHIP-8 emulator pygame application."""

from __future__ import annotations

import argparse
import binascii
import os
import sys
from typing import Dict, Iterable, Tuple

from chip8emu.chip8.machine import Chip8Machine, RunState
from chip8emu.chip8.sound import Chip8Beeper
from chip8emu.cpu.cpu import MachineFault
from chip8emu.emulator.file import ProgramLoadError, load_rom
from chip8emu.frontend.keypad_overlay import KeypadOverlay

Color = Tuple[int, int, int, int]

ENV_ROM_PATH = "CHIP8EMU_ROM"
ENV_TRACE = "CHIP8EMU_TRACE"
DEFAULT_SCALE = 10
DEFAULT_FG = "FFFFFF"
DEFAULT_BG = "000000"

# Mapping from pygame key constants to CHIP-8 keypad indices.
#
#   1 2 3 C  ->  1 2 3 4
#   4 5 6 D  ->  Q W E R
#   7 8 9 E  ->  A S D F
#   A 0 B F  ->  Z X C V
KEYPAD_MAP: Dict[int, int] = {
    ord("1"): 0x1,
    ord("2"): 0x2,
    ord("3"): 0x3,
    ord("4"): 0xC,
    ord("q"): 0x4,
    ord("w"): 0x5,
    ord("e"): 0x6,
    ord("r"): 0xD,
    ord("a"): 0x7,
    ord("s"): 0x8,
    ord("d"): 0x9,
    ord("f"): 0xE,
    ord("z"): 0xA,
    ord("x"): 0x0,
    ord("c"): 0xB,
    ord("v"): 0xF,
}

KEY_QUIT = 27  # pygame.K_ESCAPE
KEY_PAUSE = ord("p")
KEY_KEYPAD = ord("k")
KEY_VOLUME_UP = ord("0")
KEY_VOLUME_DOWN = ord("9")


def parse_color(value: str) -> Color:
    """Decode ``RRGGBB`` or ``RRGGBBAA`` into an RGBA tuple."""

    text = value.strip()
    if text.startswith("#"):
        text = text[1:]
    try:
        data = binascii.unhexlify(text)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"couldn't decode a hex string: {exc}") from exc
    if len(data) not in (3, 4):
        raise ValueError("color must be in rgb or rgba format")
    alpha = data[3] if len(data) == 4 else 0xFF
    return (data[0], data[1], data[2], alpha)


def _handle_key_event(machine: Chip8Machine, key: int, pressed: bool) -> None:
    index = KEYPAD_MAP.get(key)
    if index is None:
        return
    machine.set_key(index, pressed)


def _handle_control_key(
    machine: Chip8Machine,
    overlay: KeypadOverlay,
    beeper: Chip8Beeper,
    key: int,
) -> bool:
    """Apply a front-end hotkey. Returns True when the window must be resized."""

    if key == KEY_QUIT:
        machine.quit()
    elif key == KEY_PAUSE:
        machine.toggle_pause()
    elif key == KEY_KEYPAD:
        overlay.toggle()
        return True
    elif key == KEY_VOLUME_UP:
        beeper.set_volume(machine.volume_up())
    elif key == KEY_VOLUME_DOWN:
        beeper.set_volume(machine.volume_down())
    return False


def _pygame_loop(
    machine: Chip8Machine,
    scale: int,
    fps: int,
    *,
    fg: Color,
    bg: Color,
    enable_audio: bool = True,
    show_keypad: bool = False,
) -> int:
    import pygame  # type: ignore

    overlay = KeypadOverlay(machine, scale, visible=show_keypad)
    beeper = Chip8Beeper(enable_audio=enable_audio, volume=machine.volume)
    display = machine.hardware.display
    width, height = machine.screen_size()

    def _window_size() -> Tuple[int, int]:
        return width * scale, height * scale + overlay.extra_height()

    pygame.init()
    screen = pygame.display.set_mode(_window_size())
    pygame.display.set_caption(machine.window_title())
    clock = pygame.time.Clock()
    exit_code = 0

    while machine.state is not RunState.QUIT:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                machine.quit()
                continue
            if event.type == pygame.KEYDOWN:
                if _handle_control_key(machine, overlay, beeper, event.key):
                    screen = pygame.display.set_mode(_window_size())
                _handle_key_event(machine, event.key, True)
            elif event.type == pygame.KEYUP:
                _handle_key_event(machine, event.key, False)

        if machine.state is RunState.QUIT:
            break

        try:
            machine.step()
        except MachineFault as exc:
            print(f"Execution stopped: {exc}", file=sys.stderr)
            machine.quit()
            exit_code = 4
            break

        beeper.update(machine.sound_active and machine.state is RunState.RUNNING)
        pygame.display.set_caption(machine.window_title())

        screen.fill(bg[:3])
        screen.blit(display.render_pygame_surface(scale, fg, bg), (0, 0))
        overlay.render(screen)

        pygame.display.flip()
        clock.tick(fps)

    if beeper.playing:
        beeper.stop()
    pygame.quit()
    return exit_code


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="CHIP-8 emulator")
    parser.add_argument("-f", "--rom", help=f"ROM file to run (defaults to ${ENV_ROM_PATH})")
    parser.add_argument("--fg", default=DEFAULT_FG, help="Foreground color as RRGGBB or RRGGBBAA hex (default: white)")
    parser.add_argument("--bg", default=DEFAULT_BG, help="Background color as RRGGBB or RRGGBBAA hex (default: black)")
    parser.add_argument("--scale", type=int, default=DEFAULT_SCALE, help="Integer scaling factor for display (default: 10)")
    parser.add_argument(
        "--fps",
        type=int,
        default=Chip8Machine.DEFAULT_TPS,
        help="Emulated ticks per second; one instruction and one timer tick per frame (default: 60)",
    )
    parser.add_argument("--audio", dest="audio", action="store_true", help="Enable the beeper (default)")
    parser.add_argument("--no-audio", dest="audio", action="store_false", help="Disable the beeper")
    parser.set_defaults(audio=True)
    parser.add_argument("--keypad", action="store_true", help="Show the keypad overlay at start (toggle with K)")
    parser.add_argument("--trace", action="store_true", help=f"Print every executed instruction (or set ${ENV_TRACE})")
    args = parser.parse_args(list(argv) if argv is not None else None)

    rom_path = args.rom or os.getenv(ENV_ROM_PATH)
    if not rom_path:
        raise SystemExit("rom file is empty")
    if args.scale <= 0:
        raise SystemExit("scale must be positive")
    if args.fps <= 0:
        raise SystemExit("fps must be positive")

    try:
        fg = parse_color(args.fg)
    except ValueError as exc:
        raise SystemExit(f"couldn't decode fg color from hex {args.fg}: {exc}")
    try:
        bg = parse_color(args.bg)
    except ValueError as exc:
        raise SystemExit(f"couldn't decode bg color from hex {args.bg}: {exc}")

    try:
        rom = load_rom(rom_path)
    except ProgramLoadError as exc:
        raise SystemExit(f"couldn't create a rom from the file: {exc}")

    machine = Chip8Machine()
    machine.load_rom(rom)
    machine.enable_trace(args.trace or os.getenv(ENV_TRACE) is not None)

    try:
        exit_code = _pygame_loop(
            machine,
            args.scale,
            args.fps,
            fg=fg,
            bg=bg,
            enable_audio=args.audio,
            show_keypad=args.keypad,
        )
    except RuntimeError as exc:
        raise SystemExit(str(exc))
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
