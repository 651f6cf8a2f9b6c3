"""Keypad state tests."""

from chip8emu.chip8.keyboard import KEYPAD_SIZE, Chip8Keypad


def test_press_release_and_first_pressed() -> None:
    keypad = Chip8Keypad()
    assert keypad.first_pressed() is None
    keypad.press(0xB)
    keypad.press(0x3)
    assert keypad.is_pressed(0xB)
    assert keypad.first_pressed() == 0x3
    keypad.release(0x3)
    assert keypad.first_pressed() == 0xB


def test_out_of_range_keys_are_ignored() -> None:
    keypad = Chip8Keypad()
    keypad.set_key(KEYPAD_SIZE, True)
    keypad.set_key(-1, True)
    assert not keypad.is_pressed(KEYPAD_SIZE)
    assert keypad.first_pressed() is None
