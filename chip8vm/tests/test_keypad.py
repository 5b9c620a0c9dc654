import pytest

from chip8vm.errors import InvalidKeyCode
from chip8vm.keypad import KEYPAD_SIZE, InputState


def test_starts_released() -> None:
    keys = InputState()
    assert len(keys) == KEYPAD_SIZE
    assert keys.pressed_keys() == ()
    assert keys.first_pressed() is None


def test_press_and_release() -> None:
    keys = InputState()
    keys.press(0xF)
    keys.press(0x3)
    assert keys.is_pressed(0xF)
    assert keys.pressed_keys() == (0x3, 0xF)
    assert keys.first_pressed() == 0x3
    keys.release(0x3)
    assert keys.first_pressed() == 0xF


def test_update_replaces_state() -> None:
    keys = InputState()
    keys.press(0x1)
    keys.update([0x4, 0x5])
    assert keys.pressed_keys() == (0x4, 0x5)
    keys.update([])
    assert keys.pressed_keys() == ()


def test_item_access() -> None:
    keys = InputState()
    keys[0xA] = True
    assert keys[0xA] is True
    keys[0xA] = 0
    assert keys[0xA] is False


@pytest.mark.parametrize("key", [-1, 16, 0xFF])
def test_out_of_range_keys(key) -> None:
    keys = InputState()
    with pytest.raises(InvalidKeyCode):
        keys.press(key)
    with pytest.raises(InvalidKeyCode) as excinfo:
        keys.is_pressed(key, 0x234)
    assert excinfo.value.pc == 0x234


@pytest.mark.parametrize("key", [-1, 16])
def test_item_read_out_of_range(key) -> None:
    with pytest.raises(InvalidKeyCode):
        InputState()[key]
