"""Hexadecimal keypad state shared between the input adapter and the CPU."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .errors import InvalidKeyCode

KEYPAD_SIZE = 16


class InputState:
    """Sixteen pressed/released flags, one per hexadecimal key."""

    def __init__(self) -> None:
        self._keys: List[bool] = [False] * KEYPAD_SIZE

    def __len__(self) -> int:
        return KEYPAD_SIZE

    def __getitem__(self, key: int) -> bool:
        if not 0 <= key < KEYPAD_SIZE:
            raise InvalidKeyCode(key)
        return self._keys[key]

    def __setitem__(self, key: int, pressed: bool) -> None:
        if not 0 <= key < KEYPAD_SIZE:
            raise InvalidKeyCode(key)
        self._keys[key] = bool(pressed)

    def press(self, key: int) -> None:
        self[key] = True

    def release(self, key: int) -> None:
        self[key] = False

    def release_all(self) -> None:
        self._keys = [False] * KEYPAD_SIZE

    def update(self, pressed: Iterable[int]) -> None:
        """Replace the whole state with the given set of pressed keys."""
        self.release_all()
        for key in pressed:
            self.press(key)

    def is_pressed(self, key: int, pc: Optional[int] = None) -> bool:
        if not 0 <= key < KEYPAD_SIZE:
            raise InvalidKeyCode(key, pc)
        return self._keys[key]

    def first_pressed(self) -> Optional[int]:
        for index, pressed in enumerate(self._keys):
            if pressed:
                return index
        return None

    def pressed_keys(self) -> tuple[int, ...]:
        return tuple(i for i, pressed in enumerate(self._keys) if pressed)


__all__ = ["InputState", "KEYPAD_SIZE"]
