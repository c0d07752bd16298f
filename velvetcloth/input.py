"""Keyboard and mouse state with edge detection across frames."""

from __future__ import annotations

from typing import Callable

import numpy as np

KEY_LAST = 348

KEY_1 = 49
KEY_A = 65
KEY_D = 68
KEY_E = 69
KEY_H = 72
KEY_K = 75
KEY_L = 76
KEY_O = 79
KEY_P = 80
KEY_Q = 81
KEY_R = 82
KEY_S = 83
KEY_W = 87
KEY_ESCAPE = 256

MOUSE_BUTTON_LEFT = 0
MOUSE_BUTTON_RIGHT = 1


class Input:
    """Polls raw key, button and cursor state and reports presses and releases."""

    def __init__(
        self,
        key_pressed: Callable[[int], bool],
        mouse_pressed: Callable[[int], bool] | None = None,
        cursor_position: Callable[[], tuple[float, float]] | None = None,
    ) -> None:
        self._key_pressed = key_pressed
        self._mouse_pressed = mouse_pressed or (lambda button: False)
        self._cursor_position = cursor_position or (lambda: (0.0, 0.0))
        self._key_once = [False] * (KEY_LAST + 1)
        self._key_now = [False] * (KEY_LAST + 1)

    @staticmethod
    def _slot(code: int) -> int:
        if not 0 <= code <= KEY_LAST:
            raise IndexError(f"key or button code {code} out of range 0..{KEY_LAST}")
        return code

    def on_update(self) -> None:
        """Close the frame: this frame's state becomes the previous state."""
        self._key_once, self._key_now = self._key_now, self._key_once

    def get_key(self, key: int) -> bool:
        """True while the key is held down."""
        return bool(self._key_pressed(self._slot(key)))

    def get_key_down(self, key: int) -> bool:
        """True during the frame the key starts being pressed."""
        self._key_now[key] = self.get_key(key)
        return not self._key_once[key] and self._key_now[key]

    def toggle_on_key_down(self, key: int, value: bool) -> bool:
        """Return ``value`` flipped if the key went down this frame, else unchanged."""
        return not value if self.get_key_down(key) else value

    def get_key_up(self, key: int) -> bool:
        """True during the frame the key is released."""
        self._key_now[key] = self.get_key(key)
        return self._key_once[key] and not self._key_now[key]

    def get_mouse(self, button: int) -> bool:
        return bool(self._mouse_pressed(self._slot(button)))

    def get_mouse_down(self, button: int) -> bool:
        self._key_now[button] = self.get_mouse(button)
        return not self._key_once[button] and self._key_now[button]

    def get_mouse_up(self, button: int) -> bool:
        self._key_now[button] = self.get_mouse(button)
        return self._key_once[button] and not self._key_now[button]

    def get_mouse_pos(self) -> np.ndarray:
        x, y = self._cursor_position()
        return np.array([x, y], dtype=float)