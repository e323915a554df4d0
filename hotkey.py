"""Hold a global key to shake the simulated sensor (pynput)."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from sensors import SimulatedSensorSource

try:
    from pynput import keyboard
except Exception:  # pragma: no cover
    keyboard = None  # type: ignore

logger = logging.getLogger(__name__)


class HotkeyShakeTrigger:
    def __init__(
        self,
        sensor: SimulatedSensorSource,
        hotkey_name: str = "Key.f8",
        strength: float = 1.0,
    ) -> None:
        self._sensor = sensor
        self._hotkey_name = hotkey_name
        self._strength = strength
        self._listener: Optional[object] = None
        self._pressed = False
        self._lock = threading.Lock()

    @property
    def hotkey_name(self) -> str:
        return self._hotkey_name

    def start(self) -> None:
        if keyboard is None:
            raise RuntimeError("pynput is not installed")
        if self._listener is not None:
            return
        self._listener = keyboard.Listener(on_press=self._on_press, on_release=self._on_release)
        self._listener.start()
        logger.info("hold %s to shake", self._hotkey_name)

    def stop(self) -> None:
        listener = self._listener
        if listener is not None:
            listener.stop()
            self._listener = None
        self._release()

    def _on_press(self, key: object) -> None:
        if str(key) != self._hotkey_name:
            return
        with self._lock:
            # Auto-repeat delivers repeated presses while the key is held.
            if self._pressed:
                return
            self._pressed = True
        self._sensor.begin_shake(self._strength)

    def _on_release(self, key: object) -> None:
        if str(key) != self._hotkey_name:
            return
        self._release()

    def _release(self) -> None:
        with self._lock:
            if not self._pressed:
                return
            self._pressed = False
        self._sensor.end_shake()
