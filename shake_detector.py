"""Turns a raw acceleration stream into discrete shake episodes."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Optional

from models import AccelerationSample, ShakeState

logger = logging.getLogger(__name__)

GRAVITY_G = 1.0
SHAKE_THRESHOLD_G = 1.5
MAX_SHAKE_INTENSITY_G = 4.0
INTENSITY_EPSILON = 0.01

ShakeListener = Callable[[ShakeState], None]


def shake_acceleration(x: float, y: float, z: float) -> float:
    """Acceleration above the resting 1g baseline, floored at zero.

    Non-finite readings count as a device at rest.
    """
    if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
        return 0.0
    magnitude = math.sqrt(x * x + y * y + z * z)
    if not math.isfinite(magnitude):
        return 0.0
    return max(0.0, magnitude - GRAVITY_G)


def normalize_intensity(acceleration: float) -> float:
    if acceleration < SHAKE_THRESHOLD_G:
        return 0.0
    return min(1.0, acceleration / MAX_SHAKE_INTENSITY_G)


class ShakeDetector:
    """Edge-triggered shake detector.

    An episode starts on the first sample at or above the threshold and ends on
    the very next sample below it. Listeners receive an immutable ``ShakeState``
    snapshot, in order, whenever the observable state changes.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._listeners: list[ShakeListener] = []
        self._state = ShakeState.idle()
        self._monitoring = False
        self._was_active = False
        self._episode_start: Optional[float] = None

    @property
    def state(self) -> ShakeState:
        return self._state

    @property
    def is_monitoring(self) -> bool:
        return self._monitoring

    def add_listener(self, listener: ShakeListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: ShakeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def start_monitoring(self) -> None:
        with self._lock:
            self._monitoring = True

    def stop_monitoring(self) -> None:
        with self._lock:
            self._monitoring = False

    def reset(self) -> None:
        with self._lock:
            self._state = ShakeState.idle()
            self._was_active = False
            self._episode_start = None

    def process_sample(self, sample: AccelerationSample) -> None:
        self.process_reading(sample.x, sample.y, sample.z)

    def process_reading(self, x: float, y: float, z: float) -> None:
        with self._lock:
            if not self._monitoring:
                return

            acceleration = shake_acceleration(x, y, z)
            is_active = acceleration >= SHAKE_THRESHOLD_G
            intensity = normalize_intensity(acceleration)

            if is_active:
                now = self._clock()
                if not self._was_active or self._episode_start is None:
                    self._episode_start = now
                    duration_s = 0.0
                    logger.debug("shake started at %.2fg", acceleration)
                else:
                    duration_s = max(0.0, now - self._episode_start)
            else:
                if self._was_active:
                    logger.debug("shake ended after %.2fs", self._state.duration_s)
                self._episode_start = None
                duration_s = 0.0

            previous = self._state
            changed = (
                is_active != self._was_active
                or abs(intensity - previous.intensity) > INTENSITY_EPSILON
                or duration_s != previous.duration_s
            )

            self._state = ShakeState(is_active=is_active, intensity=intensity, duration_s=duration_s)
            self._was_active = is_active

            if changed:
                self._notify(self._state)

    def _notify(self, state: ShakeState) -> None:
        for listener in list(self._listeners):
            listener(state)
