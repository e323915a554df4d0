"""Desktop stand-ins for a device accelerometer."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Any, Callable, Optional

from models import AccelerationSample
from shake_detector import GRAVITY_G, MAX_SHAKE_INTENSITY_G, SHAKE_THRESHOLD_G

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    from pynput import mouse
except Exception:  # pragma: no cover
    mouse = None  # type: ignore

logger = logging.getLogger(__name__)

ReadingCallback = Callable[[AccelerationSample], None]


class _TickerSource:
    """Calls ``_tick`` at a fixed rate on a daemon thread."""

    def __init__(self, rate_hz: float) -> None:
        if rate_hz <= 0:
            raise ValueError("rate_hz must be positive")
        self.rate_hz = rate_hz
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._on_reading: Optional[ReadingCallback] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self, on_reading: ReadingCallback) -> None:
        with self._lock:
            if self._running:
                return
            self._check_available()
            self._on_reading = on_reading
            self._stop_event.clear()
            self._before_start()
            self._thread = threading.Thread(target=self._worker, name=type(self).__name__, daemon=True)
            self._running = True
            self._thread.start()

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._after_stop()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def _worker(self) -> None:
        interval = 1.0 / self.rate_hz
        while not self._stop_event.wait(interval):
            sample = self._tick(time.monotonic())
            if sample is not None:
                self._emit(sample)

    def _emit(self, sample: AccelerationSample) -> None:
        callback = self._on_reading
        if not self._running or callback is None:
            return
        try:
            callback(sample)
        except Exception:
            logger.exception("sensor reading handler failed")

    def _check_available(self) -> None:
        pass

    def _before_start(self) -> None:
        pass

    def _after_stop(self) -> None:
        pass

    def _tick(self, now: float) -> Optional[AccelerationSample]:
        raise NotImplementedError


class SimulatedSensorSource(_TickerSource):
    """Noisy at-rest readings, with shakes triggered from code or a hotkey."""

    def __init__(self, rate_hz: float = 60.0, noise_g: float = 0.05, seed: Optional[int] = None) -> None:
        super().__init__(rate_hz)
        self.noise_g = noise_g
        self._rng: Any = np.random.default_rng(seed) if np is not None else None
        self._shake_strength: Optional[float] = None

    @property
    def is_supported(self) -> bool:
        return np is not None

    @property
    def shaking(self) -> bool:
        return self._shake_strength is not None

    def begin_shake(self, strength: float = 1.0) -> None:
        self._shake_strength = min(1.0, max(0.0, strength))

    def end_shake(self) -> None:
        self._shake_strength = None

    def simulate_shake(self, strength: float = 1.0, count: int = 5) -> None:
        """Emit a burst of shake readings right away, then fall back to rest."""
        if not self._running:
            return
        strength = min(1.0, max(0.0, strength))
        for _ in range(count):
            self._emit(self._shake_sample(strength))

    def _check_available(self) -> None:
        if np is None:
            raise RuntimeError("numpy is not installed")

    def _tick(self, now: float) -> Optional[AccelerationSample]:
        strength = self._shake_strength
        if strength is None:
            return self._rest_sample()
        return self._shake_sample(strength)

    def _rest_sample(self) -> AccelerationSample:
        x, y, z = self._rng.uniform(-self.noise_g, self.noise_g, size=3)
        return AccelerationSample(float(x), float(y), float(GRAVITY_G + z))

    def _shake_sample(self, strength: float) -> AccelerationSample:
        # Magnitude is gravity plus a shake between just over the threshold and
        # the saturation point, pointing in a random direction.
        low = SHAKE_THRESHOLD_G + 0.1
        target = low + strength * (MAX_SHAKE_INTENSITY_G - low)
        target *= self._rng.uniform(1.0, 1.05)
        direction = self._rng.normal(size=3)
        norm = float(np.linalg.norm(direction)) or 1.0
        x, y, z = direction / norm * (GRAVITY_G + target)
        return AccelerationSample(float(x), float(y), float(z))


class MouseShakeSensorSource(_TickerSource):
    """Derives a planar acceleration from how hard the pointer is jiggled.

    The pointer position is sampled at ``rate_hz``; its second difference gives
    an acceleration in px/s^2, scaled to g by ``pixels_per_g``. Mouse shaking
    passes through zero acceleration mid-swing, so the reported value is the
    strongest reading inside a short window. Gravity is added on z.
    """

    def __init__(
        self,
        rate_hz: float = 60.0,
        pixels_per_g: float = 40000.0,
        window_s: float = 0.3,
    ) -> None:
        super().__init__(rate_hz)
        if pixels_per_g <= 0:
            raise ValueError("pixels_per_g must be positive")
        self.pixels_per_g = pixels_per_g
        self.window_s = window_s
        self._listener: Optional[Any] = None
        self._position: Optional[tuple[float, float]] = None
        self._last_position: Any = None
        self._last_velocity: Any = None
        self._last_time: Optional[float] = None
        self._window: deque = deque()

    @property
    def is_supported(self) -> bool:
        return mouse is not None and np is not None

    def _check_available(self) -> None:
        if mouse is None:
            raise RuntimeError("pynput is not installed")
        if np is None:
            raise RuntimeError("numpy is not installed")

    def _before_start(self) -> None:
        self._reset_kinematics()
        self._listener = mouse.Listener(on_move=self._on_move)
        self._listener.start()

    def _after_stop(self) -> None:
        listener = self._listener
        if listener is not None:
            listener.stop()
            self._listener = None

    def _reset_kinematics(self) -> None:
        self._position = None
        self._last_position = None
        self._last_velocity = None
        self._last_time = None
        self._window.clear()

    def _on_move(self, x: float, y: float) -> None:
        self._position = (float(x), float(y))

    def _tick(self, now: float) -> Optional[AccelerationSample]:
        position = self._position
        if position is None:
            return AccelerationSample(0.0, 0.0, GRAVITY_G)

        current = np.array(position, dtype=float)
        accel_g = np.zeros(2)
        if self._last_position is not None and self._last_time is not None:
            dt = now - self._last_time
            if dt <= 0:
                return None
            velocity = (current - self._last_position) / dt
            if self._last_velocity is not None:
                accel_g = (velocity - self._last_velocity) / dt / self.pixels_per_g
            self._last_velocity = velocity
        self._last_position = current
        self._last_time = now

        self._window.append((now, accel_g))
        while self._window and now - self._window[0][0] > self.window_s:
            self._window.popleft()
        peak = max((a for _, a in self._window), key=lambda a: float(np.linalg.norm(a)))
        return AccelerationSample(float(peak[0]), float(peak[1]), GRAVITY_G)
