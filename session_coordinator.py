"""Glue between shake detection, estimate selection and persistence."""

from __future__ import annotations

import dataclasses
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from errors import (
    ERROR_MESSAGES,
    PERSISTENCE_FAILED,
    SENSOR_FAILED,
    SENSOR_UNAVAILABLE,
    SETTINGS_LOAD_FAILED,
)
from interfaces import EstimateGenerator, HistoryStore, SensorSource, SettingsStore
from models import AppSettings, EstimateMode, EstimateResult, ShakeState
from shake_detector import ShakeDetector

logger = logging.getLogger(__name__)

EstimateCallback = Callable[[EstimateResult], None]
ShakeCallback = Callable[[ShakeState], None]
ErrorCallback = Callable[[str, str], None]


class SessionCoordinator:
    """Generates one estimate per shake episode.

    The estimate is drawn on the falling edge of ``is_active`` using the last
    active state, then the detector is reset so the next shake starts clean.
    Writes go through a single background worker so they keep their order and
    never block sensor delivery.
    """

    def __init__(
        self,
        detector: ShakeDetector,
        estimator: EstimateGenerator,
        settings_store: SettingsStore,
        history_store: HistoryStore,
        sensor: Optional[SensorSource] = None,
        executor: Optional[Executor] = None,
        on_estimate: Optional[EstimateCallback] = None,
        on_shake: Optional[ShakeCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._detector = detector
        self._estimator = estimator
        self._settings_store = settings_store
        self._history_store = history_store
        self._sensor = sensor
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="hiha-persist")
        self._on_estimate = on_estimate
        self._on_shake = on_shake
        self._on_error = on_error

        self._lock = threading.RLock()
        self._running = False
        self._closed = False
        self._settings = AppSettings()
        self._last_state = ShakeState.idle()
        self._last_estimate: Optional[EstimateResult] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def selected_mode(self) -> EstimateMode:
        return self._settings.selected_mode

    @property
    def last_estimate(self) -> Optional[EstimateResult]:
        return self._last_estimate

    def start(self) -> None:
        with self._lock:
            if self._running or self._closed:
                return
            self._settings = self._load_settings()
            self._history_store.max_size = self._settings.max_history_size
            self._last_state = ShakeState.idle()
            self._detector.reset()
            self._detector.add_listener(self._handle_shake_state)
            self._detector.start_monitoring()
            self._start_sensor()
            self._running = True
            logger.info("session started in %s mode", self._settings.selected_mode.value)

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._safe_stop_sensor()
            self._detector.stop_monitoring()
            self._detector.remove_listener(self._handle_shake_state)
            logger.info("session stopped")

    def close(self) -> None:
        self.stop()
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def replace_sensor(self, sensor: Optional[SensorSource]) -> None:
        with self._lock:
            if self._running:
                self._safe_stop_sensor()
            self._sensor = sensor
            self._detector.reset()
            self._last_state = ShakeState.idle()
            if self._running:
                self._start_sensor()

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every write queued so far has finished."""
        with self._lock:
            if self._closed:
                return
            future = self._executor.submit(lambda: None)
        future.result(timeout=timeout)

    def set_mode(self, mode: EstimateMode) -> Future:
        with self._lock:
            if self._closed:
                return self._closed_future("set mode")
            self._settings = dataclasses.replace(self._settings, selected_mode=mode)
            future = self._submit("save settings", self._settings_store.save, self._settings)
        logger.info("mode set to %s", mode.value)
        return future

    def set_max_history_size(self, size: int) -> Future:
        with self._lock:
            if self._closed:
                return self._closed_future("set history size")
            self._settings = dataclasses.replace(self._settings, max_history_size=size)
            self._history_store.max_size = size
            return self._submit("save settings", self._settings_store.save, self._settings)

    def history(self, limit: int = 10) -> List[EstimateResult]:
        return self._history_store.query(limit)

    def clear_history(self) -> Future:
        with self._lock:
            if self._closed:
                return self._closed_future("clear history")
            return self._submit("clear history", self._history_store.clear)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _handle_shake_state(self, state: ShakeState) -> None:
        previous = self._last_state
        self._last_state = state
        if self._on_shake:
            self._on_shake(state)
        if previous.is_active and not state.is_active:
            self._complete_shake(previous)

    def _complete_shake(self, shake: ShakeState) -> None:
        result = self._estimator.generate(shake.intensity, shake.duration_s, self._settings.selected_mode)
        self._last_estimate = result
        self._submit("save estimate", self._history_store.append, result)
        self._detector.reset()
        self._last_state = ShakeState.idle()
        logger.info(
            "estimate %r (%s, intensity %.2f, %.1fs)",
            result.text,
            result.mode.value,
            result.intensity,
            result.duration_s,
        )
        if self._on_estimate:
            self._on_estimate(result)

    def _load_settings(self) -> AppSettings:
        try:
            return self._settings_store.load()
        except Exception as exc:
            logger.exception("loading settings failed")
            self._emit_error(SETTINGS_LOAD_FAILED, str(exc))
            return AppSettings()

    def _start_sensor(self) -> None:
        if self._sensor is None:
            return
        if not self._sensor.is_supported:
            logger.warning("sensor %s is not supported here", type(self._sensor).__name__)
            self._emit_error(SENSOR_UNAVAILABLE, ERROR_MESSAGES[SENSOR_UNAVAILABLE])
            return
        try:
            self._sensor.start(self._detector.process_sample)
        except Exception as exc:
            logger.exception("starting sensor failed")
            self._emit_error(SENSOR_FAILED, str(exc))

    def _safe_stop_sensor(self) -> None:
        if self._sensor is None:
            return
        try:
            self._sensor.stop()
        except Exception:
            logger.exception("stopping sensor failed")

    def _submit(self, description: str, fn: Callable[..., Any], *args: Any) -> Future:
        return self._executor.submit(self._run_persistence, description, fn, *args)

    def _closed_future(self, description: str) -> Future:
        logger.warning("%s ignored: session coordinator is closed", description)
        future: Future = Future()
        future.set_result(None)
        return future

    def _run_persistence(self, description: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except Exception as exc:
            logger.exception("%s failed", description)
            self._emit_error(PERSISTENCE_FAILED, f"{description}: {exc}")
            return None

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)
