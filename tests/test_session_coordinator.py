from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest

from config import JsonSettingsStore
from errors import PERSISTENCE_FAILED, SENSOR_FAILED, SENSOR_UNAVAILABLE, SETTINGS_LOAD_FAILED
from estimate_pools import DEFAULT_POOLS
from estimator import EstimateSelector
from history import SqliteHistoryStore
from models import AccelerationSample, AppSettings, EstimateMode, EstimateResult, ShakeState
from session_coordinator import SessionCoordinator
from shake_detector import ShakeDetector


class FakeDetector:
    def __init__(self) -> None:
        self.listeners: list[Callable[[ShakeState], None]] = []
        self.monitoring = False
        self.reset_calls = 0
        self.samples: list[AccelerationSample] = []

    def add_listener(self, listener) -> None:  # noqa: ANN001
        self.listeners.append(listener)

    def remove_listener(self, listener) -> None:  # noqa: ANN001
        self.listeners.remove(listener)

    def start_monitoring(self) -> None:
        self.monitoring = True

    def stop_monitoring(self) -> None:
        self.monitoring = False

    def reset(self) -> None:
        self.reset_calls += 1

    def process_sample(self, sample: AccelerationSample) -> None:
        self.samples.append(sample)

    def publish(self, state: ShakeState) -> None:
        for listener in list(self.listeners):
            listener(state)


class FakeEstimator:
    def __init__(self) -> None:
        self.calls: list[tuple[float, float, EstimateMode]] = []

    def generate(self, intensity: float, duration_s: float, mode: EstimateMode) -> EstimateResult:
        self.calls.append((intensity, duration_s, mode))
        return EstimateResult.create("2 weeks", mode, intensity, duration_s)


class FakeSettingsStore:
    def __init__(self, settings: Optional[AppSettings] = None, fail_load: bool = False) -> None:
        self.settings = settings or AppSettings()
        self.fail_load = fail_load
        self.saved: list[AppSettings] = []

    def load(self) -> AppSettings:
        if self.fail_load:
            raise OSError("disk on fire")
        return self.settings

    def save(self, settings: AppSettings) -> None:
        self.saved.append(settings)
        self.settings = settings


class FakeHistoryStore:
    def __init__(self, fail: bool = False) -> None:
        self.max_size = 10
        self.fail = fail
        self.items: list[EstimateResult] = []

    def append(self, result: EstimateResult) -> None:
        if self.fail:
            raise OSError("database is locked")
        self.items.append(result)

    def query(self, limit: int = 10) -> list[EstimateResult]:
        return list(reversed(self.items))[: max(limit, 0)]

    def clear(self) -> None:
        self.items.clear()

    def count(self) -> int:
        return len(self.items)


class FakeSensor:
    def __init__(self, supported: bool = True, fail_start: bool = False) -> None:
        self.supported = supported
        self.fail_start = fail_start
        self.on_reading = None
        self.started = False
        self.stopped = False

    @property
    def is_supported(self) -> bool:
        return self.supported

    def start(self, on_reading) -> None:  # noqa: ANN001
        if self.fail_start:
            raise RuntimeError("no accelerometer")
        self.started = True
        self.on_reading = on_reading

    def stop(self) -> None:
        self.stopped = True

    def emit(self, x: float, y: float, z: float) -> None:
        assert self.on_reading is not None
        self.on_reading(AccelerationSample(x, y, z))


def active(intensity: float, duration_s: float) -> ShakeState:
    return ShakeState(is_active=True, intensity=intensity, duration_s=duration_s)


def make_coordinator(**kwargs):  # noqa: ANN003, ANN201
    detector = kwargs.pop("detector", FakeDetector())
    estimator = kwargs.pop("estimator", FakeEstimator())
    settings_store = kwargs.pop("settings_store", FakeSettingsStore())
    history_store = kwargs.pop("history_store", FakeHistoryStore())
    coordinator = SessionCoordinator(
        detector=detector,
        estimator=estimator,
        settings_store=settings_store,
        history_store=history_store,
        **kwargs,
    )
    return coordinator, detector, estimator, settings_store, history_store


def test_falling_edge_generates_once_from_last_active_state() -> None:
    estimates: list[EstimateResult] = []
    coordinator, detector, estimator, _, history = make_coordinator(on_estimate=estimates.append)
    coordinator.start()

    detector.publish(active(0.5, 1.0))
    detector.publish(active(0.6, 2.0))
    detector.publish(ShakeState.idle())
    coordinator.close()

    assert estimator.calls == [(0.6, 2.0, EstimateMode.WORK)]
    assert detector.reset_calls >= 1
    assert len(estimates) == 1
    assert history.items == estimates
    assert coordinator.last_estimate == estimates[0]


def test_no_edge_means_no_estimate() -> None:
    coordinator, detector, estimator, _, _ = make_coordinator()
    coordinator.start()

    detector.publish(ShakeState.idle())
    detector.publish(active(0.4, 0.0))
    detector.publish(active(0.9, 0.5))
    coordinator.close()

    assert estimator.calls == []


def test_each_episode_yields_one_estimate() -> None:
    coordinator, detector, estimator, _, history = make_coordinator()
    coordinator.start()

    for intensity in (0.4, 0.8):
        detector.publish(active(intensity, 1.0))
        detector.publish(ShakeState.idle())
        detector.publish(ShakeState.idle())
    coordinator.close()

    assert [c[0] for c in estimator.calls] == [0.4, 0.8]
    assert history.count() == 2


def test_loaded_mode_is_used() -> None:
    settings = FakeSettingsStore(AppSettings(selected_mode=EstimateMode.GENERIC, max_history_size=3))
    coordinator, detector, estimator, _, history = make_coordinator(settings_store=settings)
    coordinator.start()

    assert coordinator.selected_mode == EstimateMode.GENERIC
    assert history.max_size == 3

    detector.publish(active(0.2, 0.3))
    detector.publish(ShakeState.idle())
    coordinator.close()

    assert estimator.calls[0][2] == EstimateMode.GENERIC


def test_set_mode_persists_and_applies() -> None:
    coordinator, detector, estimator, settings, _ = make_coordinator()
    coordinator.start()

    coordinator.set_mode(EstimateMode.GENERIC).result(timeout=2)
    detector.publish(active(0.7, 1.0))
    detector.publish(ShakeState.idle())
    coordinator.close()

    assert settings.saved == [AppSettings(selected_mode=EstimateMode.GENERIC, max_history_size=10)]
    assert estimator.calls[0][2] == EstimateMode.GENERIC


def test_humorous_cannot_be_selected() -> None:
    coordinator, _, _, settings, _ = make_coordinator()
    coordinator.start()

    with pytest.raises(ValueError):
        coordinator.set_mode(EstimateMode.HUMOROUS)

    coordinator.close()
    assert coordinator.selected_mode == EstimateMode.WORK
    assert settings.saved == []


def test_set_max_history_size_updates_store() -> None:
    coordinator, _, _, settings, history = make_coordinator()
    coordinator.start()

    coordinator.set_max_history_size(4)
    coordinator.flush(timeout=2)

    assert history.max_size == 4
    assert settings.saved[-1].max_history_size == 4

    with pytest.raises(ValueError):
        coordinator.set_max_history_size(0)
    assert history.max_size == 4
    coordinator.close()


def test_history_failure_is_reported_and_pipeline_continues() -> None:
    errors: list[tuple[str, str]] = []
    history = FakeHistoryStore(fail=True)
    coordinator, detector, estimator, _, _ = make_coordinator(
        history_store=history,
        on_error=lambda c, m: errors.append((c, m)),
    )
    coordinator.start()

    detector.publish(active(0.5, 1.0))
    detector.publish(ShakeState.idle())
    coordinator.flush(timeout=2)

    history.fail = False
    detector.publish(active(0.9, 1.0))
    detector.publish(ShakeState.idle())
    coordinator.close()

    assert len(estimator.calls) == 2
    assert history.count() == 1
    assert [code for code, _ in errors] == [PERSISTENCE_FAILED]


def test_settings_load_failure_falls_back_to_defaults() -> None:
    errors: list[tuple[str, str]] = []
    coordinator, _, _, _, _ = make_coordinator(
        settings_store=FakeSettingsStore(fail_load=True),
        on_error=lambda c, m: errors.append((c, m)),
    )
    coordinator.start()
    coordinator.close()

    assert coordinator.settings == AppSettings()
    assert errors[0][0] == SETTINGS_LOAD_FAILED


def test_unsupported_sensor_is_reported_but_not_fatal() -> None:
    errors: list[tuple[str, str]] = []
    sensor = FakeSensor(supported=False)
    coordinator, _, _, _, _ = make_coordinator(sensor=sensor, on_error=lambda c, m: errors.append((c, m)))

    coordinator.start()

    assert coordinator.running is True
    assert sensor.started is False
    assert errors[0][0] == SENSOR_UNAVAILABLE
    coordinator.close()


def test_sensor_start_failure_is_reported() -> None:
    errors: list[tuple[str, str]] = []
    sensor = FakeSensor(fail_start=True)
    coordinator, _, _, _, _ = make_coordinator(sensor=sensor, on_error=lambda c, m: errors.append((c, m)))

    coordinator.start()

    assert errors == [(SENSOR_FAILED, "no accelerometer")]
    coordinator.close()


def test_start_stop_idempotent() -> None:
    sensor = FakeSensor()
    coordinator, detector, _, _, _ = make_coordinator(sensor=sensor)

    coordinator.start()
    coordinator.start()
    assert len(detector.listeners) == 1
    assert detector.monitoring is True

    coordinator.stop()
    coordinator.stop()
    assert detector.listeners == []
    assert detector.monitoring is False
    assert sensor.stopped is True
    coordinator.close()


def test_sensor_readings_reach_detector() -> None:
    sensor = FakeSensor()
    coordinator, detector, _, _, _ = make_coordinator(sensor=sensor)
    coordinator.start()

    sensor.emit(0.0, 0.0, 1.0)

    assert detector.samples == [AccelerationSample(0.0, 0.0, 1.0)]
    coordinator.close()


def test_replace_sensor_swaps_sources() -> None:
    old, new = FakeSensor(), FakeSensor()
    coordinator, _, _, _, _ = make_coordinator(sensor=old)
    coordinator.start()

    coordinator.replace_sensor(new)

    assert old.stopped is True
    assert new.started is True
    coordinator.close()


def test_clear_history_runs_after_pending_writes() -> None:
    coordinator, detector, _, _, history = make_coordinator()
    coordinator.start()

    detector.publish(active(0.5, 1.0))
    detector.publish(ShakeState.idle())
    coordinator.clear_history().result(timeout=2)

    assert coordinator.history() == []
    coordinator.close()


def test_changes_after_close_are_ignored() -> None:
    coordinator, detector, _, settings, history = make_coordinator()
    coordinator.start()
    detector.publish(active(0.5, 1.0))
    detector.publish(ShakeState.idle())
    coordinator.close()

    assert coordinator.set_mode(EstimateMode.GENERIC).result(timeout=2) is None
    assert coordinator.set_max_history_size(3).result(timeout=2) is None
    assert coordinator.clear_history().result(timeout=2) is None
    coordinator.flush(timeout=2)

    assert coordinator.selected_mode == EstimateMode.WORK
    assert history.max_size == 10
    assert history.count() == 1
    assert settings.saved == []


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_long_shake_end_to_end(tmp_path: Path) -> None:
    clock = FakeClock()
    sensor = FakeSensor()
    history = SqliteHistoryStore(tmp_path / "history.db")
    coordinator = SessionCoordinator(
        detector=ShakeDetector(clock=clock),
        estimator=EstimateSelector(),
        settings_store=JsonSettingsStore(tmp_path / "settings.json"),
        history_store=history,
        sensor=sensor,
    )
    coordinator.start()

    sensor.emit(0.0, 0.0, 1.0)
    for step in range(18):
        clock.now = float(step)
        sensor.emit(4.0, 0.0, 1.0)
    sensor.emit(0.0, 0.0, 1.0)
    coordinator.close()

    results = history.query(10)
    assert len(results) == 1
    assert results[0].mode == EstimateMode.HUMOROUS
    assert results[0].duration_s == 17.0
    assert results[0].text in DEFAULT_POOLS.humorous
    history.close()


def test_short_hard_shake_end_to_end(tmp_path: Path) -> None:
    clock = FakeClock()
    sensor = FakeSensor()
    history = SqliteHistoryStore(tmp_path / "history.db")
    coordinator = SessionCoordinator(
        detector=ShakeDetector(clock=clock),
        estimator=EstimateSelector(),
        settings_store=JsonSettingsStore(tmp_path / "settings.json"),
        history_store=history,
        sensor=sensor,
    )
    coordinator.start()

    sensor.emit(5.0, 0.0, 1.0)
    clock.now = 1.5
    sensor.emit(5.0, 0.0, 1.0)
    sensor.emit(0.0, 0.0, 1.0)
    coordinator.close()

    (result,) = history.query(10)
    assert result.mode == EstimateMode.WORK
    assert result.intensity == 1.0
    assert result.duration_s == 1.5
    assert result.text in DEFAULT_POOLS.work_hard
    history.close()
