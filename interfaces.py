"""Protocol interfaces used by SessionCoordinator."""

from __future__ import annotations

from typing import Callable, Protocol

from models import AccelerationSample, AppSettings, EstimateMode, EstimateResult


class SensorSource(Protocol):
    @property
    def is_supported(self) -> bool: ...

    def start(self, on_reading: Callable[[AccelerationSample], None]) -> None: ...

    def stop(self) -> None: ...


class EstimateGenerator(Protocol):
    def generate(self, intensity: float, duration_s: float, mode: EstimateMode) -> EstimateResult: ...


class SettingsStore(Protocol):
    def load(self) -> AppSettings: ...

    def save(self, settings: AppSettings) -> None: ...


class HistoryStore(Protocol):
    max_size: int

    def append(self, result: EstimateResult) -> None: ...

    def query(self, limit: int = 10) -> list[EstimateResult]: ...

    def clear(self) -> None: ...

    def count(self) -> int: ...
