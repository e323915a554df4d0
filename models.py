"""Core data models for the app."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class EstimateMode(str, Enum):
    WORK = "work"
    GENERIC = "generic"
    HUMOROUS = "humorous"

    @classmethod
    def user_selectable(cls) -> tuple[EstimateMode, ...]:
        return (cls.WORK, cls.GENERIC)


@dataclass(frozen=True)
class AccelerationSample:
    """One tri-axial reading in g-units (1g = 9.8 m/s^2)."""

    x: float
    y: float
    z: float

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


@dataclass(frozen=True)
class ShakeState:
    is_active: bool = False
    intensity: float = 0.0
    duration_s: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.intensity <= 1.0:
            raise ValueError(f"intensity must be within [0.0, 1.0], got {self.intensity}")
        if not (math.isfinite(self.duration_s) and self.duration_s >= 0):
            raise ValueError(f"duration_s must be a finite non-negative number, got {self.duration_s}")
        if not self.is_active and self.intensity != 0.0:
            raise ValueError("an inactive shake state must have zero intensity")

    @classmethod
    def idle(cls) -> ShakeState:
        return cls()


@dataclass(frozen=True)
class EstimateResult:
    text: str
    mode: EstimateMode
    intensity: float
    duration_s: float
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError("estimate text must be a non-empty string")
        if not isinstance(self.mode, EstimateMode):
            raise TypeError(f"mode must be an EstimateMode, got {self.mode!r}")
        if not 0.0 <= self.intensity <= 1.0:
            raise ValueError(f"intensity must be within [0.0, 1.0], got {self.intensity}")
        if not (math.isfinite(self.duration_s) and self.duration_s >= 0):
            raise ValueError(f"duration_s must be a finite non-negative number, got {self.duration_s}")
        if self.timestamp.tzinfo is None or self.timestamp.utcoffset() is None:
            raise ValueError("timestamp must be timezone-aware")

    @classmethod
    def create(
        cls,
        text: str,
        mode: EstimateMode,
        intensity: float,
        duration_s: float,
    ) -> EstimateResult:
        return cls(text=text, mode=mode, intensity=intensity, duration_s=duration_s)


@dataclass(frozen=True)
class AppSettings:
    selected_mode: EstimateMode = EstimateMode.WORK
    max_history_size: int = 10

    def __post_init__(self) -> None:
        if self.selected_mode not in EstimateMode.user_selectable():
            raise ValueError(f"{self.selected_mode!r} cannot be selected as a mode")
        if isinstance(self.max_history_size, bool) or not isinstance(self.max_history_size, int):
            raise TypeError("max_history_size must be an int")
        if self.max_history_size <= 0:
            raise ValueError(f"max_history_size must be positive, got {self.max_history_size}")
