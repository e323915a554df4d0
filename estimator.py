"""Maps a finished shake to a randomly drawn time estimate."""

from __future__ import annotations

import logging
import secrets
from typing import Optional, Sequence

from estimate_pools import DEFAULT_POOLS, EstimatePools
from models import EstimateMode, EstimateResult

logger = logging.getLogger(__name__)

EASTER_EGG_DURATION_S = 15.0
HARD_SHAKE_INTENSITY = 0.5


def effective_mode(duration_s: float, mode: EstimateMode) -> EstimateMode:
    """Shaking for longer than 15 seconds always yields a humorous estimate."""
    if duration_s > EASTER_EGG_DURATION_S:
        return EstimateMode.HUMOROUS
    return mode


def secure_choice(pool: Sequence[str]) -> str:
    if not pool:
        raise ValueError("cannot draw an estimate from an empty pool")
    return pool[secrets.randbelow(len(pool))]


class EstimateSelector:
    """Stateless apart from the immutable pools, so safe to share across threads."""

    def __init__(self, pools: Optional[EstimatePools] = None) -> None:
        self._pools = pools or DEFAULT_POOLS

    @property
    def pools(self) -> EstimatePools:
        return self._pools

    def pool_for(self, intensity: float, duration_s: float, mode: EstimateMode) -> tuple[EstimateMode, Sequence[str]]:
        if not isinstance(mode, EstimateMode):
            raise ValueError(f"unknown estimate mode: {mode!r}")
        used = effective_mode(duration_s, mode)
        if used == EstimateMode.HUMOROUS:
            return used, self._pools.humorous
        gentle, hard = self._pools.tiers(used)
        return used, (gentle if intensity < HARD_SHAKE_INTENSITY else hard)

    def generate(self, intensity: float, duration_s: float, mode: EstimateMode) -> EstimateResult:
        used, pool = self.pool_for(intensity, duration_s, mode)
        text = secure_choice(pool)
        if used != mode:
            logger.debug("shake of %.1fs switched %s to %s", duration_s, mode.value, used.value)
        return EstimateResult.create(text, used, intensity, duration_s)
