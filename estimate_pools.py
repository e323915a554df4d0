"""Estimate catalogs, keyed by mode and split by shake strength.

Work and Generic each carry a gentle pool (narrow, conservative range) and a
hard pool (wide range, optimistic through pessimistic). Humorous has a single
pool and is only reached by shaking for a long time.
"""

from __future__ import annotations

from dataclasses import dataclass

from models import EstimateMode

Pool = tuple[str, ...]


@dataclass(frozen=True)
class EstimatePools:
    work_gentle: Pool
    work_hard: Pool
    generic_gentle: Pool
    generic_hard: Pool
    humorous: Pool

    def __post_init__(self) -> None:
        for name in ("work_gentle", "work_hard", "generic_gentle", "generic_hard", "humorous"):
            pool = tuple(getattr(self, name))
            if not pool:
                raise ValueError(f"estimate pool {name!r} is empty")
            for entry in pool:
                if not isinstance(entry, str) or not entry.strip():
                    raise ValueError(f"estimate pool {name!r} contains a blank entry")
            object.__setattr__(self, name, pool)

    def tiers(self, mode: EstimateMode) -> tuple[Pool, Pool]:
        """Return ``(gentle, hard)`` for a user-selectable mode."""
        if mode == EstimateMode.WORK:
            return self.work_gentle, self.work_hard
        if mode == EstimateMode.GENERIC:
            return self.generic_gentle, self.generic_hard
        raise ValueError(f"mode {mode!r} has no intensity tiers")


DEFAULT_POOLS = EstimatePools(
    work_gentle=(
        "2 hours", "4 hours", "1 day", "2 days", "3 days", "5 days",
        "1 week", "3 hours", "6 hours", "1.5 days", "4 days", "6 days",
        "1.5 weeks", "2.5 hours", "5 hours", "1.5 hours", "3.5 days", "4.5 days",
        "2 weeks", "7 hours", "8 hours", "1.25 days", "2.5 days", "5.5 days",
        "10 days", "90 minutes", "150 minutes", "2.75 days", "3.25 days", "8 days",
        "12 days", "3.5 hours", "5.5 hours", "1.75 days", "2.25 days",
    ),
    work_hard=(
        "15 minutes", "30 minutes", "1 hour", "2 hours", "1 day", "3 days",
        "1 week", "2 weeks", "1 month", "3 months", "6 months", "1 year",
        "20 minutes", "45 minutes", "90 minutes", "3 hours", "2 days", "4 days",
        "10 days", "3 weeks", "6 weeks", "2 months", "4 months", "8 months",
        "25 minutes", "40 minutes", "75 minutes", "4 hours", "5 days", "1.5 weeks",
        "4 weeks", "5 weeks", "1.5 months", "2.5 months", "5 months", "9 months",
        "10 minutes", "35 minutes", "50 minutes", "2.5 hours", "6 days", "8 days",
        "9 days", "12 days", "7 days", "1.25 months", "1.75 months", "3.5 months",
        "7 months", "10 months", "14 months", "18 months", "2 years", "55 minutes",
        "65 minutes", "100 minutes", "120 minutes", "11 days", "13 days",
    ),
    generic_gentle=(
        "1 minute", "5 minutes", "10 minutes", "15 minutes", "30 minutes", "1 hour",
        "2 hours", "3 hours", "2 minutes", "7 minutes", "12 minutes", "20 minutes",
        "45 minutes", "90 minutes", "2.5 hours", "4 hours", "3 minutes", "8 minutes",
        "18 minutes", "25 minutes", "40 minutes", "75 minutes", "3.5 hours", "5 hours",
        "4 minutes", "6 minutes", "9 minutes", "22 minutes", "35 minutes", "50 minutes",
        "4.5 hours", "6 hours", "11 minutes", "13 minutes", "16 minutes", "28 minutes",
        "55 minutes", "65 minutes", "5.5 hours", "7 hours",
    ),
    generic_hard=(
        "30 seconds", "1 minute", "5 minutes", "15 minutes", "30 minutes", "1 hour",
        "2 hours", "6 hours", "12 hours", "1 day", "3 days", "1 week",
        "2 weeks", "1 month", "45 seconds", "2 minutes", "7 minutes", "20 minutes",
        "45 minutes", "90 minutes", "3 hours", "8 hours", "18 hours", "2 days",
        "4 days", "10 days", "3 weeks", "6 weeks", "2 months", "1 minute 30 seconds",
        "3 minutes", "10 minutes", "25 minutes", "50 minutes", "75 minutes", "4 hours",
        "9 hours", "15 hours", "1.5 days", "5 days", "8 days", "12 days",
        "4 weeks", "2.5 months", "20 seconds", "40 seconds", "4 minutes", "12 minutes",
        "35 minutes", "55 minutes", "5 hours", "7 hours", "10 hours", "20 hours",
        "2.5 days", "6 days", "9 days", "11 days", "5 weeks", "3 months",
        "15 seconds", "50 seconds", "6 minutes", "8 minutes", "14 minutes", "40 minutes",
        "100 minutes", "120 minutes", "11 hours", "16 hours", "22 hours", "3.5 days",
        "7 days", "14 days", "3.5 weeks",
    ),
    humorous=(
        "5 minutes", "tomorrow", "eventually", "next quarter",
        "when hell freezes over", "3 lifetimes", "Tuesday", "never",
        "your retirement", "when pigs fly", "next decade", "in another life",
        "ask again later", "two Tuesdays from now", "sometime this century",
        "after the heat death of the universe", "once you've learned Haskell",
        "when JavaScript makes sense", "next month maybe", "before the next ice age",
        "in a parallel universe", "when I feel like it", "after lunch", "probably never",
        "when the stars align", "in your dreams", "next sprint (we promise)",
        "when the backlog is empty", "after code review", "when tests pass",
        "when dependencies update themselves", "real soon now",
        "two weeks (famous last words)", "when management understands agile",
        "after the rewrite", "when the bugs fix themselves", "in production (maybe)",
        "after coffee", "when the wifi works", "next year for sure", "in the year 2525",
        "when documentation is up to date", "after we migrate to the cloud",
        "eventually (probably)", "when the build is green", "after the standup",
    ),
)
