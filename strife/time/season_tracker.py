"""Calendar driving the daily conflict loop and its seasonal appetite for war."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class SeasonProfile:
    """A named season and how strongly it encourages fighting."""

    name: str
    conflict_multiplier: float = 1.0


DEFAULT_SEASONS: tuple[SeasonProfile, ...] = (
    SeasonProfile("spring"),
    SeasonProfile("summer", conflict_multiplier=1.1),
    SeasonProfile("autumn"),
    SeasonProfile("winter", conflict_multiplier=0.7),
)


class SeasonTracker:
    """Simulation clock cycling through a fixed list of seasons.

    Every subsystem reads :attr:`current_day` from the tracker and the day
    engine advances it once all phases of a day have run. Seasons last
    ``days_per_season`` days each and repeat in key order.
    """

    def __init__(
        self,
        *,
        seasons: Mapping[int, SeasonProfile] | None = None,
        days_per_season: int = 30,
        starting_day: int = 0,
    ) -> None:
        if days_per_season <= 0:
            raise ValueError("days_per_season must be positive")
        if starting_day < 0:
            raise ValueError("starting_day must be non-negative")

        self.days_per_season = days_per_season
        self._day = starting_day
        if seasons:
            self._cycle = tuple(seasons[key] for key in sorted(seasons))
        else:
            self._cycle = DEFAULT_SEASONS

    @property
    def current_day(self) -> int:
        return self._day

    def advance_day(self) -> None:
        self._day += 1

    @property
    def season_index(self) -> int:
        return (self._day // self.days_per_season) % len(self._cycle)

    @property
    def current_season(self) -> SeasonProfile:
        return self._cycle[self.season_index]

    def conflict_modifier(self) -> float:
        return self.current_season.conflict_multiplier

    def days_until_next_season(self) -> int:
        """Days left in the current season, today included."""

        return self.days_per_season - self._day % self.days_per_season


@dataclass(frozen=True)
class FixedSeason:
    """Seasonal provider with a constant modifier, for tests and embedding."""

    multiplier: float = 1.0

    def conflict_modifier(self) -> float:
        return self.multiplier


__all__ = ["DEFAULT_SEASONS", "FixedSeason", "SeasonProfile", "SeasonTracker"]
