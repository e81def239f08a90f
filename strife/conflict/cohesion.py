"""Tracks coalition members that contribute far less than their allies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping

import polars as pl

from ..events.notifications import CohesionComplaint
from ..world.config import CohesionSettings
from ..world.services import NotificationSink, NullSink, RelationService
from .models import Conflict

_SNAPSHOT_SCHEMA = {
    "conflict_id": pl.Int64,
    "side": pl.Int64,
    "settlement": pl.String,
    "slack_days": pl.Int64,
    "complained": pl.Boolean,
}


@dataclass(slots=True)
class SlackRecord:
    slack_days: int = 0
    complained: bool = False


class CohesionMonitor:
    """Counts consecutive days each member lags behind its side's average.

    A member whose streak passes ``grace_days`` (and has not yet run beyond
    ``max_penalty_days``) is complained about once: its standing with every
    other member of the side drops and a :class:`CohesionComplaint` is emitted.
    Recovering above the slack line clears the streak.
    """

    def __init__(
        self,
        relations: RelationService,
        *,
        sink: NotificationSink | None = None,
        settings: CohesionSettings | None = None,
    ) -> None:
        self.relations = relations
        self.sink = sink or NullSink()
        self.settings = settings or CohesionSettings()
        self._records: Dict[tuple[int, int, str], SlackRecord] = {}

    def observe(
        self,
        conflict: Conflict,
        side_index: int,
        scores: Mapping[str, float],
        day: int,
    ) -> List[CohesionComplaint]:
        if not scores:
            return []
        settings = self.settings
        average = sum(scores.values()) / len(scores)
        slack_line = average * settings.slack_ratio
        complaints: List[CohesionComplaint] = []
        for member in sorted(scores):
            key = (conflict.identifier, side_index, member)
            record = self._records.setdefault(key, SlackRecord())
            if scores[member] >= slack_line:
                record.slack_days = 0
                record.complained = False
                continue
            record.slack_days = min(settings.counter_cap, record.slack_days + 1)
            if record.complained:
                continue
            if settings.grace_days < record.slack_days <= settings.max_penalty_days:
                allies = tuple(other for other in sorted(scores) if other != member)
                for ally in allies:
                    self.relations.adjust(member, ally, -settings.relation_penalty)
                record.complained = True
                complaint = CohesionComplaint(
                    day=day,
                    conflict_id=conflict.identifier,
                    side=side_index,
                    member=member,
                    slack_days=record.slack_days,
                    complainants=allies,
                )
                self.sink.emit(complaint)
                complaints.append(complaint)
        return complaints

    def slack_days(self, conflict_id: int, side_index: int, member: str) -> int:
        record = self._records.get((conflict_id, side_index, member))
        return record.slack_days if record is not None else 0

    def forget(self, conflict_id: int) -> int:
        """Discard every record belonging to ``conflict_id``."""

        doomed = [key for key in self._records if key[0] == conflict_id]
        for key in doomed:
            del self._records[key]
        return len(doomed)

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> pl.DataFrame:
        rows = [
            {
                "conflict_id": key[0],
                "side": key[1],
                "settlement": key[2],
                "slack_days": record.slack_days,
                "complained": record.complained,
            }
            for key, record in sorted(self._records.items())
        ]
        return pl.DataFrame(rows, schema=_SNAPSHOT_SCHEMA)


__all__ = ["CohesionMonitor", "SlackRecord"]
