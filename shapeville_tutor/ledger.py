from __future__ import annotations

import logging
from dataclasses import dataclass

from .geometry_core import ActivityId, round_half_up

logger = logging.getLogger(__name__)

ACTIVITY_COUNT = len(ActivityId)


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    score: int
    progress_percent: int
    completed_activities: frozenset[ActivityId]


class SessionLedger:
    """Aggregate score and completed activities for one process lifetime.

    This is the single source of truth read by the presentation layer. Each
    activity engine receives the same ledger instance and reports settlement
    through ``award`` and ``mark_complete``; nothing else mutates it.
    """

    def __init__(self) -> None:
        self._score = 0
        self._completed: set[ActivityId] = set()
        self._progress_percent = 0

    @property
    def score(self) -> int:
        return self._score

    @property
    def progress_percent(self) -> int:
        return self._progress_percent

    def is_complete(self, activity: ActivityId) -> bool:
        return ActivityId(activity) in self._completed

    def award(self, points: int) -> int:
        """Add points to the score. Returns the new score."""

        points = int(points)
        if points < 0:
            raise ValueError("points must be >= 0")
        self._score += points
        return self._score

    def mark_complete(self, activity: ActivityId) -> bool:
        """Record a completed activity. Returns True only the first time."""

        activity = ActivityId(activity)
        if activity in self._completed:
            return False
        self._completed.add(activity)
        self._progress_percent = round_half_up(len(self._completed) / ACTIVITY_COUNT * 100)
        logger.info(
            "activity %s complete (%d/%d, %d%%)",
            activity.value,
            len(self._completed),
            ACTIVITY_COUNT,
            self._progress_percent,
        )
        return True

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            score=self._score,
            progress_percent=self._progress_percent,
            completed_activities=frozenset(self._completed),
        )
