from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .activity_engine import ActivityEngine
from .geometry_core import ActivityId, Outcome, SettlementEvent
from .ledger import LedgerSnapshot


@dataclass(frozen=True, slots=True)
class ActivityResult:
    """Summary of every problem settled in one activity this session."""

    activity: ActivityId
    title: str
    settled: int
    correct: int
    exhausted: int
    expired: int
    points: int
    completed: bool
    mean_elapsed_s: float | None

    @property
    def accuracy(self) -> float:
        return 0.0 if self.settled == 0 else self.correct / self.settled


@dataclass(frozen=True, slots=True)
class SessionReport:
    score: int
    progress_percent: int
    activities: tuple[ActivityResult, ...]

    def lines(self) -> list[str]:
        out = [f"Final Score: {self.score}", f"Progress: {self.progress_percent}%", ""]
        for r in self.activities:
            mark = "done" if r.completed else "open"
            line = f"{r.title}: {r.correct}/{r.settled} correct ({r.accuracy:.0%}), {r.points} pts ({mark})"
            if r.mean_elapsed_s is not None:
                line += f", avg {r.mean_elapsed_s:.0f}s"
            out.append(line)
        return out


def activity_result_from_engine(engine: ActivityEngine, *, completed: bool) -> ActivityResult:
    return activity_result_from_events(
        engine.events(),
        activity=engine.activity,
        title=engine.config.title,
        completed=completed,
    )


def activity_result_from_events(
    events: Iterable[SettlementEvent],
    *,
    activity: ActivityId,
    title: str,
    completed: bool,
) -> ActivityResult:
    evs = [e for e in events if e.activity is activity]
    elapsed = [e.elapsed_s for e in evs]
    return ActivityResult(
        activity=activity,
        title=title,
        settled=len(evs),
        correct=sum(1 for e in evs if e.outcome is Outcome.CORRECT),
        exhausted=sum(1 for e in evs if e.outcome is Outcome.INCORRECT_EXHAUSTED),
        expired=sum(1 for e in evs if e.outcome is Outcome.EXPIRED),
        points=sum(e.points for e in evs),
        completed=completed,
        mean_elapsed_s=None if not elapsed else sum(elapsed) / len(elapsed),
    )


def session_report(engines: Iterable[ActivityEngine], ledger: LedgerSnapshot) -> SessionReport:
    results = tuple(
        activity_result_from_engine(e, completed=e.activity in ledger.completed_activities)
        for e in engines
    )
    return SessionReport(
        score=ledger.score,
        progress_percent=ledger.progress_percent,
        activities=results,
    )
