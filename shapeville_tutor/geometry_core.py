"""Deterministic building blocks shared by every Shapeville activity.

Nothing in here touches pygame or real time. Problems are produced by seeded
generators, countdowns advance only when ``tick()`` is called, and answers
are judged by pure functions, so the whole engine can be driven headlessly
from tests.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

NUMERIC_TOLERANCE = 0.01
DEFAULT_MAX_ATTEMPTS = 3
STANDARD_TIERS: tuple[int, int, int] = (3, 2, 1)
BONUS_TIERS: tuple[int, int, int] = (6, 4, 2)


class ActivityId(StrEnum):
    SHAPE_RECOGNITION = "shape_recognition"
    ANGLE_TYPES = "angle_types"
    POLYGON_AREA = "polygon_area"
    CIRCLE_MEASURE = "circle_measure"
    COMPOSITE_AREA = "composite_area"
    SECTOR_AREA = "sector_area"


class ProblemKind(StrEnum):
    SHAPE_ID = "shape_id"
    ANGLE_TYPE = "angle_type"
    POLYGON_AREA = "polygon_area"
    CIRCLE_MEASURE = "circle_measure"
    COMPOSITE_AREA = "composite_area"
    SECTOR_AREA = "sector_area"


class TaskState(StrEnum):
    IDLE = "idle"
    SELECTING = "selecting"
    IN_PROGRESS = "in_progress"
    SETTLED = "settled"


class Outcome(StrEnum):
    CORRECT = "correct"
    INCORRECT_RETRY = "incorrect_retry"
    INCORRECT_EXHAUSTED = "incorrect_exhausted"
    EXPIRED = "expired"
    ALREADY_COMPLETED = "already_completed"
    INVALID_NUMERIC = "invalid_numeric"
    OUT_OF_RANGE = "out_of_range"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class Problem:
    """One question instance. Immutable; attempt bookkeeping lives in AttemptState."""

    kind: ProblemKind
    item_id: str
    prompt: str
    correct_answer: float | str
    point_tiers: tuple[int, ...]
    time_limit_s: int
    reveal: str
    asset_key: str
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    payload: object | None = None  # optional structured data for UI

    def __post_init__(self) -> None:
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be > 0")
        if len(self.point_tiers) != self.max_attempts:
            raise ValueError("point_tiers must have one entry per attempt")
        if any(p < 0 for p in self.point_tiers):
            raise ValueError("point_tiers must be >= 0")
        if self.time_limit_s <= 0:
            raise ValueError("time_limit_s must be > 0")

    @property
    def is_numeric(self) -> bool:
        return not isinstance(self.correct_answer, str)


@dataclass(slots=True)
class AttemptState:
    remaining_s: int
    attempts_used: int = 0
    settled: bool = False
    outcome: Outcome | None = None
    points: int = 0


@dataclass(slots=True)
class ActivityProgress:
    required_count: int
    completed_item_ids: set[str] = field(default_factory=set)

    @property
    def is_complete(self) -> bool:
        return len(self.completed_item_ids) >= self.required_count

    @property
    def completed_count(self) -> int:
        return len(self.completed_item_ids)

    def add(self, item_id: str) -> None:
        self.completed_item_ids.add(item_id)

    def excluded(self) -> frozenset[str]:
        return frozenset(self.completed_item_ids)


@dataclass(frozen=True, slots=True)
class EnabledControls:
    """Which controls the renderer should enable. Applied as-is, no lookup."""

    answer_entry: bool = False
    submit: bool = False
    reveal: bool = False
    next: bool = False
    choose_angle: bool = False
    modes: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class SettlementEvent:
    index: int
    activity: ActivityId
    item_id: str
    outcome: Outcome
    attempts_used: int
    points: int
    elapsed_s: int


@dataclass(frozen=True, slots=True)
class TaskSnapshot:
    """View model for the UI (pure data)."""

    title: str
    activity: ActivityId
    state: TaskState
    mode: str | None
    prompt: str
    input_hint: str
    asset_key: str | None
    attempts_remaining: int
    max_attempts: int
    time_remaining_s: int | None
    feedback: str
    last_outcome: Outcome | None
    reveal: str | None
    completed_count: int
    required_count: int
    controls: EnabledControls
    payload: object | None = None


class ContentGenerator(Protocol):
    """Deterministic producer of problems for one activity."""

    def begin_run(self) -> None:
        """Called whenever the activity is entered from Idle."""
        ...

    def next_problem(self, *, mode: str | None, excluded: frozenset[str]) -> Problem:
        ...


def parse_numeric(raw: str) -> float | None:
    """Parse a typed number. Returns None for anything that is not a finite number."""

    text = raw.strip()
    if text == "":
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def normalize_label(text: str) -> str:
    return text.strip().lower()


def answers_match(correct: float | str, user: float | str) -> bool:
    """Numeric answers within NUMERIC_TOLERANCE; labels by trimmed, case-insensitive equality."""

    if isinstance(correct, str):
        if not isinstance(user, str):
            return False
        return normalize_label(user) == normalize_label(correct)
    if isinstance(user, str):
        return False
    return abs(float(user) - float(correct)) < NUMERIC_TOLERANCE


class AttemptTracker:
    """Counts attempts against one Problem and decides when it settles."""

    def __init__(self, problem: Problem) -> None:
        self._problem = problem
        self._state = AttemptState(remaining_s=problem.time_limit_s)

    @property
    def problem(self) -> Problem:
        return self._problem

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def attempts_remaining(self) -> int:
        return self._problem.max_attempts - self._state.attempts_used

    def points_for_attempts_used(self, attempts_used: int) -> int:
        return self._problem.point_tiers[attempts_used]

    def record_attempt(self, user_answer: float | str) -> Outcome:
        st = self._state
        if st.settled:
            return Outcome.REJECTED

        if answers_match(self._problem.correct_answer, user_answer):
            st.points = self.points_for_attempts_used(st.attempts_used)
            self._settle(Outcome.CORRECT)
            return Outcome.CORRECT

        st.attempts_used += 1
        if st.attempts_used >= self._problem.max_attempts:
            self._settle(Outcome.INCORRECT_EXHAUSTED)
            return Outcome.INCORRECT_EXHAUSTED
        return Outcome.INCORRECT_RETRY

    def expire(self) -> Outcome:
        if self._state.settled:
            return Outcome.REJECTED
        self._state.remaining_s = 0
        self._settle(Outcome.EXPIRED)
        return Outcome.EXPIRED

    def _settle(self, outcome: Outcome) -> None:
        st = self._state
        st.settled = True
        st.outcome = outcome
        if outcome is not Outcome.CORRECT:
            st.points = 0


class Countdown:
    """Per-problem countdown advanced by explicit one-second ticks.

    ``cancel()`` is idempotent, and ticks delivered after cancellation or
    expiry are ignored, so a late callback can never touch a problem that
    has already settled.
    """

    def __init__(self, seconds: int, *, on_expire: Callable[[], None] | None = None) -> None:
        if seconds <= 0:
            raise ValueError("seconds must be > 0")
        self._remaining_s = int(seconds)
        self._running = True
        self._on_expire = on_expire

    @property
    def remaining_s(self) -> int:
        return self._remaining_s

    @property
    def running(self) -> bool:
        return self._running

    @property
    def expired(self) -> bool:
        return self._remaining_s == 0

    def tick(self) -> bool:
        """Advance one second. Returns True if this tick expired the countdown."""

        if not self._running:
            return False
        self._remaining_s = max(0, self._remaining_s - 1)
        if self._remaining_s > 0:
            return False
        self._running = False
        callback, self._on_expire = self._on_expire, None
        if callback is not None:
            callback()
        return True

    def cancel(self) -> None:
        if self._running:
            logger.debug("countdown cancelled with %ss left", self._remaining_s)
        self._running = False
        self._on_expire = None


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def shuffle(self, items: list[T]) -> None:
        self._rng.shuffle(items)


def round_half_up(x: float) -> int:
    # For consistent educational-style rounding when needed.
    return int(math.floor(x + 0.5))


def format_number(value: float) -> str:
    """Render whole numbers without a trailing .0 (12 rather than 12.0)."""

    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
