from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from .activity_engine import ActivityConfig, ActivityEngine
from .assets import angle_key
from .geometry_core import (
    DEFAULT_MAX_ATTEMPTS,
    STANDARD_TIERS,
    ActivityId,
    EnabledControls,
    Outcome,
    Problem,
    ProblemKind,
    SeededRng,
    TaskState,
    parse_numeric,
)
from .ledger import SessionLedger

ANGLE_STEP_DEG = 10
ANGLE_MAX_DEG = 360
ANGLE_CHOICES: tuple[int, ...] = tuple(range(0, ANGLE_MAX_DEG + 1, ANGLE_STEP_DEG))


class AngleType(StrEnum):
    ACUTE = "Acute"
    RIGHT = "Right"
    OBTUSE = "Obtuse"
    REFLEX = "Reflex"


def classify_angle(degrees: int) -> AngleType:
    if degrees < 90:
        return AngleType.ACUTE
    if degrees == 90:
        return AngleType.RIGHT
    if degrees < 180:
        return AngleType.OBTUSE
    return AngleType.REFLEX


def is_valid_angle(degrees: int) -> bool:
    return 0 <= degrees <= ANGLE_MAX_DEG and degrees % ANGLE_STEP_DEG == 0


@dataclass(frozen=True, slots=True)
class AngleTypesConfig:
    time_limit_s: int = 180
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    tiers: tuple[int, ...] = STANDARD_TIERS


@dataclass(frozen=True, slots=True)
class AngleTypesPayload:
    degrees: int
    chosen_by_learner: bool


class AngleTypesGenerator:
    """Draws a multiple of 10 in [0, 360] whose type is not yet classified."""

    def __init__(self, *, seed: int, config: AngleTypesConfig | None = None) -> None:
        self._rng = SeededRng(seed)
        self._cfg = config or AngleTypesConfig()

    def begin_run(self) -> None:
        return None

    def next_problem(self, *, mode: str | None, excluded: frozenset[str]) -> Problem:
        _ = mode
        eligible = [a for a in ANGLE_CHOICES if classify_angle(a).value not in excluded]
        if not eligible:
            raise RuntimeError("every angle type is already classified")
        return self.problem_for_angle(self._rng.choice(eligible), chosen_by_learner=False)

    def problem_for_angle(self, degrees: int, *, chosen_by_learner: bool) -> Problem:
        if not is_valid_angle(degrees):
            raise ValueError(f"angle must be a multiple of {ANGLE_STEP_DEG} in [0, {ANGLE_MAX_DEG}]")
        kind = classify_angle(degrees)
        return Problem(
            kind=ProblemKind.ANGLE_TYPE,
            item_id=kind.value,
            prompt=f"What type of angle is {degrees}°? (Acute, Right, Obtuse or Reflex)",
            correct_answer=kind.value,
            point_tiers=tuple(self._cfg.tiers),
            time_limit_s=self._cfg.time_limit_s,
            max_attempts=self._cfg.max_attempts,
            reveal=f"The correct answer was: {kind.value}",
            asset_key=angle_key(degrees),
            payload=AngleTypesPayload(degrees=degrees, chosen_by_learner=chosen_by_learner),
        )


class AngleTypesEngine(ActivityEngine):
    """Adds learner-chosen angles on top of the shared activity lifecycle."""

    def __init__(
        self,
        *,
        config: ActivityConfig,
        generator: AngleTypesGenerator,
        ledger: SessionLedger,
    ) -> None:
        super().__init__(config=config, generator=generator, ledger=ledger)
        self._angles = generator

    def can_choose_angle(self) -> bool:
        return (
            self._state is TaskState.IN_PROGRESS
            and self._tracker is not None
            and self._tracker.state.attempts_used == 0
        )

    def choose_angle(self, raw: str) -> Outcome:
        """Replace the current angle with one typed by the learner.

        Allowed only before the first classification attempt. Bad input is
        re-prompted without touching attempts or the countdown; an angle whose
        type is already classified this run brings a fresh angle instead.
        """

        if not self.can_choose_angle():
            return Outcome.REJECTED

        value = parse_numeric(raw)
        if value is None:
            self._feedback = "Please enter a valid number (e.g., 30, 90, 180)"
            self._last_outcome = Outcome.INVALID_NUMERIC
            return Outcome.INVALID_NUMERIC
        if not value.is_integer() or not is_valid_angle(int(value)):
            self._feedback = (
                f"Invalid input! Please enter a number between 0 - {ANGLE_MAX_DEG} "
                f"that's a multiple of {ANGLE_STEP_DEG}."
            )
            self._last_outcome = Outcome.OUT_OF_RANGE
            return Outcome.OUT_OF_RANGE

        degrees = int(value)
        if classify_angle(degrees).value in self._progress.completed_item_ids:
            self._deal_problem()
            self._feedback = "You have already completed this angle type! Try a different angle."
            self._last_outcome = Outcome.ALREADY_COMPLETED
            return Outcome.ALREADY_COMPLETED

        self._start_problem(self._angles.problem_for_angle(degrees, chosen_by_learner=True))
        self._feedback = ""
        self._last_outcome = Outcome.ACCEPTED
        return Outcome.ACCEPTED

    def enabled_controls(self) -> EnabledControls:
        controls = super().enabled_controls()
        if not self.can_choose_angle():
            return controls
        return replace(controls, choose_angle=True)


def build_angle_types_activity(
    *,
    ledger: SessionLedger,
    seed: int,
    config: AngleTypesConfig | None = None,
) -> AngleTypesEngine:
    cfg = config or AngleTypesConfig()

    instructions = (
        "Angle Types",
        "",
        "Classify angles as Acute, Right, Obtuse or Reflex.",
        "You may type your own angle (0 - 360, multiples of 10) before answering.",
        "Classify one angle of each type to finish.",
    )

    activity = ActivityConfig(
        activity=ActivityId.ANGLE_TYPES,
        title="Angle Types",
        instructions=instructions,
        required_count=len(AngleType),
        input_hint="Type Acute, Right, Obtuse or Reflex then press Enter",
    )
    return AngleTypesEngine(
        config=activity,
        generator=AngleTypesGenerator(seed=seed, config=cfg),
        ledger=ledger,
    )
