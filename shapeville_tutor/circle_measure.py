from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

from .activity_engine import ActivityConfig, ActivityEngine
from .assets import circle_key
from .geometry_core import (
    DEFAULT_MAX_ATTEMPTS,
    STANDARD_TIERS,
    ActivityId,
    Problem,
    ProblemKind,
    SeededRng,
)
from .ledger import SessionLedger

RADIUS_MIN_CM = 2
RADIUS_MAX_CM = 20
DISPLAY_SCALE = 4  # pixels per cm in the drawing


class CircleMeasure(StrEnum):
    AREA = "area"
    CIRCUMFERENCE = "circumference"


@dataclass(frozen=True, slots=True)
class CircleMeasureConfig:
    time_limit_s: int = 180
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    tiers: tuple[int, ...] = STANDARD_TIERS


@dataclass(frozen=True, slots=True)
class CircleMeasurePayload:
    measure: CircleMeasure
    radius_cm: int
    display_radius: int


def circle_answer(measure: CircleMeasure, radius_cm: float) -> float:
    if measure is CircleMeasure.AREA:
        return math.pi * radius_cm**2
    return 2 * math.pi * radius_cm


def circle_problem(
    measure: CircleMeasure,
    radius_cm: int,
    *,
    config: CircleMeasureConfig | None = None,
) -> Problem:
    cfg = config or CircleMeasureConfig()
    answer = circle_answer(measure, radius_cm)
    if measure is CircleMeasure.AREA:
        prompt = f"Radius: {radius_cm} cm. Calculate the area of the circle (cm², 2 d.p.)."
        reveal = f"Area = π×r² = π×{radius_cm}² = {answer:.2f} cm²"
    else:
        prompt = f"Radius: {radius_cm} cm. Calculate the circumference of the circle (cm, 2 d.p.)."
        reveal = f"Arc Length = 2πr = 2π×{radius_cm} = {answer:.2f} cm"

    return Problem(
        kind=ProblemKind.CIRCLE_MEASURE,
        item_id=measure.value,
        prompt=prompt,
        correct_answer=answer,
        point_tiers=tuple(cfg.tiers),
        time_limit_s=cfg.time_limit_s,
        max_attempts=cfg.max_attempts,
        reveal=reveal,
        asset_key=circle_key(measure.value),
        payload=CircleMeasurePayload(
            measure=measure,
            radius_cm=radius_cm,
            display_radius=radius_cm * DISPLAY_SCALE,
        ),
    )


class CircleMeasureGenerator:
    """One radius per visit to the activity, reused for area and circumference."""

    def __init__(self, *, seed: int, config: CircleMeasureConfig | None = None) -> None:
        self._rng = SeededRng(seed)
        self._cfg = config or CircleMeasureConfig()
        self._radius_cm: int | None = None

    @property
    def radius_cm(self) -> int | None:
        return self._radius_cm

    def begin_run(self) -> None:
        self._radius_cm = self._rng.randint(RADIUS_MIN_CM, RADIUS_MAX_CM)

    def next_problem(self, *, mode: str | None, excluded: frozenset[str]) -> Problem:
        _ = excluded
        if mode is None:
            raise ValueError("circle measurement needs area or circumference")
        if self._radius_cm is None:
            self.begin_run()
        assert self._radius_cm is not None
        return circle_problem(CircleMeasure(mode), self._radius_cm, config=self._cfg)


def build_circle_measure_activity(
    *,
    ledger: SessionLedger,
    seed: int,
    config: CircleMeasureConfig | None = None,
) -> ActivityEngine:
    cfg = config or CircleMeasureConfig()

    instructions = (
        "Circle Calculation",
        "",
        "Choose area or circumference, then calculate it from the radius.",
        "Use π to full precision; answers are accepted within 0.01.",
        f"You have {cfg.time_limit_s} seconds and {cfg.max_attempts} attempts.",
    )

    activity = ActivityConfig(
        activity=ActivityId.CIRCLE_MEASURE,
        title="Circle Calculation",
        instructions=instructions,
        required_count=1,
        modes=(CircleMeasure.AREA.value, CircleMeasure.CIRCUMFERENCE.value),
        reselect_after_settle=True,
        selection_prompt="Calculate the area or the circumference?",
    )
    return ActivityEngine(
        config=activity,
        generator=CircleMeasureGenerator(seed=seed, config=cfg),
        ledger=ledger,
    )
