from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .activity_engine import ActivityConfig, ActivityEngine
from .assets import polygon_key
from .geometry_core import (
    DEFAULT_MAX_ATTEMPTS,
    STANDARD_TIERS,
    ActivityId,
    Problem,
    ProblemKind,
    SeededRng,
    format_number,
)
from .ledger import SessionLedger

DIM_MIN = 2
DIM_MAX = 20
TRAPEZIUM_BASE_MAX = 11
TRAPEZIUM_SPREAD = 10


class PolygonFamily(StrEnum):
    RECTANGLE = "Rectangle"
    PARALLELOGRAM = "Parallelogram"
    TRIANGLE = "Triangle"
    TRAPEZIUM = "Trapezium"


@dataclass(frozen=True, slots=True)
class PolygonAreaConfig:
    time_limit_s: int = 180
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    tiers: tuple[int, ...] = STANDARD_TIERS


@dataclass(frozen=True, slots=True)
class PolygonAreaPayload:
    family: PolygonFamily
    labels: tuple[str, ...]
    dimensions: tuple[int, ...]


_LABELS: dict[PolygonFamily, tuple[str, ...]] = {
    PolygonFamily.RECTANGLE: ("length", "width"),
    PolygonFamily.PARALLELOGRAM: ("base", "height"),
    PolygonFamily.TRIANGLE: ("base", "height"),
    PolygonFamily.TRAPEZIUM: ("upper base a", "lower base b", "height h"),
}


def polygon_area(family: PolygonFamily, dims: tuple[int, ...]) -> float:
    if family is PolygonFamily.TRAPEZIUM:
        a, b, h = dims
        return (a + b) / 2.0 * h
    d1, d2 = dims
    if family is PolygonFamily.TRIANGLE:
        return d1 * d2 / 2.0
    return float(d1 * d2)


def polygon_formula(family: PolygonFamily, dims: tuple[int, ...]) -> str:
    """Worked formula with the problem's values, shown when the answer is revealed."""

    area = polygon_area(family, dims)
    f = [format_number(d) for d in dims]
    if family is PolygonFamily.RECTANGLE:
        return f"Area = length × width = {f[0]} × {f[1]} = {area:.2f} cm²"
    if family is PolygonFamily.PARALLELOGRAM:
        return f"Area = base × height = {f[0]} × {f[1]} = {area:.2f} cm²"
    if family is PolygonFamily.TRIANGLE:
        return f"Area = (base × height) ÷ 2 = ({f[0]} × {f[1]}) ÷ 2 = {area:.2f} cm²"
    return f"Area = ((a + b) ÷ 2) × h = (({f[0]} + {f[1]}) ÷ 2) × {f[2]} = {area:.2f} cm²"


def polygon_problem(
    family: PolygonFamily,
    dims: tuple[int, ...],
    *,
    config: PolygonAreaConfig | None = None,
) -> Problem:
    cfg = config or PolygonAreaConfig()
    labels = _LABELS[family]
    if len(dims) != len(labels):
        raise ValueError(f"{family.value} needs {len(labels)} dimensions")

    described = ", ".join(f"{label} = {format_number(d)} cm" for label, d in zip(labels, dims))
    return Problem(
        kind=ProblemKind.POLYGON_AREA,
        item_id=family.value,
        prompt=f"{family.value}: {described}. Calculate the area in cm².",
        correct_answer=polygon_area(family, dims),
        point_tiers=tuple(cfg.tiers),
        time_limit_s=cfg.time_limit_s,
        max_attempts=cfg.max_attempts,
        reveal=polygon_formula(family, dims),
        asset_key=polygon_key(family.value),
        payload=PolygonAreaPayload(family=family, labels=labels, dimensions=tuple(dims)),
    )


class PolygonAreaGenerator:
    """Random whole-number dimensions for the selected polygon family."""

    def __init__(self, *, seed: int, config: PolygonAreaConfig | None = None) -> None:
        self._rng = SeededRng(seed)
        self._cfg = config or PolygonAreaConfig()

    def begin_run(self) -> None:
        return None

    def next_problem(self, *, mode: str | None, excluded: frozenset[str]) -> Problem:
        if mode is None:
            raise ValueError("polygon area needs a shape family")
        family = PolygonFamily(mode)
        if family.value in excluded:
            raise RuntimeError(f"{family.value} is already solved")
        return polygon_problem(family, self.draw_dimensions(family), config=self._cfg)

    def draw_dimensions(self, family: PolygonFamily) -> tuple[int, ...]:
        if family is PolygonFamily.TRAPEZIUM:
            a = self._rng.randint(DIM_MIN, TRAPEZIUM_BASE_MAX)
            b = self._rng.randint(a + 1, a + TRAPEZIUM_SPREAD)
            h = self._rng.randint(DIM_MIN, DIM_MAX)
            return (a, b, h)
        return (self._rng.randint(DIM_MIN, DIM_MAX), self._rng.randint(DIM_MIN, DIM_MAX))


def build_polygon_area_activity(
    *,
    ledger: SessionLedger,
    seed: int,
    config: PolygonAreaConfig | None = None,
) -> ActivityEngine:
    cfg = config or PolygonAreaConfig()

    instructions = (
        "Area of Shapes",
        "",
        "Pick a shape and calculate its area from the dimensions shown.",
        f"You have {cfg.time_limit_s} seconds and {cfg.max_attempts} attempts per shape.",
        "Answers are accepted within 0.01.",
    )

    activity = ActivityConfig(
        activity=ActivityId.POLYGON_AREA,
        title="Area of Shapes",
        instructions=instructions,
        required_count=len(PolygonFamily),
        modes=tuple(f.value for f in PolygonFamily),
        modes_are_items=True,
        reselect_after_settle=True,
        selection_prompt="Select a shape to calculate its area.",
    )
    return ActivityEngine(
        config=activity,
        generator=PolygonAreaGenerator(seed=seed, config=cfg),
        ledger=ledger,
    )
