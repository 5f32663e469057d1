from __future__ import annotations

from dataclasses import dataclass

from .activity_engine import ActivityConfig, ActivityEngine
from .assets import composite_key
from .geometry_core import (
    BONUS_TIERS,
    DEFAULT_MAX_ATTEMPTS,
    ActivityId,
    Problem,
    ProblemKind,
    format_number,
)
from .ledger import SessionLedger


@dataclass(frozen=True, slots=True)
class CompositePart:
    shape: str  # "rectangle" | "square" | "triangle"
    width: float
    height: float

    @property
    def area(self) -> float:
        if self.shape == "triangle":
            return self.width * self.height / 2.0
        return self.width * self.height

    def expression(self) -> str:
        w, h = format_number(self.width), format_number(self.height)
        if self.shape == "triangle":
            return f"({w} × {h}) ÷ 2"
        return f"{w} × {h}"


@dataclass(frozen=True, slots=True)
class CompositeFigure:
    figure_id: int
    description: str
    parts: tuple[CompositePart, ...]

    @property
    def area(self) -> float:
        return sum(p.area for p in self.parts)


# Pre-measured figures; the drawings themselves are resolved by the renderer.
COMPOSITE_FIGURES: dict[int, CompositeFigure] = {
    2: CompositeFigure(
        2,
        "A rectangle joined to a square",
        (CompositePart("rectangle", 20, 10), CompositePart("square", 11, 11)),
    ),
    3: CompositeFigure(
        3,
        "A square with a rectangular extension",
        (CompositePart("square", 16, 16), CompositePart("rectangle", 18, 19)),
    ),
    4: CompositeFigure(
        4,
        "Two rectangles combined",
        (CompositePart("rectangle", 24, 6), CompositePart("square", 12, 12)),
    ),
    5: CompositeFigure(
        5,
        "A rectangle topped by a triangle",
        (CompositePart("rectangle", 4, 3), CompositePart("triangle", 4, 3)),
    ),
    8: CompositeFigure(
        8,
        "A large rectangle joined to a square",
        (CompositePart("rectangle", 60, 36), CompositePart("square", 36, 36)),
    ),
    9: CompositeFigure(
        9,
        "A rectangle joined to a square",
        (CompositePart("rectangle", 11, 10), CompositePart("square", 8, 8)),
    ),
}
COMPOSITE_IDS: tuple[int, ...] = tuple(COMPOSITE_FIGURES)


@dataclass(frozen=True, slots=True)
class CompositeAreaConfig:
    time_limit_s: int = 300
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    tiers: tuple[int, ...] = BONUS_TIERS


@dataclass(frozen=True, slots=True)
class CompositeAreaPayload:
    figure_id: int
    description: str
    parts: tuple[CompositePart, ...]


def composite_formula(figure: CompositeFigure) -> str:
    terms = " + ".join(p.expression() for p in figure.parts)
    return f"Area = {terms} = {figure.area:.2f}"


class CompositeAreaGenerator:
    """Looks up the pre-measured figure the learner picked."""

    def __init__(self, *, config: CompositeAreaConfig | None = None) -> None:
        self._cfg = config or CompositeAreaConfig()

    def begin_run(self) -> None:
        return None

    def next_problem(self, *, mode: str | None, excluded: frozenset[str]) -> Problem:
        if mode is None:
            raise ValueError("composite area needs a figure id")
        if mode in excluded:
            raise RuntimeError(f"figure {mode} is already solved")
        figure = COMPOSITE_FIGURES[int(mode)]
        return Problem(
            kind=ProblemKind.COMPOSITE_AREA,
            item_id=str(figure.figure_id),
            prompt=f"Figure {figure.figure_id}: {figure.description}. Calculate its area.",
            correct_answer=figure.area,
            point_tiers=tuple(self._cfg.tiers),
            time_limit_s=self._cfg.time_limit_s,
            max_attempts=self._cfg.max_attempts,
            reveal=composite_formula(figure),
            asset_key=composite_key(figure.figure_id),
            payload=CompositeAreaPayload(
                figure_id=figure.figure_id,
                description=figure.description,
                parts=figure.parts,
            ),
        )


def build_composite_area_activity(
    *,
    ledger: SessionLedger,
    config: CompositeAreaConfig | None = None,
) -> ActivityEngine:
    cfg = config or CompositeAreaConfig()

    instructions = (
        "Bonus: Compound Shapes",
        "",
        "Pick a figure and calculate the total area of its parts.",
        f"You have {cfg.time_limit_s // 60} minutes and {cfg.max_attempts} attempts per figure.",
        "Bonus figures are worth double points.",
    )

    activity = ActivityConfig(
        activity=ActivityId.COMPOSITE_AREA,
        title="Compound Shapes",
        instructions=instructions,
        required_count=len(COMPOSITE_IDS),
        modes=tuple(str(i) for i in COMPOSITE_IDS),
        modes_are_items=True,
        reselect_after_settle=True,
        selection_prompt="Select a composite figure to calculate.",
    )
    return ActivityEngine(
        config=activity,
        generator=CompositeAreaGenerator(config=cfg),
        ledger=ledger,
    )
