from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from .activity_engine import ActivityConfig, ActivityEngine
from .assets import shape_key
from .geometry_core import (
    BONUS_TIERS,
    DEFAULT_MAX_ATTEMPTS,
    STANDARD_TIERS,
    ActivityId,
    Problem,
    ProblemKind,
    SeededRng,
)
from .ledger import SessionLedger

logger = logging.getLogger(__name__)


class ShapeDimension(StrEnum):
    TWO_D = "2D"
    THREE_D = "3D"

    @property
    def number(self) -> int:
        return 2 if self is ShapeDimension.TWO_D else 3


@dataclass(frozen=True, slots=True)
class CatalogShape:
    name: str
    description: str
    dimension: ShapeDimension


SHAPE_CATALOG: tuple[CatalogShape, ...] = (
    CatalogShape("circle", "A round shape with no corners", ShapeDimension.TWO_D),
    CatalogShape(
        "rectangle",
        "A shape with 4 sides and 4 right angles, opposite sides are equal",
        ShapeDimension.TWO_D,
    ),
    CatalogShape("triangle", "A shape with 3 sides and 3 angles", ShapeDimension.TWO_D),
    CatalogShape("oval", "An elongated round shape", ShapeDimension.TWO_D),
    CatalogShape("octagon", "A shape with 8 sides", ShapeDimension.TWO_D),
    CatalogShape("square", "A shape with 4 equal sides and 4 right angles", ShapeDimension.TWO_D),
    CatalogShape("heptagon", "A shape with 7 sides", ShapeDimension.TWO_D),
    CatalogShape("rhombus", "A shape with 4 equal sides, opposite angles equal", ShapeDimension.TWO_D),
    CatalogShape("pentagon", "A shape with 5 sides", ShapeDimension.TWO_D),
    CatalogShape("hexagon", "A shape with 6 sides", ShapeDimension.TWO_D),
    CatalogShape("kite", "A shape with two distinct pairs of adjacent sides equal", ShapeDimension.TWO_D),
    CatalogShape("cube", "A 3D shape with 6 equal square faces", ShapeDimension.THREE_D),
    CatalogShape("cuboid", "A 3D shape with 6 rectangular faces", ShapeDimension.THREE_D),
    CatalogShape(
        "cylinder",
        "A 3D shape with two circular bases and a curved surface",
        ShapeDimension.THREE_D,
    ),
    CatalogShape("sphere", "A perfectly round 3D shape like a ball", ShapeDimension.THREE_D),
    CatalogShape("cone", "A 3D shape with a circular base and a pointed top", ShapeDimension.THREE_D),
    CatalogShape(
        "triangular prism",
        "A 3D shape with triangular ends and rectangular faces",
        ShapeDimension.THREE_D,
    ),
    CatalogShape(
        "square-based pyramid",
        "A 3D shape with a square base and triangular faces meeting at a point",
        ShapeDimension.THREE_D,
    ),
    CatalogShape("tetrahedron", "A 3D shape with 4 triangular faces", ShapeDimension.THREE_D),
)


@dataclass(frozen=True, slots=True)
class ShapeRecognitionConfig:
    time_limit_s: int = 180
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    shapes_per_run: int = 4
    max_draws: int = 100
    tiers_2d: tuple[int, ...] = STANDARD_TIERS
    tiers_3d: tuple[int, ...] = BONUS_TIERS


@dataclass(frozen=True, slots=True)
class ShapeRecognitionPayload:
    dimension: ShapeDimension
    description: str
    position: int  # 1-based slot in the run's lineup
    lineup_size: int


def shapes_for(dimension: ShapeDimension) -> tuple[CatalogShape, ...]:
    return tuple(s for s in SHAPE_CATALOG if s.dimension is dimension)


class ShapeRecognitionGenerator:
    """Deals a lineup of distinct shapes for the chosen dimension.

    The lineup is drawn with a bounded resampling loop over the whole catalog.
    If the draws leave it short, it is topped up from the unused shapes of
    that dimension in catalog order. Each shape is dealt once per run; the
    cursor skips shapes that have already settled.
    """

    def __init__(self, *, seed: int, config: ShapeRecognitionConfig | None = None) -> None:
        self._rng = SeededRng(seed)
        self._cfg = config or ShapeRecognitionConfig()
        self._lineup: list[CatalogShape] = []
        self._lineup_dimension: ShapeDimension | None = None
        self._cursor = 0

    @property
    def lineup(self) -> tuple[CatalogShape, ...]:
        return tuple(self._lineup)

    def begin_run(self) -> None:
        self._lineup = []
        self._lineup_dimension = None
        self._cursor = 0

    def draw_lineup(self, dimension: ShapeDimension) -> list[CatalogShape]:
        picked: list[CatalogShape] = []
        for _ in range(self._cfg.max_draws):
            shape = self._rng.choice(SHAPE_CATALOG)
            if shape.dimension is dimension and shape not in picked:
                picked.append(shape)
            if len(picked) >= self._cfg.shapes_per_run:
                break

        if len(picked) < self._cfg.shapes_per_run:
            for shape in shapes_for(dimension):
                if len(picked) >= self._cfg.shapes_per_run:
                    break
                if shape not in picked:
                    picked.append(shape)
            logger.debug("shape lineup topped up to %d after %d draws", len(picked), self._cfg.max_draws)

        self._rng.shuffle(picked)
        return picked[: self._cfg.shapes_per_run]

    def next_problem(self, *, mode: str | None, excluded: frozenset[str]) -> Problem:
        dimension = ShapeDimension(mode or ShapeDimension.TWO_D)
        if self._lineup_dimension is not dimension or not self._lineup:
            self._lineup = self.draw_lineup(dimension)
            self._lineup_dimension = dimension
            self._cursor = 0

        size = len(self._lineup)
        for step in range(size):
            idx = (self._cursor + step) % size
            shape = self._lineup[idx]
            if shape.name not in excluded:
                self._cursor = (idx + 1) % size
                return self._make_problem(shape, position=idx + 1, lineup_size=size)

        raise RuntimeError("every shape in the lineup has already been dealt")

    def _make_problem(self, shape: CatalogShape, *, position: int, lineup_size: int) -> Problem:
        tiers = self._cfg.tiers_2d if shape.dimension is ShapeDimension.TWO_D else self._cfg.tiers_3d
        return Problem(
            kind=ProblemKind.SHAPE_ID,
            item_id=shape.name,
            prompt=f"{shape.description}. What is this shape called?",
            correct_answer=shape.name,
            point_tiers=tuple(tiers),
            time_limit_s=self._cfg.time_limit_s,
            max_attempts=self._cfg.max_attempts,
            reveal=f"The correct answer is: {shape.name}",
            asset_key=shape_key(shape.dimension.number, shape.name),
            payload=ShapeRecognitionPayload(
                dimension=shape.dimension,
                description=shape.description,
                position=position,
                lineup_size=lineup_size,
            ),
        )


def build_shape_recognition_activity(
    *,
    ledger: SessionLedger,
    seed: int,
    config: ShapeRecognitionConfig | None = None,
) -> ActivityEngine:
    cfg = config or ShapeRecognitionConfig()
    smallest_pool = min(len(shapes_for(d)) for d in ShapeDimension)
    if not (0 < cfg.shapes_per_run <= smallest_pool):
        raise ValueError(f"shapes_per_run must be in [1, {smallest_pool}]")

    instructions = (
        "Shape Recognition",
        "",
        "Pick 2D or 3D shapes, then name each shape from its picture.",
        f"You have {cfg.max_attempts} attempts per shape.",
        "3D shapes are worth double points.",
    )

    activity = ActivityConfig(
        activity=ActivityId.SHAPE_RECOGNITION,
        title="Shape Recognition",
        instructions=instructions,
        required_count=cfg.shapes_per_run,
        modes=(ShapeDimension.TWO_D.value, ShapeDimension.THREE_D.value),
        count_unsolved=True,
        mode_starts_run=True,
        selection_prompt="Identify 2D shapes or 3D shapes?",
        input_hint="Type the shape name then press Enter",
    )
    return ActivityEngine(
        config=activity,
        generator=ShapeRecognitionGenerator(seed=seed, config=cfg),
        ledger=ledger,
    )
