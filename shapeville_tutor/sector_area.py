from __future__ import annotations

from dataclasses import dataclass

from .activity_engine import ActivityConfig, ActivityEngine
from .assets import sector_key
from .geometry_core import (
    BONUS_TIERS,
    DEFAULT_MAX_ATTEMPTS,
    ActivityId,
    Problem,
    ProblemKind,
)
from .ledger import SessionLedger

# Sector answers are printed and checked with 3.14, not math.pi.
SECTOR_PI = 3.14


@dataclass(frozen=True, slots=True)
class Sector:
    sector_id: int
    radius: float
    angle_deg: float

    @property
    def area(self) -> float:
        return sector_area(self.radius, self.angle_deg)


def sector_area(radius: float, angle_deg: float) -> float:
    return SECTOR_PI * radius * radius * (angle_deg / 360.0)


SECTORS: dict[int, Sector] = {
    1: Sector(1, 8, 90),
    2: Sector(2, 18, 130),
    3: Sector(3, 19, 240),
    4: Sector(4, 22, 110),
    5: Sector(5, 3.5, 100),
    6: Sector(6, 8, 270),
    7: Sector(7, 12, 280),
    8: Sector(8, 15, 250),
}
SECTOR_IDS: tuple[int, ...] = tuple(SECTORS)


@dataclass(frozen=True, slots=True)
class SectorAreaConfig:
    time_limit_s: int = 300
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    tiers: tuple[int, ...] = BONUS_TIERS


@dataclass(frozen=True, slots=True)
class SectorAreaPayload:
    sector_id: int
    radius: float
    angle_deg: float


def sector_formula(sector: Sector) -> str:
    return (
        f"Area = π×r²×(θ/360) = {SECTOR_PI}×{sector.radius:.1f}²×"
        f"({sector.angle_deg:.0f}/360) = {sector.area:.2f}"
    )


class SectorAreaGenerator:
    def __init__(self, *, config: SectorAreaConfig | None = None) -> None:
        self._cfg = config or SectorAreaConfig()

    def begin_run(self) -> None:
        return None

    def next_problem(self, *, mode: str | None, excluded: frozenset[str]) -> Problem:
        if mode is None:
            raise ValueError("sector area needs a sector id")
        if mode in excluded:
            raise RuntimeError(f"sector {mode} is already solved")
        sector = SECTORS[int(mode)]
        return Problem(
            kind=ProblemKind.SECTOR_AREA,
            item_id=str(sector.sector_id),
            prompt=(
                f"Sector {sector.sector_id}: R={sector.radius:.1f}, Angle={sector.angle_deg:.0f}°. "
                f"Calculate the area using π = {SECTOR_PI}."
            ),
            correct_answer=sector.area,
            point_tiers=tuple(self._cfg.tiers),
            time_limit_s=self._cfg.time_limit_s,
            max_attempts=self._cfg.max_attempts,
            reveal=sector_formula(sector),
            asset_key=sector_key(sector.sector_id),
            payload=SectorAreaPayload(
                sector_id=sector.sector_id,
                radius=sector.radius,
                angle_deg=sector.angle_deg,
            ),
        )


def build_sector_area_activity(
    *,
    ledger: SessionLedger,
    config: SectorAreaConfig | None = None,
) -> ActivityEngine:
    cfg = config or SectorAreaConfig()

    instructions = (
        "Bonus: Sector Area",
        "",
        "Pick a sector and calculate its area from the radius and angle.",
        f"Use π = {SECTOR_PI}. Answers are accepted within 0.01.",
        "Bonus sectors are worth double points.",
    )

    activity = ActivityConfig(
        activity=ActivityId.SECTOR_AREA,
        title="Sector Area",
        instructions=instructions,
        required_count=len(SECTOR_IDS),
        modes=tuple(str(i) for i in SECTOR_IDS),
        modes_are_items=True,
        reselect_after_settle=True,
        selection_prompt="Select a sector to calculate.",
    )
    return ActivityEngine(
        config=activity,
        generator=SectorAreaGenerator(config=cfg),
        ledger=ledger,
    )
