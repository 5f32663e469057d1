from __future__ import annotations

from dataclasses import dataclass

from .activity_engine import ActivityEngine
from .angle_types import AngleTypesConfig, AngleTypesEngine, build_angle_types_activity
from .circle_measure import CircleMeasureConfig, build_circle_measure_activity
from .composite_area import CompositeAreaConfig, build_composite_area_activity
from .geometry_core import ActivityId
from .ledger import LedgerSnapshot, SessionLedger
from .polygon_area import PolygonAreaConfig, build_polygon_area_activity
from .results import SessionReport, session_report
from .sector_area import SectorAreaConfig, build_sector_area_activity
from .shape_recognition import ShapeRecognitionConfig, build_shape_recognition_activity


@dataclass(frozen=True, slots=True)
class TutorConfig:
    shape_recognition: ShapeRecognitionConfig = ShapeRecognitionConfig()
    angle_types: AngleTypesConfig = AngleTypesConfig()
    polygon_area: PolygonAreaConfig = PolygonAreaConfig()
    circle_measure: CircleMeasureConfig = CircleMeasureConfig()
    composite_area: CompositeAreaConfig = CompositeAreaConfig()
    sector_area: SectorAreaConfig = SectorAreaConfig()


class TutorSession:
    """Six activity engines sharing one injected SessionLedger."""

    def __init__(self, *, ledger: SessionLedger, engines: list[ActivityEngine]) -> None:
        self._ledger = ledger
        self._engines: dict[ActivityId, ActivityEngine] = {}
        for engine in engines:
            if engine.activity in self._engines:
                raise ValueError(f"duplicate activity {engine.activity.value}")
            self._engines[engine.activity] = engine

    @property
    def ledger(self) -> SessionLedger:
        return self._ledger

    def engines(self) -> list[ActivityEngine]:
        return list(self._engines.values())

    def engine(self, activity: ActivityId) -> ActivityEngine:
        try:
            return self._engines[ActivityId(activity)]
        except KeyError:
            raise ValueError(f"unknown activity {activity!r}") from None

    @property
    def angle_types(self) -> AngleTypesEngine:
        engine = self.engine(ActivityId.ANGLE_TYPES)
        assert isinstance(engine, AngleTypesEngine)
        return engine

    def tick(self) -> None:
        # Engines ignore ticks unless a problem is in progress.
        for engine in self._engines.values():
            engine.tick()

    def snapshot(self) -> LedgerSnapshot:
        return self._ledger.snapshot()

    def end_session(self) -> SessionReport:
        """Stop every countdown and summarise the session."""

        for engine in self._engines.values():
            engine.exit_activity()
        return session_report(self._engines.values(), self._ledger.snapshot())


def build_tutor_session(*, seed: int, config: TutorConfig | None = None) -> TutorSession:
    cfg = config or TutorConfig()
    ledger = SessionLedger()
    engines: list[ActivityEngine] = [
        build_shape_recognition_activity(ledger=ledger, seed=seed, config=cfg.shape_recognition),
        build_polygon_area_activity(ledger=ledger, seed=seed + 1, config=cfg.polygon_area),
        build_angle_types_activity(ledger=ledger, seed=seed + 2, config=cfg.angle_types),
        build_circle_measure_activity(ledger=ledger, seed=seed + 3, config=cfg.circle_measure),
        build_composite_area_activity(ledger=ledger, config=cfg.composite_area),
        build_sector_area_activity(ledger=ledger, config=cfg.sector_area),
    ]
    return TutorSession(ledger=ledger, engines=engines)
