from __future__ import annotations

from shapeville_tutor.geometry_core import ActivityId, Outcome, TaskState
from shapeville_tutor.ledger import SessionLedger
from shapeville_tutor.sector_area import (
    SECTOR_IDS,
    SECTORS,
    SectorAreaPayload,
    build_sector_area_activity,
    sector_area,
    sector_formula,
)


def test_sector_one_uses_literal_pi() -> None:
    assert abs(sector_area(8, 90) - 50.24) < 1e-9
    assert sector_formula(SECTORS[1]) == "Area = π×r²×(θ/360) = 3.14×8.0²×(90/360) = 50.24"


def test_pool_is_one_to_eight() -> None:
    assert SECTOR_IDS == tuple(range(1, 9))
    assert SECTORS[5].radius == 3.5


def test_answer_within_tolerance_of_literal_pi_value() -> None:
    ledger = SessionLedger()
    engine = build_sector_area_activity(ledger=ledger)
    engine.start_activity("1")
    snap = engine.snapshot()
    assert snap.asset_key == "sector/1"
    assert isinstance(snap.payload, SectorAreaPayload)

    # 50.27 is what full-precision π would give; it is outside tolerance.
    assert engine.submit_answer("50.27") is Outcome.INCORRECT_RETRY
    assert engine.submit_answer("50.24") is Outcome.CORRECT
    assert ledger.score == 4


def test_expiry_reveals_formula_and_returns_to_selection() -> None:
    engine = build_sector_area_activity(ledger=SessionLedger())
    engine.start_activity("6")
    for _ in range(300):
        engine.tick()
    assert engine.state is TaskState.SETTLED
    assert engine.request_reveal() == sector_formula(SECTORS[6])
    engine.next_problem()
    assert engine.state is TaskState.SELECTING
    assert "6" in engine.snapshot().controls.modes


def test_all_sectors_complete_the_activity() -> None:
    ledger = SessionLedger()
    engine = build_sector_area_activity(ledger=ledger)
    engine.start_activity()
    for sector_id in SECTOR_IDS:
        assert engine.select_mode(str(sector_id)) is Outcome.ACCEPTED
        assert engine.submit_answer(f"{SECTORS[sector_id].area:.2f}") is Outcome.CORRECT
        engine.next_problem()
    assert ledger.score == 48
    assert ledger.is_complete(ActivityId.SECTOR_AREA)
    assert engine.state is TaskState.IDLE
