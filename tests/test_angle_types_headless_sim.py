from __future__ import annotations

from shapeville_tutor.angle_types import AngleType, AngleTypesGenerator, build_angle_types_activity
from shapeville_tutor.geometry_core import ActivityId, Outcome, TaskState
from shapeville_tutor.ledger import SessionLedger

SAMPLE_ANGLE = {
    AngleType.ACUTE: 30,
    AngleType.RIGHT: 90,
    AngleType.OBTUSE: 120,
    AngleType.REFLEX: 270,
}


def _wrong(label: str) -> str:
    return next(t.value for t in AngleType if t.value != label)


def test_headless_scripted_run_produces_expected_score() -> None:
    seed = 314
    ledger = SessionLedger()
    engine = build_angle_types_activity(ledger=ledger, seed=seed)

    # Mirror generator stream to know exact answers.
    gen = AngleTypesGenerator(seed=seed)
    done: set[str] = set()

    engine.start_activity()

    # Generated angle, correct first try (+3).
    p1 = gen.next_problem(mode=None, excluded=frozenset(done))
    assert engine.current_problem is not None
    assert engine.current_problem.asset_key == p1.asset_key
    assert engine.submit_answer(str(p1.correct_answer)) is Outcome.CORRECT
    done.add(p1.item_id)
    engine.next_problem()

    # Proposing an angle of the solved type swaps in a fresh generated one.
    gen.next_problem(mode=None, excluded=frozenset(done))
    assert engine.choose_angle(str(SAMPLE_ANGLE[AngleType(p1.item_id)])) is Outcome.ALREADY_COMPLETED
    p3 = gen.next_problem(mode=None, excluded=frozenset(done))
    assert engine.current_problem is not None
    assert engine.current_problem.asset_key == p3.asset_key

    # The learner proposes an angle of an unsolved type, then needs two tries (+2).
    target = next(t for t in AngleType if t.value not in done)
    assert engine.choose_angle(str(SAMPLE_ANGLE[target])) is Outcome.ACCEPTED
    assert engine.submit_answer(_wrong(target.value)) is Outcome.INCORRECT_RETRY
    assert engine.submit_answer(target.value.lower()) is Outcome.CORRECT
    done.add(target.value)
    engine.next_problem()

    # Remaining two types from the generator (+3 each).
    for _ in range(2):
        p = gen.next_problem(mode=None, excluded=frozenset(done))
        assert engine.current_problem is not None
        assert engine.current_problem.asset_key == p.asset_key
        assert engine.submit_answer(str(p.correct_answer)) is Outcome.CORRECT
        done.add(p.item_id)
        engine.next_problem()

    assert done == {t.value for t in AngleType}
    assert ledger.score == 3 + 2 + 3 + 3
    assert ledger.is_complete(ActivityId.ANGLE_TYPES)
    assert engine.state is TaskState.IDLE
