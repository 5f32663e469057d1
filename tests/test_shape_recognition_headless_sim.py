from __future__ import annotations

from shapeville_tutor.geometry_core import ActivityId, Outcome, TaskState
from shapeville_tutor.ledger import SessionLedger
from shapeville_tutor.shape_recognition import ShapeRecognitionGenerator, build_shape_recognition_activity


def test_headless_scripted_run_deals_each_shape_once() -> None:
    seed = 42
    ledger = SessionLedger()
    engine = build_shape_recognition_activity(ledger=ledger, seed=seed)

    # Mirror generator stream to know exact answers.
    gen = ShapeRecognitionGenerator(seed=seed)
    gen.begin_run()
    dealt: set[str] = set()

    engine.start_activity()
    assert engine.select_mode("3D") is Outcome.ACCEPTED

    # Shape 1: correct first try (+6).
    p1 = gen.next_problem(mode="3D", excluded=frozenset(dealt))
    assert engine.current_problem is not None
    assert engine.current_problem.item_id == p1.item_id
    assert engine.submit_answer(p1.item_id) is Outcome.CORRECT
    dealt.add(p1.item_id)
    engine.next_problem()

    # Shape 2: three wrong names, revealed and not dealt again.
    p2 = gen.next_problem(mode="3D", excluded=frozenset(dealt))
    for _ in range(2):
        assert engine.submit_answer("not a shape") is Outcome.INCORRECT_RETRY
    assert engine.submit_answer("not a shape") is Outcome.INCORRECT_EXHAUSTED
    assert engine.request_reveal() == f"The correct answer is: {p2.item_id}"
    dealt.add(p2.item_id)
    assert engine.snapshot().completed_count == 2
    engine.next_problem()

    # Shape 3: the countdown runs out.
    p3 = gen.next_problem(mode="3D", excluded=frozenset(dealt))
    assert engine.current_problem is not None
    assert engine.current_problem.item_id == p3.item_id
    for _ in range(180):
        engine.tick()
    assert engine.events()[-1].outcome is Outcome.EXPIRED
    dealt.add(p3.item_id)
    engine.next_problem()

    # Shape 4: correct on the second try (+4) ends the run.
    p4 = gen.next_problem(mode="3D", excluded=frozenset(dealt))
    assert p4.item_id not in {p1.item_id, p2.item_id, p3.item_id}
    assert engine.current_problem is not None
    assert engine.current_problem.item_id == p4.item_id
    assert engine.submit_answer("cube-ish") is Outcome.INCORRECT_RETRY
    assert engine.submit_answer(p4.item_id) is Outcome.CORRECT

    assert ledger.score == 6 + 4
    assert ledger.is_complete(ActivityId.SHAPE_RECOGNITION)

    engine.next_problem()
    assert engine.state is TaskState.IDLE
    assert len(engine.events()) == 4
