from __future__ import annotations

import math

from shapeville_tutor.circle_measure import (
    CircleMeasure,
    CircleMeasureGenerator,
    CircleMeasurePayload,
    build_circle_measure_activity,
    circle_answer,
    circle_problem,
)
from shapeville_tutor.geometry_core import ActivityId, Outcome, TaskState
from shapeville_tutor.ledger import SessionLedger


def test_answers_use_full_precision_pi() -> None:
    assert circle_answer(CircleMeasure.AREA, 2) == math.pi * 4
    assert circle_answer(CircleMeasure.CIRCUMFERENCE, 5) == 10 * math.pi


def test_reveal_strings() -> None:
    area = circle_problem(CircleMeasure.AREA, 2)
    assert area.reveal == "Area = π×r² = π×2² = 12.57 cm²"
    circ = circle_problem(CircleMeasure.CIRCUMFERENCE, 5)
    assert circ.reveal == "Arc Length = 2πr = 2π×5 = 31.42 cm"
    assert isinstance(circ.payload, CircleMeasurePayload)
    assert circ.payload.display_radius == 20


def test_radius_is_drawn_once_per_run() -> None:
    gen = CircleMeasureGenerator(seed=11)
    gen.begin_run()
    r = gen.radius_cm
    assert r is not None and 2 <= r <= 20
    a = gen.next_problem(mode="area", excluded=frozenset())
    c = gen.next_problem(mode="circumference", excluded=frozenset())
    assert isinstance(a.payload, CircleMeasurePayload) and isinstance(c.payload, CircleMeasurePayload)
    assert a.payload.radius_cm == c.payload.radius_cm == r


def test_two_decimal_answer_is_accepted_and_completes_activity() -> None:
    seed = 12
    ledger = SessionLedger()
    engine = build_circle_measure_activity(ledger=ledger, seed=seed)

    gen = CircleMeasureGenerator(seed=seed)
    gen.begin_run()
    assert gen.radius_cm is not None
    expected = 2 * math.pi * gen.radius_cm

    engine.start_activity()
    assert engine.select_mode("circumference") is Outcome.ACCEPTED
    assert engine.submit_answer(f"{expected:.2f}") is Outcome.CORRECT
    assert ledger.score == 3
    assert ledger.is_complete(ActivityId.CIRCLE_MEASURE)
    engine.next_problem()
    assert engine.state is TaskState.IDLE


def test_failed_problem_returns_to_selection() -> None:
    engine = build_circle_measure_activity(ledger=SessionLedger(), seed=3)
    engine.start_activity("area")
    for _ in range(3):
        engine.submit_answer("0")
    assert engine.snapshot().reveal is not None
    assert engine.snapshot().reveal.startswith("Area = π×r²")
    engine.next_problem()
    assert engine.state is TaskState.SELECTING
    assert engine.snapshot().controls.modes == frozenset({"area", "circumference"})
