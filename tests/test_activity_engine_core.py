from __future__ import annotations

import pytest

from shapeville_tutor.activity_engine import ActivityConfig, ActivityEngine
from shapeville_tutor.geometry_core import ActivityId, Outcome, Problem, ProblemKind, TaskState
from shapeville_tutor.ledger import SessionLedger


class ListGenerator:
    """Deals items in order; item ``n`` has answer ``10 + n``."""

    def __init__(self, *, count: int = 5, time_limit_s: int = 5) -> None:
        self.count = count
        self.time_limit_s = time_limit_s
        self.runs = 0
        self.dealt: list[Problem] = []

    def begin_run(self) -> None:
        self.runs += 1

    def next_problem(self, *, mode: str | None, excluded: frozenset[str]) -> Problem:
        for n in range(self.count):
            item_id = mode if mode is not None else f"i{n}"
            if item_id in excluded:
                continue
            p = Problem(
                kind=ProblemKind.POLYGON_AREA,
                item_id=item_id,
                prompt=f"item {item_id}",
                correct_answer=float(10 + n),
                point_tiers=(3, 2, 1),
                time_limit_s=self.time_limit_s,
                reveal=f"answer was {10 + n}",
                asset_key=f"polygon/{item_id}",
            )
            self.dealt.append(p)
            return p
        raise RuntimeError("nothing left")


def _engine(
    *,
    required: int = 2,
    modes: tuple[str, ...] = (),
    items: bool = False,
    reselect: bool = False,
    count_unsolved: bool = False,
    mode_starts_run: bool = False,
    time_limit_s: int = 5,
) -> tuple[ActivityEngine, ListGenerator, SessionLedger]:
    ledger = SessionLedger()
    gen = ListGenerator(time_limit_s=time_limit_s)
    cfg = ActivityConfig(
        activity=ActivityId.POLYGON_AREA,
        title="Test Activity",
        instructions=("x",),
        required_count=required,
        modes=modes,
        modes_are_items=items,
        reselect_after_settle=reselect,
        count_unsolved=count_unsolved,
        mode_starts_run=mode_starts_run,
    )
    return ActivityEngine(config=cfg, generator=gen, ledger=ledger), gen, ledger


def test_commands_in_wrong_state_are_rejected() -> None:
    engine, _, ledger = _engine()
    assert engine.state is TaskState.IDLE
    assert engine.submit_answer("10") is Outcome.REJECTED
    assert engine.next_problem() is Outcome.REJECTED
    assert engine.request_reveal() is None
    assert engine.tick() is None
    assert ledger.score == 0

    assert engine.start_activity() is Outcome.ACCEPTED
    assert engine.start_activity() is Outcome.REJECTED


def test_correct_first_attempt_awards_top_tier_and_settles() -> None:
    engine, gen, ledger = _engine()
    engine.start_activity()
    assert engine.state is TaskState.IN_PROGRESS
    snap = engine.snapshot()
    assert snap.controls.answer_entry and snap.controls.submit
    assert snap.time_remaining_s == 5
    assert snap.attempts_remaining == 3

    assert engine.submit_answer("10") is Outcome.CORRECT
    assert engine.state is TaskState.SETTLED
    assert ledger.score == 3
    assert engine.progress.completed_count == 1
    assert not engine.countdown_running
    assert "3 points" in engine.snapshot().feedback
    assert engine.snapshot().controls.next is True
    assert engine.snapshot().controls.reveal is False
    assert gen.runs == 1


def test_wrong_answers_count_down_then_reveal() -> None:
    engine, _, ledger = _engine()
    engine.start_activity()

    assert engine.submit_answer("1") is Outcome.INCORRECT_RETRY
    assert engine.snapshot().feedback == "Incorrect! You have 2 attempts left."
    assert engine.submit_answer("2") is Outcome.INCORRECT_RETRY
    assert engine.snapshot().feedback == "Incorrect! You have 1 attempt left."
    assert engine.submit_answer("3") is Outcome.INCORRECT_EXHAUSTED

    assert engine.state is TaskState.SETTLED
    assert ledger.score == 0
    assert engine.progress.completed_count == 0
    assert engine.snapshot().controls.reveal is True
    assert engine.request_reveal() == "answer was 10"

    # The unsolved item comes back.
    engine.next_problem()
    assert engine.current_problem is not None
    assert engine.current_problem.item_id == "i0"


def test_invalid_numeric_input_costs_nothing() -> None:
    engine, _, _ = _engine()
    engine.start_activity()
    engine.tick()
    assert engine.submit_answer("abc") is Outcome.INVALID_NUMERIC
    assert engine.submit_answer("") is Outcome.INVALID_NUMERIC
    assert engine.attempts_remaining == 3
    assert engine.time_remaining_s() == 4
    assert engine.state is TaskState.IN_PROGRESS


def test_countdown_expiry_settles_with_zero_points() -> None:
    engine, _, ledger = _engine(time_limit_s=3)
    engine.start_activity()

    assert engine.tick() is None
    assert engine.tick() is None
    assert engine.tick() is Outcome.EXPIRED
    assert engine.state is TaskState.SETTLED
    assert engine.time_remaining_s() == 0
    assert engine.snapshot().feedback.startswith("Time's up!")
    assert engine.request_reveal() == "answer was 10"

    # Extra ticks after settlement change nothing.
    assert engine.tick() is None
    assert len(engine.events()) == 1
    assert ledger.score == 0


def test_answer_after_countdown_reaches_zero_loses() -> None:
    engine, _, ledger = _engine(time_limit_s=1)
    engine.start_activity()
    engine.tick()
    assert engine.submit_answer("10") is Outcome.REJECTED
    assert engine.events()[-1].outcome is Outcome.EXPIRED
    assert ledger.score == 0


def test_old_countdown_never_touches_the_next_problem() -> None:
    engine, _, ledger = _engine(required=3, time_limit_s=5)
    engine.start_activity()
    engine.tick()
    engine.tick()
    engine.submit_answer("10")
    engine.next_problem()

    assert engine.time_remaining_s() == 5
    for _ in range(4):
        assert engine.tick() is None
    assert engine.state is TaskState.IN_PROGRESS
    assert engine.submit_answer("11") is Outcome.CORRECT
    assert ledger.score == 6


def test_reset_mid_problem_stops_the_countdown() -> None:
    engine, _, _ = _engine(time_limit_s=2)
    engine.start_activity()
    engine.submit_answer("10")
    engine.next_problem()
    assert engine.can_exit() is False

    engine.reset_activity()
    assert engine.state is TaskState.IDLE
    assert engine.can_exit() is True
    assert not engine.countdown_running
    for _ in range(5):
        assert engine.tick() is None
    assert len(engine.events()) == 1
    assert engine.progress.completed_count == 0


def test_exit_keeps_run_progress_and_reentry_continues() -> None:
    engine, gen, _ = _engine(required=3)
    engine.start_activity()
    engine.submit_answer("10")
    engine.exit_activity()
    assert engine.state is TaskState.IDLE
    assert engine.current_problem is None

    engine.start_activity()
    assert gen.runs == 1
    assert engine.progress.completed_count == 1
    assert engine.current_problem is not None
    assert engine.current_problem.item_id == "i1"


def test_completion_marks_ledger_at_settlement_then_returns_to_idle() -> None:
    engine, gen, ledger = _engine(required=2)
    engine.start_activity()
    engine.submit_answer("10")
    engine.next_problem()
    engine.submit_answer("12")  # wrong
    engine.submit_answer("11")  # second attempt

    assert ledger.is_complete(ActivityId.POLYGON_AREA)
    assert ledger.score == 5
    assert ledger.progress_percent == 17

    assert engine.next_problem() is Outcome.ACCEPTED
    assert engine.state is TaskState.IDLE
    assert engine.snapshot().feedback.startswith("Congratulations!")
    assert ledger.progress_percent == 17

    # A fresh visit starts a new run.
    engine.start_activity()
    assert gen.runs == 2
    assert engine.progress.completed_count == 0


def test_item_modes_disable_solved_items_and_reselect() -> None:
    engine, _, ledger = _engine(required=2, modes=("a", "b"), items=True, reselect=True)
    assert engine.start_activity() is Outcome.ACCEPTED
    assert engine.state is TaskState.SELECTING
    assert engine.snapshot().controls.modes == frozenset({"a", "b"})

    with pytest.raises(ValueError):
        engine.select_mode("z")

    assert engine.select_mode("a") is Outcome.ACCEPTED
    assert engine.mode == "a"
    assert engine.select_mode("b") is Outcome.REJECTED
    engine.submit_answer("10")
    engine.next_problem()

    assert engine.state is TaskState.SELECTING
    assert engine.snapshot().controls.modes == frozenset({"b"})
    assert engine.select_mode("a") is Outcome.ALREADY_COMPLETED
    assert engine.state is TaskState.SELECTING

    engine.select_mode("b")
    engine.submit_answer("10")
    assert ledger.is_complete(ActivityId.POLYGON_AREA)


def test_start_activity_can_select_mode_directly() -> None:
    engine, _, _ = _engine(modes=("a", "b"))
    assert engine.start_activity("b") is Outcome.ACCEPTED
    assert engine.state is TaskState.IN_PROGRESS
    assert engine.current_problem is not None
    assert engine.current_problem.item_id == "b"


def test_settlement_events_record_elapsed_time() -> None:
    engine, _, _ = _engine(time_limit_s=5)
    engine.start_activity()
    engine.tick()
    engine.tick()
    engine.submit_answer("10")
    (event,) = engine.events()
    assert event.outcome is Outcome.CORRECT
    assert event.elapsed_s == 2
    assert event.points == 3
    assert event.attempts_used == 0


def test_count_unsolved_bounds_the_run() -> None:
    engine, _, ledger = _engine(required=2, count_unsolved=True, time_limit_s=2)
    engine.start_activity()
    for _ in range(3):
        engine.submit_answer("0")
    engine.next_problem()
    assert engine.current_problem is not None
    assert engine.current_problem.item_id == "i1"

    engine.tick()
    assert engine.tick() is Outcome.EXPIRED
    assert ledger.is_complete(ActivityId.POLYGON_AREA)
    assert ledger.score == 0
    engine.next_problem()
    assert engine.state is TaskState.IDLE


def test_mode_starts_run_discards_open_progress() -> None:
    engine, gen, _ = _engine(required=3, modes=("a", "b"), mode_starts_run=True)
    engine.start_activity("a")
    engine.submit_answer("10")
    assert engine.progress.completed_count == 1
    engine.exit_activity()

    engine.start_activity()
    assert engine.progress.completed_count == 1
    engine.select_mode("b")
    assert engine.progress.completed_count == 0
    assert gen.runs == 3


def test_activity_config_validation() -> None:
    with pytest.raises(ValueError):
        ActivityConfig(activity=ActivityId.SECTOR_AREA, title="t", instructions=(), required_count=0)
    with pytest.raises(ValueError):
        ActivityConfig(
            activity=ActivityId.SECTOR_AREA,
            title="t",
            instructions=(),
            required_count=1,
            reselect_after_settle=True,
        )
    with pytest.raises(ValueError):
        ActivityConfig(
            activity=ActivityId.SECTOR_AREA,
            title="t",
            instructions=(),
            required_count=1,
            modes=("a", "a"),
        )
    with pytest.raises(ValueError):
        ActivityConfig(
            activity=ActivityId.SECTOR_AREA,
            title="t",
            instructions=(),
            required_count=1,
            mode_starts_run=True,
        )
