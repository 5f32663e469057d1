"""One parameterised state machine drives all six Shapeville activities.

Lifecycle of an activity run::

    IDLE -> (SELECTING) -> IN_PROGRESS -> SETTLED -> IN_PROGRESS | SELECTING | IDLE

Activities differ only in their ``ActivityConfig`` and ``ContentGenerator``.
Every command is dispatched from a single thread (the UI loop); commands that
make no sense in the current state return ``Outcome.REJECTED`` and change
nothing. The countdown for the active problem is cancelled on every path out
of IN_PROGRESS: settlement, a new problem, exit and reset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .geometry_core import (
    ActivityId,
    ActivityProgress,
    AttemptTracker,
    ContentGenerator,
    Countdown,
    EnabledControls,
    Outcome,
    Problem,
    SettlementEvent,
    TaskSnapshot,
    TaskState,
    parse_numeric,
)
from .ledger import SessionLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActivityConfig:
    activity: ActivityId
    title: str
    instructions: tuple[str, ...]
    required_count: int
    modes: tuple[str, ...] = ()
    # When modes are items (e.g. "Triangle", "Figure 3") a solved mode is disabled.
    modes_are_items: bool = False
    # Return to the selection surface after every settled problem.
    reselect_after_settle: bool = False
    # Exhausted and expired items also count toward required_count, so each
    # item is dealt once and the run ends after required_count settlements.
    count_unsolved: bool = False
    # Choosing a mode discards the open run and starts a new one.
    mode_starts_run: bool = False
    selection_prompt: str = "Choose what to practise."
    input_hint: str = "Type your answer then press Enter"

    def __post_init__(self) -> None:
        if self.required_count <= 0:
            raise ValueError("required_count must be > 0")
        if self.reselect_after_settle and not self.modes:
            raise ValueError("reselect_after_settle needs at least one mode")
        if self.mode_starts_run and not self.modes:
            raise ValueError("mode_starts_run needs at least one mode")
        if len(set(self.modes)) != len(self.modes):
            raise ValueError("modes must be unique")


class ActivityEngine:
    """Task state machine for one activity, reporting into an injected ledger."""

    def __init__(
        self,
        *,
        config: ActivityConfig,
        generator: ContentGenerator,
        ledger: SessionLedger,
    ) -> None:
        self._config = config
        self._generator = generator
        self._ledger = ledger

        self._state = TaskState.IDLE
        self._mode: str | None = None
        self._run_active = False
        self._progress = ActivityProgress(required_count=config.required_count)

        self._tracker: AttemptTracker | None = None
        self._countdown: Countdown | None = None

        self._feedback = ""
        self._last_outcome: Outcome | None = None
        self._reveal: str | None = None
        self._events: list[SettlementEvent] = []

    # -- read accessors ---------------------------------------------------

    @property
    def config(self) -> ActivityConfig:
        return self._config

    @property
    def activity(self) -> ActivityId:
        return self._config.activity

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def mode(self) -> str | None:
        return self._mode

    @property
    def progress(self) -> ActivityProgress:
        return self._progress

    @property
    def current_problem(self) -> Problem | None:
        return None if self._tracker is None else self._tracker.problem

    @property
    def attempts_remaining(self) -> int:
        return 0 if self._tracker is None else self._tracker.attempts_remaining

    @property
    def countdown_running(self) -> bool:
        return self._countdown is not None and self._countdown.running

    def time_remaining_s(self) -> int | None:
        if self._tracker is None or self._state not in (TaskState.IN_PROGRESS, TaskState.SETTLED):
            return None
        return self._tracker.state.remaining_s

    def events(self) -> list[SettlementEvent]:
        return list(self._events)

    def can_exit(self) -> bool:
        # Leaving mid-problem discards it, so the UI confirms first.
        return self._state is not TaskState.IN_PROGRESS

    def enabled_modes(self) -> frozenset[str]:
        if not self._config.modes_are_items:
            return frozenset(self._config.modes)
        return frozenset(m for m in self._config.modes if m not in self._progress.completed_item_ids)

    # -- commands ---------------------------------------------------------

    def start_activity(self, mode: str | None = None) -> Outcome:
        """Enter the activity. Starts a new run unless one is still open."""

        if self._state is not TaskState.IDLE:
            return Outcome.REJECTED

        if not self._run_active:
            self._begin_run()

        self._feedback = ""
        self._last_outcome = None
        self._reveal = None

        if not self._config.modes:
            self._deal_problem()
            return Outcome.ACCEPTED

        self._state = TaskState.SELECTING
        if mode is None:
            return Outcome.ACCEPTED
        return self.select_mode(mode)

    def select_mode(self, mode: str) -> Outcome:
        if mode not in self._config.modes:
            raise ValueError(f"unknown mode {mode!r} for {self._config.activity.value}")
        if self._state is not TaskState.SELECTING:
            return Outcome.REJECTED
        if mode not in self.enabled_modes():
            self._feedback = "You have already completed this one! Pick another."
            return Outcome.ALREADY_COMPLETED

        if self._config.mode_starts_run:
            self._begin_run()
        self._mode = mode
        self._deal_problem()
        return Outcome.ACCEPTED

    def submit_answer(self, raw: str) -> Outcome:
        if self._state is not TaskState.IN_PROGRESS:
            return Outcome.REJECTED
        tracker = self._tracker
        assert tracker is not None

        # Ticks are applied before answers within one dispatch, so an expired
        # countdown always wins over an answer that arrives on the same tick.
        if self._countdown is not None and self._countdown.expired:
            return self._expire(tracker.problem)

        problem = tracker.problem
        answer: float | str
        if problem.is_numeric:
            value = parse_numeric(raw)
            if value is None:
                self._feedback = "Invalid input! Please enter a number."
                self._last_outcome = Outcome.INVALID_NUMERIC
                return Outcome.INVALID_NUMERIC
            answer = value
        else:
            answer = raw.strip()
            if answer == "":
                self._feedback = "Please type an answer."
                return Outcome.REJECTED

        outcome = tracker.record_attempt(answer)
        if outcome is Outcome.INCORRECT_RETRY:
            left = tracker.attempts_remaining
            plural = "attempt" if left == 1 else "attempts"
            self._feedback = f"Incorrect! You have {left} {plural} left."
            self._last_outcome = outcome
            return outcome

        self._settle(outcome)
        return outcome

    def tick(self) -> Outcome | None:
        """Advance the active countdown by one second."""

        if self._state is not TaskState.IN_PROGRESS or self._countdown is None:
            return None
        countdown = self._countdown
        expired = countdown.tick()
        if self._tracker is not None and not self._tracker.state.settled:
            self._tracker.state.remaining_s = countdown.remaining_s
        return Outcome.EXPIRED if expired else None

    def request_reveal(self) -> str | None:
        """Return the worked answer once a problem has settled without success."""

        if self._state is not TaskState.SETTLED:
            return None
        if self._last_outcome not in (Outcome.INCORRECT_EXHAUSTED, Outcome.EXPIRED):
            return None
        self._feedback = self._reveal or ""
        return self._reveal

    def next_problem(self) -> Outcome:
        if self._state is not TaskState.SETTLED:
            return Outcome.REJECTED

        if self._progress.is_complete:
            self._ledger.mark_complete(self._config.activity)
            self._finish_run()
            self._feedback = f"Congratulations! You have completed {self._config.title}!"
            return Outcome.ACCEPTED

        self._feedback = ""
        self._reveal = None
        if self._config.reselect_after_settle:
            self._stop_countdown()
            self._tracker = None
            self._mode = None
            self._state = TaskState.SELECTING
            return Outcome.ACCEPTED

        self._deal_problem()
        return Outcome.ACCEPTED

    def exit_activity(self) -> None:
        """Leave the activity. An unsettled problem is dropped without penalty."""

        self._stop_countdown()
        self._tracker = None
        self._mode = None
        self._reveal = None
        self._feedback = ""
        self._state = TaskState.IDLE
        if self._progress.is_complete:
            self._run_active = False

    def reset_activity(self) -> None:
        """Leave the activity and discard this run's progress."""

        self.exit_activity()
        self._run_active = False
        self._progress = ActivityProgress(required_count=self._config.required_count)
        self._last_outcome = None

    # -- snapshot ---------------------------------------------------------

    def snapshot(self) -> TaskSnapshot:
        problem = self.current_problem
        return TaskSnapshot(
            title=self._config.title,
            activity=self._config.activity,
            state=self._state,
            mode=self._mode,
            prompt=self.current_prompt(),
            input_hint=self._config.input_hint,
            asset_key=None if problem is None else problem.asset_key,
            attempts_remaining=self.attempts_remaining,
            max_attempts=0 if problem is None else problem.max_attempts,
            time_remaining_s=self.time_remaining_s(),
            feedback=self._feedback,
            last_outcome=self._last_outcome,
            reveal=self._reveal,
            completed_count=self._progress.completed_count,
            required_count=self._progress.required_count,
            controls=self.enabled_controls(),
            payload=None if problem is None else problem.payload,
        )

    def current_prompt(self) -> str:
        if self._state is TaskState.IDLE:
            return "Press Enter to begin."
        if self._state is TaskState.SELECTING:
            return self._config.selection_prompt
        problem = self.current_problem
        return "" if problem is None else problem.prompt

    def enabled_controls(self) -> EnabledControls:
        if self._state is TaskState.SELECTING:
            return EnabledControls(modes=self.enabled_modes())
        if self._state is TaskState.IN_PROGRESS:
            return EnabledControls(answer_entry=True, submit=True)
        if self._state is TaskState.SETTLED:
            return EnabledControls(
                next=True,
                reveal=self._last_outcome in (Outcome.INCORRECT_EXHAUSTED, Outcome.EXPIRED),
            )
        return EnabledControls()

    # -- internals --------------------------------------------------------

    def _begin_run(self) -> None:
        self._progress = ActivityProgress(required_count=self._config.required_count)
        self._generator.begin_run()
        self._run_active = True
        logger.debug("activity %s: new run", self._config.activity.value)

    def _finish_run(self) -> None:
        self._stop_countdown()
        self._tracker = None
        self._mode = None
        self._reveal = None
        self._run_active = False
        self._state = TaskState.IDLE

    def _deal_problem(self) -> None:
        self._stop_countdown()
        problem = self._generator.next_problem(mode=self._mode, excluded=self._progress.excluded())
        self._start_problem(problem)

    def _start_problem(self, problem: Problem) -> None:
        self._stop_countdown()
        self._tracker = AttemptTracker(problem)
        self._countdown = Countdown(
            problem.time_limit_s,
            on_expire=lambda: self._expire(problem),
        )
        self._reveal = None
        self._state = TaskState.IN_PROGRESS
        logger.debug(
            "activity %s: problem %s (%ss)",
            self._config.activity.value,
            problem.item_id,
            problem.time_limit_s,
        )

    def _expire(self, problem: Problem) -> Outcome:
        tracker = self._tracker
        if tracker is None or tracker.problem is not problem or tracker.state.settled:
            return Outcome.REJECTED
        tracker.expire()
        self._settle(Outcome.EXPIRED)
        return Outcome.EXPIRED

    def _settle(self, outcome: Outcome) -> None:
        tracker = self._tracker
        assert tracker is not None
        try:
            problem = tracker.problem
            st = tracker.state
            self._last_outcome = outcome
            if outcome is Outcome.CORRECT:
                self._ledger.award(st.points)
                self._progress.add(problem.item_id)
                self._feedback = f"Great job! You earned {st.points} points!"
            elif outcome is Outcome.INCORRECT_EXHAUSTED:
                self._reveal = problem.reveal
                self._feedback = f"Incorrect! {problem.reveal}"
            else:
                self._reveal = problem.reveal
                self._feedback = f"Time's up! {problem.reveal}"
            if outcome is not Outcome.CORRECT and self._config.count_unsolved:
                self._progress.add(problem.item_id)

            self._events.append(
                SettlementEvent(
                    index=len(self._events),
                    activity=self._config.activity,
                    item_id=problem.item_id,
                    outcome=outcome,
                    attempts_used=st.attempts_used,
                    points=st.points,
                    elapsed_s=problem.time_limit_s - st.remaining_s,
                )
            )
            logger.info(
                "activity %s: %s settled %s (+%d)",
                self._config.activity.value,
                problem.item_id,
                outcome.value,
                st.points,
            )

            if self._progress.is_complete:
                self._ledger.mark_complete(self._config.activity)
        finally:
            self._stop_countdown()
            self._state = TaskState.SETTLED

    def _stop_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None
