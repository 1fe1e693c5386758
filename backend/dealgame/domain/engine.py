# dealgame/domain/engine.py
"""
Gameplay state machine.

All state lives in frozen GameState objects; every command takes a state and
returns a new one. The decision path (submit_decision) and the timeout path
(tick/on_timeout) both go through _resolve(), which is a no-op once the current
case has a result. That single guard is what keeps a late timer tick from
double-scoring a case.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Protocol, Union

from . import red_flags, score as score_ops
from .errors import NoCasesRemaining
from .red_flags import FlagAction
from .scoring import FLAG_REVEAL_POINTS, evaluate_case
from .timer import DEFAULT_BUDGET_S, SessionTimer, TimerStatus, tick as timer_tick
from .types import Decision, GameScore, PropertyCase, ScoreResult


class CaseSource(Protocol):
    def get_random_case(self, exclude_ids: Iterable[str] = ()) -> PropertyCase: ...


class GameMode(str, Enum):
    regular = "regular"
    daily = "daily"


@dataclass(frozen=True)
class CaseState:
    case: PropertyCase
    timer: SessionTimer
    decision: Decision | None = None
    result: ScoreResult | None = None
    pending_quiz_flag: str | None = None
    # flag reveals + settled quiz answers + decision points for this case only
    case_points: int = 0

    @property
    def resolved(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class GameState:
    mode: GameMode
    score: GameScore
    completed_case_ids: tuple[str, ...] = ()
    current: CaseState | None = None
    challenge_id: int | None = None
    time_budget_s: int = DEFAULT_BUDGET_S


# --- persistence commands produced by the engine (the host performs them) ---
@dataclass(frozen=True)
class SessionSnapshot:
    score: GameScore

    def to_payload(self) -> dict[str, int]:
        return self.score.to_payload()


@dataclass(frozen=True)
class ChallengeCompletion:
    challenge_id: int
    decision: Decision
    points_earned: int
    time_taken: int

    def to_payload(self) -> dict[str, object]:
        return {
            "decision": self.decision.value,
            "points_earned": self.points_earned,
            "time_taken": self.time_taken,
        }


PersistCommand = Union[SessionSnapshot, ChallengeCompletion]


@dataclass(frozen=True)
class DecisionOutcome:
    case_id: str
    decision: Decision
    result: ScoreResult
    quiz_points: int
    forced: bool
    time_taken: int
    persist: PersistCommand


# -----------------------------
# Game lifecycle
# -----------------------------
def _case_state(case: PropertyCase, budget_s: int) -> CaseState:
    return CaseState(case=case, timer=SessionTimer.start(budget_s))


def start_regular_game(cases: CaseSource, *, time_budget_s: int = DEFAULT_BUDGET_S) -> GameState:
    state = GameState(mode=GameMode.regular, score=score_ops.new_score(), time_budget_s=time_budget_s)
    return load_next_case(state, cases)


def start_daily_challenge(
    case: PropertyCase,
    challenge_id: int,
    *,
    time_budget_s: int = DEFAULT_BUDGET_S,
) -> GameState:
    return GameState(
        mode=GameMode.daily,
        score=score_ops.new_score(),
        current=_case_state(case, time_budget_s),
        challenge_id=challenge_id,
        time_budget_s=time_budget_s,
    )


def load_next_case(state: GameState, cases: CaseSource) -> GameState:
    """
    Regular mode only. Once every case has been seen, start over from the full set.
    """
    if state.mode != GameMode.regular:
        raise ValueError("a daily challenge has a single case")

    completed = state.completed_case_ids
    try:
        case = cases.get_random_case(completed)
    except NoCasesRemaining:
        completed = ()
        case = cases.get_random_case(completed)

    return replace(state, completed_case_ids=completed, current=_case_state(case, state.time_budget_s))


def exit_game(state: GameState) -> GameState:
    """
    Leaving mid-game. Every decided case was already persisted when it was
    decided; nothing is saved for the unresolved case.
    """
    return replace(state, current=None)


# -----------------------------
# Red flags
# -----------------------------
def select_flag(state: GameState, flag_id: str) -> GameState:
    cur = state.current
    if cur is None or cur.resolved:
        return state

    case, action = red_flags.select_flag(cur.case, flag_id)
    if action == FlagAction.quiz_opened:
        return replace(state, current=replace(cur, pending_quiz_flag=flag_id))
    if action == FlagAction.revealed:
        return replace(
            state,
            score=score_ops.record_flag_found(state.score, FLAG_REVEAL_POINTS),
            current=replace(cur, case=case, case_points=cur.case_points + FLAG_REVEAL_POINTS),
        )
    return state


def cancel_quiz(state: GameState) -> GameState:
    cur = state.current
    if cur is None or cur.pending_quiz_flag is None:
        return state
    return replace(state, current=replace(cur, pending_quiz_flag=None))


def submit_quiz_answer(state: GameState, flag_id: str, choice: int) -> GameState:
    """
    Marks the quiz flag discovered and records the answer. Its points are
    settled when the case is decided.
    """
    cur = state.current
    if cur is None or cur.resolved:
        return state

    case, action = red_flags.answer_quiz(cur.case, flag_id, choice)
    if action != FlagAction.answered:
        return state

    pending = None if cur.pending_quiz_flag == flag_id else cur.pending_quiz_flag
    return replace(
        state,
        score=score_ops.record_flag_found(state.score),
        current=replace(cur, case=case, pending_quiz_flag=pending),
    )


# -----------------------------
# Decisions and time
# -----------------------------
def submit_decision(state: GameState, decision: Decision | str | None) -> tuple[GameState, DecisionOutcome | None]:
    if decision is None:
        return state, None
    return _resolve(state, Decision(decision), forced=False)


def on_timeout(state: GameState) -> tuple[GameState, DecisionOutcome | None]:
    """Time ran out: the engine walks away on the player's behalf."""
    return _resolve(state, Decision.WALK_AWAY, forced=True)


def tick(state: GameState) -> tuple[GameState, DecisionOutcome | None]:
    cur = state.current
    if cur is None:
        return state, None

    timer, expired_now = timer_tick(cur.timer, decided=cur.resolved)
    if timer is cur.timer:
        return state, None

    state = replace(state, current=replace(cur, timer=timer))
    if expired_now:
        return on_timeout(state)
    return state, None


def _resolve(state: GameState, decision: Decision, *, forced: bool) -> tuple[GameState, DecisionOutcome | None]:
    cur = state.current
    if cur is None or cur.resolved:
        return state, None

    case = cur.case
    result = evaluate_case(decision, case)

    new_score, quiz_points = score_ops.record_quiz_answers(state.score, case.red_flags)
    new_score = score_ops.record_decision(new_score, decision, is_good_deal=case.is_good_deal, points=result.points)

    time_taken = cur.timer.budget_s if forced else cur.timer.elapsed_s
    case_points = cur.case_points + quiz_points + result.points

    persist: PersistCommand
    if state.mode == GameMode.daily and state.challenge_id is not None:
        persist = ChallengeCompletion(
            challenge_id=state.challenge_id,
            decision=decision,
            points_earned=case_points,
            time_taken=time_taken,
        )
    else:
        persist = SessionSnapshot(score=new_score)

    timer = cur.timer
    if forced and not timer.expired:
        timer = replace(timer, remaining_s=0, status=TimerStatus.expired)

    new_state = replace(
        state,
        score=new_score,
        completed_case_ids=state.completed_case_ids + (case.id,),
        current=replace(
            cur,
            timer=timer,
            decision=decision,
            result=result,
            pending_quiz_flag=None,
            case_points=case_points,
        ),
    )
    outcome = DecisionOutcome(
        case_id=case.id,
        decision=decision,
        result=result,
        quiz_points=quiz_points,
        forced=forced,
        time_taken=time_taken,
        persist=persist,
    )
    return new_state, outcome
