# dealgame/domain/scoring.py
from __future__ import annotations

from typing import Sequence

from .policies import total_acquisition_cost
from .types import Decision, PropertyCase, RedFlag, ScoreResult

# --- Decision point table ---
BUY_GOOD_POINTS = 100
BUY_BAD_POINTS = -150
MISSED_SEVERE_PENALTY = -50
WALK_AWAY_BAD_POINTS = 50
WALK_AWAY_GOOD_POINTS = -50
INVESTIGATE_POINTS = 10

# --- Red flag points ---
FLAG_REVEAL_POINTS = 25
QUIZ_CORRECT_POINTS = 50
QUIZ_CORRECT_CRITICAL_POINTS = 75
QUIZ_WRONG_POINTS = -25


def format_currency(amount: float) -> str:
    return f"${abs(amount):,.0f}"


def quiz_answer_points(flag: RedFlag) -> int:
    """
    Points for an answered quiz flag. Unanswered or non-quiz flags score 0.
    """
    if not flag.is_quiz or flag.user_answer is None:
        return 0
    if flag.answered_correctly:
        return QUIZ_CORRECT_CRITICAL_POINTS if flag.is_critical else QUIZ_CORRECT_POINTS
    return QUIZ_WRONG_POINTS


def evaluate(
    decision: Decision,
    *,
    is_good_deal: bool,
    undiscovered_flags: Sequence[RedFlag],
    missed_severe_flags: Sequence[RedFlag],
    profit: float,
) -> ScoreResult:
    """
    Pure decision evaluator.

    `profit` is actual_value minus the total acquisition cost (auction price,
    repairs and surviving liens); its magnitude is
    quoted as the profit (good deal) or the loss (bad deal) in the explanation.
    """
    if decision == Decision.BUY:
        if is_good_deal:
            return ScoreResult(
                points=BUY_GOOD_POINTS,
                message="Excellent Decision!",
                explanation=f"This was a solid deal! You'll make approximately {format_currency(profit)} profit.",
            )

        points = BUY_BAD_POINTS
        parts = ["This was a trap!"]
        parts.extend(f.description for f in undiscovered_flags)
        if missed_severe_flags:
            points += MISSED_SEVERE_PENALTY
            n = len(missed_severe_flags)
            parts.append(f"You missed {n} critical red flag{'s' if n != 1 else ''}.")
        parts.append(f"You would lose approximately {format_currency(profit)}.")
        return ScoreResult(points=points, message="Bad Investment!", explanation=" ".join(parts))

    if decision == Decision.WALK_AWAY:
        if not is_good_deal:
            hint = (
                undiscovered_flags[0].description
                if undiscovered_flags
                else "There were hidden issues that would have cost you."
            )
            return ScoreResult(
                points=WALK_AWAY_BAD_POINTS,
                message="Smart Move!",
                explanation=f"Good instincts! You avoided a bad deal. {hint}",
            )
        return ScoreResult(
            points=WALK_AWAY_GOOD_POINTS,
            message="Missed Opportunity",
            explanation=(
                "This was actually a good deal. You were too cautious and missed out on "
                f"approximately {format_currency(profit)} profit."
            ),
        )

    if decision == Decision.INVESTIGATE:
        return ScoreResult(
            points=INVESTIGATE_POINTS,
            message="More Research Needed",
            explanation=(
                "In a real auction, you don't have time to investigate further. "
                "You need to decide now: BUY or WALK AWAY."
            ),
        )

    raise ValueError(f"Unknown decision: {decision!r}")


def evaluate_case(decision: Decision, case: PropertyCase) -> ScoreResult:
    return evaluate(
        decision,
        is_good_deal=case.is_good_deal,
        undiscovered_flags=case.undiscovered_flags(),
        missed_severe_flags=case.missed_severe_flags(),
        profit=case.actual_value - total_acquisition_cost(case),
    )
