# dealgame/domain/score.py
from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .scoring import quiz_answer_points
from .types import Decision, GameScore, RedFlag


def new_score() -> GameScore:
    return GameScore()


def record_flag_found(score: GameScore, points: int = 0) -> GameScore:
    return replace(
        score,
        points=score.points + points,
        red_flags_found=score.red_flags_found + 1,
    )


def record_quiz_answers(score: GameScore, flags: Iterable[RedFlag]) -> tuple[GameScore, int]:
    """
    Settle answered quiz flags. Returns (new score, points added).
    """
    total = 0
    correct = 0
    wrong = 0
    for f in flags:
        if not f.is_quiz or f.user_answer is None:
            continue
        total += quiz_answer_points(f)
        if f.answered_correctly:
            correct += 1
        else:
            wrong += 1

    return (
        replace(
            score,
            points=score.points + total,
            red_flag_correct=score.red_flag_correct + correct,
            red_flag_mistakes=score.red_flag_mistakes + wrong,
        ),
        total,
    )


def record_decision(score: GameScore, decision: Decision, *, is_good_deal: bool, points: int) -> GameScore:
    """
    casesSolved always moves; at most one of good_deals / bad_deals_avoided / mistakes does.
    """
    good = bad_avoided = mistake = 0
    if decision == Decision.BUY:
        if is_good_deal:
            good = 1
        else:
            mistake = 1
    elif decision == Decision.WALK_AWAY:
        if is_good_deal:
            mistake = 1
        else:
            bad_avoided = 1

    return replace(
        score,
        points=score.points + points,
        cases_solved=score.cases_solved + 1,
        good_deals=score.good_deals + good,
        bad_deals_avoided=score.bad_deals_avoided + bad_avoided,
        mistakes=score.mistakes + mistake,
    )
