# dealgame/domain/red_flags.py
from __future__ import annotations

from dataclasses import replace
from enum import Enum

from .types import PropertyCase


class FlagAction(str, Enum):
    ignored = "ignored"  # unknown id, or already discovered
    revealed = "revealed"  # simple flag, discovered now
    quiz_opened = "quiz_opened"  # quiz flag, waiting for an answer
    answered = "answered"  # quiz flag, discovered now with user_answer set


def select_flag(case: PropertyCase, flag_id: str) -> tuple[PropertyCase, FlagAction]:
    """
    Player clicks a flag.

    Simple flags are discovered immediately. Quiz flags only open their prompt;
    they stay undiscovered until answer_quiz().
    """
    flag = case.flag(flag_id)
    if flag is None or flag.discovered:
        return case, FlagAction.ignored

    if flag.is_quiz:
        return case, FlagAction.quiz_opened

    return case.with_flag(replace(flag, discovered=True)), FlagAction.revealed


def answer_quiz(case: PropertyCase, flag_id: str, choice: int) -> tuple[PropertyCase, FlagAction]:
    flag = case.flag(flag_id)
    if flag is None or flag.discovered or not flag.is_quiz:
        return case, FlagAction.ignored

    if not 0 <= choice < len(flag.choices):
        raise ValueError(f"choice {choice} out of range for flag {flag_id} ({len(flag.choices)} choices)")

    return case.with_flag(replace(flag, discovered=True, user_answer=choice)), FlagAction.answered
