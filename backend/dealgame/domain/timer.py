# dealgame/domain/timer.py
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

DEFAULT_BUDGET_S = 300


class TimerStatus(str, Enum):
    running = "running"
    expired = "expired"


@dataclass(frozen=True)
class SessionTimer:
    budget_s: int = DEFAULT_BUDGET_S
    remaining_s: int = DEFAULT_BUDGET_S
    status: TimerStatus = TimerStatus.running

    @classmethod
    def start(cls, budget_s: int = DEFAULT_BUDGET_S) -> "SessionTimer":
        if budget_s <= 0:
            raise ValueError("timer budget must be positive")
        return cls(budget_s=budget_s, remaining_s=budget_s)

    @property
    def elapsed_s(self) -> int:
        return self.budget_s - self.remaining_s

    @property
    def expired(self) -> bool:
        return self.status == TimerStatus.expired


def tick(timer: SessionTimer, *, decided: bool) -> tuple[SessionTimer, bool]:
    """
    One second passes. Returns (timer, expired_now).

    No-op once a decision exists or the timer already expired, so expiry fires once.
    """
    if decided or timer.expired:
        return timer, False

    remaining = timer.remaining_s - 1
    if remaining <= 0:
        return replace(timer, remaining_s=0, status=TimerStatus.expired), True
    return replace(timer, remaining_s=remaining), False


def whole_seconds(elapsed_s: float, carry_s: float = 0.0) -> tuple[int, float]:
    """
    Converts wall-clock time into whole timer ticks for hosts that sample the
    clock irregularly. Returns (ticks, carry); feed carry into the next call so
    fractions of a second are not lost between samples.
    """
    total = max(0.0, elapsed_s) + carry_s
    ticks = int(total)
    return ticks, total - ticks
