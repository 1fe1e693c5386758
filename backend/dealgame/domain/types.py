# dealgame/domain/types.py
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class Severity(str, Enum):
    red_herring = "red-herring"
    low = "low"
    medium = "medium"
    high = "high"
    severe = "severe"


# severities that cost extra when missed on a bad BUY, and pay more on a correct quiz answer
CRITICAL_SEVERITIES: frozenset[Severity] = frozenset({Severity.high, Severity.severe})

# severities that don't count as "hidden issues" when explaining a decision
MINOR_SEVERITIES: frozenset[Severity] = frozenset({Severity.red_herring, Severity.low})


class Decision(str, Enum):
    BUY = "BUY"
    INVESTIGATE = "INVESTIGATE"
    WALK_AWAY = "WALK_AWAY"


class Occupancy(str, Enum):
    vacant = "vacant"
    occupied = "occupied"
    unknown = "unknown"


@dataclass(frozen=True)
class Lien:
    type: str
    holder: str
    amount: float
    priority: int
    notes: str | None = None
    # set when the case is authored; a surviving lien transfers to the buyer
    survives_foreclosure: bool = False


@dataclass(frozen=True)
class RedFlag:
    id: str
    description: str
    severity: Severity
    hidden_in: str
    discovered: bool = False

    # optional quiz
    question: str | None = None
    choices: tuple[str, ...] = ()
    correct_choice: int | None = None
    answer_explanation: str | None = None
    user_answer: int | None = None

    @property
    def is_quiz(self) -> bool:
        return bool(self.question) and len(self.choices) > 0

    @property
    def is_critical(self) -> bool:
        return self.severity in CRITICAL_SEVERITIES

    @property
    def answered_correctly(self) -> bool:
        return self.is_quiz and self.user_answer is not None and self.user_answer == self.correct_choice

    def reset(self) -> "RedFlag":
        return replace(self, discovered=False, user_answer=None)


@dataclass(frozen=True)
class PropertyCase:
    id: str
    address: str
    city: str
    state: str
    zip: str

    property_value: float
    auction_price: float
    repair_estimate: float
    actual_value: float  # ground truth after hidden costs
    is_good_deal: bool

    occupancy_status: Occupancy
    liens: tuple[Lien, ...]
    red_flags: tuple[RedFlag, ...]
    photos: tuple[str, ...] = ()
    description: str = ""
    hoa_fees: float | None = None

    repair_estimate_min: float | None = None
    repair_estimate_max: float | None = None

    property_type: str | None = None
    beds: float | None = None
    baths: float | None = None
    sqft: int | None = None
    year_built: int | None = None

    @property
    def potential_profit(self) -> float:
        """What the listing suggests, before any red flag is considered."""
        return self.property_value - self.auction_price - self.repair_estimate

    def flag(self, flag_id: str) -> RedFlag | None:
        return next((f for f in self.red_flags if f.id == flag_id), None)

    def with_flag(self, updated: RedFlag) -> "PropertyCase":
        flags = tuple(updated if f.id == updated.id else f for f in self.red_flags)
        return replace(self, red_flags=flags)

    def undiscovered_flags(self) -> tuple[RedFlag, ...]:
        """Hidden issues that matter: not discovered, not low/red-herring."""
        return tuple(f for f in self.red_flags if not f.discovered and f.severity not in MINOR_SEVERITIES)

    def missed_severe_flags(self) -> tuple[RedFlag, ...]:
        return tuple(f for f in self.red_flags if not f.discovered and f.is_critical)


@dataclass(frozen=True)
class GameScore:
    points: int = 0
    cases_solved: int = 0
    good_deals: int = 0
    bad_deals_avoided: int = 0
    mistakes: int = 0
    red_flags_found: int = 0
    red_flag_correct: int = 0
    red_flag_mistakes: int = 0

    def to_payload(self) -> dict[str, int]:
        """Shape expected by POST /api/game/sessions."""
        return {
            "points": self.points,
            "casesSolved": self.cases_solved,
            "goodDeals": self.good_deals,
            "badDealsAvoided": self.bad_deals_avoided,
            "mistakes": self.mistakes,
            "redFlagsFound": self.red_flags_found,
            "redFlagCorrect": self.red_flag_correct,
            "redFlagMistakes": self.red_flag_mistakes,
        }


@dataclass(frozen=True)
class ScoreResult:
    points: int
    message: str
    explanation: str
