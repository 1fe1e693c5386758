from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DecisionLiteral = Literal["BUY", "INVESTIGATE", "WALK_AWAY"]
DifficultyLiteral = Literal["easy", "medium", "hard"]


# ----- Users -----

class UserCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: str | None = None
    username: str | None = Field(default=None, max_length=80)


class UserOut(BaseModel):
    id: int
    email: str
    name: str | None = None
    username: str | None = None
    created_at: datetime


# ----- Regular game sessions -----

class GameSessionCreate(BaseModel):
    # the game client posts camelCase
    model_config = ConfigDict(populate_by_name=True)

    points: int
    cases_solved: int = Field(..., ge=0, alias="casesSolved")
    good_deals: int = Field(..., ge=0, alias="goodDeals")
    bad_deals_avoided: int = Field(..., ge=0, alias="badDealsAvoided")
    mistakes: int = Field(..., ge=0)
    red_flags_found: int = Field(..., ge=0, alias="redFlagsFound")
    red_flag_correct: int = Field(0, ge=0, alias="redFlagCorrect")
    red_flag_mistakes: int = Field(0, ge=0, alias="redFlagMistakes")


class GameSessionOut(BaseModel):
    id: int
    user_id: int
    points: int
    cases_solved: int
    good_deals: int
    bad_deals_avoided: int
    mistakes: int
    red_flags_found: int
    red_flag_correct: int
    red_flag_mistakes: int
    created_at: datetime


class UserStatsOut(BaseModel):
    total_games: int
    best_score: int | None = None
    average_score: float | None = None
    total_good_deals: int
    total_bad_deals_avoided: int
    total_mistakes: int
    total_red_flags: int
    lifetime_points: int
    current_streak: int


class LeaderboardRow(BaseModel):
    user_id: int
    display_name: str
    best_score: int | None = None
    games_played: int
    total_good_deals: int
    total_bad_deals_avoided: int


# ----- Daily challenges -----

class ChallengeOut(BaseModel):
    id: int
    challenge_date: date
    difficulty: str
    property_data: dict[str, Any]


class CompletionOut(BaseModel):
    id: int
    user_id: int
    challenge_id: int
    decision: str
    points_earned: int
    time_taken: int
    completed_at: datetime


class TodayChallengeOut(BaseModel):
    challenge: ChallengeOut
    case: dict[str, Any]
    user_completion: CompletionOut | None = None


class ChallengeByDateOut(BaseModel):
    challenge: ChallengeOut
    case: dict[str, Any]
    completed: bool
    completion: CompletionOut | None = None


class CompletionCreate(BaseModel):
    decision: DecisionLiteral
    points_earned: int = Field(
        ...,
        description=(
            "Whole case total: +25 per revealed flag, settled quiz points and the decision points. "
            "Daily leaderboards rank on this total, not on decision points alone."
        ),
    )
    time_taken: int = Field(..., ge=0)


class CompletionResult(BaseModel):
    completion: CompletionOut
    message: str = "Challenge completed successfully"


class HistoryItem(BaseModel):
    id: int
    challenge_date: date
    difficulty: str
    completed: bool
    completed_at: datetime | None = None
    decision: str | None = None
    points_earned: int | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ChallengeHistoryOut(BaseModel):
    challenges: list[HistoryItem]
    pagination: Pagination


class GenerateChallengeRequest(BaseModel):
    challenge_date: date | None = None
    difficulty: DifficultyLiteral | None = None


class DailyLeaderboardRow(BaseModel):
    rank: int
    username: str
    points: int
    time: int
    completed_at: datetime
