# tests/conftest.py
from datetime import date
from typing import Any

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dealgame.db import get_session
from dealgame.domain.types import Lien, Occupancy, PropertyCase, RedFlag, Severity
from dealgame.entrypoints.api.deps import get_today
from dealgame.entrypoints.fastapi_app import create_app
from dealgame.models import Base, User

TODAY = date(2025, 3, 14)


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
async def users(async_session_maker) -> list[User]:
    async with async_session_maker() as session:
        rows = [
            User(email="alice@example.com", name="Alice Auction", username="alice"),
            User(email="bob@example.com", name="Bob Bidder"),
            User(email="carol@example.com"),
        ]
        session.add_all(rows)
        await session.commit()
        return rows


@pytest.fixture
async def client(async_session_maker):
    app = create_app()

    async def _session_override():
        async with async_session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_today] = lambda: TODAY

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        c.app = app
        yield c


# -----------------------------
# Domain builders
# -----------------------------
def _flag(
    flag_id: str = "f1",
    severity: Severity = Severity.high,
    *,
    quiz: bool = False,
    correct: int = 1,
    description: str | None = None,
) -> RedFlag:
    kw: dict[str, Any] = {}
    if quiz:
        kw = dict(question="What happens to this lien?", choices=("Wiped", "Survives", "Halved"), correct_choice=correct)
    return RedFlag(
        id=flag_id,
        description=description or f"issue {flag_id}",
        severity=severity,
        hidden_in="Title Report",
        **kw,
    )


def _case(
    case_id: str = "c1",
    *,
    is_good_deal: bool = True,
    auction_price: float = 140000,
    repair_estimate: float = 35000,
    actual_value: float = 245000,
    flags: tuple[RedFlag, ...] = (),
    liens: tuple[Lien, ...] = (),
) -> PropertyCase:
    return PropertyCase(
        id=case_id,
        address="1 Test St",
        city="Detroit",
        state="MI",
        zip="48201",
        property_value=actual_value,
        auction_price=auction_price,
        repair_estimate=repair_estimate,
        actual_value=actual_value,
        is_good_deal=is_good_deal,
        occupancy_status=Occupancy.vacant,
        liens=liens,
        red_flags=flags,
    )


@pytest.fixture
def make_flag():
    return _flag


@pytest.fixture
def make_case():
    return _case


class ListCaseSource:
    """In-order case source for engine tests."""

    def __init__(self, cases: list[PropertyCase]) -> None:
        self.cases = cases
        self.calls: list[tuple[str, ...]] = []

    def get_random_case(self, exclude_ids=()) -> PropertyCase:
        from dealgame.domain.errors import NoCasesRemaining

        excluded = tuple(exclude_ids)
        self.calls.append(excluded)
        for c in self.cases:
            if c.id not in excluded:
                return c
        raise NoCasesRemaining("all cases excluded")


@pytest.fixture
def case_source():
    return ListCaseSource


# generated-scenario shape, as stored in daily_challenges.property_data
SCENARIO: dict[str, Any] = {
    "address": "13 Haunted Hollow Rd",
    "city": "Salem",
    "state": "MA",
    "zipCode": "01970",
    "propertyType": "Single Family Home",
    "beds": 4,
    "baths": 2,
    "sqft": 2100,
    "yearBuilt": 1952,
    "auctionPrice": 120000,
    "estimatedValue": 260000,
    "estimatedRepairs": 30000,
    "monthlyRent": 2100,
    "actualValue": 240000,
    "isGoodDeal": True,
    "occupancyStatus": "vacant",
    "description": "A charming colonial with a very enthusiastic attic.",
    "funnyStory": "The attic hosts a bat book club. The stairs creak in C minor.",
    "photos": ["🏠 Front view", "🦇 Attic"],
    "liens": [
        {"type": "First Mortgage", "holder": "Bay State Bank", "amount": 150000, "priority": 1},
        {"type": "Tax Lien", "holder": "City of Salem", "amount": 6000, "priority": 0, "survivesForeclosure": True},
    ],
    "redFlags": [
        {"type": "Structural", "description": "Attic joists need sistering", "severity": "medium", "impact": "$8k"},
        {"type": "Tax Records", "description": "Back taxes survive the sale", "severity": "low", "impact": "$6k"},
    ],
    "hiddenIssues": ["Bats"],
    "correctDecision": "BUY",
    "explanation": "120k + 30k + 6k is well under 240k.",
}


@pytest.fixture
def scenario() -> dict[str, Any]:
    import copy

    return copy.deepcopy(SCENARIO)
