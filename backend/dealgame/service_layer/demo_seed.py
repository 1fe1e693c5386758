# dealgame/service_layer/demo_seed.py
from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Difficulty
from .daily_challenges import create_challenge, get_challenge_by_date
from .users import get_or_create_user

DEMO_USERS: list[dict[str, str | None]] = [
    {"email": "alice@example.com", "name": "Alice Auction", "username": "alice"},
    {"email": "bob@example.com", "name": "Bob Bidder", "username": None},
]

# same shape the scenario generator produces
DEMO_SCENARIO: dict[str, Any] = {
    "address": "404 Foundation Not Found Ln",
    "city": "Columbus",
    "state": "OH",
    "zipCode": "43215",
    "propertyType": "Single Family Home",
    "beds": 3,
    "baths": 2,
    "sqft": 1650,
    "yearBuilt": 1962,
    "auctionPrice": 95000,
    "estimatedValue": 210000,
    "estimatedRepairs": 40000,
    "monthlyRent": 1650,
    "actualValue": 150000,
    "isGoodDeal": False,
    "occupancyStatus": "occupied",
    "description": "Mid-century ranch with a suspiciously new basement carpet.",
    "funnyStory": (
        "The listing calls the basement 'a natural indoor pool'. Every door closes by itself, "
        "which the seller describes as 'smart home features'. The neighbors bring snacks to "
        "watch the gutters overflow."
    ),
    "photos": ["🏠 Front view", "🛋️ Living room", "🌊 Basement", "🍳 Kitchen"],
    "liens": [
        {"type": "First Mortgage", "holder": "Buckeye Savings", "amount": 160000, "priority": 1,
         "notes": "Foreclosing lender, wiped at sale", "survivesForeclosure": False},
        {"type": "Tax Lien", "holder": "Franklin County Treasurer", "amount": 18000, "priority": 0,
         "notes": "Survives foreclosure!", "survivesForeclosure": True},
    ],
    "redFlags": [
        {"type": "Foundation", "description": "Doors swinging shut point to a settling foundation",
         "severity": "high", "impact": "$35,000 in piering"},
        {"type": "Tax Records", "description": "Unpaid property taxes transfer to the buyer",
         "severity": "medium", "impact": "$18,000 owed to the county"},
    ],
    "hiddenIssues": ["Basement water intrusion"],
    "correctDecision": "WALK_AWAY",
    "explanation": "95,000 + 40,000 + 18,000 in surviving taxes = 153,000 against a 150,000 actual value.",
}


async def seed_demo(session: AsyncSession, *, challenge_date: date) -> dict[str, Any]:
    """
    Idempotent demo seed:
    - two demo users
    - a static daily challenge for challenge_date (left alone if one exists)
    """
    for u in DEMO_USERS:
        await get_or_create_user(session, u["email"] or "", name=u["name"], username=u["username"])

    created = False
    ch = await get_challenge_by_date(session, challenge_date)
    if not ch:
        ch = await create_challenge(session, challenge_date, Difficulty.medium, DEMO_SCENARIO)
        created = True

    return {"users": len(DEMO_USERS), "challenge_id": ch.id, "challenge_created": created}
