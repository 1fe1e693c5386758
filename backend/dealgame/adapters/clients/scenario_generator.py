# dealgame/adapters/clients/scenario_generator.py
from __future__ import annotations

import json
import logging
import re
from typing import Any, Protocol

from openai import AsyncOpenAI

from ...config import settings
from ...domain.errors import CaseDataError
from ...domain.normalize import case_from_challenge
from ...domain.policies import check_deal_consistency

log = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")
DECISIONS = ("BUY", "INVESTIGATE", "WALK_AWAY")
OCCUPANCY = ("vacant", "occupied", "unknown")
MONEY_FIELDS = ("auctionPrice", "estimatedValue", "estimatedRepairs", "monthlyRent", "actualValue", "hoaFees")

SYSTEM_PROMPT = (
    "You are an expert in foreclosure auction analysis and real estate investing. "
    "Generate realistic foreclosure scenarios for educational purposes."
)


class ScenarioValidationError(ValueError):
    pass


class ScenarioGenerator(Protocol):
    async def generate(self, difficulty: str) -> dict[str, Any]: ...


def build_prompt(difficulty: str) -> str:
    return f"""Generate a realistic and ENTERTAINING foreclosure auction scenario as a JSON object. \
Make the story funny while dropping subtle clues about the deal quality.

Required JSON structure:
{{
  "address": "creative street address",
  "city": "real US city name",
  "state": "two-letter state code",
  "zipCode": "5-digit zip code",
  "propertyType": "Single Family Home, Condo, Townhouse, or Multi-Family",
  "beds": 1-5, "baths": 1-4, "sqft": 800-4000, "yearBuilt": 1950-2020,
  "auctionPrice": dollars,
  "estimatedValue": dollars,
  "estimatedRepairs": dollars,
  "monthlyRent": dollars,
  "actualValue": true value after all hidden issues,
  "isGoodDeal": true only if actualValue exceeds auctionPrice + estimatedRepairs + surviving liens,
  "occupancyStatus": "vacant", "occupied", or "unknown",
  "hoaFees": optional monthly HOA fees,
  "description": "1-2 sentence property description",
  "funnyStory": "3-5 funny sentences about the property with subtle clues",
  "photos": 4-6 emoji photo captions like "🏠 Front view",
  "liens": 2-4 of {{"type": str, "holder": str, "amount": dollars, "priority": 1.., "notes": str,
             "survivesForeclosure": true if the lien transfers to the buyer (e.g. tax liens)}},
  "redFlags": 2-4 of {{"type": "where the issue hides (Title, Foundation, Environmental, ...)",
                 "description": str, "severity": "low", "medium", or "high", "impact": str}},
  "hiddenIssues": 1-3 strings,
  "correctDecision": "BUY", "INVESTIGATE", or "WALK_AWAY",
  "explanation": "why, with calculations"
}}

Difficulty level: {difficulty}
- easy: obvious good or bad deal with clear warning signs in the story
- medium: mixed signals, requires careful analysis
- hard: subtle issues hidden in seemingly good deals, or hidden gems in rough situations

Respond with the JSON object only."""


def _strip_fences(content: str) -> str:
    m = re.search(r"```(?:json)?\s*(.*?)```", content, re.DOTALL)
    return m.group(1) if m else content


def parse_scenario(content: str | None) -> dict[str, Any]:
    if not content:
        raise ScenarioValidationError("empty response from model")
    try:
        data = json.loads(_strip_fences(content).strip())
    except json.JSONDecodeError as e:
        raise ScenarioValidationError(f"response is not JSON: {e}") from None
    if not isinstance(data, dict):
        raise ScenarioValidationError("response JSON must be an object")
    return data


def validate_scenario(scenario: dict[str, Any]) -> dict[str, Any]:
    """
    Returns a normalized copy (money rounded to whole dollars) or raises
    ScenarioValidationError. The result is guaranteed to normalize into a
    playable case.
    """
    s = dict(scenario)

    for key in ("address", "city", "state"):
        if not s.get(key):
            raise ScenarioValidationError(f"missing required field '{key}'")
    if not s.get("funnyStory") or not s.get("description"):
        raise ScenarioValidationError("missing story or description")

    for key in MONEY_FIELDS:
        if s.get(key) is None:
            continue
        try:
            s[key] = int(round(float(s[key])))
        except (TypeError, ValueError):
            raise ScenarioValidationError(f"'{key}' is not a number") from None

    for key in ("redFlags", "liens", "photos"):
        v = s.get(key)
        if not isinstance(v, list) or not v:
            raise ScenarioValidationError(f"'{key}' must be a non-empty array")

    if s.get("correctDecision") not in DECISIONS:
        raise ScenarioValidationError("correctDecision must be BUY, INVESTIGATE, or WALK_AWAY")
    if s.get("occupancyStatus") not in OCCUPANCY:
        raise ScenarioValidationError("occupancyStatus must be vacant, occupied, or unknown")

    try:
        case = case_from_challenge(0, s)
    except CaseDataError as e:
        raise ScenarioValidationError(str(e)) from None

    ok, reason = check_deal_consistency(case)
    if not ok:
        log.warning("generated scenario isGoodDeal disagrees with its numbers: %s", reason)

    return s


class AzureScenarioGenerator:
    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        if client is None:
            if not settings.AZURE_OPENAI_API_KEY or not settings.AZURE_OPENAI_ENDPOINT:
                raise RuntimeError(
                    "Azure OpenAI credentials not configured. Set AZURE_OPENAI_API_KEY and AZURE_OPENAI_ENDPOINT"
                )
            endpoint = re.sub(r"/api/projects.*$", "", settings.AZURE_OPENAI_ENDPOINT).rstrip("/")
            client = AsyncOpenAI(
                api_key=settings.AZURE_OPENAI_API_KEY,
                base_url=f"{endpoint}/openai/deployments/{settings.AZURE_OPENAI_DEPLOYMENT}",
                default_query={"api-version": settings.AZURE_OPENAI_API_VERSION},
                default_headers={"api-key": settings.AZURE_OPENAI_API_KEY},
            )
        self.client = client

    async def generate(self, difficulty: str = "medium") -> dict[str, Any]:
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"unknown difficulty: {difficulty}")

        resp = await self.client.chat.completions.create(
            model=settings.AZURE_OPENAI_DEPLOYMENT,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(difficulty)},
            ],
            max_completion_tokens=settings.AZURE_OPENAI_MAX_TOKENS,
        )
        content = resp.choices[0].message.content if resp.choices else None
        return validate_scenario(parse_scenario(content))
