# dealgame/adapters/repos/cases.py
from __future__ import annotations

import copy
import json
import random
from dataclasses import replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Sequence

from ...config import settings
from ...domain.errors import CaseDataError, NoCasesRemaining
from ...domain.normalize import case_from_dict
from ...domain.types import PropertyCase

PACKAGED_CASES_PATH = Path(__file__).resolve().parents[2] / "data" / "cases.json"


def _as_list_of_dicts(payload: Any) -> list[dict[str, Any]]:
    """
    Accept either:
      - list[dict]
      - {"cases": list[dict]}
    """
    if isinstance(payload, list):
        return [x for x in payload if isinstance(x, dict)]
    if isinstance(payload, dict):
        v = payload.get("cases")
        if isinstance(v, list):
            return [x for x in v if isinstance(x, dict)]
    raise CaseDataError("case catalog must be a list of cases or {'cases': [...]}")


class CaseRepository:
    """
    Static, in-process case catalog.

    Every case handed out is a fresh deep copy with all flags reset, so one
    play-through can't leak discovered flags or answers into another.
    """

    def __init__(self, cases: Sequence[PropertyCase], rng: random.Random | None = None) -> None:
        seen: set[str] = set()
        for c in cases:
            if c.id in seen:
                raise CaseDataError(f"duplicate case id: {c.id}")
            seen.add(c.id)
        self._cases: tuple[PropertyCase, ...] = tuple(cases)
        self._rng = rng or random.Random()

    @classmethod
    def from_json(cls, path: str | Path, rng: random.Random | None = None) -> "CaseRepository":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls([case_from_dict(d) for d in _as_list_of_dicts(payload)], rng=rng)

    def __len__(self) -> int:
        return len(self._cases)

    def all_ids(self) -> list[str]:
        return [c.id for c in self._cases]

    def all_cases(self) -> list[PropertyCase]:
        return [self._fresh(c) for c in self._cases]

    def get(self, case_id: str) -> PropertyCase | None:
        for c in self._cases:
            if c.id == case_id:
                return self._fresh(c)
        return None

    def get_random_case(self, exclude_ids: Iterable[str] = ()) -> PropertyCase:
        excluded = set(exclude_ids)
        available = [c for c in self._cases if c.id not in excluded]
        if not available:
            raise NoCasesRemaining(f"all {len(self._cases)} cases excluded")
        return self._fresh(self._rng.choice(available))

    @staticmethod
    def _fresh(case: PropertyCase) -> PropertyCase:
        clone = copy.deepcopy(case)
        return replace(clone, red_flags=tuple(f.reset() for f in clone.red_flags))


@lru_cache(maxsize=1)
def default_case_repository() -> CaseRepository:
    return CaseRepository.from_json(settings.CASES_PATH or PACKAGED_CASES_PATH)
