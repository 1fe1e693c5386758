# dealgame/entrypoints/api/routers/cases.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_case_repository
from ....adapters.repos.cases import CaseRepository
from ....domain.errors import NoCasesRemaining
from ....domain.normalize import case_to_dict

router = APIRouter(prefix="/api/cases", tags=["cases"])


@router.get("/random")
def random_case(
    exclude: str | None = Query(None, description="Comma-separated case ids already played"),
    cases: CaseRepository = Depends(get_case_repository),
) -> dict[str, Any]:
    exclude_ids = [x.strip() for x in (exclude or "").split(",") if x.strip()]
    try:
        case = cases.get_random_case(exclude_ids)
    except NoCasesRemaining as e:
        raise HTTPException(status_code=404, detail=str(e))
    return case_to_dict(case)


@router.get("/{case_id}")
def get_case(case_id: str, cases: CaseRepository = Depends(get_case_repository)) -> dict[str, Any]:
    case = cases.get(case_id)
    if case is None:
        raise HTTPException(status_code=404, detail=f"Case {case_id} not found")
    return case_to_dict(case)
