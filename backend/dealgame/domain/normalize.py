# dealgame/domain/normalize.py
from __future__ import annotations

from typing import Any

from .errors import CaseDataError
from .types import Lien, Occupancy, PropertyCase, RedFlag, Severity


def _require(data: dict[str, Any], key: str, ctx: str) -> Any:
    if key not in data or data[key] is None:
        raise CaseDataError(f"{ctx}: missing required field '{key}'")
    return data[key]


def _coerce_str(x: Any) -> str | None:
    if x is None:
        return None
    s = str(x).strip()
    return s if s else None


def _coerce_float(x: Any, ctx: str, key: str) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        raise CaseDataError(f"{ctx}: field '{key}' is not a number: {x!r}") from None


def _opt_float(x: Any) -> float | None:
    if x is None or x == "":
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def _opt_int(x: Any) -> int | None:
    f = _opt_float(x)
    return int(f) if f is not None else None


def _severity(raw: Any, ctx: str) -> Severity:
    s = (_coerce_str(raw) or "").lower().replace("_", "-")
    if s == "redherring":
        s = "red-herring"
    try:
        return Severity(s)
    except ValueError:
        raise CaseDataError(f"{ctx}: unknown severity {raw!r}") from None


def _occupancy(raw: Any) -> Occupancy:
    s = (_coerce_str(raw) or "unknown").lower()
    try:
        return Occupancy(s)
    except ValueError:
        return Occupancy.unknown


def lien_from_dict(data: dict[str, Any], ctx: str) -> Lien:
    return Lien(
        type=str(_require(data, "type", ctx)),
        holder=_coerce_str(data.get("holder")) or "Unknown",
        amount=_coerce_float(_require(data, "amount", ctx), ctx, "amount"),
        priority=_opt_int(data.get("priority")) or 0,
        notes=_coerce_str(data.get("notes")),
        survives_foreclosure=bool(data.get("survivesForeclosure", False)),
    )


def red_flag_from_dict(data: dict[str, Any], *, flag_id: str, hidden_in: str, ctx: str) -> RedFlag:
    question = _coerce_str(data.get("question"))
    choices = tuple(str(c) for c in (data.get("choices") or []))
    correct = _opt_int(data.get("correctChoice"))

    if question or choices:
        if not question or not choices:
            raise CaseDataError(f"{ctx}: quiz flag needs both 'question' and 'choices'")
        if correct is None or not 0 <= correct < len(choices):
            raise CaseDataError(f"{ctx}: 'correctChoice' must index into choices")

    return RedFlag(
        id=flag_id,
        description=str(_require(data, "description", ctx)),
        severity=_severity(_require(data, "severity", ctx), ctx),
        hidden_in=hidden_in,
        discovered=False,
        question=question,
        choices=choices,
        correct_choice=correct,
        answer_explanation=_coerce_str(data.get("answerExplanation")),
    )


def _repair_estimate(data: dict[str, Any], ctx: str, key: str = "repairEstimate") -> tuple[float, float | None, float | None]:
    lo = _opt_float(data.get(f"{key}Min"))
    hi = _opt_float(data.get(f"{key}Max"))
    if data.get(key) is not None:
        return _coerce_float(data[key], ctx, key), lo, hi
    if lo is not None and hi is not None:
        return (lo + hi) / 2.0, lo, hi
    raise CaseDataError(f"{ctx}: missing required field '{key}' (or '{key}Min'/'{key}Max')")


def case_from_dict(data: dict[str, Any]) -> PropertyCase:
    """
    Static catalog shape (camelCase, one object per case).
    """
    case_id = str(_require(data, "id", "case"))
    ctx = f"case {case_id}"

    raw_flags = _require(data, "redFlags", ctx)
    if not isinstance(raw_flags, list):
        raise CaseDataError(f"{ctx}: 'redFlags' must be a list")
    raw_liens = _require(data, "liens", ctx)
    if not isinstance(raw_liens, list):
        raise CaseDataError(f"{ctx}: 'liens' must be a list")

    repair, repair_lo, repair_hi = _repair_estimate(data, ctx)

    flags = tuple(
        red_flag_from_dict(
            f,
            flag_id=str(_require(f, "id", f"{ctx} flag #{i}")),
            hidden_in=str(_require(f, "hiddenIn", f"{ctx} flag #{i}")),
            ctx=f"{ctx} flag #{i}",
        )
        for i, f in enumerate(raw_flags)
    )

    return PropertyCase(
        id=case_id,
        address=str(_require(data, "address", ctx)),
        city=str(_require(data, "city", ctx)),
        state=str(_require(data, "state", ctx)),
        zip=str(_require(data, "zip", ctx)),
        property_value=_coerce_float(_require(data, "propertyValue", ctx), ctx, "propertyValue"),
        auction_price=_coerce_float(_require(data, "auctionPrice", ctx), ctx, "auctionPrice"),
        repair_estimate=repair,
        repair_estimate_min=repair_lo,
        repair_estimate_max=repair_hi,
        actual_value=_coerce_float(_require(data, "actualValue", ctx), ctx, "actualValue"),
        is_good_deal=bool(_require(data, "isGoodDeal", ctx)),
        occupancy_status=_occupancy(data.get("occupancyStatus")),
        hoa_fees=_opt_float(data.get("hoaFees")),
        liens=tuple(lien_from_dict(l, f"{ctx} lien #{i}") for i, l in enumerate(raw_liens)),
        red_flags=flags,
        photos=tuple(str(p) for p in (data.get("photos") or [])),
        description=_coerce_str(data.get("description")) or "",
        property_type=_coerce_str(data.get("propertyType")),
        beds=_opt_float(data.get("beds")),
        baths=_opt_float(data.get("baths")),
        sqft=_opt_int(data.get("sqft")),
        year_built=_opt_int(data.get("yearBuilt")),
    )


def case_from_challenge(challenge_id: int, property_data: dict[str, Any]) -> PropertyCase:
    """
    Generated daily-challenge shape -> PropertyCase.

    Generated flags carry a `type` (where the issue hides) instead of `hiddenIn`
    and no id, so ids are positional: flag-0, flag-1, ...
    """
    ctx = f"daily challenge {challenge_id}"

    raw_flags = property_data.get("redFlags")
    if raw_flags is None:
        raise CaseDataError(f"{ctx}: missing required field 'redFlags'")
    if not isinstance(raw_flags, list):
        raise CaseDataError(f"{ctx}: 'redFlags' must be a list")

    estimated_value = _coerce_float(_require(property_data, "estimatedValue", ctx), ctx, "estimatedValue")
    actual = property_data.get("actualValue")
    repair, repair_lo, repair_hi = _repair_estimate(property_data, ctx, key="estimatedRepairs")

    flags = tuple(
        red_flag_from_dict(
            f,
            flag_id=f"flag-{i}",
            hidden_in=_coerce_str(f.get("type")) or _coerce_str(f.get("hiddenIn")) or "Case File",
            ctx=f"{ctx} flag #{i}",
        )
        for i, f in enumerate(raw_flags)
    )

    return PropertyCase(
        id=f"daily-{challenge_id}",
        address=str(_require(property_data, "address", ctx)),
        city=str(_require(property_data, "city", ctx)),
        state=str(_require(property_data, "state", ctx)),
        zip=str(property_data.get("zipCode") or property_data.get("zip") or ""),
        property_value=estimated_value,
        auction_price=_coerce_float(_require(property_data, "auctionPrice", ctx), ctx, "auctionPrice"),
        repair_estimate=repair,
        repair_estimate_min=repair_lo,
        repair_estimate_max=repair_hi,
        actual_value=_coerce_float(actual, ctx, "actualValue") if actual else estimated_value,
        is_good_deal=bool(_require(property_data, "isGoodDeal", ctx)),
        occupancy_status=_occupancy(property_data.get("occupancyStatus")),
        hoa_fees=_opt_float(property_data.get("hoaFees")),
        liens=tuple(
            lien_from_dict(l, f"{ctx} lien #{i}") for i, l in enumerate(property_data.get("liens") or [])
        ),
        red_flags=flags,
        photos=tuple(str(p) for p in (property_data.get("photos") or [])),
        description=(
            _coerce_str(property_data.get("funnyStory"))
            or _coerce_str(property_data.get("description"))
            or "AI-generated foreclosure scenario"
        ),
        property_type=_coerce_str(property_data.get("propertyType")),
        beds=_opt_float(property_data.get("beds")),
        baths=_opt_float(property_data.get("baths")),
        sqft=_opt_int(property_data.get("sqft")),
        year_built=_opt_int(property_data.get("yearBuilt")),
    )


def case_to_dict(case: PropertyCase) -> dict[str, Any]:
    """
    PropertyCase -> the camelCase JSON the game client renders.
    """
    return {
        "id": case.id,
        "address": case.address,
        "city": case.city,
        "state": case.state,
        "zip": case.zip,
        "propertyValue": case.property_value,
        "auctionPrice": case.auction_price,
        "repairEstimate": case.repair_estimate,
        "repairEstimateMin": case.repair_estimate_min,
        "repairEstimateMax": case.repair_estimate_max,
        "actualValue": case.actual_value,
        "isGoodDeal": case.is_good_deal,
        "occupancyStatus": case.occupancy_status.value,
        "hoaFees": case.hoa_fees,
        "description": case.description,
        "photos": list(case.photos),
        "propertyType": case.property_type,
        "beds": case.beds,
        "baths": case.baths,
        "sqft": case.sqft,
        "yearBuilt": case.year_built,
        "liens": [
            {
                "type": l.type,
                "holder": l.holder,
                "amount": l.amount,
                "priority": l.priority,
                "notes": l.notes,
                "survivesForeclosure": l.survives_foreclosure,
            }
            for l in case.liens
        ],
        "redFlags": [
            {
                "id": f.id,
                "description": f.description,
                "severity": f.severity.value,
                "hiddenIn": f.hidden_in,
                "discovered": f.discovered,
                "question": f.question,
                "choices": list(f.choices),
                "correctChoice": f.correct_choice,
                "answerExplanation": f.answer_explanation,
                "userAnswer": f.user_answer,
            }
            for f in case.red_flags
        ],
    }
