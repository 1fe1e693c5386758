# dealgame/domain/policies.py
from __future__ import annotations

from .types import Lien, PropertyCase


def surviving_liens(case: PropertyCase) -> list[Lien]:
    return [lien for lien in case.liens if lien.survives_foreclosure]


def surviving_lien_total(case: PropertyCase) -> float:
    return sum(float(lien.amount) for lien in surviving_liens(case))


def total_acquisition_cost(case: PropertyCase) -> float:
    """
    auction price + repairs + every lien that transfers to the buyer
    """
    return float(case.auction_price) + float(case.repair_estimate) + surviving_lien_total(case)


def check_deal_consistency(case: PropertyCase) -> tuple[bool, str | None]:
    """
    Returns (consistent, reason)

    is_good_deal is authored, not computed. This checks the authoring rule:
    a good deal's actual value must exceed the total acquisition cost.
    """
    cost = total_acquisition_cost(case)
    profitable = case.actual_value > cost
    if profitable == case.is_good_deal:
        return True, None
    return False, (
        f"{case.id}: is_good_deal={case.is_good_deal} but actual_value={case.actual_value:.0f} "
        f"vs acquisition cost={cost:.0f}"
    )
