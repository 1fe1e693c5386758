import pytest

from dealgame.domain.errors import CaseDataError
from dealgame.domain.normalize import case_from_challenge, case_from_dict, case_to_dict
from dealgame.domain.policies import surviving_lien_total, total_acquisition_cost
from dealgame.domain.types import Occupancy, Severity


def _static_case(**overrides):
    data = {
        "id": "case-x",
        "address": "9 Elm St",
        "city": "Flint",
        "state": "MI",
        "zip": "48502",
        "propertyValue": 120000,
        "auctionPrice": 60000,
        "repairEstimateMin": 20000,
        "repairEstimateMax": 40000,
        "actualValue": 110000,
        "isGoodDeal": True,
        "occupancyStatus": "vacant",
        "liens": [{"type": "Tax Lien", "holder": "County", "amount": 3000, "priority": 0, "survivesForeclosure": True}],
        "redFlags": [
            {"id": "rf-1", "description": "Old roof", "severity": "medium", "hiddenIn": "Inspection"},
            {
                "id": "rf-2",
                "description": "Paint color",
                "severity": "red-herring",
                "hiddenIn": "Photos",
                "question": "Does paint matter?",
                "choices": ["Yes", "No"],
                "correctChoice": 1,
            },
        ],
    }
    data.update(overrides)
    return data


def test_static_case_normalizes():
    case = case_from_dict(_static_case())
    assert case.repair_estimate == 30000
    assert case.occupancy_status == Occupancy.vacant
    assert case.red_flags[1].is_quiz
    assert case.red_flags[1].severity == Severity.red_herring
    assert surviving_lien_total(case) == 3000
    assert total_acquisition_cost(case) == 60000 + 30000 + 3000


def test_missing_red_flags_fails_fast():
    data = _static_case()
    del data["redFlags"]
    with pytest.raises(CaseDataError):
        case_from_dict(data)


def test_quiz_needs_valid_correct_choice():
    data = _static_case()
    data["redFlags"][1]["correctChoice"] = 5
    with pytest.raises(CaseDataError):
        case_from_dict(data)


def test_unknown_severity_rejected():
    data = _static_case()
    data["redFlags"][0]["severity"] = "catastrophic"
    with pytest.raises(CaseDataError):
        case_from_dict(data)


def test_lien_survival_defaults_false():
    data = _static_case()
    data["liens"] = [{"type": "Tax Lien", "holder": "County", "amount": 3000, "notes": "Survives foreclosure!"}]
    case = case_from_dict(data)
    # notes are display text only
    assert not case.liens[0].survives_foreclosure


def test_generated_scenario_normalizes(scenario):
    case = case_from_challenge(42, scenario)
    assert case.id == "daily-42"
    assert [f.id for f in case.red_flags] == ["flag-0", "flag-1"]
    assert case.red_flags[0].hidden_in == "Structural"
    assert case.zip == "01970"
    assert case.property_value == 260000
    assert case.actual_value == 240000
    assert case.repair_estimate == 30000
    assert case.description.startswith("The attic hosts")


def test_generated_defaults(scenario):
    del scenario["actualValue"]
    del scenario["occupancyStatus"]
    case = case_from_challenge(1, scenario)
    assert case.actual_value == scenario["estimatedValue"]
    assert case.occupancy_status == Occupancy.unknown


def test_generated_without_red_flags_fails_fast(scenario):
    del scenario["redFlags"]
    with pytest.raises(CaseDataError):
        case_from_challenge(1, scenario)


def test_case_to_dict_round_trips_through_static_shape():
    case = case_from_dict(_static_case())
    out = case_to_dict(case)
    assert out["redFlags"][1]["correctChoice"] == 1
    assert out["liens"][0]["survivesForeclosure"] is True
    assert case_from_dict(out) == case
