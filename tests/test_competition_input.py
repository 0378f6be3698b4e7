from datetime import datetime, timedelta

import pytest

from formco.core.competition_input import validate_competition_input
from formco.core.errors import CompetitionValidationError
from formco.db.enums import ApplicationField, CompetitionMode

NOW = datetime(2025, 6, 1, 8, 0)


def raw(**overrides):
    data = {
        "title": "Debate Open",
        "description": "Parliamentary debate",
        "instructions": "Teams of three",
        "category": "Debate",
        "mode": "online",
        "deadline_to_apply": (NOW + timedelta(days=5)).isoformat(),
        "start_date": (NOW + timedelta(days=6)).isoformat(),
        "end_date": (NOW + timedelta(days=7)).isoformat(),
    }
    data.update(overrides)
    return data


def messages(**overrides) -> list[str]:
    with pytest.raises(CompetitionValidationError) as info:
        validate_competition_input(raw(**overrides), NOW)
    return info.value.messages


def test_valid_online_without_location():
    draft = validate_competition_input(raw(), NOW)
    assert draft.mode == CompetitionMode.ONLINE
    assert draft.location is None
    assert draft.team_size is None


def test_deadline_in_past():
    assert messages(deadline_to_apply=(NOW - timedelta(minutes=1)).isoformat()) == [
        "Application deadline cannot be in the past"
    ]


def test_start_equal_to_deadline_rejected():
    deadline = (NOW + timedelta(days=5)).isoformat()
    assert "Start date must be after application deadline" in messages(deadline_to_apply=deadline, start_date=deadline)


def test_end_equal_to_start_rejected():
    start = (NOW + timedelta(days=6)).isoformat()
    assert messages(start_date=start, end_date=start) == ["End date must be after start date"]


@pytest.mark.parametrize("mode", ["onsite", "hybrid"])
def test_location_required_for_physical_events(mode):
    assert messages(mode=mode) == ["Location is required for onsite or hybrid events"]
    assert validate_competition_input(raw(mode=mode, location="Hall B"), NOW).location == "Hall B"


def test_all_violations_reported_together():
    found = messages(
        title="",
        mode="onsite",
        deadline_to_apply=(NOW - timedelta(days=1)).isoformat(),
        is_team_event=True,
        team_size={"min": 0, "max": "x"},
    )
    assert "title is required" in found
    assert "Location is required for onsite or hybrid events" in found
    assert "Application deadline cannot be in the past" in found
    assert "Team size values must be valid numbers" in found
    assert len(found) == 4


def test_team_size_rules():
    assert messages(is_team_event=True, team_size={"min": 0, "max": 3}) == [
        "Minimum team size must be at least 1 for team events"
    ]
    assert messages(is_team_event=True, team_size={"min": 4, "max": 2}) == [
        "Maximum team size must be greater than or equal to minimum team size"
    ]


def test_team_event_defaults_to_one_to_four():
    draft = validate_competition_input(raw(isTeamEvent="true"), NOW)
    assert (draft.team_size.min, draft.team_size.max) == (1, 4)


def test_invalid_mode_and_unparseable_date():
    found = messages(mode="virtual", end_date="next friday")
    assert found == ["Mode must be one of: online, onsite, hybrid", "end_date is not a valid date"]


def test_normalisation_of_optional_fields():
    draft = validate_competition_input(
        raw(
            registrationFee="250",
            verificationNeeded=True,
            accountDetails={"name": " Acme ", "number": "PK00123", "type": "IBAN"},
            skillsRequired=" python, ,sql ",
            requiredApplicationFields=["institute"],
            eligibility=["Undergraduates", "", "Under 25"],
        ),
        NOW,
    )
    assert draft.registration_fee == 250.0
    assert draft.requires_payment_proof
    assert draft.account_details.name == "Acme"
    assert draft.skills_required == ["python", "sql"]
    assert draft.required_application_fields == [
        ApplicationField.NAME, ApplicationField.EMAIL, ApplicationField.INSTITUTE,
    ]
    assert draft.eligibility_criteria == ["Undergraduates", "Under 25"]


def test_account_details_dropped_without_fee():
    draft = validate_competition_input(
        raw(verification_needed=True, account_details={"name": "Acme", "number": "1", "type": "bank"}),
        NOW,
    )
    assert draft.registration_fee == 0.0
    assert draft.account_details is None


def test_negative_fee_coerced_to_zero():
    assert validate_competition_input(raw(registration_fee=-10), NOW).registration_fee == 0.0


def test_unknown_application_field_reported():
    assert messages(required_application_fields="name,portfolio") == ["Unknown application field: portfolio"]


@pytest.mark.parametrize("value", [True, 5, {"name": True}])
def test_required_fields_of_wrong_type_reported(value):
    assert messages(required_application_fields=value) == [
        "Required application fields must be a list or a comma-separated string"
    ]


@pytest.mark.parametrize("team_size", ["2-4", 3, ["2", "4"]])
def test_team_size_that_is_not_an_object_is_reported(team_size):
    assert messages(is_team_event=True, team_size=team_size) == ["Team size values must be valid numbers"]
