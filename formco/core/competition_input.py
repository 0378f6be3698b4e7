"""Validation of organizer input for a new competition.

Unlike application eligibility, every rule is checked and every violation is
reported, so the organizer can fix the whole form in one pass.
"""
import math
from datetime import datetime
from typing import Any, Mapping, Optional

from formco.db.enums import ApplicationField, CompetitionMode
from formco.db.schemas.competition import AccountDetails, CompetitionDraft
from formco.core.eligibility import MINIMUM_REQUIRED_FIELDS
from formco.core.errors import CompetitionValidationError
from formco.i18n import get_localizer
from formco.utils.clock import as_naive_utc

REQUIRED_TEXT_FIELDS = ("title", "description", "instructions", "category", "mode")
DATE_FIELDS = ("deadline_to_apply", "start_date", "end_date")
DEFAULT_TEAM_SIZE = (1, 4)

# Browser clients post camelCase keys.
_ALIASES = {
    "deadline_to_apply": "deadlineToApply",
    "start_date": "startDate",
    "end_date": "endDate",
    "is_team_event": "isTeamEvent",
    "team_size": "teamSize",
    "registration_fee": "registrationFee",
    "verification_needed": "verificationNeeded",
    "account_details": "accountDetails",
    "required_application_fields": "requiredApplicationFields",
    "skills_required": "skillsRequired",
}
_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _get(raw: Mapping[str, Any], key: str) -> Any:
    if key in raw:
        return raw[key]
    alias = _ALIASES.get(key)
    return raw.get(alias) if alias else None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _parse_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return as_naive_utc(value)
    text = _text(value)
    if not text:
        return None
    try:
        return as_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def coerce_fee(value: Any) -> float:
    number = _number(value)
    if number is None or number < 0:
        return 0.0
    return number


def normalize_skills(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _split_fields(value: Any) -> Optional[list[str]]:
    """Field names from a comma-separated string or a list; None for any other type."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return None
    return [_text(item).lower() for item in value if _text(item)]


def validate_competition_input(raw: Mapping[str, Any], now: datetime) -> CompetitionDraft:
    _ = get_localizer()
    errors: list[str] = []

    text = {name: _text(_get(raw, name)) for name in REQUIRED_TEXT_FIELDS}
    for name in REQUIRED_TEXT_FIELDS:
        if not text[name]:
            errors.append(_("validation.field_required", field=name))

    mode: Optional[CompetitionMode] = None
    if text["mode"]:
        try:
            mode = CompetitionMode(text["mode"].lower())
        except ValueError:
            errors.append(_("validation.invalid_mode", modes=", ".join(m.value for m in CompetitionMode)))

    location = _text(_get(raw, "location")) or None
    if mode is not None and mode != CompetitionMode.ONLINE and location is None:
        errors.append(_("validation.location_required"))

    dates: dict[str, Optional[datetime]] = {}
    for name in DATE_FIELDS:
        value = _get(raw, name)
        if value is None or _text(value) == "":
            errors.append(_("validation.field_required", field=name))
            dates[name] = None
            continue
        dates[name] = _parse_date(value)
        if dates[name] is None:
            errors.append(_("validation.invalid_date", field=name))

    deadline, start, end = dates["deadline_to_apply"], dates["start_date"], dates["end_date"]
    if deadline is not None and deadline < now:
        errors.append(_("validation.deadline_in_past"))
    if deadline is not None and start is not None and start <= deadline:
        errors.append(_("validation.start_after_deadline"))
    if start is not None and end is not None and end <= start:
        errors.append(_("validation.end_after_start"))

    is_team_event = _flag(_get(raw, "is_team_event"))
    team_min: Optional[int] = None
    team_max: Optional[int] = None
    if is_team_event:
        team_size = _get(raw, "team_size")
        if isinstance(team_size, Mapping):
            raw_min, raw_max = team_size.get("min"), team_size.get("max")
        elif team_size is not None:
            # present but not a {min, max} object
            raw_min = raw_max = None
        elif "team_size_min" in raw or "team_size_max" in raw:
            raw_min, raw_max = raw.get("team_size_min"), raw.get("team_size_max")
        else:
            raw_min, raw_max = DEFAULT_TEAM_SIZE
        low, high = _number(raw_min), _number(raw_max)
        if low is None or high is None:
            errors.append(_("validation.team_size_not_number"))
        else:
            team_min, team_max = int(low), int(high)
            if team_min < 1:
                errors.append(_("validation.team_size_min"))
            if team_max < team_min:
                errors.append(_("validation.team_size_max"))

    fee = coerce_fee(_get(raw, "registration_fee"))
    verification_needed = _flag(_get(raw, "verification_needed"))
    account_details: Optional[AccountDetails] = None
    raw_account = _get(raw, "account_details")
    if fee > 0 and verification_needed and isinstance(raw_account, Mapping):
        account_details = AccountDetails(
            name=_text(raw_account.get("name")),
            number=_text(raw_account.get("number")),
            type=_text(raw_account.get("type")),
        )

    wanted = set(MINIMUM_REQUIRED_FIELDS)
    field_names = _split_fields(_get(raw, "required_application_fields"))
    if field_names is None:
        errors.append(_("validation.application_fields_invalid"))
        field_names = []
    for name in field_names:
        try:
            wanted.add(ApplicationField(name))
        except ValueError:
            errors.append(_("validation.unknown_application_field", field=name))

    eligibility = _get(raw, "eligibility")
    if isinstance(eligibility, (list, tuple)):
        eligibility = "\n".join(_text(line) for line in eligibility if _text(line))

    if errors:
        raise CompetitionValidationError(errors)

    return CompetitionDraft(
        title=text["title"],
        description=text["description"],
        instructions=text["instructions"],
        category=text["category"],
        mode=mode,
        location=location,
        event=_text(_get(raw, "event")) or None,
        is_team_event=is_team_event,
        team_size_min=team_min,
        team_size_max=team_max,
        registration_fee=fee,
        verification_needed=verification_needed,
        account_details=account_details,
        required_application_fields=[field for field in ApplicationField if field in wanted],
        skills_required=normalize_skills(_get(raw, "skills_required")),
        eligibility=_text(eligibility) or None,
        deadline_to_apply=deadline,
        start_date=start,
        end_date=end,
    )
