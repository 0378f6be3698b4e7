"""Server-side eligibility checks for a student's application.

Checks run in a fixed order and stop at the first failure, because each
later check only makes sense once the earlier ones hold. Clients may run the
same checks for responsiveness; this module is the authoritative copy.
"""
import uuid
from datetime import datetime
from typing import Iterable, Optional

from formco.db.enums import ApplicationField
from formco.db.schemas.application import (
    ApplicationDraft,
    ApplicationRead,
    ApplicationSubmission,
    TeamMember,
)
from formco.db.schemas.competition import CompetitionRead
from formco.core.errors import (
    AlreadyAppliedError,
    EligibilityError,
    ErrorKind,
    MissingFieldsError,
    MissingMemberFieldsError,
    NotFoundError,
    TeamSizeOutOfRangeError,
)

MINIMUM_REQUIRED_FIELDS: frozenset[ApplicationField] = frozenset({ApplicationField.NAME, ApplicationField.EMAIL})


def required_fields(competition: CompetitionRead) -> list[str]:
    """Competition's required fields unioned with the minimum set, in declaration order."""
    wanted = set(competition.required_application_fields) | MINIMUM_REQUIRED_FIELDS
    return [str(field) for field in ApplicationField if field in wanted]


def _missing(values: Iterable[tuple[str, str]]) -> list[str]:
    return [name for name, value in values if not value]


def validate_application(
    competition: Optional[CompetitionRead],
    student_id: uuid.UUID,
    submission: ApplicationSubmission,
    existing: Optional[ApplicationRead],
    now: datetime,
) -> ApplicationDraft:
    if competition is None:
        raise NotFoundError("Competition")

    if now >= competition.deadline_to_apply:
        raise EligibilityError(ErrorKind.DEADLINE_PASSED)

    if existing is not None:
        raise AlreadyAppliedError(existing.id)

    fields = required_fields(competition)

    if competition.is_team_event:
        team_name = (submission.team_name or "").strip()
        if not team_name:
            raise EligibilityError(ErrorKind.MISSING_TEAM_NAME)

        size = competition.team_size
        count = len(submission.team_members)
        if size is None or not (size.min <= count <= size.max):
            lower = size.min if size else 1
            upper = size.max if size else 1
            raise TeamSizeOutOfRangeError(count, lower, upper)

        for index, member in enumerate(submission.team_members, start=1):
            missing = _missing((name, member.value_of(name)) for name in fields)
            if missing:
                raise MissingMemberFieldsError(index, missing)

        members = [_normalized(member) for member in submission.team_members]
    else:
        team_name = None
        missing = _missing((name, submission.value_of(name)) for name in fields)
        if missing:
            raise MissingFieldsError(missing)
        members = [submission.as_member()]

    receipt_image = submission.value_of("receipt_image") or None
    transaction_id = submission.value_of("transaction_id") or None
    if competition.requires_payment_proof:
        if receipt_image is None or transaction_id is None:
            raise EligibilityError(ErrorKind.PAYMENT_PROOF_REQUIRED)
    else:
        receipt_image = transaction_id = None

    return ApplicationDraft(
        competition_id=competition.id,
        student_id=student_id,
        team_name=team_name,
        team_members=members,
        payment_amount=competition.registration_fee,
        receipt_image=receipt_image,
        transaction_id=transaction_id,
        notes=submission.notes,
    )


def _normalized(member: TeamMember) -> TeamMember:
    return member.model_copy(update={"name": member.name.strip(), "email": member.email.strip().lower()})
