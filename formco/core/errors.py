"""Named outcomes of the FormCo workflows.

Every failure a caller can trigger is one of the classes below. They carry a
machine-readable :class:`ErrorKind`, the parameters used to render the message
and, where useful, extra context (e.g. the id of an existing application).
The HTTP layer turns them into JSON responses; nothing here is a crash.
"""
from __future__ import annotations

import enum
import uuid
from typing import Any, Iterable, Optional

from formco.i18n import get_localizer


class ErrorKind(enum.StrEnum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    DEADLINE_PASSED = "deadline_passed"
    ALREADY_APPLIED = "already_applied"
    MISSING_TEAM_NAME = "missing_team_name"
    TEAM_SIZE_OUT_OF_RANGE = "team_size_out_of_range"
    MISSING_MEMBER_FIELDS = "missing_member_fields"
    MISSING_FIELDS = "missing_fields"
    PAYMENT_PROOF_REQUIRED = "payment_proof_required"
    VALIDATION_ERROR = "validation_error"
    DUPLICATE_TITLE = "duplicate_title"
    INVALID_SECRET_CODE = "invalid_secret_code"
    ALREADY_MEMBER = "already_member"
    NOT_A_MEMBER = "not_a_member"
    ORGANIZER_NOT_LINKED = "organizer_not_linked"
    EMAIL_TAKEN = "email_taken"


class WorkflowError(Exception):
    kind: ErrorKind = ErrorKind.VALIDATION_ERROR

    def __init__(self, kind: Optional[ErrorKind] = None, **params: Any) -> None:
        if kind is not None:
            self.kind = kind
        self.params = params
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return get_localizer()(f"errors.{self.kind}", **self.params)

    @property
    def details(self) -> list[str]:
        return [self.message]

    def to_dict(self) -> dict[str, Any]:
        return {"error": str(self.kind), "message": self.message, "details": self.details}


class NotFoundError(WorkflowError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str) -> None:
        super().__init__(entity=entity)


class ForbiddenError(WorkflowError):
    kind = ErrorKind.FORBIDDEN

    def __init__(self, reason_key: str) -> None:
        self.reason_key = reason_key
        super().__init__(reason=get_localizer()(f"forbidden.{reason_key}"))


class ConflictError(WorkflowError):
    """Request collides with state that already exists."""


class AlreadyAppliedError(ConflictError):
    kind = ErrorKind.ALREADY_APPLIED

    def __init__(self, application_id: uuid.UUID) -> None:
        self.application_id = application_id
        super().__init__()

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["application_id"] = str(self.application_id)
        return data


class DuplicateTitleError(ConflictError):
    kind = ErrorKind.DUPLICATE_TITLE

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__()


class EligibilityError(WorkflowError):
    """Single blocking reason why a student cannot apply."""


class TeamSizeOutOfRangeError(EligibilityError):
    kind = ErrorKind.TEAM_SIZE_OUT_OF_RANGE

    def __init__(self, count: int, lower: int, upper: int) -> None:
        self.count, self.lower, self.upper = count, lower, upper
        super().__init__(count=count, min=lower, max=upper)


class MissingFieldsError(EligibilityError):
    kind = ErrorKind.MISSING_FIELDS

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = list(fields)
        super().__init__(fields=", ".join(self.fields))


class MissingMemberFieldsError(EligibilityError):
    kind = ErrorKind.MISSING_MEMBER_FIELDS

    def __init__(self, index: int, fields: Iterable[str]) -> None:
        # 1-based, as shown to the user
        self.index = index
        self.fields = list(fields)
        super().__init__(index=index, fields=", ".join(self.fields))


class CompetitionValidationError(WorkflowError):
    """All rule violations found in one competition draft."""
    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages = list(messages)
        super().__init__()

    @property
    def details(self) -> list[str]:
        return list(self.messages)


__all__ = [
    "ErrorKind",
    "WorkflowError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "AlreadyAppliedError",
    "DuplicateTitleError",
    "EligibilityError",
    "TeamSizeOutOfRangeError",
    "MissingFieldsError",
    "MissingMemberFieldsError",
    "CompetitionValidationError",
]
