# db/schemas/application.py
import uuid
from datetime import datetime
from typing import Any, Optional
from pydantic import ConfigDict, Field, model_validator
from formco.db.schemas._base import OrmModel
from formco.db.enums import AcceptanceStatus
from formco.utils.sentinels import Missing, provided

class TeamMember(OrmModel):
    model_config = ConfigDict(from_attributes=True, extra="allow")

    name: str = ""
    email: str = ""
    institute: Optional[str] = None
    contact: Optional[str] = None
    qualification: Optional[str] = None
    resume: Optional[str] = None

    def value_of(self, field: str) -> str:
        value = getattr(self, field, None)
        if value is None and self.model_extra:
            value = self.model_extra.get(field)
        return str(value).strip() if value is not None else ""

class ApplicationSubmission(OrmModel):
    """Raw form data sent by a student.

    Team events use ``team_name`` and ``team_members``; individual events send the
    applicant's own fields at the top level.
    """
    team_name: Optional[str] = None
    team_members: list[TeamMember] = Field(default_factory=list)
    name: Optional[str] = None
    email: Optional[str] = None
    institute: Optional[str] = None
    contact: Optional[str] = None
    qualification: Optional[str] = None
    resume: Optional[str] = None
    receipt_image: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None

    def value_of(self, field: str) -> str:
        value = getattr(self, field, None)
        return str(value).strip() if value is not None else ""

    def as_member(self) -> TeamMember:
        return TeamMember(
            name=self.value_of("name"),
            email=self.value_of("email").lower(),
            institute=self.institute,
            contact=self.contact,
            qualification=self.qualification,
            resume=self.resume,
        )

class ApplicationDraft(OrmModel):
    competition_id: uuid.UUID
    student_id: uuid.UUID
    team_name: Optional[str] = None
    team_members: list[TeamMember]
    payment_amount: float = 0.0
    receipt_image: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None

class ApplicationCreate(ApplicationDraft):
    verification_code: str

class ApplicationRead(ApplicationCreate):
    id: uuid.UUID
    payment_verified: bool = False
    payment_date: Optional[datetime] = None
    attended: bool = False
    accepted: AcceptanceStatus = AcceptanceStatus.PENDING
    submitted_at: datetime
    updated_at: datetime

class ApplicationUpdate(OrmModel):
    """Column-level changes for one application; only provided fields are written."""
    id: uuid.UUID
    payment_verified: bool | Missing = Missing()
    payment_date: datetime | None | Missing = Missing()
    attended: bool | Missing = Missing()
    accepted: AcceptanceStatus | Missing = Missing()

    def changes(self) -> dict[str, Any]:
        return {
            name: value
            for name in ("payment_verified", "payment_date", "attended", "accepted")
            if provided(value := getattr(self, name))
        }

class AxisUpdate(OrmModel):
    """Request body for a lifecycle update; exactly one axis must be set."""
    payment_verified: Optional[bool] = None
    attended: Optional[bool] = None
    accepted: Optional[AcceptanceStatus] = None

    @model_validator(mode="after")
    def _single_axis(self) -> "AxisUpdate":
        chosen = [name for name in ("payment_verified", "attended", "accepted") if getattr(self, name) is not None]
        if len(chosen) != 1:
            raise ValueError("exactly one of payment_verified, attended, accepted must be given")
        return self

class ApplicationCheck(OrmModel):
    has_applied: bool
    application_id: Optional[uuid.UUID] = None
    verification_code: Optional[str] = None
    submitted_at: Optional[datetime] = None
    payment_verified: Optional[bool] = None

class StudentApplicationRow(OrmModel):
    id: uuid.UUID
    competition_id: uuid.UUID
    competition_title: str
    verification_code: str
    payment_verified: bool
    registration_fee: float
    accepted: AcceptanceStatus
    submitted_at: datetime
