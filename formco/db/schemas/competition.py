# db/schemas/competition.py
import uuid
from datetime import datetime
from typing import Optional
from pydantic import Field
from formco.db.schemas._base import OrmModel
from formco.db.enums import ApplicationField, CompetitionMode, CompetitionStatus

class TeamSize(OrmModel):
    min: int
    max: int

class AccountDetails(OrmModel):
    name: str = ""
    number: str = ""
    type: str = ""

class CompetitionBase(OrmModel):
    title: str
    description: str
    instructions: str
    category: str
    mode: CompetitionMode = CompetitionMode.ONLINE
    location: Optional[str] = None
    event: Optional[str] = None
    is_team_event: bool = False
    team_size_min: Optional[int] = None
    team_size_max: Optional[int] = None
    registration_fee: float = 0.0
    verification_needed: bool = False
    account_details: Optional[AccountDetails] = None
    required_application_fields: list[ApplicationField] = Field(
        default_factory=lambda: [ApplicationField.NAME, ApplicationField.EMAIL]
    )
    skills_required: list[str] = Field(default_factory=list)
    eligibility: Optional[str] = None
    deadline_to_apply: datetime
    start_date: datetime
    end_date: datetime

    @property
    def team_size(self) -> Optional[TeamSize]:
        if not self.is_team_event or self.team_size_min is None or self.team_size_max is None:
            return None
        return TeamSize(min=self.team_size_min, max=self.team_size_max)

    @property
    def requires_payment_proof(self) -> bool:
        return self.registration_fee > 0 and self.verification_needed

    @property
    def eligibility_criteria(self) -> list[str]:
        if not self.eligibility:
            return []
        return [line.strip() for line in self.eligibility.splitlines() if line.strip()]

class CompetitionDraft(CompetitionBase):
    """Validated organizer input, not yet bound to an owner."""

class CompetitionCreate(CompetitionBase):
    organization_id: uuid.UUID
    organizer_id: Optional[uuid.UUID] = None

class CompetitionRead(CompetitionCreate):
    id: uuid.UUID
    created_at: datetime

class CompetitionView(CompetitionRead):
    status: CompetitionStatus
