# core/actors.py
import uuid
from dataclasses import dataclass, field
from typing import Optional

from formco.db.enums import ActorRole
from formco.db.schemas.competition import CompetitionRead


@dataclass(frozen=True, slots=True)
class StudentActor:
    id: uuid.UUID
    role: ActorRole = field(default=ActorRole.STUDENT, init=False)


@dataclass(frozen=True, slots=True)
class OrganizerActor:
    id: uuid.UUID
    organization_ids: frozenset[uuid.UUID] = frozenset()
    role: ActorRole = field(default=ActorRole.ORGANIZER, init=False)

    def belongs_to(self, organization_id: uuid.UUID) -> bool:
        return organization_id in self.organization_ids


@dataclass(frozen=True, slots=True)
class OrganizationActor:
    id: uuid.UUID
    role: ActorRole = field(default=ActorRole.ORGANIZATION, init=False)


Actor = StudentActor | OrganizerActor | OrganizationActor


def can_manage(actor: Actor, competition: CompetitionRead) -> bool:
    """Organizer of the owning organization, or the organization itself."""
    match actor:
        case OrganizationActor(id=org_id):
            return org_id == competition.organization_id
        case OrganizerActor():
            return actor.belongs_to(competition.organization_id)
        case _:
            return False


def acting_organization(actor: Actor, organization_id: Optional[uuid.UUID] = None) -> Optional[uuid.UUID]:
    """Organization a write is performed for, or None when the actor has no claim to one.

    Organizations always act for themselves. Organizers name the organization
    explicitly; with exactly one membership it may be omitted.
    """
    match actor:
        case OrganizationActor(id=org_id):
            if organization_id is not None and organization_id != org_id:
                return None
            return org_id
        case OrganizerActor(organization_ids=org_ids):
            if organization_id is None:
                return next(iter(org_ids)) if len(org_ids) == 1 else None
            return organization_id if organization_id in org_ids else None
        case _:
            return None
