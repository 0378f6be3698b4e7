"""Registration and organizer membership routes."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from formco.api.deps import CurrentActor, organization_service
from formco.db.schemas.organization import (
    OrganizationCreate,
    OrganizationPublic,
    OrganizationRead,
    OrganizerCreate,
    OrganizerRead,
    StudentCreate,
    StudentRead,
)
from formco.services.organization import OrganizationService

router = APIRouter()


class JoinRequest(BaseModel):
    secret_code: str


class LeaveRequest(BaseModel):
    organization_id: UUID


@router.post("/organizations", response_model=OrganizationRead, status_code=status.HTTP_201_CREATED)
async def register_organization(
    payload: OrganizationCreate,
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.register_organization(payload)


@router.post("/organizers", response_model=OrganizerRead, status_code=status.HTTP_201_CREATED)
async def register_organizer(
    payload: OrganizerCreate,
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.register_organizer(payload)


@router.post("/students", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
async def register_student(
    payload: StudentCreate,
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.register_student(payload)


@router.post("/organizers/me/join", response_model=OrganizerRead)
async def join_organization(
    body: JoinRequest,
    actor: CurrentActor,
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.join_organization(actor, body.secret_code)


@router.post("/organizers/me/leave", response_model=OrganizerRead)
async def leave_organization(
    body: LeaveRequest,
    actor: CurrentActor,
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.leave_organization(actor, body.organization_id)


@router.get("/organizations", response_model=list[OrganizationPublic])
async def list_organizations(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.list_organizations(limit=limit, offset=offset)


@router.get("/organizations/me/organizers", response_model=list[OrganizerRead])
async def list_organizers(
    actor: CurrentActor,
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.list_organizers(actor)


@router.delete("/organizations/me/organizers/{organizer_id}", response_model=list[OrganizerRead])
async def remove_organizer(
    organizer_id: UUID,
    actor: CurrentActor,
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.remove_organizer(actor, organizer_id)


@router.get("/organizers/me/organizations", response_model=list[OrganizationPublic])
async def list_my_organizations(
    actor: CurrentActor,
    organizations: OrganizationService = Depends(organization_service),
):
    return await organizations.list_organizations_for_organizer(actor)
