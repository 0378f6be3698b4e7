"""Competition routes: browsing, creation, deletion and applying."""
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import BaseModel

from formco.api.deps import CurrentActor, application_service, competition_service
from formco.db.enums import CompetitionMode, CompetitionStatus
from formco.db.schemas.application import ApplicationCheck, ApplicationRead, ApplicationSubmission
from formco.db.schemas.competition import CompetitionRead, CompetitionView
from formco.services.application import ApplicationService
from formco.services.competition import CompetitionService

router = APIRouter()


class CompetitionPage(BaseModel):
    items: List[CompetitionView]
    total: int
    page: int
    page_size: int


class StatusResponse(BaseModel):
    id: UUID
    status: CompetitionStatus


@router.get("", response_model=CompetitionPage)
async def list_competitions(
    category: Optional[str] = None,
    mode: Optional[CompetitionMode] = None,
    organization_id: Optional[UUID] = None,
    status_filter: Optional[CompetitionStatus] = Query(None, alias="status"),
    page: int = Query(0, ge=0),
    page_size: int = Query(20, ge=1, le=100),
    competitions: CompetitionService = Depends(competition_service),
):
    """Newest first, with the status derived at request time."""
    items, total = await competitions.list_competitions(
        page,
        page_size,
        category=category,
        mode=mode,
        organization_id=organization_id,
        status=status_filter,
    )
    return CompetitionPage(items=items, total=total, page=page, page_size=page_size)


@router.post("", response_model=CompetitionRead, status_code=status.HTTP_201_CREATED)
async def create_competition(
    actor: CurrentActor,
    payload: Dict[str, Any] = Body(...),
    organization_id: Optional[UUID] = Query(None),
    competitions: CompetitionService = Depends(competition_service),
):
    # raw form body; every rule violation is reported together as a 400
    return await competitions.create_competition(actor, payload, organization_id=organization_id)


@router.get("/{competition_id}", response_model=CompetitionView)
async def get_competition(
    competition_id: UUID,
    competitions: CompetitionService = Depends(competition_service),
):
    return await competitions.get_competition(competition_id)


@router.delete("/{competition_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_competition(
    competition_id: UUID,
    actor: CurrentActor,
    competitions: CompetitionService = Depends(competition_service),
):
    await competitions.delete_competition(actor, competition_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{competition_id}/status", response_model=StatusResponse)
async def get_competition_status(
    competition_id: UUID,
    competitions: CompetitionService = Depends(competition_service),
):
    return StatusResponse(id=competition_id, status=await competitions.get_status(competition_id))


@router.post("/{competition_id}/apply", response_model=ApplicationRead, status_code=status.HTTP_201_CREATED)
async def apply(
    competition_id: UUID,
    submission: ApplicationSubmission,
    actor: CurrentActor,
    applications: ApplicationService = Depends(application_service),
):
    return await applications.submit(actor, competition_id, submission)


@router.get("/{competition_id}/check-application", response_model=ApplicationCheck)
async def check_application(
    competition_id: UUID,
    actor: CurrentActor,
    applications: ApplicationService = Depends(application_service),
):
    return await applications.check_application(actor, competition_id)


@router.get("/{competition_id}/applications", response_model=List[ApplicationRead])
async def list_competition_applications(
    competition_id: UUID,
    actor: CurrentActor,
    applications: ApplicationService = Depends(application_service),
):
    return await applications.list_for_competition(actor, competition_id)
