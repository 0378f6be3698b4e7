from datetime import timedelta

import pytest

from formco.core.actors import OrganizationActor, OrganizerActor
from formco.core.errors import CompetitionValidationError, DuplicateTitleError, ForbiddenError, NotFoundError
from formco.db.enums import CompetitionStatus
from formco.db.schemas.application import ApplicationSubmission
from formco.db.schemas.organization import OrganizationCreate
from formco.services.application import ApplicationService
from formco.services.competition import CompetitionService
from formco.services.organization import OrganizationService


async def test_organizer_creates_for_single_organization(organizer, organization, form):
    comp = await CompetitionService().create_competition(organizer, form())
    assert comp.organization_id == organization.id
    assert comp.organizer_id == organizer.id


async def test_organization_creates_for_itself(organization, form):
    comp = await CompetitionService().create_competition(organization, form())
    assert comp.organization_id == organization.id
    assert comp.organizer_id is None


async def test_students_cannot_create(student, form):
    with pytest.raises(ForbiddenError):
        await CompetitionService().create_competition(student, form())


async def test_organizer_without_membership(organizer, form):
    with pytest.raises(ForbiddenError) as info:
        await CompetitionService().create_competition(OrganizerActor(id=organizer.id), form())
    assert info.value.reason_key == "organization_required"


async def test_organizer_must_name_organization_when_in_several(database, organizer, organization, form):
    other = await OrganizationService().register_organization(
        OrganizationCreate(name="Beta College", email="hello@beta.edu")
    )
    await database.add_organizer_to_organization(other.id, organizer.id)
    actor = await OrganizationService().resolve_actor("organizer", organizer.id)

    with pytest.raises(ForbiddenError):
        await CompetitionService().create_competition(actor, form())
    comp = await CompetitionService().create_competition(actor, form(), organization_id=other.id)
    assert comp.organization_id == other.id


async def test_duplicate_title_within_organization(organizer, form):
    service = CompetitionService()
    await service.create_competition(organizer, form())
    with pytest.raises(DuplicateTitleError):
        await service.create_competition(organizer, form())


async def test_invalid_input_collects_errors(organizer, form):
    with pytest.raises(CompetitionValidationError) as info:
        await CompetitionService().create_competition(organizer, form(title="", mode="onsite"))
    assert len(info.value.details) == 2


async def test_status_is_derived_per_read(organizer, form):
    service = CompetitionService()
    comp = await service.create_competition(organizer, form())

    assert await service.get_status(comp.id) == CompetitionStatus.OPEN
    assert await service.get_status(comp, now=comp.start_date - timedelta(hours=1)) == CompetitionStatus.CLOSED
    assert await service.get_status(comp, now=comp.start_date) == CompetitionStatus.HAPPENING
    assert await service.get_status(comp, now=comp.end_date + timedelta(seconds=1)) == CompetitionStatus.HAPPENED


async def test_list_filters(organizer, form):
    service = CompetitionService()
    await service.create_competition(organizer, form(title="A", category="Tech"))
    await service.create_competition(organizer, form(title="B", category="Art"))

    items, total = await service.list_competitions(category="Tech")
    assert total == 1 and items[0].title == "A"

    later = (await service.get_competition(items[0].id)).start_date
    items, total = await service.list_competitions(status=CompetitionStatus.CLOSED, now=later - timedelta(hours=1))
    assert total == 2 and {c.status for c in items} == {CompetitionStatus.CLOSED}
    items, total = await service.list_competitions(status=CompetitionStatus.HAPPENED)
    assert (items, total) == ([], 0)


async def test_delete_cascades_to_applications(database, organizer, student, form):
    service = CompetitionService()
    comp = await service.create_competition(organizer, form())
    application = await ApplicationService().submit(
        student, comp.id, ApplicationSubmission(name="Sam", email="sam@student.edu")
    )

    with pytest.raises(ForbiddenError):
        await service.delete_competition(student, comp.id)

    await service.delete_competition(organizer, comp.id)

    assert await database.get_competition_by_id(comp.id) is None
    assert await database.get_application_by_id(application.id) is None
    with pytest.raises(NotFoundError):
        await service.get_competition(comp.id)


async def test_organization_cannot_create_for_another(database, organization, form):
    other = await OrganizationService().register_organization(
        OrganizationCreate(name="Beta College", email="hello@beta.edu")
    )
    with pytest.raises(ForbiddenError) as info:
        await CompetitionService().create_competition(organization, form(), organization_id=other.id)
    assert info.value.reason_key == "not_in_organization"

    own = await CompetitionService().create_competition(OrganizationActor(id=other.id), form())
    assert own.organization_id == other.id
