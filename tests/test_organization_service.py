import pytest

from formco.core.actors import can_manage
from formco.core.errors import ErrorKind, ForbiddenError, WorkflowError
from formco.db.schemas.organization import OrganizationCreate, OrganizerCreate
from formco.services.competition import CompetitionService
from formco.services.organization import OrganizationService


async def test_organization_lists_its_organizers(organization, organizer):
    listed = await OrganizationService().list_organizers(organization)
    assert [o.id for o in listed] == [organizer.id]
    assert listed[0].organization_ids == [organization.id]


async def test_only_organizations_list_or_remove_organizers(organization, organizer, student):
    service = OrganizationService()
    for actor in (organizer, student):
        with pytest.raises(ForbiddenError) as info:
            await service.list_organizers(actor)
        assert info.value.reason_key == "organizations_only"
        with pytest.raises(ForbiddenError):
            await service.remove_organizer(actor, organizer.id)


async def test_removed_organizer_loses_management(organization, organizer, form):
    service = OrganizationService()
    comp = await CompetitionService().create_competition(organizer, form())

    remaining = await service.remove_organizer(organization, organizer.id)
    assert remaining == []

    refreshed = await service.resolve_actor("organizer", organizer.id)
    assert refreshed.organization_ids == frozenset()
    assert not can_manage(refreshed, comp)

    with pytest.raises(WorkflowError) as info:
        await service.remove_organizer(organization, organizer.id)
    assert info.value.kind == ErrorKind.ORGANIZER_NOT_LINKED


async def test_remove_only_touches_own_membership(database, organization, organizer):
    service = OrganizationService()
    other = await service.register_organization(OrganizationCreate(name="Beta College", email="hello@beta.edu"))
    await database.add_organizer_to_organization(other.id, organizer.id)

    await service.remove_organizer(organization, organizer.id)

    refreshed = await service.resolve_actor("organizer", organizer.id)
    assert refreshed.organization_ids == frozenset({other.id})


async def test_organizer_lists_own_organizations(organization, organizer, student):
    service = OrganizationService()
    assert [o.id for o in await service.list_organizations_for_organizer(organizer)] == [organization.id]

    newcomer = await service.register_organizer(OrganizerCreate(name="Nadia", email="nadia@acme.edu"))
    actor = await service.resolve_actor("organizer", newcomer.id)
    assert await service.list_organizations_for_organizer(actor) == []

    with pytest.raises(ForbiddenError):
        await service.list_organizations_for_organizer(student)


async def test_public_directory_hides_secret_codes(organization):
    service = OrganizationService()
    await service.register_organization(OrganizationCreate(name="Beta College", email="hello@beta.edu"))

    listed = await service.list_organizations()
    assert [o.name for o in listed] == ["Acme University", "Beta College"]
    assert all("secret_code" not in o.model_dump() for o in listed)
    assert [o.name for o in await service.list_organizations(limit=1, offset=1)] == ["Beta College"]
