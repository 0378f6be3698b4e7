"""Shared fixtures: a fresh SQLite database per test and a few registered actors."""
from datetime import timedelta
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from formco.api.app import create_app
from formco.config import Settings
from formco.core.actors import OrganizationActor, OrganizerActor, StudentActor
from formco.db.database import DataBase
from formco.db.enums import EducationLevel
from formco.db.schemas.organization import OrganizationCreate, OrganizerCreate, StudentCreate
from formco.i18n import get_localizer
from formco.services.application import ApplicationService
from formco.services.competition import CompetitionService
from formco.services.organization import OrganizationService
from formco.utils.clock import utcnow


def _reset_singletons() -> None:
    for cls in (Settings, DataBase, CompetitionService, ApplicationService, OrganizationService):
        cls._instance = None
    get_localizer.cache_clear()


def competition_form(**overrides: Any) -> dict[str, Any]:
    now = utcnow()
    form = {
        "title": "Hackathon",
        "description": "24h build sprint",
        "instructions": "Bring a laptop",
        "category": "Tech",
        "mode": "online",
        "deadline_to_apply": (now + timedelta(days=1)).isoformat(),
        "start_date": (now + timedelta(days=2)).isoformat(),
        "end_date": (now + timedelta(days=3)).isoformat(),
    }
    form.update(overrides)
    return form


@pytest_asyncio.fixture
async def database(tmp_path, monkeypatch) -> AsyncGenerator[DataBase, None]:
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'formco.db'}")
    monkeypatch.setenv("RECEIPTS_DIR", str(tmp_path / "receipts"))
    _reset_singletons()
    db = DataBase()
    await db.create_all()
    yield db
    await db.dispose()
    _reset_singletons()


@pytest_asyncio.fixture
async def organization(database: DataBase) -> OrganizationActor:
    org = await OrganizationService().register_organization(
        OrganizationCreate(name="Acme University", email="events@acme.edu")
    )
    return OrganizationActor(id=org.id)


@pytest_asyncio.fixture
async def organizer(database: DataBase, organization: OrganizationActor) -> OrganizerActor:
    service = OrganizationService()
    created = await service.register_organizer(OrganizerCreate(name="Olga Organizer", email="olga@acme.edu"))
    await database.add_organizer_to_organization(organization.id, created.id)
    return await service.resolve_actor("organizer", created.id)


@pytest_asyncio.fixture
async def student(database: DataBase) -> StudentActor:
    created = await OrganizationService().register_student(
        StudentCreate(
            name="Sam Student",
            email="sam@student.edu",
            education_level=EducationLevel.COLLEGE,
            year_or_semester="3rd semester",
        )
    )
    return StudentActor(id=created.id)


@pytest.fixture
def form():
    return competition_form


@pytest_asyncio.fixture
async def client(database: DataBase) -> AsyncGenerator[AsyncClient, None]:
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
