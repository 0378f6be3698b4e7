# db/database.py
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, ClassVar, Self, Any, List, Tuple

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from formco.db.models._base import Base
from formco.db.models.organization import Organization, organization_organizer
from formco.db.models.organizer import Organizer
from formco.db.models.student import Student
from formco.db.models.competition import Competition
from formco.db.models.application import Application
from formco.db.models.audit_log import AuditLog
from formco.db.enums import CompetitionMode
from formco.db.schemas.organization import (
    OrganizationCreate, OrganizationPublic, OrganizationRead, OrganizerCreate, OrganizerRead,
    StudentCreate, StudentRead,
)
from formco.db.schemas.competition import CompetitionCreate, CompetitionRead
from formco.db.schemas.application import (
    ApplicationCreate, ApplicationRead, ApplicationUpdate, StudentApplicationRow,
)
from formco.db.schemas.audit_log import AuditLogCreate, AuditLogRead
from formco.config import Settings
from formco.utils.clock import utcnow


class DataBase():
    """
    Async SQLAlchemy database singleton.
    Usage:
        db = DataBase()  # same instance everywhere
        async with db.session() as s:
            ...
    """
    _instance: ClassVar[Optional["DataBase"]] = None

    def __new__(cls, *args: Any, **kwargs: Any) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)

        return cls._instance

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None) -> None:
        if getattr(self, "_initialized", False):
            return

        settings = Settings()
        url = url or settings.database_url
        echo = settings.database_echo if echo is None else echo
        self._engine: AsyncEngine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        self._sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

        self._initialized = True

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Provides an AsyncSession with safe commit/rollback semantics.
        """
        session: AsyncSession = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # --- schema management helpers ---

    async def create_all(self) -> None:
        """
        Create tables based on Base metadata. Use only in dev/tests; prefer Alembic in prod.
        """
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    # ---------- Organizations / organizers / students ----------

    async def create_organization(self, payload: OrganizationCreate, secret_code: str) -> OrganizationRead:
        """
        Insert an organization with a pre-generated secret join code.

        Raises:
            IntegrityError: duplicate email or secret code.
        """
        obj = Organization(
            name=payload.name.strip(),
            email=str(payload.email).lower(),
            website=payload.website,
            logo=payload.logo,
            secret_code=secret_code,
        )
        async with self.session() as s:
            s.add(obj)
            await s.flush()
            await s.refresh(obj)
            return OrganizationRead.model_validate(obj)

    async def get_organization_by_id(self, organization_id: Optional[uuid.UUID]) -> Optional[OrganizationRead]:
        if organization_id is None:
            return None
        async with self.session() as s:
            row = await s.get(Organization, organization_id)
        return OrganizationRead.model_validate(row) if row is not None else None

    async def get_organization_by_secret_code(self, secret_code: str) -> Optional[OrganizationRead]:
        if not secret_code:
            return None
        async with self.session() as s:
            stmt = select(Organization).where(Organization.secret_code == secret_code.strip())
            row = (await s.execute(stmt)).scalar_one_or_none()
        return OrganizationRead.model_validate(row) if row is not None else None

    async def list_organizations(self, *, limit: int = 100, offset: int = 0) -> list[OrganizationPublic]:
        async with self.session() as s:
            stmt = select(Organization).order_by(Organization.name, Organization.id)
            if limit:
                stmt = stmt.limit(max(0, int(limit)))
            if offset:
                stmt = stmt.offset(max(0, int(offset)))
            rows = (await s.execute(stmt)).scalars().all()
        return [OrganizationPublic.model_validate(row) for row in rows]

    async def list_organizations_for_organizer(self, organizer_id: uuid.UUID) -> list[OrganizationPublic]:
        async with self.session() as s:
            stmt = (
                select(Organization)
                .join(organization_organizer, organization_organizer.c.organization_id == Organization.id)
                .where(organization_organizer.c.organizer_id == organizer_id)
                .order_by(Organization.name, Organization.id)
            )
            rows = (await s.execute(stmt)).scalars().all()
        return [OrganizationPublic.model_validate(row) for row in rows]

    async def list_organizers_by_organization(self, organization_id: uuid.UUID) -> list[OrganizerRead]:
        """Organizers linked to an organization, each with all of its memberships."""
        async with self.session() as s:
            stmt = (
                select(Organizer)
                .join(organization_organizer, organization_organizer.c.organizer_id == Organizer.id)
                .where(organization_organizer.c.organization_id == organization_id)
                .options(selectinload(Organizer.organizations))
                .order_by(Organizer.name, Organizer.id)
            )
            rows = (await s.execute(stmt)).scalars().all()
            return [self._organizer_read(row, [org.id for org in row.organizations]) for row in rows]

    async def add_organizer_to_organization(self, organization_id: uuid.UUID, organizer_id: uuid.UUID) -> bool:
        """
        Link an organizer to an organization.

        Returns:
            bool: False if the link already existed.
        """
        async with self.session() as s:
            exists_stmt = select(organization_organizer.c.organizer_id).where(
                organization_organizer.c.organization_id == organization_id,
                organization_organizer.c.organizer_id == organizer_id,
            )
            if (await s.execute(exists_stmt)).first() is not None:
                return False
            await s.execute(
                insert(organization_organizer).values(organization_id=organization_id, organizer_id=organizer_id)
            )
        return True

    async def remove_organizer_from_organization(self, organization_id: uuid.UUID, organizer_id: uuid.UUID) -> bool:
        async with self.session() as s:
            res = await s.execute(
                delete(organization_organizer).where(
                    organization_organizer.c.organization_id == organization_id,
                    organization_organizer.c.organizer_id == organizer_id,
                )
            )
        return res.rowcount > 0

    async def create_organizer(self, payload: OrganizerCreate) -> OrganizerRead:
        obj = Organizer(
            name=payload.name.strip(),
            email=str(payload.email).lower(),
            phone=payload.phone,
            department=payload.department,
            position=payload.position,
        )
        async with self.session() as s:
            s.add(obj)
            await s.flush()
            await s.refresh(obj)
            return self._organizer_read(obj, [])

    async def get_organizer_by_id(self, organizer_id: Optional[uuid.UUID]) -> Optional[OrganizerRead]:
        """Fetch an organizer together with the ids of the organizations it belongs to."""
        if organizer_id is None:
            return None
        async with self.session() as s:
            stmt = (
                select(Organizer)
                .where(Organizer.id == organizer_id)
                .options(selectinload(Organizer.organizations))
            )
            row = (await s.execute(stmt)).scalar_one_or_none()
            if row is None:
                return None
            return self._organizer_read(row, [org.id for org in row.organizations])

    @staticmethod
    def _organizer_read(row: Organizer, organization_ids: List[uuid.UUID]) -> OrganizerRead:
        return OrganizerRead(
            id=row.id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            department=row.department,
            position=row.position,
            organization_ids=organization_ids,
            created_at=row.created_at,
        )

    async def create_student(self, payload: StudentCreate) -> StudentRead:
        obj = Student(
            name=payload.name.strip(),
            email=str(payload.email).lower(),
            phone=payload.phone,
            education_level=payload.education_level,
            year_or_semester=payload.year_or_semester,
            country=payload.country,
            organization_id=payload.organization_id,
        )
        async with self.session() as s:
            s.add(obj)
            await s.flush()
            await s.refresh(obj)
            return StudentRead.model_validate(obj)

    async def get_student_by_id(self, student_id: Optional[uuid.UUID]) -> Optional[StudentRead]:
        if student_id is None:
            return None
        async with self.session() as s:
            row = await s.get(Student, student_id)
        return StudentRead.model_validate(row) if row is not None else None

    # ---------- Competition ----------

    async def create_competition(self, payload: CompetitionCreate) -> CompetitionRead:
        """
        Insert a competition.

        Raises:
            IntegrityError: title already used within the organization
                (``uq_competition_organization_title``).
        """
        obj = Competition(
            title=payload.title,
            description=payload.description,
            instructions=payload.instructions,
            category=payload.category,
            mode=payload.mode,
            location=payload.location,
            event=payload.event,
            is_team_event=payload.is_team_event,
            team_size_min=payload.team_size_min,
            team_size_max=payload.team_size_max,
            registration_fee=payload.registration_fee,
            verification_needed=payload.verification_needed,
            account_details=payload.account_details.model_dump() if payload.account_details else None,
            required_application_fields=[str(f) for f in payload.required_application_fields],
            skills_required=list(payload.skills_required),
            eligibility=payload.eligibility,
            deadline_to_apply=payload.deadline_to_apply,
            start_date=payload.start_date,
            end_date=payload.end_date,
            organization_id=payload.organization_id,
            organizer_id=payload.organizer_id,
        )
        async with self.session() as s:
            s.add(obj)
            try:
                await s.flush()
            except IntegrityError:
                # rollback happens in context manager
                raise
            await s.refresh(obj)
            return CompetitionRead.model_validate(obj)

    async def get_competition_by_id(self, competition_id: Optional[uuid.UUID]) -> Optional[CompetitionRead]:
        """Fetch a competition by its UUID."""
        if not competition_id:
            return None
        async with self.session() as s:
            row = await s.get(Competition, competition_id)
        return CompetitionRead.model_validate(row) if row is not None else None

    async def list_competitions(
        self,
        *,
        limit: int,
        offset: int,
        category: Optional[str] = None,
        mode: Optional[CompetitionMode] = None,
        organization_id: Optional[uuid.UUID] = None,
    ) -> Tuple[list[CompetitionRead], int]:
        """Newest first; returns (items, total) for the filtered set."""
        limit = max(0, int(limit))
        offset = max(0, int(offset))

        filters = []
        if category:
            filters.append(Competition.category == category)
        if mode:
            filters.append(Competition.mode == mode)
        if organization_id:
            filters.append(Competition.organization_id == organization_id)

        async with self.session() as s:
            total_stmt = select(func.count(Competition.id)).where(*filters)
            total = int((await s.execute(total_stmt)).scalar_one())

            if limit == 0:
                return [], total

            items_stmt = (
                select(Competition)
                .where(*filters)
                .order_by(Competition.created_at.desc(), Competition.id.asc())
                .limit(limit)
                .offset(offset)
            )
            rows: List[Competition] = (await s.execute(items_stmt)).scalars().all()

        return [CompetitionRead.model_validate(r) for r in rows], total

    async def delete_competition(self, competition_id: uuid.UUID) -> bool:
        """
        Hard-delete a competition and all of its applications in one transaction.

        Returns:
            bool: False if the competition did not exist.
        """
        async with self.session() as s:
            await s.execute(delete(Application).where(Application.competition_id == competition_id))
            res = await s.execute(delete(Competition).where(Competition.id == competition_id))
        return res.rowcount > 0

    # ---------- Application: reads ----------

    async def get_application_by_id(self, application_id: Optional[uuid.UUID]) -> Optional[ApplicationRead]:
        if application_id is None:
            return None
        async with self.session() as s:
            row = await s.get(Application, application_id)
        return ApplicationRead.model_validate(row) if row is not None else None

    async def get_application_for_student(
        self, competition_id: uuid.UUID, student_id: uuid.UUID
    ) -> Optional[ApplicationRead]:
        async with self.session() as s:
            stmt = select(Application).where(
                Application.competition_id == competition_id,
                Application.student_id == student_id,
            )
            row = (await s.execute(stmt)).scalar_one_or_none()
        return ApplicationRead.model_validate(row) if row is not None else None

    async def list_applications_by_competition(self, competition_id: uuid.UUID) -> list[ApplicationRead]:
        async with self.session() as s:
            stmt = (
                select(Application)
                .where(Application.competition_id == competition_id)
                .order_by(Application.submitted_at.desc(), Application.id.asc())
            )
            rows = (await s.execute(stmt)).scalars().all()
        return [ApplicationRead.model_validate(r) for r in rows]

    async def list_applications_by_student(self, student_id: uuid.UUID) -> list[StudentApplicationRow]:
        async with self.session() as s:
            stmt = (
                select(Application, Competition.title, Competition.registration_fee)
                .join(Competition, Application.competition_id == Competition.id)
                .where(Application.student_id == student_id)
                .order_by(Application.submitted_at.desc())
            )
            rows = (await s.execute(stmt)).all()
        return [
            StudentApplicationRow(
                id=app.id,
                competition_id=app.competition_id,
                competition_title=title,
                verification_code=app.verification_code,
                payment_verified=app.payment_verified,
                registration_fee=fee,
                accepted=app.accepted,
                submitted_at=app.submitted_at,
            )
            for app, title, fee in rows
        ]

    # ---------- Application: writes ----------

    async def create_application(self, data: ApplicationCreate) -> ApplicationRead:
        """
        Insert a new application row.

        Raises:
            IntegrityError: an application for (competition_id, student_id) already
                exists (``uq_application_competition_student``).
        """
        async with self.session() as s:
            db_obj = Application(
                competition_id=data.competition_id,
                student_id=data.student_id,
                team_name=data.team_name,
                team_members=[member.model_dump() for member in data.team_members],
                payment_amount=data.payment_amount,
                receipt_image=data.receipt_image,
                transaction_id=data.transaction_id,
                verification_code=data.verification_code,
                notes=data.notes,
            )
            s.add(db_obj)
            await s.flush()
            await s.refresh(db_obj)
            return ApplicationRead.model_validate(db_obj)

    async def update_application_fields(self, data: ApplicationUpdate) -> ApplicationRead:
        """
        Write only the provided columns with a single UPDATE statement.

        Columns not named in ``data`` are never part of the statement, so
        concurrent updates of other columns are preserved.

        Raises:
            LookupError: if the application does not exist.
        """
        changes = data.changes()
        async with self.session() as s:
            if changes:
                stmt = (
                    update(Application)
                    .where(Application.id == data.id)
                    .values(**changes, updated_at=utcnow())
                    .execution_options(synchronize_session=False)
                )
                res = await s.execute(stmt)
                if res.rowcount == 0:
                    raise LookupError("Application not found.")
            row = (await s.execute(select(Application).where(Application.id == data.id))).scalar_one_or_none()
            if row is None:
                raise LookupError("Application not found.")
            await s.refresh(row)
            return ApplicationRead.model_validate(row)

    # ---------------------------------
    # Audit log helpers
    # ---------------------------------

    async def create_audit_log(self, payload: AuditLogCreate) -> AuditLogRead:
        """Persist a new audit log entry."""
        async with self.session() as s:
            record = AuditLog(
                actor_id=payload.actor_id,
                actor_role=payload.actor_role,
                action=payload.action,
                payload=dict(payload.payload or {}),
            )
            s.add(record)
            await s.flush()
            await s.refresh(record)
            return AuditLogRead.model_validate(record)

    async def list_audit_logs(
        self,
        *,
        limit: int = 100,
        offset: int = 0,
        actor_id: uuid.UUID | None = None,
        action: str | None = None,
    ) -> tuple[list[AuditLogRead], int]:
        """Return paginated audit log entries filtered by actor/action."""
        limit = max(0, int(limit))
        offset = max(0, int(offset))

        async with self.session() as s:
            stmt = select(AuditLog).order_by(AuditLog.created_at.desc())
            count_stmt = select(func.count(AuditLog.id))
            if actor_id:
                stmt = stmt.where(AuditLog.actor_id == actor_id)
                count_stmt = count_stmt.where(AuditLog.actor_id == actor_id)
            if action:
                stmt = stmt.where(AuditLog.action == action)
                count_stmt = count_stmt.where(AuditLog.action == action)

            if limit:
                stmt = stmt.limit(limit)
            if offset:
                stmt = stmt.offset(offset)

            rows = (await s.execute(stmt)).scalars().all()
            total = int((await s.execute(count_stmt)).scalar_one())

        return [AuditLogRead.model_validate(row) for row in rows], total
