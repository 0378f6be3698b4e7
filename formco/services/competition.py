# services/competition.py
import logging
from uuid import UUID
from datetime import datetime
from typing import Any, ClassVar, Mapping, Optional, Self

from sqlalchemy.exc import IntegrityError

from formco.core.actors import Actor, OrganizationActor, OrganizerActor, acting_organization, can_manage
from formco.core.competition_input import validate_competition_input
from formco.core.errors import DuplicateTitleError, ForbiddenError, NotFoundError
from formco.core.status import competition_status
from formco.db.database import DataBase
from formco.db.enums import CompetitionMode, CompetitionStatus
from formco.db.schemas.competition import CompetitionCreate, CompetitionRead, CompetitionView
from formco.services.audit_log import instrument_service_class
from formco.utils.clock import utcnow

logger = logging.getLogger(__name__)


class CompetitionService:
	"""
	Singleton service layer for competitions.

	Strict rule: this service does **not** touch SQLAlchemy sessions or models.
	It only calls the DataBase facade and returns DTOs. Status is never cached;
	it is derived from the wall clock on every read.
	"""

	_instance: ClassVar[Optional["CompetitionService"]] = None

	def __new__(cls) -> Self:
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __init__(self) -> None:
		if getattr(self, "_initialized", False):
			return

		self._database: DataBase = DataBase()

		self._initialized = True

	# --------------------
	# Reads
	# --------------------
	async def get_competition_by_id(self, comp_id: UUID) -> Optional[CompetitionRead]:
		# uncached; a delete on any worker is visible on the next read
		return await self._database.get_competition_by_id(comp_id)

	async def get_competition(self, comp_id: UUID, now: Optional[datetime] = None) -> CompetitionView:
		comp = await self.get_competition_by_id(comp_id)
		if comp is None:
			raise NotFoundError("Competition")
		return self.view(comp, now)

	async def get_status(self, competition: CompetitionRead | UUID, now: Optional[datetime] = None) -> CompetitionStatus:
		if isinstance(competition, UUID):
			found = await self.get_competition_by_id(competition)
			if found is None:
				raise NotFoundError("Competition")
			competition = found
		return competition_status(
			now or utcnow(),
			competition.deadline_to_apply,
			competition.start_date,
			competition.end_date,
		)

	async def list_competitions(
		self,
		page: int = 0,
		page_size: int = 20,
		*,
		category: Optional[str] = None,
		mode: Optional[CompetitionMode] = None,
		organization_id: Optional[UUID] = None,
		status: Optional[CompetitionStatus] = None,
		now: Optional[datetime] = None,
	) -> tuple[list[CompetitionView], int]:
		"""Newest first. Status is not stored, so a status filter is applied after loading the filtered set."""
		now = now or utcnow()
		offset = max(page, 0) * page_size
		if status is None:
			items, total = await self._database.list_competitions(
				limit=page_size, offset=offset, category=category, mode=mode, organization_id=organization_id,
			)
			return [self.view(comp, now) for comp in items], total

		_, total = await self._database.list_competitions(
			limit=0, offset=0, category=category, mode=mode, organization_id=organization_id,
		)
		items, _ = await self._database.list_competitions(
			limit=total, offset=0, category=category, mode=mode, organization_id=organization_id,
		)
		views = [v for v in (self.view(comp, now) for comp in items) if v.status == status]
		return views[offset:offset + page_size], len(views)

	@staticmethod
	def view(comp: CompetitionRead, now: Optional[datetime] = None) -> CompetitionView:
		status = competition_status(now or utcnow(), comp.deadline_to_apply, comp.start_date, comp.end_date)
		return CompetitionView(**comp.model_dump(), status=status)

	# --------------------
	# Writes
	# --------------------
	async def create_competition(
		self,
		actor: Actor,
		raw: Mapping[str, Any],
		organization_id: Optional[UUID] = None,
		now: Optional[datetime] = None,
	) -> CompetitionRead:
		"""
		Validate organizer input and store a competition for the acting organization.

		Args:
			actor: organizer or organization creating the competition.
			raw: form fields as posted by the client (snake_case or camelCase keys).
			organization_id: acting organization; may be omitted by organizations and by
				organizers with exactly one membership.

		Raises:
			ForbiddenError: students, or organizers and organizations acting outside their own organization.
			CompetitionValidationError: every rule violation found in ``raw``.
			DuplicateTitleError: the organization already has a competition with this title.
		"""
		if isinstance(actor, OrganizerActor) and not actor.organization_ids:
			raise ForbiddenError("organization_required")
		owner = acting_organization(actor, organization_id)
		if owner is None:
			if isinstance(actor, (OrganizerActor, OrganizationActor)):
				raise ForbiddenError("not_in_organization")
			raise ForbiddenError("organizers_only")

		draft = validate_competition_input(raw, now or utcnow())
		payload = CompetitionCreate(
			**draft.model_dump(),
			organization_id=owner,
			organizer_id=actor.id if isinstance(actor, OrganizerActor) else None,
		)
		try:
			comp = await self._database.create_competition(payload)
		except IntegrityError:
			raise DuplicateTitleError(payload.title) from None

		logger.info("competition %s created for organization %s", comp.id, owner)
		return comp

	async def delete_competition(self, actor: Actor, competition_id: UUID) -> None:
		"""Hard-delete a competition together with all of its applications."""
		comp = await self.get_competition_by_id(competition_id)
		if comp is None:
			raise NotFoundError("Competition")
		if not can_manage(actor, comp):
			raise ForbiddenError("not_managing")

		deleted = await self._database.delete_competition(competition_id)
		if not deleted:
			raise NotFoundError("Competition")
		logger.info("competition %s deleted", competition_id)


instrument_service_class(
	CompetitionService,
	prefix="services.competition",
	exclude={"get_competition_by_id", "get_competition", "get_status", "list_competitions", "view"},
)
