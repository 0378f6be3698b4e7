# services/application.py
import logging
from uuid import UUID
from datetime import datetime
from typing import ClassVar, Optional, Self

from sqlalchemy.exc import IntegrityError

from formco.core.actors import Actor, StudentActor, can_manage
from formco.core.eligibility import validate_application
from formco.core.errors import AlreadyAppliedError, ForbiddenError, NotFoundError
from formco.core import lifecycle
from formco.core.verification import issue_code
from formco.db.database import DataBase
from formco.db.enums import AcceptanceStatus
from formco.db.schemas.application import (
	ApplicationCheck,
	ApplicationCreate,
	ApplicationRead,
	ApplicationSubmission,
	ApplicationUpdate,
	AxisUpdate,
	StudentApplicationRow,
)
from formco.db.schemas.competition import CompetitionRead
from formco.services.audit_log import instrument_service_class
from formco.services.competition import CompetitionService
from formco.utils.clock import utcnow

logger = logging.getLogger(__name__)


class ApplicationService:
	"""
	Submission of applications and the organizer-side lifecycle updates.

	Eligibility rules live in :mod:`formco.core.eligibility`; this layer loads the
	inputs, enforces who may act, and maps persistence failures to workflow errors.
	"""

	_instance: ClassVar[Optional["ApplicationService"]] = None

	def __new__(cls) -> Self:
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __init__(self) -> None:
		if getattr(self, "_initialized", False):
			return

		self._database = DataBase()
		self._competition_svc = CompetitionService()

		self._initialized = True

	async def submit(
		self,
		actor: Actor,
		competition_id: UUID,
		submission: ApplicationSubmission,
		now: Optional[datetime] = None,
	) -> ApplicationRead:
		"""
		Validate and store a student's application.

		Returns:
			ApplicationRead: the stored application, including its verification code.

		Raises:
			ForbiddenError: the actor is not a student.
			NotFoundError: unknown competition.
			EligibilityError: the first failed eligibility check.
			AlreadyAppliedError: an application for this competition already exists,
				including one inserted concurrently after the pre-check.
		"""
		if not isinstance(actor, StudentActor):
			raise ForbiddenError("students_only")

		competition = await self._competition_svc.get_competition_by_id(competition_id)
		existing = None
		if competition is not None:
			existing = await self._database.get_application_for_student(competition_id, actor.id)

		draft = validate_application(competition, actor.id, submission, existing, now or utcnow())
		payload = ApplicationCreate(**draft.model_dump(), verification_code=issue_code())
		try:
			application = await self._database.create_application(payload)
		except IntegrityError:
			# either a concurrent submit won the unique constraint, or the competition
			# was deleted after the pre-check (foreign key)
			winner = await self._database.get_application_for_student(competition_id, actor.id)
			if winner is None:
				raise NotFoundError("Competition") from None
			raise AlreadyAppliedError(winner.id) from None

		logger.info("application %s submitted for competition %s", application.id, competition_id)
		return application

	# --------------------
	# Lifecycle axes
	# --------------------
	async def set_payment_verified(self, actor: Actor, application_id: UUID, value: bool) -> ApplicationRead:
		await self._managed_application(actor, application_id)
		return await self._apply(lifecycle.set_payment_verified(application_id, value, utcnow()))

	async def set_attended(self, actor: Actor, application_id: UUID, value: bool) -> ApplicationRead:
		await self._managed_application(actor, application_id)
		return await self._apply(lifecycle.set_attended(application_id, value))

	async def set_acceptance(self, actor: Actor, application_id: UUID, value: AcceptanceStatus) -> ApplicationRead:
		await self._managed_application(actor, application_id)
		return await self._apply(lifecycle.set_acceptance(application_id, value))

	async def update_axis(self, actor: Actor, application_id: UUID, request: AxisUpdate) -> ApplicationRead:
		await self._managed_application(actor, application_id)
		return await self._apply(lifecycle.transition(application_id, request, utcnow()))

	# --------------------
	# Reads
	# --------------------
	async def get_application(self, actor: Actor, application_id: UUID) -> ApplicationRead:
		application = await self._database.get_application_by_id(application_id)
		if application is None:
			raise NotFoundError("Application")
		if isinstance(actor, StudentActor):
			if application.student_id != actor.id:
				raise ForbiddenError("own_applications_only")
			return application

		competition = await self._competition_svc.get_competition_by_id(application.competition_id)
		if competition is None or not can_manage(actor, competition):
			raise ForbiddenError("not_managing")
		return application

	async def list_for_competition(self, actor: Actor, competition_id: UUID) -> list[ApplicationRead]:
		competition = await self._competition_svc.get_competition_by_id(competition_id)
		if competition is None:
			raise NotFoundError("Competition")
		if not can_manage(actor, competition):
			raise ForbiddenError("not_managing")
		return await self._database.list_applications_by_competition(competition_id)

	async def list_for_student(self, actor: Actor) -> list[StudentApplicationRow]:
		if not isinstance(actor, StudentActor):
			raise ForbiddenError("students_only")
		return await self._database.list_applications_by_student(actor.id)

	async def check_application(self, actor: Actor, competition_id: UUID) -> ApplicationCheck:
		if not isinstance(actor, StudentActor):
			raise ForbiddenError("students_only")
		if await self._competition_svc.get_competition_by_id(competition_id) is None:
			raise NotFoundError("Competition")

		application = await self._database.get_application_for_student(competition_id, actor.id)
		if application is None:
			return ApplicationCheck(has_applied=False)
		return ApplicationCheck(
			has_applied=True,
			application_id=application.id,
			verification_code=application.verification_code,
			submitted_at=application.submitted_at,
			payment_verified=application.payment_verified,
		)

	# --------------------
	# Helpers
	# --------------------
	async def _managed_application(self, actor: Actor, application_id: UUID) -> CompetitionRead:
		application = await self._database.get_application_by_id(application_id)
		if application is None:
			raise NotFoundError("Application")
		competition = await self._competition_svc.get_competition_by_id(application.competition_id)
		if competition is None:
			raise NotFoundError("Competition")
		if not can_manage(actor, competition):
			raise ForbiddenError("not_managing")
		return competition

	async def _apply(self, update: ApplicationUpdate) -> ApplicationRead:
		try:
			return await self._database.update_application_fields(update)
		except LookupError:
			raise NotFoundError("Application") from None


instrument_service_class(
	ApplicationService,
	prefix="services.application",
	exclude={"get_application", "list_for_competition", "list_for_student", "check_application"},
)
