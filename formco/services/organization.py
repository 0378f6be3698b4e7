# services/organization.py
import logging
import secrets
from uuid import UUID
from typing import ClassVar, Optional, Self

from sqlalchemy.exc import IntegrityError

from formco.core.actors import Actor, OrganizationActor, OrganizerActor, StudentActor
from formco.core.errors import ConflictError, ErrorKind, ForbiddenError, NotFoundError, WorkflowError
from formco.db.database import DataBase
from formco.db.enums import ActorRole
from formco.db.schemas.organization import (
	OrganizationCreate,
	OrganizationPublic,
	OrganizationRead,
	OrganizerCreate,
	OrganizerRead,
	StudentCreate,
	StudentRead,
)
from formco.services.audit_log import instrument_service_class

logger = logging.getLogger(__name__)

SECRET_CODE_BYTES = 6


class OrganizationService:
	"""
	Registration of organizations, organizers and students, organizer membership
	via an organization's secret code, and resolution of upstream identities into
	:data:`formco.core.actors.Actor` values.
	"""

	_instance: ClassVar[Optional["OrganizationService"]] = None

	def __new__(cls) -> Self:
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __init__(self) -> None:
		if getattr(self, "_initialized", False):
			return

		self._database = DataBase()

		self._initialized = True

	async def register_organization(self, payload: OrganizationCreate) -> OrganizationRead:
		try:
			return await self._database.create_organization(payload, secret_code=secrets.token_urlsafe(SECRET_CODE_BYTES))
		except IntegrityError:
			raise ConflictError(ErrorKind.EMAIL_TAKEN) from None

	async def register_organizer(self, payload: OrganizerCreate) -> OrganizerRead:
		try:
			return await self._database.create_organizer(payload)
		except IntegrityError:
			raise ConflictError(ErrorKind.EMAIL_TAKEN) from None

	async def register_student(self, payload: StudentCreate) -> StudentRead:
		try:
			return await self._database.create_student(payload)
		except IntegrityError:
			raise ConflictError(ErrorKind.EMAIL_TAKEN) from None

	async def join_organization(self, actor: Actor, secret_code: str) -> OrganizerRead:
		"""Add the acting organizer to the organization owning ``secret_code``."""
		if not isinstance(actor, OrganizerActor):
			raise ForbiddenError("organizers_only")

		organization = await self._database.get_organization_by_secret_code(secret_code)
		if organization is None:
			raise WorkflowError(ErrorKind.INVALID_SECRET_CODE)
		if not await self._database.add_organizer_to_organization(organization.id, actor.id):
			raise ConflictError(ErrorKind.ALREADY_MEMBER)

		logger.info("organizer %s joined organization %s", actor.id, organization.id)
		return await self._database.get_organizer_by_id(actor.id)

	async def leave_organization(self, actor: Actor, organization_id: UUID) -> OrganizerRead:
		if not isinstance(actor, OrganizerActor):
			raise ForbiddenError("organizers_only")
		if not await self._database.remove_organizer_from_organization(organization_id, actor.id):
			raise WorkflowError(ErrorKind.NOT_A_MEMBER)

		logger.info("organizer %s left organization %s", actor.id, organization_id)
		return await self._database.get_organizer_by_id(actor.id)

	async def remove_organizer(self, actor: Actor, organizer_id: UUID) -> list[OrganizerRead]:
		"""
		Revoke an organizer's membership in the acting organization.

		Returns:
			list[OrganizerRead]: the organizers still linked to the organization.

		Raises:
			ForbiddenError: the actor is not an organization.
			WorkflowError: the organizer is not linked to this organization.
		"""
		if not isinstance(actor, OrganizationActor):
			raise ForbiddenError("organizations_only")
		if not await self._database.remove_organizer_from_organization(actor.id, organizer_id):
			raise WorkflowError(ErrorKind.ORGANIZER_NOT_LINKED)

		logger.info("organization %s removed organizer %s", actor.id, organizer_id)
		return await self._database.list_organizers_by_organization(actor.id)

	async def list_organizers(self, actor: Actor) -> list[OrganizerRead]:
		if not isinstance(actor, OrganizationActor):
			raise ForbiddenError("organizations_only")
		return await self._database.list_organizers_by_organization(actor.id)

	async def list_organizations_for_organizer(self, actor: Actor) -> list[OrganizationPublic]:
		if not isinstance(actor, OrganizerActor):
			raise ForbiddenError("organizer_account_only")
		return await self._database.list_organizations_for_organizer(actor.id)

	async def list_organizations(self, limit: int = 100, offset: int = 0) -> list[OrganizationPublic]:
		# public directory; secret codes are never part of it
		return await self._database.list_organizations(limit=limit, offset=offset)

	async def resolve_actor(self, role: ActorRole | str, actor_id: UUID) -> Actor:
		"""
		Turn the identity provider's (role, id) pair into an actor.

		Organizer memberships are loaded fresh on every call so a join or leave is
		visible on the next request.

		Raises:
			NotFoundError: no record of that role with this id.
		"""
		role = ActorRole(role)
		match role:
			case ActorRole.STUDENT:
				if await self._database.get_student_by_id(actor_id) is None:
					raise NotFoundError("Student")
				return StudentActor(id=actor_id)
			case ActorRole.ORGANIZER:
				organizer = await self._database.get_organizer_by_id(actor_id)
				if organizer is None:
					raise NotFoundError("Organizer")
				return OrganizerActor(id=actor_id, organization_ids=frozenset(organizer.organization_ids))
			case ActorRole.ORGANIZATION:
				if await self._database.get_organization_by_id(actor_id) is None:
					raise NotFoundError("Organization")
				return OrganizationActor(id=actor_id)


instrument_service_class(
	OrganizationService,
	prefix="services.organization",
	exclude={"resolve_actor", "list_organizers", "list_organizations_for_organizer", "list_organizations"},
)
