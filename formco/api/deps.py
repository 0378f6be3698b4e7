# api/deps.py
from typing import Annotated, AsyncIterator
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from formco.core.actors import Actor
from formco.db.enums import ActorRole
from formco.services.application import ApplicationService
from formco.services.audit_log import AuditLogService, audit_logger
from formco.services.competition import CompetitionService
from formco.services.organization import OrganizationService


def competition_service() -> CompetitionService:
	return CompetitionService()


def application_service() -> ApplicationService:
	return ApplicationService()


def organization_service() -> OrganizationService:
	return OrganizationService()


def audit_log_service() -> AuditLogService:
	return audit_logger


async def current_actor(
	x_actor_role: Annotated[str | None, Header()] = None,
	x_actor_id: Annotated[str | None, Header()] = None,
	organizations: OrganizationService = Depends(organization_service),
) -> AsyncIterator[Actor]:
	"""Identity established upstream, passed as ``X-Actor-Role`` / ``X-Actor-Id``."""
	if not x_actor_role or not x_actor_id:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
	try:
		role = ActorRole(x_actor_role.strip().lower())
		actor_id = UUID(x_actor_id.strip())
	except ValueError:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid identity headers") from None

	actor = await organizations.resolve_actor(role, actor_id)
	# bind actor context for downstream audit entries
	token = audit_logger.bind_actor(actor)
	try:
		yield actor
	finally:
		audit_logger.unbind_actor(token)


CurrentActor = Annotated[Actor, Depends(current_actor)]
