# api/app.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from formco.config import Settings
from formco.core.errors import ConflictError, ForbiddenError, NotFoundError, WorkflowError
from formco.api.routers.competitions import router as CompetitionRouter
from formco.api.routers.applications import router as ApplicationRouter
from formco.api.routers.organizations import router as OrganizationRouter
from formco.api.routers.audit import router as AuditRouter
from formco.db.database import DataBase

logger = logging.getLogger(__name__)


def status_for(exc: WorkflowError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ForbiddenError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    logger.info("%s on %s: %s", exc.kind, request.url.path, exc.message)
    return JSONResponse(status_code=status_for(exc), content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "validation_error", "message": "Request is invalid", "details": details},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)


def setup_routers(app: FastAPI) -> None:
    app.include_router(CompetitionRouter, prefix="/competitions", tags=["competitions"])
    app.include_router(ApplicationRouter, tags=["applications"])
    app.include_router(OrganizationRouter, tags=["organizations"])
    app.include_router(AuditRouter, tags=["audit"])


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = DataBase()
    # dev convenience; production schemas come from migrations
    await database.create_all()
    yield
    await database.dispose()


def create_app() -> FastAPI:
    app = FastAPI(title="FormCo", description="Competition management API", lifespan=lifespan)
    setup_exception_handlers(app)
    setup_routers(app)
    return app


def main() -> None:
    settings = Settings()
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(create_app(), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
