import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from installations_api import config
from installations_api.errors import ConcurrentModification, InvalidTransition, NotFound, PersistenceFailure
from installations_api.routes import health, installations, milestones, permits

logging.basicConfig(level=config.log_level(), format="%(levelname)-5.5s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Installations API")

app.include_router(health.router)
app.include_router(installations.router)
app.include_router(milestones.router)
app.include_router(permits.router)


@app.exception_handler(NotFound)
def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc), "entity": exc.entity, "id": exc.entity_id},
    )


@app.exception_handler(InvalidTransition)
def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": str(exc),
            "entity": exc.entity,
            "current": exc.current,
            "requested": exc.requested,
        },
    )


@app.exception_handler(PersistenceFailure)
def persistence_failure_handler(request: Request, exc: PersistenceFailure):
    if isinstance(exc, ConcurrentModification):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})
    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})
