import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import AsyncExitStack
from fastapi.exceptions import HTTPException

from app.connections import http_lifespan, mongo_lifespan, redis_lifespan, get_http_client
from app.api.user import router as user_router
from app.services.registration import RegistrationConfig, RegistrationService
from app.services.store import UserStore
from app.utils.config import settings


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def combined_lifespan(app: FastAPI):
    logger.info("Starting %s (%s)", settings.app_name, settings.environment)
    async with AsyncExitStack() as stack:
        await stack.enter_async_context(mongo_lifespan(app))
        await stack.enter_async_context(redis_lifespan(app))
        await stack.enter_async_context(http_lifespan(app))

        app.state.registration_service = RegistrationService(
            config=RegistrationConfig.from_settings(settings),
            store=UserStore(),
            http_client=get_http_client(),
        )
        yield


def http_error_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    """Render framework errors in the same {"failed": ...} envelope as the pipeline."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"failed": True, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"failed": True})


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=combined_lifespan)

app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, internal_error_handler)

app.include_router(user_router, prefix="/api/users")


@app.get("/health")
def health_check() -> dict:
    return {"status": "healthy"}
