from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool

from app.services.rate_limit import limit_route
from app.services.registration import RegistrationService
from app.utils.config import settings


router = APIRouter()


def get_registration_service(request: Request) -> RegistrationService:
    return request.app.state.registration_service


@router.post("/register", dependencies=[Depends(limit_route(settings.signup_rate_limit_seconds))])
async def register(
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
) -> Response:
    """PUBLIC | RATE-LIMITED: Create an identity, user and default allowance.

    The raw body is handed to the pipeline untouched so a malformed payload
    degrades to empty fields instead of a framework validation error.
    """
    raw_body = await request.body()
    # Store and upstream calls block; keep them off the event loop
    result = await run_in_threadpool(service.handle, raw_body)
    return Response(content=result.body, status_code=result.status, media_type=result.content_type)
