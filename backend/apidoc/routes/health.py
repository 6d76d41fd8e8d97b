"""
apidoc — Health Check Route
============================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Reports service status, version, uptime and the documentation
       cache state. It never triggers a model build.

Documentation states:
    disabled  no copyright block, or doc_online=true
    empty     not built yet (or invalidated)
    building  a request is building the model right now
    ready     model published
"""

import logging
import time

from fastapi import APIRouter, Request

from apidoc import __version__
from apidoc.metadata import api_ignore
from apidoc.schemas.document import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
@api_ignore()
async def health_check(request: Request) -> HealthResponse:
    cache = getattr(request.app.state, "document_cache", None)
    if cache is None or not cache.enabled:
        documentation = "disabled"
    else:
        documentation = cache.state.value

    return HealthResponse(
        status="healthy",
        version=__version__,
        documentation=documentation,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
