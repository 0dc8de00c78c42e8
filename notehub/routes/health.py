"""
NoteHub Backend: Health Check Route
====================================

What:  Liveness probe for load balancers and container health checks.
How:   Runs `SELECT 1` against the note store's database.

    200 {"status": "ok", "message": "API Services"}
    503 {"status": "unavailable", "message": "..."}   database unreachable
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from notehub.database import check_connection
from notehub.schemas.note import HealthResponse
from notehub.services.note_store import BACKEND_ERRORS

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

MESSAGE = "API Services"


@router.get(
    "/healthcheck",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    try:
        await check_connection(request.app.state.engine)
    except BACKEND_ERRORS as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unavailable",
                message=f"{MESSAGE}: database unreachable",
            ).model_dump(),
        )

    return HealthResponse(status="ok", message=MESSAGE)
