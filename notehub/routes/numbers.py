"""
NoteHub Backend: Number Registry Routes
========================================

    GET  /numbers   → 200, the registry snapshot as a JSON array
    POST /numbers   → 200, the registry right after appending the body

The POST body is a bare JSON integer (e.g. `5`). Strict parsing rejects
"5", 5.0 and true, and values outside int32 are refused before the
registry is touched. Every rejection is a 400 from the global handler.
"""

from typing import List

from fastapi import APIRouter, Body, Depends

from notehub.dependencies import get_registry
from notehub.schemas.note import INT32_MAX, INT32_MIN, ErrorResponse
from notehub.services.number_registry import NumberRegistry

router = APIRouter(tags=["Numbers"])


@router.get("/numbers", response_model=List[int], summary="Snapshot of the registry")
async def get_numbers(registry: NumberRegistry = Depends(get_registry)) -> List[int]:
    return await registry.snapshot()


@router.post(
    "/numbers",
    response_model=List[int],
    responses={400: {"description": "Body is not a 32-bit integer", "model": ErrorResponse}},
    summary="Append a number to the registry",
)
async def add_number(
    value: int = Body(
        ...,
        strict=True,
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Signed 32-bit integer to append",
        examples=[5],
    ),
    registry: NumberRegistry = Depends(get_registry),
) -> List[int]:
    return await registry.append(value)
