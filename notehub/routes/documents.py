"""
NoteHub Backend: Document Routes
=================================

    GET /poem → 200 {"title": ..., "text": ...}

The poem is read from POEM_PATH on every request; a missing or malformed
file becomes a 500 JSON error through the DocumentError handler.
"""

from fastapi import APIRouter, Depends

from notehub.dependencies import get_poem_reader
from notehub.schemas.note import ErrorResponse, PoemResponse
from notehub.services.poem_reader import PoemReader

router = APIRouter(tags=["Documents"])


@router.get(
    "/poem",
    response_model=PoemResponse,
    responses={500: {"description": "Poem file missing or invalid", "model": ErrorResponse}},
    summary="Poem loaded from a YAML document",
)
async def get_poem(reader: PoemReader = Depends(get_poem_reader)) -> PoemResponse:
    return await reader.read()
