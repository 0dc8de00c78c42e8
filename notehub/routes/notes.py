"""
NoteHub Backend: Notes Route Handlers
======================================

What:  CRUD endpoints under /api/notes.
How:   Parse and type-check path/query/body, delegate to NoteStore, shape
       the response. Failures raised by the store are turned into JSON
       error bodies by the global handlers in main.py.

Route Inventory:
    POST   /api/notes          create       → 201 Note
    GET    /api/notes          list page    → 200 [Note], X-Total-Count header
    GET    /api/notes/{id}     fetch        → 200 Note
    PATCH  /api/notes/{id}     partial edit → 200 Note
    DELETE /api/notes/{id}     remove       → 204
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.database import get_db_session
from notehub.dependencies import get_note_store
from notehub.schemas.note import (
    INT32_MAX,
    ErrorResponse,
    NoteCreate,
    NotePatch,
    NoteResponse,
)
from notehub.services.note_store import NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

# Ids are positive and fit the INTEGER primary key column
NoteId = Annotated[int, Path(ge=1, le=INT32_MAX, description="Note identifier")]

STORE_ERRORS = {
    400: {"description": "Malformed or invalid request", "model": ErrorResponse},
    503: {"description": "Note store unavailable", "model": ErrorResponse},
}
NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteResponse,
    responses=STORE_ERRORS,
    summary="Create a note",
)
async def create_note(
    payload: NoteCreate,
    db: AsyncSession = Depends(get_db_session),
    store: NoteStore = Depends(get_note_store),
) -> NoteResponse:
    note = await store.create_note(db, title=payload.title, content=payload.content)
    return NoteResponse.model_validate(note)


@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses=STORE_ERRORS,
    summary="List notes, one page at a time",
    description=(
        "Notes are ordered by id ascending. Pages are 1-based; a page past the "
        "end returns an empty array. X-Total-Count carries the number of notes."
    ),
)
async def list_notes(
    response: Response,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    page_size: int = Query(
        default=10, ge=1, le=100, alias="pageSize",
        description="Items per page (max 100)",
    ),
    db: AsyncSession = Depends(get_db_session),
    store: NoteStore = Depends(get_note_store),
) -> List[NoteResponse]:
    notes = await store.list_notes(db, page=page, page_size=page_size)
    total = await store.count_notes(db)

    # Follows the de facto REST convention (GitHub, GitLab)
    response.headers["X-Total-Count"] = str(total)
    return [NoteResponse.model_validate(note) for note in notes]


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={**STORE_ERRORS, **NOT_FOUND},
    summary="Get a single note by id",
)
async def get_note(
    note_id: NoteId,
    db: AsyncSession = Depends(get_db_session),
    store: NoteStore = Depends(get_note_store),
) -> NoteResponse:
    note = await store.get_note(db, note_id)
    return NoteResponse.model_validate(note)


@router.patch(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={**STORE_ERRORS, **NOT_FOUND},
    summary="Partially update a note",
    description="Only the fields present in the body change; absent fields keep their values.",
)
async def patch_note(
    payload: NotePatch,
    note_id: NoteId,
    db: AsyncSession = Depends(get_db_session),
    store: NoteStore = Depends(get_note_store),
) -> NoteResponse:
    note = await store.patch_note(db, note_id, payload)
    return NoteResponse.model_validate(note)


@router.delete(
    "/notes/{note_id}",
    status_code=204,
    response_class=Response,
    responses={**STORE_ERRORS, **NOT_FOUND},
    summary="Delete a note",
)
async def delete_note(
    note_id: NoteId,
    db: AsyncSession = Depends(get_db_session),
    store: NoteStore = Depends(get_note_store),
) -> Response:
    await store.delete_note(db, note_id)
    return Response(status_code=204)
