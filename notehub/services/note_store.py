"""
NoteHub Backend: Note Store (CRUD over the relational backend)
===============================================================

What:  Create, list, get, patch and delete notes against the SQL store.
Why:   Keeps id assignment, partial-update and not-found rules in one place,
       independent of HTTP concerns.
How:   Each method receives the request's AsyncSession. Mutations commit
       before returning, so their effects are visible to every other process
       connected to the same database as soon as the call completes.
Who:   Called by the /api/notes route handlers.

Error Handling Strategy:
    Domain errors are raised directly:
        ValidationError  → blank title/content
        NotFoundError    → no row with that id
    Every backend failure (SQLAlchemyError, including pool checkout
    timeouts, or an OSError from the driver's socket) is logged with its
    original detail and re-raised as StoreUnavailableError, which the
    global handler answers with a generic 503.

Ordering:
    list_notes() returns notes by id ascending. Ids come from the backend's
    auto-increment, so this is also insertion order.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from notehub.exceptions import NotFoundError, StoreUnavailableError, ValidationError
from notehub.models.note import Note, utcnow
from notehub.schemas.note import NotePatch

logger = logging.getLogger(__name__)

# Exceptions that mean "the backend could not serve this call"
BACKEND_ERRORS = (SQLAlchemyError, OSError)

EDITABLE_FIELDS = ("title", "content")

# OFFSET is a signed 64-bit value in both PostgreSQL and SQLite
MAX_OFFSET = 2 ** 63 - 1


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _require_text(field: str, value: Optional[str]) -> None:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(message=f"'{field}' must be a non-empty string", field=field)


class NoteStore:
    """
    Stateless CRUD layer for Note rows.

    No note data is cached in-process; every call goes to the database.
    """

    async def create_note(self, db: AsyncSession, title: str, content: str) -> Note:
        """
        Insert a new note.

        The store assigns the id and sets created_at and updated_at to the
        same instant.

        Raises:
            ValidationError: title or content is empty or whitespace-only
            StoreUnavailableError: the insert could not be committed
        """
        _require_text("title", title)
        _require_text("content", content)

        now = utcnow()
        note = Note(title=title, content=content, created_at=now, updated_at=now)
        try:
            db.add(note)
            await db.commit()
        except BACKEND_ERRORS as e:
            raise self._unavailable("create", e) from e

        logger.info("Note %s created", note.id)
        return note

    async def list_notes(self, db: AsyncSession, page: int = 1, page_size: int = 10) -> List[Note]:
        """
        Return one page of notes ordered by id ascending.

        Pages are 1-based. A page past the end is an empty list, not an error.
        """
        if page < 1:
            raise ValidationError(message="'page' must be at least 1", field="page")
        if page_size < 1:
            raise ValidationError(message="'pageSize' must be at least 1", field="pageSize")

        offset = (page - 1) * page_size
        if offset > MAX_OFFSET:
            return []

        query = (
            select(Note)
            .order_by(Note.id.asc())
            .offset(offset)
            .limit(page_size)
        )
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except BACKEND_ERRORS as e:
            raise self._unavailable("list", e) from e

    async def count_notes(self, db: AsyncSession) -> int:
        """Total number of stored notes."""
        try:
            result = await db.execute(select(func.count(Note.id)))
            return result.scalar() or 0
        except BACKEND_ERRORS as e:
            raise self._unavailable("count", e) from e

    async def get_note(self, db: AsyncSession, note_id: int) -> Note:
        """
        Fetch one note.

        Raises:
            NotFoundError: no note with that id (→ 404)
            StoreUnavailableError: query execution failed (→ 503)
        """
        try:
            result = await db.execute(select(Note).where(Note.id == note_id))
            note = result.scalar_one_or_none()
        except BACKEND_ERRORS as e:
            raise self._unavailable("get", e, note_id=note_id) from e

        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note

    async def patch_note(self, db: AsyncSession, note_id: int, fields: NotePatch) -> Note:
        """
        Apply a partial update.

        Only fields present in the payload change; absent fields keep their
        stored values. updated_at moves to the current time and never
        backwards, even if the clock does.

        Raises:
            NotFoundError: no note with that id, including one deleted
                between the read and the commit
            ValidationError: a supplied field is null or blank
            StoreUnavailableError: the update could not be committed
        """
        changes = {k: v for k, v in fields.supplied_fields().items() if k in EDITABLE_FIELDS}
        for name, value in changes.items():
            _require_text(name, value)

        note = await self.get_note(db, note_id)

        for name, value in changes.items():
            setattr(note, name, value)
        note.updated_at = max(utcnow(), _as_utc(note.updated_at))

        try:
            await db.commit()
        except StaleDataError as e:
            # Row deleted by another request after it was loaded
            raise NotFoundError(resource="note", resource_id=note_id) from e
        except BACKEND_ERRORS as e:
            raise self._unavailable("patch", e, note_id=note_id) from e

        logger.info("Note %s patched (%s)", note_id, ", ".join(sorted(changes)) or "no fields")
        return note

    async def delete_note(self, db: AsyncSession, note_id: int) -> None:
        """
        Hard-delete a note.

        A single DELETE statement decides existence, so deleting the same id
        twice (even concurrently) yields NotFoundError for the loser.
        """
        try:
            result = await db.execute(delete(Note).where(Note.id == note_id))
            deleted = result.rowcount
            if deleted:
                await db.commit()
        except BACKEND_ERRORS as e:
            raise self._unavailable("delete", e, note_id=note_id) from e

        if not deleted:
            raise NotFoundError(resource="note", resource_id=note_id)
        logger.info("Note %s deleted", note_id)

    @staticmethod
    def _unavailable(operation: str, error: Exception, **context) -> StoreUnavailableError:
        logger.error(
            "Note store %s failed: %s: %s",
            operation,
            type(error).__name__,
            str(error),
        )
        return StoreUnavailableError(
            context={"operation": operation, "error_type": type(error).__name__, **context},
        )
