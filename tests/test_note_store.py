"""
NoteHub Backend: Note Store Tests
==================================

What we test:
    ✅ Create → get round trip, id assignment, timestamps
    ✅ Partial patch keeps absent fields; updated_at never moves backwards
    ✅ A note deleted between read and commit of a patch is NotFound
    ✅ Delete is final; a second delete is NotFound
    ✅ Paging: id-ascending order, past-the-end pages are empty
    ✅ Blank and null inputs are rejected before touching the database
    ✅ Backend failures (SQLAlchemy errors, pool timeouts, socket errors)
       surface as StoreUnavailableError

The first group runs against a real SQLite file (see conftest.py); the
second uses a mock session to force backend failures.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm.exc import StaleDataError

from notehub.exceptions import NotFoundError, StoreUnavailableError, ValidationError
from notehub.schemas.note import NotePatch
from notehub.services.note_store import NoteStore


def _aware(value):
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _DeletingAfterReadStore(NoteStore):
    """Deletes the row from another session right after loading it."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def get_note(self, db, note_id):
        note = await super().get_note(db, note_id)
        async with self.session_factory() as other:
            await NoteStore().delete_note(other, note_id)
        return note


class TestNoteStoreCrud:

    def setup_method(self):
        self.store = NoteStore()

    @pytest.mark.asyncio
    async def test_create_then_get(self, app, db_session):
        created = await self.store.create_note(db_session, "A", "x")
        assert created.id is not None and created.id > 0
        assert created.created_at == created.updated_at

        async with app.state.session_factory() as other:
            fetched = await self.store.get_note(other, created.id)

        assert fetched.title == "A"
        assert fetched.content == "x"
        assert fetched.created_at == fetched.updated_at

    @pytest.mark.asyncio
    async def test_ids_are_distinct(self, db_session):
        first = await self.store.create_note(db_session, "A", "x")
        second = await self.store.create_note(db_session, "B", "y")
        assert first.id != second.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title, content", [("", "x"), ("   ", "x"), ("A", ""), ("A", "\n\t")])
    async def test_create_rejects_blank_fields(self, db_session, title, content):
        with pytest.raises(ValidationError):
            await self.store.create_note(db_session, title, content)
        assert await self.store.count_notes(db_session) == 0

    @pytest.mark.asyncio
    async def test_patch_changes_only_supplied_fields(self, db_session):
        note = await self.store.create_note(db_session, "A", "x")
        created_at = _aware(note.created_at)
        before = _aware(note.updated_at)

        patched = await self.store.patch_note(db_session, note.id, NotePatch(title="B"))

        assert patched.title == "B"
        assert patched.content == "x"
        assert _aware(patched.created_at) == created_at
        assert _aware(patched.updated_at) >= before

    @pytest.mark.asyncio
    async def test_empty_patch_only_touches_updated_at(self, db_session):
        note = await self.store.create_note(db_session, "A", "x")
        before = _aware(note.updated_at)

        patched = await self.store.patch_note(db_session, note.id, NotePatch())

        assert (patched.title, patched.content) == ("A", "x")
        assert _aware(patched.updated_at) >= before

    @pytest.mark.asyncio
    async def test_patch_rejects_blank_and_null(self, db_session):
        note = await self.store.create_note(db_session, "A", "x")

        with pytest.raises(ValidationError):
            await self.store.patch_note(db_session, note.id, NotePatch(content=""))
        with pytest.raises(ValidationError):
            await self.store.patch_note(db_session, note.id, NotePatch(title=None))

        unchanged = await self.store.get_note(db_session, note.id)
        assert (unchanged.title, unchanged.content) == ("A", "x")

    @pytest.mark.asyncio
    async def test_patch_of_note_deleted_after_read(self, app, db_session):
        note = await self.store.create_note(db_session, "A", "x")
        store = _DeletingAfterReadStore(app.state.session_factory)

        with pytest.raises(NotFoundError):
            await store.patch_note(db_session, note.id, NotePatch(content="C"))

        await db_session.rollback()
        async with app.state.session_factory() as other:
            assert await self.store.count_notes(other) == 0

    @pytest.mark.asyncio
    async def test_patch_missing_note(self, db_session):
        with pytest.raises(NotFoundError):
            await self.store.patch_note(db_session, 4242, NotePatch(title="B"))

    @pytest.mark.asyncio
    async def test_get_missing_note(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.store.get_note(db_session, 7)
        assert exc_info.value.status_code == 404
        assert "7" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_delete_is_final(self, db_session):
        note = await self.store.create_note(db_session, "A", "x")

        await self.store.delete_note(db_session, note.id)

        with pytest.raises(NotFoundError):
            await self.store.get_note(db_session, note.id)
        with pytest.raises(NotFoundError):
            await self.store.delete_note(db_session, note.id)

    @pytest.mark.asyncio
    async def test_delete_leaves_other_notes(self, db_session):
        keep = await self.store.create_note(db_session, "keep", "x")
        drop = await self.store.create_note(db_session, "drop", "y")

        await self.store.delete_note(db_session, drop.id)

        remaining = await self.store.list_notes(db_session)
        assert [n.id for n in remaining] == [keep.id]

    @pytest.mark.asyncio
    async def test_list_pages_in_id_order(self, db_session):
        ids = [(await self.store.create_note(db_session, f"n{i}", "x")).id for i in range(5)]

        first = await self.store.list_notes(db_session, page=1, page_size=2)
        second = await self.store.list_notes(db_session, page=2, page_size=2)
        third = await self.store.list_notes(db_session, page=3, page_size=2)

        assert [n.id for n in first + second + third] == sorted(ids)
        assert len(third) == 1
        assert await self.store.count_notes(db_session) == 5

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, db_session):
        await self.store.create_note(db_session, "A", "x")
        assert await self.store.list_notes(db_session, page=9999, page_size=10) == []

    @pytest.mark.asyncio
    async def test_huge_page_does_not_overflow(self, db_session):
        assert await self.store.list_notes(db_session, page=2 ** 62, page_size=100) == []

    @pytest.mark.asyncio
    async def test_list_rejects_non_positive_paging(self, db_session):
        with pytest.raises(ValidationError):
            await self.store.list_notes(db_session, page=0)
        with pytest.raises(ValidationError):
            await self.store.list_notes(db_session, page=1, page_size=0)


class TestNoteStoreBackendFailures:

    def setup_method(self):
        self.store = NoteStore()

    @pytest.mark.asyncio
    async def test_get_maps_operational_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("connection refused")
        )

        with pytest.raises(StoreUnavailableError) as exc_info:
            await self.store.get_note(mock_db_session, 1)

        assert exc_info.value.status_code == 503
        assert exc_info.value.context["operation"] == "get"
        # Driver detail stays out of the client-facing message
        assert "connection refused" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_create_maps_pool_timeout(self, mock_db_session):
        mock_db_session.commit.side_effect = PoolTimeoutError("QueuePool limit reached")

        with pytest.raises(StoreUnavailableError) as exc_info:
            await self.store.create_note(mock_db_session, "A", "x")

        assert exc_info.value.context["error_type"] == "TimeoutError"

    @pytest.mark.asyncio
    async def test_list_maps_socket_error(self, mock_db_session):
        mock_db_session.execute.side_effect = ConnectionResetError("peer reset")

        with pytest.raises(StoreUnavailableError):
            await self.store.list_notes(mock_db_session)

    @pytest.mark.asyncio
    async def test_delete_maps_commit_failure(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("gone"))

        with pytest.raises(StoreUnavailableError):
            await self.store.delete_note(mock_db_session, 3)

    @pytest.mark.asyncio
    async def test_missing_row_is_not_a_backend_failure(self, mock_db_session):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = result

        with pytest.raises(NotFoundError):
            await self.store.get_note(mock_db_session, 1)

    @pytest.mark.asyncio
    async def test_delete_of_missing_row_does_not_commit(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=0)

        with pytest.raises(NotFoundError):
            await self.store.delete_note(mock_db_session, 3)

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_validation_happens_before_the_database(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.store.create_note(mock_db_session, "", "x")

        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stale_row_on_patch_commit_is_not_found(self, mock_db_session):
        note = MagicMock(updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
        result = MagicMock()
        result.scalar_one_or_none.return_value = note
        mock_db_session.execute.return_value = result
        mock_db_session.commit.side_effect = StaleDataError(
            "UPDATE statement on table 'notes' expected to update 1 row(s); 0 were matched."
        )

        with pytest.raises(NotFoundError):
            await self.store.patch_note(mock_db_session, 5, NotePatch(content="C"))
