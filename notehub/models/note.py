"""
NoteHub Backend: Note SQLAlchemy Model
=======================================

What:  ORM model representing the `notes` table.
Who:   Used by the note store for CRUD and by `create_tables()` on startup.

Table Design Rationale:
    - Integer primary key: assigned by the backend's auto-increment, so ids
      are unique and increase with insertion order
    - title / content: TEXT, no artificial length limit
    - created_at / updated_at: UTC with timezone; both set by the store on
      insert, updated_at refreshed on every patch
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from notehub.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A persisted note.

    Lifecycle:
        1. Inserted by NoteStore.create_note (id and timestamps assigned)
        2. Mutated only by NoteStore.patch_note (supplied fields + updated_at)
        3. Removed by NoteStore.delete_note (hard delete, no tombstone)

    Query Patterns:
        - List: ORDER BY id ASC LIMIT :page_size OFFSET :offset (primary key scan)
        - Get / patch / delete: WHERE id = :id (primary key lookup)
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Timestamps ────────────────────────────────────────────────────────
    # Defaults only cover direct inserts; the store always passes one shared
    # value for both so a fresh note has created_at == updated_at
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, updated_at='{self.updated_at}')>"
