"""
NoteHub Backend: Request Dependencies
======================================

FastAPI dependencies that hand route handlers the components the app
factory attached to `app.state`. Routes never construct services or read
settings on their own.
"""

from fastapi import Request

from notehub.services.note_store import NoteStore
from notehub.services.number_registry import NumberRegistry
from notehub.services.poem_reader import PoemReader


def get_note_store(request: Request) -> NoteStore:
    return request.app.state.note_store


def get_registry(request: Request) -> NumberRegistry:
    return request.app.state.registry


def get_poem_reader(request: Request) -> PoemReader:
    return request.app.state.poem_reader
