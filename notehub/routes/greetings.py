"""
NoteHub Backend: Greeting Routes
=================================

Stateless text responders. Each handler is a pure function of its input.

    GET  /                 Hello, World!
    POST /                 Hello, World post!
    GET  /ping             pong
    GET  /kingkong/king    Kong
    GET  /greet/{name}     Hello, {name}!
    GET  /greet            {salutation}, {name}!   (query string)
    POST /greet            {salutation}, {name}!   (JSON body)
"""

from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse

from notehub.schemas.note import GreetingParams

router = APIRouter(tags=["Greetings"], default_response_class=PlainTextResponse)

kingkong = APIRouter(prefix="/kingkong", tags=["Greetings"], default_response_class=PlainTextResponse)

DEFAULT_SALUTATION = "Hello"
DEFAULT_NAME = "World"


def format_greeting(salutation: Optional[str] = None, name: Optional[str] = None) -> str:
    # Only missing values fall back; an explicit empty string is kept
    if salutation is None:
        salutation = DEFAULT_SALUTATION
    if name is None:
        name = DEFAULT_NAME
    return f"{salutation}, {name}!"


@router.get("/")
async def hello_world() -> str:
    return "Hello, World!"


@router.post("/")
async def post_hello_world() -> str:
    return "Hello, World post!"


@router.get("/ping")
async def ping() -> str:
    return "pong"


@kingkong.get("/king")
async def king() -> str:
    return "Kong"


@router.get("/greet/{name}")
async def greet_path(name: str) -> str:
    return format_greeting(name=name)


@router.get("/greet")
async def greet_query(
    salutation: Optional[str] = Query(default=None),
    name: Optional[str] = Query(default=None),
) -> str:
    return format_greeting(salutation, name)


@router.post("/greet")
async def greet_body(params: GreetingParams) -> str:
    return format_greeting(params.salutation, params.name)
