"""
NoteHub Backend: Poem Document Reader
======================================

What:  Loads the YAML poem document served by GET /poem.
How:   Async file read (aiofiles) so a slow disk does not block the event
       loop, then `yaml.safe_load` and schema validation.

Expected document:
    title: The Road Not Taken
    text: |
      Two roads diverged in a yellow wood,
      ...
"""

import logging
from pathlib import Path

import aiofiles
import yaml
from pydantic import ValidationError as SchemaError

from notehub.exceptions import DocumentError
from notehub.schemas.note import PoemResponse

logger = logging.getLogger(__name__)


class PoemReader:
    """Reads and validates the poem file on every call (no caching)."""

    def __init__(self, path: str):
        self.path = Path(path)

    async def read(self) -> PoemResponse:
        """
        Raises:
            DocumentError: the file is missing or unreadable, is not valid
                YAML, or lacks a string `title` and `text`.
        """
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Failed to read poem file %s: %s", self.path, str(e))
            raise DocumentError(
                message="Error while accessing the poem file",
                context={"path": str(self.path), "os_error": str(e)},
            ) from e

        try:
            data = yaml.safe_load(raw)
            return PoemResponse.model_validate(data)
        except (yaml.YAMLError, SchemaError) as e:
            logger.error("Invalid poem document %s: %s", self.path, str(e))
            raise DocumentError(
                message="Error in the poem YAML document",
                context={"path": str(self.path), "parse_error": type(e).__name__},
            ) from e
