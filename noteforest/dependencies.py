"""Shared dependencies: structured logger and note store errors."""

import json
import logging
from typing import Any

from noteforest.config import get_settings

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RECORD_ATTRS = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
        }
        data.update({k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS})
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    settings = get_settings()
    logger = logging.getLogger("noteforest")
    logger.setLevel(getattr(logging, settings.log_level.upper()))
    logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger


logger = setup_logging()


class NoteError(Exception):
    """Base exception for note store operations."""

    pass


class NoteIOError(NoteError):
    """Raised when reading, writing or removing a note file fails."""

    def __init__(self, error: OSError | UnicodeError) -> None:
        super().__init__(f"IO error: {error}")
        self.error = error


class MetadataParseError(NoteError):
    """Raised when the frontmatter block is not valid note metadata."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"YAML error: {detail}")


class InvalidFrontmatterError(NoteError):
    """Raised when a note file lacks the ``---`` delimited frontmatter block."""

    def __init__(self) -> None:
        super().__init__("Invalid frontmatter")


class NoteNotFoundError(NoteError):
    """Raised when no file exists for the requested note id."""

    def __init__(self, note_id: int) -> None:
        super().__init__(f"Note not found: {note_id}")
        self.note_id = note_id


class NoteIdExhaustedError(NoteError):
    """Raised when the largest note id is taken and no new id can be assigned."""

    def __init__(self, last_id: int) -> None:
        super().__init__(f"Note id space exhausted: {last_id}")
        self.last_id = last_id
