"""Pydantic models for note operations."""

from datetime import UTC, date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from noteforest.tags.models import Tag

MAX_NOTE_ID = 2**32 - 1

TagName = Annotated[str, StringConstraints(min_length=1, max_length=50)]


def utc_timestamp() -> str:
    """Return the current UTC time as a fixed-width RFC 3339 string.

    Microseconds are always written so that timestamps compare
    lexicographically in chronological order.

    Example:
        2026-10-16T09:30:00.000000+00:00
    """
    return datetime.now(UTC).isoformat(timespec="microseconds")


def _date_to_text(value: Any) -> Any:
    # Plain scalars like 2024-01-01 load as dates under YAML 1.1
    if isinstance(value, date):
        return value.isoformat()
    return value


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoteFrontmatter(CamelModel):
    """YAML frontmatter metadata stored at the top of each note file.

    Example frontmatter:
        ---
        id: 3
        title: Groceries
        tags:
        - home
        createdAt: '2026-10-16T09:00:00.000000+00:00'
        updatedAt: '2026-10-16T09:00:00.000000+00:00'
        ---
    """

    id: int = Field(..., ge=0, le=MAX_NOTE_ID)
    title: str
    tags: list[str]
    created_at: str
    updated_at: str

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        # Unquoted timestamps load as datetimes
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            return value.astimezone(UTC).isoformat(timespec="microseconds")
        return value

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> Any:
        return _date_to_text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_date_to_text(item) for item in value]
        return value

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to a dictionary in on-disk key order."""
        return self.model_dump(by_alias=True)


class Note(CamelModel):
    """A titled, tagged piece of Markdown content.

    Attributes:
        id: Note id, also the file stem of ``<id>.md``
        title: Note title
        content: Markdown body after the frontmatter
        tags: Tags in the order stored in the file
        created_at: When the note was created (RFC 3339, UTC)
        updated_at: When the note was last modified (RFC 3339, UTC)
    """

    id: int = Field(..., ge=0, le=MAX_NOTE_ID)
    title: str
    content: str
    tags: list[Tag] = Field(default_factory=list)
    created_at: str
    updated_at: str

    @property
    def tag_names(self) -> list[str]:
        """Names of the note's tags, in order."""
        return [tag.name for tag in self.tags]

    def to_frontmatter(self) -> NoteFrontmatter:
        """Build the persisted metadata block for this note."""
        return NoteFrontmatter(
            id=self.id,
            title=self.title,
            tags=self.tag_names,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


# =============================================================================
# Requests
# =============================================================================


class ListNotesParams(CamelModel):
    """Query parameters for listing notes."""

    search: str | None = None
    tag_ids: list[Annotated[int, Field(ge=1)]] | None = None
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class CreateNoteRequest(CamelModel):
    """Payload for creating a note."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str
    tag_names: list[TagName] | None = None


class UpdateNoteRequest(CamelModel):
    """Payload for a partial note update. Omitted fields keep their values."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = None
    tag_names: list[TagName] | None = None


# =============================================================================
# Responses
# =============================================================================


class ListNotesResponse(CamelModel):
    """A page of notes plus the number of matches before pagination."""

    notes: list[Note] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


class NoteResponse(CamelModel):
    """Single-note envelope returned by get, create and update."""

    note: Note


class DeleteNoteResponse(CamelModel):
    """Acknowledgement of a deletion."""

    success: bool = True


class ListTagsResponse(CamelModel):
    """Every tag known to the registry."""

    tags: list[Tag] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Error detail in API responses."""

    message: str
    type: str = "note_store_error"
    code: str | None = None


class ErrorResponse(BaseModel):
    """Error envelope returned in the ``detail`` of failed requests."""

    error: ErrorDetail
