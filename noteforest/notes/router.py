"""FastAPI router exposing the note store operations under /v1/notes.

Endpoints are plain ``def`` functions: FastAPI runs them in its thread pool
and the manager's lock serializes them.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from noteforest.config import get_settings
from noteforest.dependencies import (
    InvalidFrontmatterError,
    MetadataParseError,
    NoteError,
    NoteIdExhaustedError,
    NoteNotFoundError,
    logger,
)
from noteforest.notes.manager import NoteManager
from noteforest.notes.models import (
    CreateNoteRequest,
    DeleteNoteResponse,
    ErrorDetail,
    ErrorResponse,
    ListNotesParams,
    ListNotesResponse,
    ListTagsResponse,
    NoteResponse,
    UpdateNoteRequest,
)

router = APIRouter(prefix="/v1/notes", tags=["notes"])


@lru_cache
def get_note_manager() -> NoteManager:
    """FastAPI dependency provider for the process-wide NoteManager."""
    return NoteManager(get_settings().notes_dir)


def to_http_exception(error: NoteError, operation: str) -> HTTPException:
    """Translate a note store error into an HTTP error response.

    The error text is passed through verbatim as the message.
    """
    if isinstance(error, NoteNotFoundError):
        status_code, code = status.HTTP_404_NOT_FOUND, "note_not_found"
    elif isinstance(error, InvalidFrontmatterError | MetadataParseError):
        status_code, code = 422, "invalid_note_file"
    elif isinstance(error, NoteIdExhaustedError):
        status_code, code = status.HTTP_507_INSUFFICIENT_STORAGE, "note_id_exhausted"
    else:
        status_code, code = status.HTTP_500_INTERNAL_SERVER_ERROR, "io_error"

    if status_code >= 500:
        logger.error(
            "note_operation_failed",
            extra={"operation": operation, "error": str(error)},
            exc_info=error,
        )
    else:
        logger.info(
            "note_operation_rejected",
            extra={"operation": operation, "error": str(error), "code": code},
        )

    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=ErrorDetail(message=str(error), code=code)).model_dump(),
    )


@router.get("", response_model=ListNotesResponse)
def list_notes(
    search: str | None = None,
    tag_ids: list[int] | None = Query(default=None, alias="tagIds"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    manager: NoteManager = Depends(get_note_manager),
) -> ListNotesResponse:
    """List notes with optional search, tag filter and pagination."""
    try:
        params = ListNotesParams(search=search, tag_ids=tag_ids, limit=limit, offset=offset)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e

    try:
        return manager.list_notes(params)
    except NoteError as e:
        raise to_http_exception(e, "list") from e


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(
    request: CreateNoteRequest,
    manager: NoteManager = Depends(get_note_manager),
) -> NoteResponse:
    """Create a note."""
    try:
        return NoteResponse(note=manager.create_note(request))
    except NoteError as e:
        raise to_http_exception(e, "create") from e


@router.get("/tags/all", response_model=ListTagsResponse)
def list_tags(manager: NoteManager = Depends(get_note_manager)) -> ListTagsResponse:
    """List every tag known to the store."""
    return manager.list_tags()


@router.get("/{note_id}", response_model=NoteResponse)
def get_note(note_id: int, manager: NoteManager = Depends(get_note_manager)) -> NoteResponse:
    """Fetch a single note by id."""
    try:
        return NoteResponse(note=manager.get_note(note_id))
    except NoteError as e:
        raise to_http_exception(e, "get") from e


@router.patch("/{note_id}", response_model=NoteResponse)
def update_note(
    note_id: int,
    request: UpdateNoteRequest,
    manager: NoteManager = Depends(get_note_manager),
) -> NoteResponse:
    """Partially update a note."""
    try:
        return NoteResponse(note=manager.update_note(note_id, request))
    except NoteError as e:
        raise to_http_exception(e, "update") from e


@router.delete("/{note_id}", response_model=DeleteNoteResponse)
def delete_note(
    note_id: int, manager: NoteManager = Depends(get_note_manager)
) -> DeleteNoteResponse:
    """Delete a note."""
    try:
        return manager.delete_note(note_id)
    except NoteError as e:
        raise to_http_exception(e, "delete") from e
