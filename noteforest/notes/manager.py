"""Note store manager.

Owns the notes directory and the tag registry. Every public operation runs
under a single lock, so concurrent callers are served one at a time. There
is no index: listing scans and decodes every note file.

Example:
    manager = NoteManager(Path("~/Documents/NoteForest/notes").expanduser())
    note = manager.create_note(CreateNoteRequest(title="Todo", content="- milk"))
    manager.list_notes(ListNotesParams(search="milk")).total
"""

import threading
from pathlib import Path

from noteforest.dependencies import (
    NoteError,
    NoteIdExhaustedError,
    NoteIOError,
    NoteNotFoundError,
    logger,
)
from noteforest.notes.codec import (
    materialize,
    normalize_body,
    note_files,
    note_path,
    parse_note_id,
    read_note_file,
    write_note,
)
from noteforest.notes.models import (
    MAX_NOTE_ID,
    CreateNoteRequest,
    DeleteNoteResponse,
    ListNotesParams,
    ListNotesResponse,
    ListTagsResponse,
    Note,
    UpdateNoteRequest,
    utc_timestamp,
)
from noteforest.tags.registry import TagRegistry


class NoteManager:
    """Persistence and query layer over a flat directory of note files."""

    def __init__(self, notes_dir: Path, create_dirs: bool = True) -> None:
        """Open the store and build the tag registry from existing notes.

        Args:
            notes_dir: Directory holding ``<id>.md`` files
            create_dirs: Create the directory (and parents) if missing

        Raises:
            NoteIOError: If the directory cannot be created or listed
        """
        self.notes_dir = notes_dir
        self._lock = threading.Lock()
        self._registry = TagRegistry()

        if create_dirs:
            try:
                notes_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise NoteIOError(e) from e
        self._registry.rebuild(notes_dir)

    # -------------------------------------------------------------------------
    # Helpers (caller holds the lock)
    # -------------------------------------------------------------------------

    def _scan(self) -> list[Note]:
        """Decode every note file, skipping the ones that fail."""
        notes: list[Note] = []
        skipped = 0
        for path in note_files(self.notes_dir):
            try:
                fm, body = read_note_file(path)
            except NoteError as e:
                skipped += 1
                logger.warning("note_file_skipped", extra={"path": str(path), "error": str(e)})
                continue
            notes.append(materialize(fm, body, self._registry.get))

        if skipped:
            logger.warning(
                "notes_scan_skipped",
                extra={"directory": str(self.notes_dir), "skipped": skipped},
            )
        return notes

    def _next_note_id(self) -> int:
        """One past the largest numeric file stem in the directory.

        Raises:
            NoteIdExhaustedError: If a file already holds the largest id
        """
        try:
            entries = list(self.notes_dir.iterdir())
        except OSError as e:
            raise NoteIOError(e) from e
        ids = [note_id for p in entries if (note_id := parse_note_id(p)) is not None]
        last_id = max(ids, default=0)
        if last_id >= MAX_NOTE_ID:
            raise NoteIdExhaustedError(last_id)
        return last_id + 1

    def _load(self, note_id: int) -> Note:
        path = note_path(self.notes_dir, note_id)
        if not path.exists():
            raise NoteNotFoundError(note_id)
        fm, body = read_note_file(path)
        return materialize(fm, body, self._registry.get)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def list_notes(self, params: ListNotesParams | None = None) -> ListNotesResponse:
        """List notes, newest update first, with optional search and tag filter.

        Search matches title or content case-insensitively. The tag filter
        keeps notes carrying at least one of ``params.tag_ids``. ``total``
        counts matches before ``offset`` and ``limit`` are applied.
        """
        params = params or ListNotesParams()
        with self._lock:
            notes = self._scan()

            notes.sort(key=lambda n: n.updated_at, reverse=True)

            if params.search is not None:
                needle = params.search.casefold()
                notes = [
                    n
                    for n in notes
                    if needle in n.title.casefold() or needle in n.content.casefold()
                ]

            if params.tag_ids:
                wanted = set(params.tag_ids)
                notes = [n for n in notes if any(t.id in wanted for t in n.tags)]

            total = len(notes)
            page = notes[params.offset : params.offset + params.limit]
            return ListNotesResponse(notes=page, total=total)

    def get_note(self, note_id: int) -> Note:
        """Return a single note.

        Raises:
            NoteNotFoundError: If ``<note_id>.md`` does not exist
        """
        with self._lock:
            return self._load(note_id)

    def create_note(self, request: CreateNoteRequest) -> Note:
        """Create a note with the next free id and write it to disk."""
        with self._lock:
            note_id = self._next_note_id()
            timestamp = utc_timestamp()
            note = Note(
                id=note_id,
                title=request.title,
                content=normalize_body(request.content),
                tags=self._registry.resolve_all(request.tag_names or [], timestamp),
                created_at=timestamp,
                updated_at=timestamp,
            )
            write_note(self.notes_dir, note)

        logger.info("note_created", extra={"note_id": note.id, "tags": note.tag_names})
        return note

    def update_note(self, note_id: int, request: UpdateNoteRequest) -> Note:
        """Apply a partial update and rewrite the note file.

        Only fields set on ``request`` change. A new tag list replaces the
        old one entirely; its tags are stamped with the note's original
        creation time. ``updatedAt`` is refreshed on every call.

        Raises:
            NoteNotFoundError: If ``<note_id>.md`` does not exist
        """
        with self._lock:
            note = self._load(note_id)
            changes: dict[str, object] = {"updated_at": utc_timestamp()}
            if request.title is not None:
                changes["title"] = request.title
            if request.content is not None:
                changes["content"] = normalize_body(request.content)
            if request.tag_names is not None:
                changes["tags"] = self._registry.resolve_all(request.tag_names, note.created_at)

            note = note.model_copy(update=changes)
            write_note(self.notes_dir, note)

        logger.info("note_updated", extra={"note_id": note.id, "fields": sorted(changes)})
        return note

    def delete_note(self, note_id: int) -> DeleteNoteResponse:
        """Remove a note file.

        Raises:
            NoteNotFoundError: If ``<note_id>.md`` does not exist
        """
        with self._lock:
            path = note_path(self.notes_dir, note_id)
            if not path.exists():
                raise NoteNotFoundError(note_id)
            try:
                path.unlink()
            except OSError as e:
                raise NoteIOError(e) from e

        logger.info("note_deleted", extra={"note_id": note_id})
        return DeleteNoteResponse(success=True)

    def list_tags(self) -> ListTagsResponse:
        """Return every tag the registry knows, stamped with the current time."""
        with self._lock:
            return ListTagsResponse(tags=self._registry.list_all(utc_timestamp()))

    def rebuild_tags(self) -> int:
        """Rebuild the tag registry from disk. Returns the number of skipped files."""
        with self._lock:
            return self._registry.rebuild(self.notes_dir)
