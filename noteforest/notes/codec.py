"""File codec: note files to and from frontmatter plus Markdown body.

A note file looks like::

    ---
    id: 3
    title: Groceries
    tags:
    - home
    createdAt: '2026-10-16T09:00:00.000000+00:00'
    updatedAt: '2026-10-16T09:00:00.000000+00:00'
    ---

    Milk, eggs.

The metadata block is YAML, handled by python-frontmatter's YAML handler.
The delimiter handling is done here rather than by ``frontmatter.loads`` so
that the body is preserved byte for byte (``frontmatter`` strips it).
"""

from collections.abc import Callable
from pathlib import Path

import yaml
from frontmatter.default_handlers import YAMLHandler
from pydantic import ValidationError

from noteforest.dependencies import (
    InvalidFrontmatterError,
    MetadataParseError,
    NoteIOError,
)
from noteforest.notes.models import MAX_NOTE_ID, Note, NoteFrontmatter
from noteforest.tags.models import Tag

DELIMITER = "---"
NOTE_SUFFIX = ".md"

_yaml = YAMLHandler()


def note_path(directory: Path, note_id: int) -> Path:
    """Return the path of the file backing ``note_id``."""
    return directory / f"{note_id}{NOTE_SUFFIX}"


def parse_note_id(path: Path) -> int | None:
    """Return the numeric id encoded in a file stem, or None.

    Stems outside the unsigned 32-bit id range are not note ids.

    Examples:
        >>> parse_note_id(Path("12.md"))
        12
        >>> parse_note_id(Path("draft.md")) is None
        True
        >>> parse_note_id(Path("99999999999.md")) is None
        True
    """
    stem = path.stem
    if not (stem.isascii() and stem.isdigit()):
        return None
    note_id = int(stem)
    return note_id if note_id <= MAX_NOTE_ID else None


def note_files(directory: Path) -> list[Path]:
    """List note files directly inside ``directory`` in a stable order.

    Numeric stems come first in ascending numeric order, followed by any
    other stems sorted by name.
    """

    def sort_key(path: Path) -> tuple[int, int, str]:
        note_id = parse_note_id(path)
        if note_id is None:
            return (1, 0, path.stem)
        return (0, note_id, path.stem)

    try:
        files = [p for p in directory.iterdir() if p.suffix == NOTE_SUFFIX and p.is_file()]
    except OSError as e:
        raise NoteIOError(e) from e
    return sorted(files, key=sort_key)


def normalize_body(body: str) -> str:
    """Drop the blank lines that separate the closing delimiter from the body.

    Applied on decode, and to new content before it is stored, so a note
    reads back exactly as it was returned when written.
    """
    return body.lstrip("\n")


def decode(text: str) -> tuple[NoteFrontmatter, str]:
    """Split raw file text into validated frontmatter and body.

    Args:
        text: Full contents of a note file

    Returns:
        Tuple of (frontmatter, body)

    Raises:
        InvalidFrontmatterError: If the text does not open with ``---`` or
            has no closing delimiter
        MetadataParseError: If the block is not YAML or lacks a required field
    """
    if not text.startswith(DELIMITER):
        raise InvalidFrontmatterError()

    parts = text.split(DELIMITER, 2)
    if len(parts) < 3:
        raise InvalidFrontmatterError()

    try:
        data = _yaml.load(parts[1].strip())
    except yaml.YAMLError as e:
        raise MetadataParseError(str(e)) from e
    if not isinstance(data, dict):
        raise MetadataParseError("frontmatter is not a mapping")

    try:
        fm = NoteFrontmatter.model_validate(data)
    except ValidationError as e:
        raise MetadataParseError(str(e)) from e

    return fm, normalize_body(parts[2])


def encode(note: Note) -> str:
    """Render a note as file text. Never fails."""
    metadata = _yaml.export(note.to_frontmatter().to_yaml_dict(), sort_keys=False)
    return f"{DELIMITER}\n{metadata}\n{DELIMITER}\n\n{note.content}"


def read_note_file(path: Path) -> tuple[NoteFrontmatter, str]:
    """Read and decode a note file.

    Raises:
        NoteIOError: If the file cannot be read as UTF-8 text
        InvalidFrontmatterError: See ``decode``
        MetadataParseError: See ``decode``
    """
    # Bytes, not read_text: line endings must survive untranslated
    try:
        text = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise NoteIOError(e) from e
    return decode(text)


def write_note(directory: Path, note: Note) -> Path:
    """Write a note to ``<id>.md`` in ``directory``, replacing any existing file."""
    path = note_path(directory, note.id)
    try:
        path.write_text(encode(note), encoding="utf-8", newline="")
    except OSError as e:
        raise NoteIOError(e) from e
    return path


def materialize(
    fm: NoteFrontmatter, body: str, lookup_tag: Callable[[str], int | None]
) -> Note:
    """Combine decoded metadata with tag ids into a full Note.

    Each tag is stamped with the note's ``createdAt``.

    Args:
        fm: Decoded frontmatter
        body: Markdown body
        lookup_tag: Returns the registry id for a tag name, or None if unknown
    """
    tags = [Tag(id=lookup_tag(name), name=name, created_at=fm.created_at) for name in fm.tags]
    return Note(
        id=fm.id,
        title=fm.title,
        content=body,
        tags=tags,
        created_at=fm.created_at,
        updated_at=fm.updated_at,
    )
