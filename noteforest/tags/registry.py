"""In-memory tag registry.

Maps tag names to process-local numeric ids. The registry is rebuilt from
the notes directory when the store starts and grows as new names are seen.
Ids are never persisted; they depend only on the order in which names are
first observed.
"""

from collections.abc import Iterable
from pathlib import Path

from noteforest.dependencies import NoteError, logger
from noteforest.notes.codec import note_files, read_note_file
from noteforest.tags.models import Tag


class TagRegistry:
    """Name to id mapping with a monotonic id counter starting at 1."""

    def __init__(self) -> None:
        self._ids: dict[str, int] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    @property
    def next_id(self) -> int:
        """Id the next unseen name will receive."""
        return self._next_id

    def get(self, name: str) -> int | None:
        """Return the id for ``name`` without assigning one."""
        return self._ids.get(name)

    def resolve_or_assign(self, name: str) -> int:
        """Return the id for ``name``, assigning the next id if it is new."""
        tag_id = self._ids.get(name)
        if tag_id is None:
            tag_id = self._next_id
            self._ids[name] = tag_id
            self._next_id += 1
        return tag_id

    def resolve_all(self, names: Iterable[str], created_at: str) -> list[Tag]:
        """Resolve each name in order and stamp the Tags with ``created_at``."""
        return [
            Tag(id=self.resolve_or_assign(name), name=name, created_at=created_at)
            for name in names
        ]

    def clear(self) -> None:
        """Forget every mapping and reset the counter."""
        self._ids.clear()
        self._next_id = 1

    def rebuild(self, directory: Path) -> int:
        """Reset the registry and repopulate it from the note files in ``directory``.

        Files are visited in ``note_files`` order and tag names in the order
        each file lists them. Files that fail to read or decode are skipped.

        Args:
            directory: Flat notes directory

        Returns:
            Number of files skipped because they could not be decoded
        """
        self.clear()
        skipped = 0
        for path in note_files(directory):
            try:
                fm, _ = read_note_file(path)
            except NoteError as e:
                skipped += 1
                logger.warning("note_file_skipped", extra={"path": str(path), "error": str(e)})
                continue
            for name in fm.tags:
                self.resolve_or_assign(name)

        logger.info(
            "tag_registry_rebuilt",
            extra={"directory": str(directory), "tags": len(self._ids), "skipped": skipped},
        )
        return skipped

    def list_all(self, timestamp: str) -> list[Tag]:
        """Return every known tag, ordered by id, stamped with ``timestamp``."""
        return [
            Tag(id=tag_id, name=name, created_at=timestamp)
            for name, tag_id in sorted(self._ids.items(), key=lambda item: item[1])
        ]
