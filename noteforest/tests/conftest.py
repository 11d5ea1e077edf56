"""Shared pytest fixtures."""

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables before importing app modules
load_dotenv()

# Set test defaults if not provided
if not os.environ.get("NOTES_DIR"):
    os.environ["NOTES_DIR"] = "/tmp/noteforest-test-notes"

from fastapi.testclient import TestClient  # noqa: E402

from noteforest.main import app  # noqa: E402
from noteforest.notes.manager import NoteManager  # noqa: E402
from noteforest.notes.router import get_note_manager  # noqa: E402

OLD_TIMESTAMP = "2025-01-01T00:00:00.000000+00:00"


def note_file_text(
    note_id: int,
    title: str = "Title",
    tags: list[str] | None = None,
    body: str = "Body",
    created_at: str = OLD_TIMESTAMP,
    updated_at: str | None = None,
) -> str:
    """Build note file text the way the store writes it."""
    lines = ["---", f"id: {note_id}", f"title: {title}"]
    if tags:
        lines.append("tags:")
        lines.extend(f"- {tag}" for tag in tags)
    else:
        lines.append("tags: []")
    lines.append(f"createdAt: '{created_at}'")
    lines.append(f"updatedAt: '{updated_at or created_at}'")
    lines.append("---")
    return "\n".join(lines) + "\n\n" + body


@pytest.fixture
def note_text() -> Callable[..., str]:
    """Return the note file text builder."""
    return note_file_text


@pytest.fixture
def notes_dir(tmp_path: Path) -> Path:
    """Create an empty temporary notes directory."""
    directory = tmp_path / "notes"
    directory.mkdir()
    return directory


@pytest.fixture
def write_note_file(notes_dir: Path) -> Callable[..., Path]:
    """Return a helper that writes a raw note file into ``notes_dir``."""

    def _write(note_id: int, **kwargs: object) -> Path:
        path = notes_dir / f"{note_id}.md"
        path.write_text(note_file_text(note_id, **kwargs), encoding="utf-8")  # type: ignore[arg-type]
        return path

    return _write


@pytest.fixture
def manager(notes_dir: Path) -> NoteManager:
    """Create a NoteManager over the temporary notes directory."""
    return NoteManager(notes_dir)


@pytest.fixture
def client(manager: NoteManager) -> Iterator[TestClient]:
    """Create a FastAPI test client backed by the temporary manager."""
    app.dependency_overrides[get_note_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()
