"""Tests for the tag registry and tag listing."""

from collections.abc import Callable
from pathlib import Path

import pytest

from noteforest.notes.manager import NoteManager
from noteforest.notes.models import CreateNoteRequest, UpdateNoteRequest
from noteforest.tags.models import Tag
from noteforest.tags.registry import TagRegistry

# =============================================================================
# Registry Tests
# =============================================================================


class TestTagRegistry:
    """Tests for name to id assignment."""

    def test_ids_start_at_one_and_increase(self) -> None:
        """Test monotonic assignment for new names."""
        registry = TagRegistry()

        assert registry.resolve_or_assign("work") == 1
        assert registry.resolve_or_assign("home") == 2
        assert registry.next_id == 3

    def test_existing_name_keeps_id(self) -> None:
        """Test that resolving a known name does not consume an id."""
        registry = TagRegistry()
        registry.resolve_or_assign("work")

        assert registry.resolve_or_assign("work") == 1
        assert registry.next_id == 2
        assert len(registry) == 1

    def test_names_are_case_sensitive(self) -> None:
        """Test that tag identity is the exact name."""
        registry = TagRegistry()

        assert registry.resolve_or_assign("Work") != registry.resolve_or_assign("work")

    def test_get_does_not_assign(self) -> None:
        """Test lookup without side effects."""
        registry = TagRegistry()

        assert registry.get("missing") is None
        assert "missing" not in registry
        assert registry.next_id == 1

    def test_resolve_all_stamps_tags(self) -> None:
        """Test resolving a list of names into Tags."""
        registry = TagRegistry()

        tags = registry.resolve_all(["a", "b", "a"], "2025-01-01T00:00:00.000000+00:00")

        assert [(t.id, t.name) for t in tags] == [(1, "a"), (2, "b"), (1, "a")]
        assert {t.created_at for t in tags} == {"2025-01-01T00:00:00.000000+00:00"}

    def test_list_all_ordered_by_id(self) -> None:
        """Test that every mapping is listed with the given timestamp."""
        registry = TagRegistry()
        for name in ("zeta", "alpha", "mid"):
            registry.resolve_or_assign(name)

        tags = registry.list_all("now")

        assert tags == [
            Tag(id=1, name="zeta", created_at="now"),
            Tag(id=2, name="alpha", created_at="now"),
            Tag(id=3, name="mid", created_at="now"),
        ]

    def test_clear_resets_counter(self) -> None:
        """Test that clear forgets names and restarts ids at 1."""
        registry = TagRegistry()
        registry.resolve_or_assign("a")
        registry.clear()

        assert len(registry) == 0
        assert registry.resolve_or_assign("b") == 1


class TestRegistryRebuild:
    """Tests for rebuilding the registry from note files."""

    def test_rebuild_uses_numeric_file_order(
        self, notes_dir: Path, write_note_file: Callable[..., Path]
    ) -> None:
        """Test that files are visited by numeric id, tags in file order."""
        write_note_file(10, tags=["late"])
        write_note_file(2, tags=["first", "second"])
        write_note_file(3, tags=["second", "third"])
        registry = TagRegistry()

        skipped = registry.rebuild(notes_dir)

        assert skipped == 0
        assert [(t.id, t.name) for t in registry.list_all("now")] == [
            (1, "first"),
            (2, "second"),
            (3, "third"),
            (4, "late"),
        ]

    def test_rebuild_skips_corrupt_files(
        self, notes_dir: Path, write_note_file: Callable[..., Path]
    ) -> None:
        """Test that undecodable files do not contribute tags."""
        write_note_file(1, tags=["ok"])
        (notes_dir / "2.md").write_text("---\nid: 2\ntags:\n- lost\n---\n")
        (notes_dir / "3.md").write_text("plain text")

        registry = TagRegistry()
        skipped = registry.rebuild(notes_dir)

        assert skipped == 2
        assert registry.get("ok") == 1
        assert registry.get("lost") is None

    def test_rebuild_replaces_previous_state(
        self, notes_dir: Path, write_note_file: Callable[..., Path]
    ) -> None:
        """Test that rebuild starts over rather than merging."""
        registry = TagRegistry()
        registry.resolve_or_assign("stale")
        write_note_file(1, tags=["fresh"])

        registry.rebuild(notes_dir)

        assert registry.get("stale") is None
        assert registry.get("fresh") == 1

    def test_empty_directory(self, notes_dir: Path) -> None:
        """Test rebuilding from an empty directory."""
        registry = TagRegistry()

        assert registry.rebuild(notes_dir) == 0
        assert len(registry) == 0


# =============================================================================
# Manager Tag Tests
# =============================================================================


class TestListTags:
    """Tests for NoteManager.list_tags."""

    def test_tags_survive_restart(self, notes_dir: Path) -> None:
        """Test that a new manager rebuilds the same names from disk."""
        first = NoteManager(notes_dir)
        first.create_note(CreateNoteRequest(title="A", content="", tag_names=["work", "home"]))
        first.create_note(CreateNoteRequest(title="B", content="", tag_names=["home", "play"]))

        second = NoteManager(notes_dir)

        assert [(t.id, t.name) for t in second.list_tags().tags] == [
            (1, "work"),
            (2, "home"),
            (3, "play"),
        ]

    def test_tags_stamped_with_current_time(
        self, manager: NoteManager, write_note_file: Callable[..., Path]
    ) -> None:
        """Test that listed tags carry the listing time, not the note's."""
        write_note_file(1, tags=["old"])
        manager.rebuild_tags()

        tags = manager.list_tags().tags

        assert [t.name for t in tags] == ["old"]
        assert tags[0].created_at > "2025-01-01T00:00:00.000000+00:00"

    def test_removed_tags_remain_listed(self, manager: NoteManager) -> None:
        """Test that tags dropped from every note stay in the registry until rebuild."""
        note = manager.create_note(CreateNoteRequest(title="A", content="", tag_names=["temp"]))
        manager.update_note(note.id, UpdateNoteRequest(tag_names=["kept"]))

        assert [t.name for t in manager.list_tags().tags] == ["temp", "kept"]

        manager.rebuild_tags()

        assert [t.name for t in manager.list_tags().tags] == ["kept"]

    @pytest.mark.parametrize("names", [[], ["solo"]])
    def test_list_tags_counts(self, manager: NoteManager, names: list[str]) -> None:
        """Test that listing reflects exactly the names seen so far."""
        manager.create_note(CreateNoteRequest(title="A", content="", tag_names=names))

        assert len(manager.list_tags().tags) == len(names)
