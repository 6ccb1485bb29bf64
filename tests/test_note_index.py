"""Tests for the knowledge-base note index and traversal."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from conftest import write_note
from roamlint.errors import IndexUnavailableError
from roamlint.note_index import KBNoteIndex, iter_note_files
from roamlint.parser import NoteMeta


@pytest.fixture
def populated_kb(tmp_path: Path) -> Path:
    """KB with org and markdown notes, plus files that must be ignored.

    Creates:
    - hub.org            (title "Hub Note", aliases "Hub", "Central")
    - projects/alpha.org (title "Project Alpha")
    - guides/setup.md    (frontmatter title "Setup Guide")
    - _drafts/wip.org, .hidden/secret.org, notes.txt (ignored)
    """
    kb = tmp_path / "kb"
    write_note(kb / "hub.org", "Hub Note", "Center of it all\n", aliases=["Hub", "Central"])
    write_note(kb / "projects" / "alpha.org", "Project Alpha", "Details\n")
    (kb / "guides").mkdir()
    (kb / "guides" / "setup.md").write_text("---\ntitle: Setup Guide\n---\n\nSteps\n")
    write_note(kb / "_drafts" / "wip.org", "Draft", "WIP\n")
    write_note(kb / ".hidden" / "secret.org", "Secret", "shh\n")
    (kb / "notes.txt").write_text("not a note")
    return kb


class TestIterNoteFiles:
    def test_finds_org_and_markdown_only(self, populated_kb):
        found = [p.relative_to(populated_kb).as_posix() for p in iter_note_files(populated_kb)]
        assert found == ["hub.org", "guides/setup.md", "projects/alpha.org"]

    def test_unlistable_root_raises(self, tmp_path, monkeypatch):
        root = tmp_path / "kb"
        root.mkdir()

        def deny(path, onerror=None, **kwargs):
            onerror(PermissionError(13, "Permission denied", str(path)))
            return iter(())

        monkeypatch.setattr(os, "walk", deny)

        with pytest.raises(IndexUnavailableError):
            list(iter_note_files(root))


class TestKBNoteIndex:
    def test_resolves_title_case_insensitively(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.resolve_title("hub note") == "Hub Note"
        assert index.resolve_title("  PROJECT ALPHA ") == "Project Alpha"

    def test_resolves_aliases_to_canonical_title(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.resolve_title("central") == "Hub Note"

    def test_resolves_markdown_frontmatter_title(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.resolve_title("Setup Guide") == "Setup Guide"
        assert index.file_for_title("Setup Guide") == str(populated_kb / "guides" / "setup.md")

    def test_resolves_relative_path(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.resolve_title("projects/alpha") == "Project Alpha"
        assert index.resolve_title("projects/alpha.org") == "Project Alpha"

    def test_resolves_bare_file_name(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.resolve_title("alpha") == "Project Alpha"

    def test_unknown_title_is_none(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.resolve_title("Nope") is None
        assert index.file_for_title("Nope") is None
        assert index.resolve_title("") is None

    def test_ignored_notes_not_indexed(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.resolve_title("Draft") is None
        assert index.resolve_title("Secret") is None
        assert len(index) == 3

    def test_file_for_title(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.file_for_title("Hub Note") == str(populated_kb / "hub.org")

    def test_title_for_key(self, populated_kb):
        index = KBNoteIndex.build(populated_kb)
        assert index.title_for_key(str(populated_kb / "hub.org")) == "Hub Note"
        assert index.title_for_key("/elsewhere/unknown-note.org") == "unknown-note"

    def test_duplicate_title_first_wins(self, tmp_path):
        first = NoteMeta(path=tmp_path / "a.org", title="Same")
        second = NoteMeta(path=tmp_path / "b.org", title="same")
        index = KBNoteIndex([first, second], tmp_path)

        assert index.file_for_title("Same") == str(tmp_path / "a.org")
        assert index.title_for_key(str(tmp_path / "b.org")) == "same"

    def test_path_link_keeps_its_own_note_on_shared_title(self, tmp_path):
        kb = tmp_path / "kb"
        write_note(kb / "a" / "foo.org", "Foo")
        write_note(kb / "b" / "bar.org", "Foo", "Content\n")

        index = KBNoteIndex.build(kb)

        assert index.resolve_title("b/bar") == "Foo"
        assert index.file_for_title("b/bar") == str(kb / "b" / "bar.org")
        assert index.file_for_title("bar") == str(kb / "b" / "bar.org")
        assert index.file_for_title("Foo") == str(kb / "a" / "foo.org")

    def test_missing_root_gives_empty_index(self, tmp_path):
        index = KBNoteIndex.build(tmp_path / "nowhere")
        assert len(index) == 0
        assert index.resolve_title("anything") is None

    def test_unparseable_note_is_skipped(self, tmp_path):
        kb = tmp_path / "kb"
        write_note(kb / "ok.org", "Fine", "x\n")
        (kb / "bad.md").write_text("---\ntitle: [unclosed\n---\n")

        index = KBNoteIndex.build(kb)

        assert len(index) == 1
        assert index.resolve_title("Fine") == "Fine"
