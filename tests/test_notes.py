"""Tests for notes: CRUD, search, JSON import/export and PDF."""

from datetime import datetime

import pytest

from notes import (
    add_note,
    create_note,
    delete_note,
    find_note,
    import_notes,
    notes_to_json,
    search_notes,
    update_note,
)
from pdf_export import notes_to_pdf

CREATED = datetime(2026, 10, 18, 9, 0)
LATER = datetime(2026, 10, 18, 11, 30)


@pytest.fixture
def notes():
    items = []
    items = add_note(items, create_note("Kinematics", "v = u + at", now=CREATED))
    items = add_note(items, create_note("Essay plan", "Intro, body, conclusion", now=CREATED))
    return items


class TestCrud:
    def test_create(self):
        note = create_note("  Cells  ", "Mitochondria", now=CREATED)
        assert note.title == "Cells"
        assert note.content == "Mitochondria"
        assert note.created_at == note.updated_at == CREATED
        assert note.id

    @pytest.mark.parametrize("title", ["", "   "])
    def test_create_requires_title(self, title):
        with pytest.raises(ValueError, match="title"):
            create_note(title, "content")

    def test_add_puts_newest_first(self, notes):
        assert [n.title for n in notes] == ["Essay plan", "Kinematics"]

    def test_update_bumps_timestamp(self, notes):
        target = notes[1]
        updated = update_note(notes, target.id, title="Motion", content="s = ut", now=LATER)
        note = find_note(updated, target.id)
        assert (note.title, note.content) == ("Motion", "s = ut")
        assert note.created_at == CREATED
        assert note.updated_at == LATER
        assert updated[0] == notes[0]
        assert notes[1].title == "Kinematics"

    def test_update_without_changes_is_noop(self, notes):
        assert update_note(notes, notes[0].id, now=LATER) == notes

    def test_update_rejects_blank_title(self, notes):
        with pytest.raises(ValueError, match="title"):
            update_note(notes, notes[0].id, title=" ")

    def test_delete(self, notes):
        remaining = delete_note(notes, notes[0].id)
        assert [n.title for n in remaining] == ["Kinematics"]
        assert delete_note(remaining, "missing") == remaining
        assert find_note(remaining, notes[0].id) is None


class TestSearch:
    def test_matches_title_or_content_ignoring_case(self, notes):
        assert [n.title for n in search_notes(notes, "KINE")] == ["Kinematics"]
        assert [n.title for n in search_notes(notes, "conclusion")] == ["Essay plan"]
        assert search_notes(notes, "chemistry") == []

    def test_blank_query_returns_everything(self, notes):
        assert search_notes(notes, "  ") == notes


class TestJson:
    def test_export_then_import_into_empty_list(self, notes):
        assert import_notes([], notes_to_json(notes)) == notes

    def test_import_prepends_and_reassigns_taken_ids(self, notes):
        extra = create_note("Vocabulary", now=CREATED)
        payload = notes_to_json([extra, notes[0]])
        merged = import_notes(notes, payload)

        assert [n.title for n in merged] == ["Vocabulary", "Essay plan", "Essay plan", "Kinematics"]
        assert merged[0].id == extra.id
        assert merged[1].id != notes[0].id
        assert len({n.id for n in merged}) == 4

    @pytest.mark.parametrize("payload", ["not json", '{"title": "x"}', '[{"id": "1"}]'])
    def test_import_rejects_bad_payload(self, notes, payload):
        with pytest.raises(ValueError, match="Invalid file format"):
            import_notes(notes, payload)


class TestPdf:
    def test_all_notes(self, notes):
        assert notes_to_pdf(notes).startswith(b"%PDF")

    def test_single_note_with_markup_characters(self):
        note = create_note("<b> & co", "line one\nline <two>", now=CREATED)
        assert notes_to_pdf([note], title=note.title).startswith(b"%PDF")

    def test_empty_list(self):
        assert notes_to_pdf([]).startswith(b"%PDF")
