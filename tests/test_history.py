"""Unit tests for the edit history log."""

import pytest

from transcript_editor.core.history import EditHistory, Operation
from transcript_editor.core.ir import Document, Paragraph


def _doc(text):
    return Document(paragraphs=(Paragraph(speaker="A", start=0.0, text=text),))


def _op(before, after, kind="set_text"):
    return Operation(kind=kind, params={"text": after}, before=_doc(before), after=_doc(after))


class TestOperation:

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError, match="Unknown operation kind"):
            _op("a", "b", kind="teleport")

    def test_to_dict_has_kind_and_params(self):
        assert _op("a", "b").to_dict() == {"kind": "set_text", "params": {"text": "b"}}


class TestEditHistory:

    def test_empty_history(self):
        history = EditHistory()
        assert not history.can_undo
        assert not history.can_redo
        assert history.undo() is None
        assert history.redo() is None

    def test_undo_then_redo(self):
        history = EditHistory()
        first, second = _op("a", "b"), _op("b", "c")
        history.record(first)
        history.record(second)

        assert history.undo() is second
        assert history.undo() is first
        assert not history.can_undo
        assert history.redo() is first
        assert history.can_redo

    def test_recording_after_undo_discards_redo_tail(self):
        history = EditHistory()
        history.record(_op("a", "b"))
        history.record(_op("b", "c"))
        history.undo()
        history.record(_op("b", "x"))

        assert not history.can_redo
        assert len(history) == 2
        assert [op.params["text"] for op in history.applied()] == ["b", "x"]

    def test_bounded_length_drops_oldest(self):
        history = EditHistory(max_entries=3)
        for i in range(5):
            history.record(_op(str(i), str(i + 1)))
        assert len(history) == 3
        assert [op.params["text"] for op in history.applied()] == ["3", "4", "5"]

    def test_to_list_excludes_undone_entries(self):
        history = EditHistory()
        history.record(_op("a", "b"))
        history.record(_op("b", "c", kind="set_speaker"))
        history.undo()
        assert history.to_list() == [{"kind": "set_text", "params": {"text": "b"}}]
