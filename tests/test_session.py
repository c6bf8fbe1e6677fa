"""Tests for EditorSession: flags, history and the async operations.

WHY: The session is where the modified/processing/saved flags live and
where the one-long-operation-at-a-time rule is enforced. Those rules are
invisible in the pure editing functions, so they are tested here.

HOW: Sessions are built from the shared fixtures. Coroutines are driven
with asyncio.run(); the concurrency tests use asyncio.gather so the
second request arrives while the first is awaiting its worker thread.
"""

import asyncio
import json

from transcript_editor.core.results import ConcurrentOperationRejected
from transcript_editor.core.session import EditorSession
from transcript_editor.export import CaptionExport, JsonFlatExport, TextExport


def _session(document):
    return EditorSession.from_document(document, title="Interview")


class TestSessionState:

    def test_new_session_is_clean_and_saved(self, interview_flat):
        session = EditorSession.from_json(interview_flat)
        assert not session.modified
        assert session.saved
        assert not session.processing
        assert session.original_words == session.document.words
        assert session.title == "Transcript"

    def test_dirty_input_starts_modified(self, interview_doc):
        blocks = _session(interview_doc).to_blocks()
        blocks[0]["text"] = "How are you"
        assert EditorSession.from_json(blocks).modified

    def test_split_marks_modified_and_unsaved(self, hello_world_doc):
        session = _session(hello_world_doc)
        outcome = session.split(0, 5)

        assert outcome.ok
        assert len(session.document) == 2
        assert session.modified
        assert not session.saved
        assert session.selection == outcome.selection
        assert session.history.to_list() == [
            {"kind": "split", "params": {"anchor": [0, 5], "focus": [0, 5]}},
        ]

    def test_rejected_edit_changes_nothing(self, hello_world_doc):
        session = _session(hello_world_doc)
        outcome = session.split(0, 3)

        assert not outcome.ok
        assert session.document is hello_world_doc
        assert not session.modified
        assert session.saved
        assert len(session.history) == 0

    def test_speaker_change_does_not_mark_modified(self, interview_doc):
        session = _session(interview_doc)
        session.set_speaker(1, "Robert")
        assert session.document[1].speaker == "Robert"
        assert not session.modified
        assert not session.saved

    def test_commit_edit_clears_modified(self, hello_world_doc):
        session = _session(hello_world_doc)
        session.set_text(0, "hello word")
        assert session.modified

        outcome = session.commit_edit(0)
        assert outcome.ok
        assert not session.modified
        assert session.document[0].words[1].text == "word"
        assert [op["kind"] for op in session.history.to_list()] == ["set_text", "realign"]

    def test_commit_edit_keeps_modified_while_others_dirty(self, interview_doc):
        session = _session(interview_doc)
        session.set_text(0, "How are you")
        session.set_text(1, "I am great")
        session.commit_edit(0)
        assert session.modified

    def test_insert_and_merge(self, two_paragraph_doc):
        session = _session(two_paragraph_doc)
        session.insert_text(0, 5, "!")
        session.merge(1, 0)
        assert len(session.document) == 1
        assert session.document[0].text == "hello! world"

    def test_mark_saved(self, hello_world_doc):
        session = _session(hello_world_doc)
        session.set_speaker(0, "B")
        session.mark_saved()
        assert session.saved

    def test_serialization(self, interview_flat):
        session = EditorSession.from_json(interview_flat)
        flat = session.to_flat()
        assert flat["words"] == interview_flat["words"]
        assert [p["speaker"] for p in flat["paragraphs"]] == ["Alice", "Bob", "Alice"]
        assert len(session.to_blocks()) == 3


class TestUndoRedo:

    def test_undo_restores_document_and_flag(self, hello_world_doc):
        session = _session(hello_world_doc)
        session.set_text(0, "hello word")
        session.undo()

        assert session.document == hello_world_doc
        assert not session.modified
        assert session.history.can_redo

    def test_redo_reapplies(self, hello_world_doc):
        session = _session(hello_world_doc)
        session.split(0, 5)
        after_split = session.document
        session.undo()
        session.redo()
        assert session.document == after_split
        assert session.modified

    def test_undo_with_empty_history_is_harmless(self, hello_world_doc):
        session = _session(hello_world_doc)
        outcome = session.undo()
        assert outcome.ok
        assert session.document is hello_world_doc

    def test_new_edit_after_undo_drops_redo(self, hello_world_doc):
        session = _session(hello_world_doc)
        session.set_speaker(0, "B")
        session.undo()
        session.set_speaker(0, "C")
        assert not session.history.can_redo
        assert session.document[0].speaker == "C"


class TestAsyncOperations:

    def test_realign_cleans_document(self, interview_doc):
        session = _session(interview_doc)
        session.set_text(1, "I am great, thank you.")

        outcome = asyncio.run(session.realign())

        assert outcome.ok
        assert not session.modified
        assert not session.processing
        assert session.document.is_clean
        assert session.document[1].words[2].id == 7

    def test_replace_text_uses_original_words(self, interview_doc):
        session = _session(interview_doc)
        session.set_text(2, "Much later then.")
        text = "How are you doing today? I feel fantastic, thank you. Much later now."

        outcome = asyncio.run(session.replace_text(text))

        assert outcome.ok
        assert not session.modified
        assert session.document[1].text == "I feel fantastic, thank you."
        assert session.document[1].words[1].id == 6
        assert session.history.to_list()[-1]["kind"] == "replace_text"

    def test_export_realigns_when_timing_needed(self, hello_world_doc):
        session = _session(hello_world_doc)
        session.set_text(0, "hello word")

        result = asyncio.run(session.export(CaptionExport(kind="srt")))

        assert result.ok
        assert result.realigned
        assert "word" in result.output.content
        assert "world" not in result.output.content
        assert not session.modified
        assert session.document.is_clean

    def test_text_export_skips_realignment(self, hello_world_doc):
        session = _session(hello_world_doc)
        session.set_text(0, "hello word")

        result = asyncio.run(session.export(TextExport()))

        assert not result.realigned
        assert result.output.content == "hello word\n"
        assert session.modified

    def test_export_unmodified_document(self, interview_doc):
        session = _session(interview_doc)
        result = asyncio.run(session.export(JsonFlatExport()))
        assert not result.realigned
        assert len(json.loads(result.output.content)["words"]) == 13
        assert len(session.history) == 0

    def test_edits_refused_while_processing(self, hello_world_doc):
        session = _session(hello_world_doc)
        session.processing = True

        outcome = session.split(0, 5)

        assert isinstance(outcome.error, ConcurrentOperationRejected)
        assert outcome.error.code == "concurrent-operation-rejected"
        assert outcome.error.operation == "split"
        assert session.document is hello_world_doc

    def test_second_export_rejected_while_first_runs(self, interview_doc):
        session = _session(interview_doc)

        async def both():
            return await asyncio.gather(
                session.export(CaptionExport(kind="vtt")),
                session.export(TextExport()),
            )

        first, second = asyncio.run(both())

        assert first.ok
        assert first.output.content.startswith("WEBVTT")
        assert not second.ok
        assert isinstance(second.error, ConcurrentOperationRejected)
        assert not session.processing

    def test_realign_rejected_during_export(self, interview_doc):
        session = _session(interview_doc)

        async def both():
            return await asyncio.gather(
                session.export(TextExport()),
                session.realign(),
            )

        _, realign_outcome = asyncio.run(both())
        assert isinstance(realign_outcome.error, ConcurrentOperationRejected)
