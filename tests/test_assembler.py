"""Unit tests for the document assembler (flat <-> block).

WHY: Every transcript enters and leaves the editor through these
mappings. A word lost, duplicated or re-timed here is invisible in the
editor but breaks every caption export.

HOW: Tests exercise flat_to_blocks/blocks_to_flat directly, the JSON
loaders with valid and malformed input, and the round-trip contract on
the shared sample transcripts.

RULES:
- flat -> block -> flat preserves every word's (id, start, end, text)
- Schema failures surface as ValueError from the loaders
"""

import json

import pytest

from transcript_editor.config import UNKNOWN_SPEAKER
from transcript_editor.core.assembler import (
    blocks_to_flat,
    document_from_blocks,
    document_to_blocks,
    flat_to_blocks,
    load_transcript,
    load_transcript_file,
    transcript_from_dict,
    transcript_to_dict,
)
from transcript_editor.core.editing import Cursor, Selection, merge_paragraph, split_paragraph
from transcript_editor.core.ir import FlatParagraph, FlatTranscript, Word


def _flat(words, paragraphs):
    return FlatTranscript(
        words=tuple(Word(i, s, e, t) for i, (s, e, t) in enumerate(words)),
        paragraphs=tuple(FlatParagraph(i, s, e, spk) for i, (s, e, spk) in enumerate(paragraphs)),
    )


# ---------------------------------------------------------------------------
# flat -> block
# ---------------------------------------------------------------------------


class TestFlatToBlocks:

    def test_groups_words_by_paragraph_range(self, interview_flat):
        document = flat_to_blocks(transcript_from_dict(interview_flat))

        assert len(document) == 3
        assert [p.speaker for p in document.paragraphs] == ["Alice", "Bob", "Alice"]
        assert document[0].text == "How are you doing today?"
        assert document[1].text == "I am fantastic, thank you."
        assert document[2].text == "Much later now."

    def test_paragraph_start_is_first_word_start(self, interview_flat):
        document = flat_to_blocks(transcript_from_dict(interview_flat))
        assert document[1].start == pytest.approx(1.2)
        assert document[1].start_timecode == "00:00:01"
        assert document[2].start_timecode == "00:01:02"

    def test_documents_load_clean(self, interview_flat):
        assert flat_to_blocks(transcript_from_dict(interview_flat)).is_clean

    def test_missing_speaker_uses_sentinel(self):
        flat = _flat([(0.0, 0.5, "hi")], [(0.0, 1.0, None)])
        assert flat_to_blocks(flat)[0].speaker == UNKNOWN_SPEAKER

    def test_no_paragraphs_means_one_unknown_paragraph(self):
        flat = _flat([(0.0, 0.5, "a"), (0.6, 0.9, "b")], [])
        document = flat_to_blocks(flat)
        assert len(document) == 1
        assert document[0].speaker == UNKNOWN_SPEAKER
        assert document[0].text == "a b"

    def test_empty_transcript(self):
        assert len(flat_to_blocks(FlatTranscript())) == 0

    def test_word_in_gap_attaches_to_preceding_paragraph(self):
        flat = _flat(
            [(0.0, 0.5, "a"), (1.5, 1.8, "gap"), (2.0, 2.5, "b")],
            [(0.0, 1.0, "A"), (2.0, 3.0, "B")],
        )
        document = flat_to_blocks(flat)
        assert document[0].text == "a gap"
        assert document[1].text == "b"

    def test_word_before_first_paragraph_attaches_to_it(self):
        flat = _flat([(0.0, 0.2, "early"), (1.0, 1.5, "on")], [(1.0, 2.0, "A")])
        document = flat_to_blocks(flat)
        assert document[0].text == "early on"
        assert document[0].start == 0.0

    def test_overlapping_paragraphs_assign_each_word_once(self):
        flat = _flat(
            [(0.0, 0.5, "a"), (1.2, 1.5, "b"), (2.5, 3.0, "c")],
            [(0.0, 2.0, "A"), (1.0, 3.0, "B")],
        )
        document = flat_to_blocks(flat)
        assert [w.text for w in document.words] == ["a", "b", "c"]
        assert document[0].text == "a"
        assert document[1].text == "b c"

    def test_empty_paragraph_range_kept(self):
        flat = _flat([(0.0, 0.5, "a")], [(0.0, 1.0, "A"), (5.0, 6.0, "B")])
        document = flat_to_blocks(flat)
        assert len(document) == 2
        assert document[1].words == ()
        assert document[1].start == 5.0


# ---------------------------------------------------------------------------
# block -> flat and round-trip
# ---------------------------------------------------------------------------


class TestBlocksToFlat:

    def test_boundaries_from_first_and_last_word(self, interview_doc):
        flat = blocks_to_flat(interview_doc)
        assert [(p.start, p.end, p.speaker) for p in flat.paragraphs] == [
            (0.12, 0.94, "Alice"),
            (1.2, 2.12, "Bob"),
            (62.0, 63.0, "Alice"),
        ]

    def test_round_trip_preserves_words(self, interview_flat):
        flat = transcript_from_dict(interview_flat)
        assert blocks_to_flat(flat_to_blocks(flat)).words == flat.words

    def test_round_trip_after_split_and_merge(self, hello_world_doc):
        split = split_paragraph(hello_world_doc, Selection.at(0, 5)).document
        merged = merge_paragraph(split, Cursor(1, 0)).document
        assert blocks_to_flat(merged).words == blocks_to_flat(hello_world_doc).words

    def test_empty_paragraphs_skipped(self):
        document = flat_to_blocks(_flat([(0.0, 0.5, "a")], [(0.0, 1.0, "A"), (5.0, 6.0, "B")]))
        assert len(blocks_to_flat(document).paragraphs) == 1


# ---------------------------------------------------------------------------
# JSON loaders
# ---------------------------------------------------------------------------


class TestJsonLoaders:

    def test_flat_dict_round_trip(self, interview_flat):
        assert transcript_to_dict(transcript_from_dict(interview_flat)) == interview_flat

    def test_block_json_round_trip(self, interview_doc):
        blocks = document_to_blocks(interview_doc)
        assert blocks[0]["startTimecode"] == "00:00:00"
        assert document_from_blocks(blocks) == interview_doc

    def test_block_text_kept_as_saved(self, interview_doc):
        blocks = document_to_blocks(interview_doc)
        blocks[0]["text"] = "How are you doing"
        document = document_from_blocks(blocks)
        assert document[0].text == "How are you doing"
        assert not document.is_clean

    def test_block_text_defaults_to_words(self, interview_doc):
        blocks = document_to_blocks(interview_doc)
        del blocks[1]["text"]
        assert document_from_blocks(blocks)[1].text == "I am fantastic, thank you."

    def test_load_transcript_detects_shape(self, interview_flat, interview_doc):
        assert load_transcript(interview_flat) == interview_doc
        assert load_transcript(document_to_blocks(interview_doc)) == interview_doc

    def test_string_ids_preserved(self, hello_world_flat):
        hello_world_flat["words"][0]["id"] = "w-0"
        document = load_transcript(hello_world_flat)
        assert document.words[0].id == "w-0"
        assert document.next_word_id() == 2

    @pytest.mark.parametrize("data", [
        {"paragraphs": []},
        {"words": [{"id": 0, "start": 0.0, "text": "x"}], "paragraphs": []},
        {"words": [{"id": 0, "start": -1, "end": 0.5, "text": "x"}], "paragraphs": []},
        [{"speaker": "A", "words": []}],
        "not a transcript",
        42,
    ])
    def test_invalid_input_raises_value_error(self, data):
        with pytest.raises(ValueError):
            load_transcript(data)

    def test_word_ending_before_start_rejected(self, hello_world_flat):
        hello_world_flat["words"][1]["end"] = 0.1
        with pytest.raises(ValueError, match="ends before it starts"):
            load_transcript(hello_world_flat)

    def test_load_file(self, tmp_path, interview_flat, interview_doc):
        path = tmp_path / "interview.json"
        path.write_text(json.dumps(interview_flat), encoding="utf-8")
        assert load_transcript_file(path) == interview_doc

    def test_load_file_with_bad_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_transcript_file(path)
