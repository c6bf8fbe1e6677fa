"""Flat <-> block transcript mapping and JSON loading.

WHY: STT services and interchange consumers speak the flat form (one
word array plus paragraph boundaries), while the editor works on
paragraphs that own their words. This module is the bridge between the
two, and the single place where incoming JSON is validated.

HOW: flat_to_blocks assigns every word to the paragraph whose
``[start, end)`` range holds the word's start, found by bisecting the
sorted paragraph starts. blocks_to_flat concatenates the words back and
derives each boundary from its first and last word. The dict helpers
validate against the JSON schemas bundled in ``transcript_editor/schemas``
before building IR objects.

RULES:
- A word belongs to the paragraph with start <= word.start < end
- A word starting exactly at the last paragraph's end still belongs to it
- Words covered by no paragraph go to the nearest preceding paragraph
  (or the first one) and are logged, never dropped
- Missing/empty speaker -> UNKNOWN_SPEAKER (the only lossy step)
- flat -> block -> flat reproduces every word's (id, start, end, text)
- Empty paragraphs produce no flat boundary
"""

from __future__ import annotations

import bisect
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

import jsonschema

from transcript_editor.config import UNKNOWN_SPEAKER
from transcript_editor.core.ir import (
    Document,
    FlatParagraph,
    FlatTranscript,
    Paragraph,
    Word,
    join_words,
)

logger = logging.getLogger(__name__)

_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"

FLAT_SCHEMA = "flat_transcript.schema.json"
BLOCK_SCHEMA = "block_document.schema.json"

_CACHED_SCHEMAS: Dict[str, dict] = {}


def get_schema(name: str) -> dict:
    """Load and cache one of the bundled JSON schemas."""
    schema = _CACHED_SCHEMAS.get(name)
    if schema is None:
        with open(_SCHEMA_DIR / name, encoding="utf-8") as f:
            schema = json.load(f)
        _CACHED_SCHEMAS[name] = schema
    return schema


def _validate(data: Any, schema_name: str, label: str) -> None:
    try:
        jsonschema.validate(instance=data, schema=get_schema(schema_name))
    except jsonschema.ValidationError as exc:
        path = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise ValueError("Invalid {} at {}: {}".format(label, path, exc.message))


# ---------------------------------------------------------------------------
# flat <-> block
# ---------------------------------------------------------------------------


def flat_to_blocks(flat: FlatTranscript) -> Document:
    """Group the flat word array into paragraphs.

    Args:
        flat: Words plus paragraph boundaries, words in time order.

    Returns:
        A clean Document. With no boundaries at all, every word lands in
        a single UNKNOWN_SPEAKER paragraph.
    """
    boundaries = sorted(flat.paragraphs, key=lambda p: p.start)
    if not boundaries:
        if not flat.words:
            return Document()
        return Document(paragraphs=(Paragraph.from_words(UNKNOWN_SPEAKER, flat.words),))

    starts = [b.start for b in boundaries]
    last = len(boundaries) - 1
    buckets: List[List[Word]] = [[] for _ in boundaries]
    uncovered = 0

    for word in flat.words:
        index = bisect.bisect_right(starts, word.start) - 1
        if index < 0:
            index = 0
            uncovered += 1
        else:
            boundary = boundaries[index]
            inside = word.start < boundary.end or (index == last and word.start == boundary.end)
            if not inside:
                uncovered += 1
        buckets[index].append(word)

    if uncovered:
        logger.warning(
            "%d word(s) fall outside every paragraph range; attached to the preceding paragraph",
            uncovered,
        )

    paragraphs = []
    for boundary, words in zip(boundaries, buckets):
        start = words[0].start if words else boundary.start
        paragraphs.append(Paragraph.from_words(boundary.speaker, words, start=start))
    return Document(paragraphs=tuple(paragraphs))


def blocks_to_flat(document: Document) -> FlatTranscript:
    """Flatten paragraphs back into one word array plus boundaries."""
    boundaries = []
    for paragraph in document.paragraphs:
        if not paragraph.words:
            continue
        boundaries.append(FlatParagraph(
            id=len(boundaries),
            start=paragraph.words[0].start,
            end=paragraph.words[-1].end,
            speaker=paragraph.speaker,
        ))
    return FlatTranscript(words=document.words, paragraphs=tuple(boundaries))


# ---------------------------------------------------------------------------
# JSON dicts
# ---------------------------------------------------------------------------


def _word_from_dict(data: Dict[str, Any]) -> Word:
    return Word(
        id=data["id"],
        start=float(data["start"]),
        end=float(data["end"]),
        text=data["text"],
    )


def transcript_from_dict(data: Dict[str, Any]) -> FlatTranscript:
    """Build a FlatTranscript from its JSON form.

    Raises:
        ValueError: If ``data`` does not match the flat transcript schema
            or a word/paragraph ends before it starts.
    """
    _validate(data, FLAT_SCHEMA, "flat transcript")
    words = tuple(_word_from_dict(w) for w in data["words"])
    for word in words:
        if word.end < word.start:
            raise ValueError("Word {!r} ends before it starts".format(word.id))

    paragraphs = []
    for index, raw in enumerate(data["paragraphs"]):
        if raw["end"] < raw["start"]:
            raise ValueError("Paragraph {} ends before it starts".format(index))
        paragraphs.append(FlatParagraph(
            id=raw.get("id", index),
            start=float(raw["start"]),
            end=float(raw["end"]),
            speaker=raw.get("speaker") or None,
        ))
    return FlatTranscript(words=words, paragraphs=tuple(paragraphs))


def transcript_to_dict(flat: FlatTranscript) -> Dict[str, Any]:
    """Serialize a FlatTranscript to its JSON form."""
    return {
        "words": [w.to_dict() for w in flat.words],
        "paragraphs": [
            {"id": p.id, "start": p.start, "end": p.end, "speaker": p.speaker}
            for p in flat.paragraphs
        ],
    }


def document_from_blocks(data: Sequence[Dict[str, Any]]) -> Document:
    """Build a Document from the block JSON array.

    ``text`` is taken as given (a saved document may hold unaligned
    edits); it defaults to the joined word texts when absent.

    Raises:
        ValueError: If ``data`` does not match the block document schema.
    """
    _validate(data, BLOCK_SCHEMA, "block document")
    paragraphs = []
    for raw in data:
        words = tuple(_word_from_dict(w) for w in raw["words"])
        paragraphs.append(Paragraph(
            speaker=raw.get("speaker") or UNKNOWN_SPEAKER,
            start=float(raw["start"]),
            words=words,
            text=raw["text"] if "text" in raw else join_words(words),
        ))
    return Document(paragraphs=tuple(paragraphs))


def document_to_blocks(document: Document) -> List[Dict[str, Any]]:
    """Serialize a Document to the block JSON array."""
    return [
        {
            "speaker": p.speaker,
            "start": p.start,
            "startTimecode": p.start_timecode,
            "words": [w.to_dict() for w in p.words],
            "text": p.text,
        }
        for p in document.paragraphs
    ]


def load_transcript(data: Any) -> Document:
    """Build a Document from either JSON form.

    A list is read as the block form; a dict with a ``words`` key as the
    flat form.

    Raises:
        ValueError: If the input is neither form or fails validation.
    """
    if isinstance(data, list):
        return document_from_blocks(data)
    if isinstance(data, dict) and "words" in data:
        return flat_to_blocks(transcript_from_dict(data))
    raise ValueError(
        "Expected a flat transcript object with 'words' and 'paragraphs' "
        "or a block document array"
    )


def load_transcript_file(path: Path) -> Document:
    """Read and parse a transcript JSON file from disk.

    Raises:
        ValueError: If the file is not valid JSON or not a transcript.
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError("{} is not valid JSON: {}".format(path, exc))
    return load_transcript(data)
