"""Paragraph split/merge engine and free-text edits.

WHY: Pressing Enter or Backspace in a timed transcript is not just a
text operation: the paragraph's word list (and therefore its timing)
must be partitioned or concatenated in step with the text, or every
downstream timestamp drifts. These functions perform those structural
edits on an immutable Document and hand back a new one.

HOW: Each edit validates the cursor/selection against a WordOffsetIndex
of the paragraph text, builds replacement paragraphs, and returns an
EditOutcome. Invalid cursor states produce a StructuralEditRejected
value and the original document; nothing is partially applied.

RULES:
- Splits require a collapsed selection inside one paragraph
- No split at offset 0 (no empty leading paragraph) or after the last
  word (no empty trailing paragraph)
- No split inside a word: rejected as not-at-word-boundary, never guessed
- A dirty paragraph is realigned against its own words before splitting
- Both halves of a split inherit the speaker; the second half starts at
  its first word's start
- Backspace at offset 0 merges into the previous paragraph (keeping its
  speaker and start); elsewhere it deletes one character of text
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from transcript_editor.core.alignment import AlignmentResult, realign_paragraph
from transcript_editor.core.ir import Document, Paragraph
from transcript_editor.core.offsets import WordOffsetIndex
from transcript_editor.core.results import (
    DIFFERENT_PARAGRAPHS,
    DOCUMENT_START,
    NO_SUCH_PARAGRAPH,
    NOT_AT_WORD_BOUNDARY,
    PARAGRAPH_END,
    PARAGRAPH_START,
    SELECTION_NOT_COLLAPSED,
    AlignmentBestEffort,
    EditOutcome,
    rejected,
)


@dataclass(frozen=True)
class Cursor:
    """A point in the document: paragraph index plus character offset."""

    paragraph_index: int
    offset: int


@dataclass(frozen=True)
class Selection:
    """Anchor/focus pair; collapsed when both are the same point."""

    anchor: Cursor
    focus: Cursor

    @classmethod
    def at(cls, paragraph_index: int, offset: int) -> "Selection":
        point = Cursor(paragraph_index, offset)
        return cls(anchor=point, focus=point)

    @property
    def collapsed(self) -> bool:
        return self.anchor == self.focus

    @property
    def same_paragraph(self) -> bool:
        return self.anchor.paragraph_index == self.focus.paragraph_index


def _valid_index(document: Document, index: int) -> bool:
    return 0 <= index < len(document.paragraphs)


def _warnings(result: AlignmentResult) -> Tuple[AlignmentBestEffort, ...]:
    return (result.warning,) if result.warning is not None else ()


def split_paragraph(document: Document, selection: Selection) -> EditOutcome:
    """Split a paragraph in two at a collapsed cursor on a word boundary.

    Args:
        document: The current document (never mutated).
        selection: Cursor selection; must be collapsed.

    Returns:
        EditOutcome with the two new paragraphs in place of the original
        and the selection moved to the start of the second one, or a
        StructuralEditRejected outcome with the original document.
    """
    if not selection.same_paragraph:
        return rejected(document, DIFFERENT_PARAGRAPHS,
                        "Selection spans more than one paragraph")
    if not selection.collapsed:
        return rejected(document, SELECTION_NOT_COLLAPSED,
                        "Selection must be a single point to split a paragraph")

    index = selection.anchor.paragraph_index
    offset = selection.anchor.offset
    if not _valid_index(document, index):
        return rejected(document, NO_SUCH_PARAGRAPH,
                        "No paragraph at index {}".format(index))
    if offset <= 0:
        return rejected(document, PARAGRAPH_START,
                        "Cannot split at the start of a paragraph")

    paragraph = document.paragraphs[index]
    offsets = WordOffsetIndex.build(paragraph.text)
    count_before = offsets.boundary_index(offset)
    if count_before is None:
        return rejected(document, NOT_AT_WORD_BOUNDARY,
                        "Offset {} is inside a word".format(offset))
    if count_before == 0:
        return rejected(document, PARAGRAPH_START,
                        "Cannot split before the first word of a paragraph")
    if count_before >= offsets.token_count:
        return rejected(document, PARAGRAPH_END,
                        "Cannot split after the last word of a paragraph")

    warnings: Tuple[AlignmentBestEffort, ...] = ()
    if not paragraph.is_clean:
        paragraph, result = realign_paragraph(paragraph, id_start=document.next_word_id())
        warnings = _warnings(result)

    words_before = paragraph.words[:count_before]
    words_after = paragraph.words[count_before:]
    first = Paragraph.from_words(paragraph.speaker, words_before, start=paragraph.start)
    second = Paragraph.from_words(paragraph.speaker, words_after, start=words_after[0].start)

    return EditOutcome(
        document=document.replace_paragraphs(index, 1, [first, second]),
        selection=Selection.at(index + 1, 0),
        marks_modified=True,
        warnings=warnings,
    )


def merge_paragraph(document: Document, cursor: Cursor) -> EditOutcome:
    """Handle backspace at ``cursor``.

    At offset 0 of any paragraph but the first, the paragraph is merged
    into the previous one. Anywhere else a single character before the
    cursor is removed from the text, leaving the word list for later
    re-alignment.
    """
    index = cursor.paragraph_index
    if not _valid_index(document, index):
        return rejected(document, NO_SUCH_PARAGRAPH,
                        "No paragraph at index {}".format(index))

    paragraph = document.paragraphs[index]
    if cursor.offset > 0:
        offset = min(cursor.offset, len(paragraph.text))
        if offset == 0:
            return EditOutcome(document=document)
        text = paragraph.text[:offset - 1] + paragraph.text[offset:]
        return EditOutcome(
            document=document.replace_paragraphs(index, 1, [paragraph.with_text(text)]),
            selection=Selection.at(index, offset - 1),
            marks_modified=True,
        )

    if index == 0:
        return rejected(document, DOCUMENT_START,
                        "Cannot merge the first paragraph into a previous one")

    previous = document.paragraphs[index - 1]
    join_offset = len(previous.text)
    if previous.text and paragraph.text:
        text = previous.text + " " + paragraph.text
        join_offset += 1
    else:
        text = previous.text + paragraph.text
    merged = Paragraph(
        speaker=previous.speaker,
        start=previous.start,
        words=previous.words + paragraph.words,
        text=text,
    )
    return EditOutcome(
        document=document.replace_paragraphs(index - 1, 2, [merged]),
        selection=Selection.at(index - 1, join_offset),
        marks_modified=True,
    )


def set_paragraph_text(document: Document, index: int, text: str) -> EditOutcome:
    """Replace a paragraph's display text; its words wait for re-alignment."""
    if not _valid_index(document, index):
        return rejected(document, NO_SUCH_PARAGRAPH,
                        "No paragraph at index {}".format(index))
    paragraph = document.paragraphs[index]
    return EditOutcome(
        document=document.replace_paragraphs(index, 1, [paragraph.with_text(text)]),
        marks_modified=paragraph.text != text,
    )


def insert_text(document: Document, cursor: Cursor, text: str) -> EditOutcome:
    """Insert ``text`` at the cursor (e.g. an ``[INAUDIBLE]`` marker)."""
    index = cursor.paragraph_index
    if not _valid_index(document, index):
        return rejected(document, NO_SUCH_PARAGRAPH,
                        "No paragraph at index {}".format(index))
    paragraph = document.paragraphs[index]
    offset = max(0, min(cursor.offset, len(paragraph.text)))
    new_text = paragraph.text[:offset] + text + paragraph.text[offset:]
    return EditOutcome(
        document=document.replace_paragraphs(index, 1, [paragraph.with_text(new_text)]),
        selection=Selection.at(index, offset + len(text)),
        marks_modified=bool(text),
    )


def set_paragraph_speaker(document: Document, index: int, speaker: str) -> EditOutcome:
    """Rename the speaker of one paragraph. Timing is unaffected."""
    if not _valid_index(document, index):
        return rejected(document, NO_SUCH_PARAGRAPH,
                        "No paragraph at index {}".format(index))
    paragraph = document.paragraphs[index]
    return EditOutcome(
        document=document.replace_paragraphs(index, 1, [paragraph.with_speaker(speaker)]),
    )


def commit_paragraph(document: Document, index: int) -> EditOutcome:
    """Realign one paragraph's edited text against its own words."""
    if not _valid_index(document, index):
        return rejected(document, NO_SUCH_PARAGRAPH,
                        "No paragraph at index {}".format(index))
    paragraph = document.paragraphs[index]
    if paragraph.is_clean:
        return EditOutcome(document=document)
    realigned, result = realign_paragraph(paragraph, id_start=document.next_word_id())
    return EditOutcome(
        document=document.replace_paragraphs(index, 1, [realigned]),
        warnings=_warnings(result),
    )
