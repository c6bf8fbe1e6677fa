"""Adapter: Document IR to caption library Word objects.

WHY: The caption library segments a flat word stream and needs three
things the document holds only implicitly: where paragraphs start (cues
must not cross them), where sentences start (preferred cue breaks), and
timings it can trust to be ordered. Edited and re-aligned words can
violate the last point (a word re-timed inside a gap may start before
its predecessor ends), so the adapter repairs timing on the way out.

HOW: Flattens paragraphs in order and, for each word:
  1. Clamps start to the previous word's end and end to at least start
     (monotonic, non-overlapping timing).
  2. Flags the first word of every paragraph as a paragraph start.
  3. Flags the first word after sentence-ending punctuation as a
     sentence start.
  4. Copies the paragraph speaker onto the word.

RULES:
- The input Document is never modified
- Paragraphs without words contribute nothing
- The very first word is both a paragraph and a sentence start
- Output timings are non-decreasing and non-overlapping
"""

from typing import List

from caption_cues.models import Word as CaptionWord
from transcript_editor.core.ir import Document

# Sentence-ending punctuation (triggers segment_start on the next word).
_SENTENCE_ENDING = (".", "?", "!", "…")
_CLOSERS = "\"')]”’"


def _ends_sentence(text: str) -> bool:
    return text.rstrip(_CLOSERS).endswith(_SENTENCE_ENDING)


def transcript_to_caption_words(document: Document) -> List[CaptionWord]:
    """Convert a Document into a flat list of caption Words.

    Args:
        document: The (clean) document to caption.

    Returns:
        Caption words ready for caption_cues.segment_cues().
    """
    result: List[CaptionWord] = []
    previous_end = 0.0
    next_is_segment_start = True

    for paragraph in document.paragraphs:
        first_in_paragraph = True
        for word in paragraph.words:
            start = max(word.start, previous_end)
            end = max(word.end, start)
            result.append(CaptionWord(
                text=word.text,
                start=start,
                end=end,
                speaker=paragraph.speaker,
                is_paragraph_start=first_in_paragraph,
                is_segment_start=next_is_segment_start or first_in_paragraph,
            ))
            previous_end = end
            first_in_paragraph = False
            next_is_segment_start = _ends_sentence(word.text)

    return result
