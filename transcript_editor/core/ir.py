"""Intermediate representation dataclasses for timed transcripts.

WHY: Every consumer of an edited transcript (captions, playback-linked
views, rich documents, interchange JSON) needs word-level timing that
stays coherent while a human rewrites the text. The IR holds both the
timed words and the paragraph text the human sees, so edits can diverge
temporarily and be reconciled later by the re-alignment engine.

HOW: Five frozen dataclasses:
  Word            one STT word with id and start/end seconds
  Paragraph       a speaker turn: speaker, start, timed words, display text
  Document        ordered paragraphs (the block representation)
  FlatParagraph   paragraph boundary in the flat representation
  FlatTranscript  flat word array plus paragraph boundaries

RULES:
- All times are float seconds
- Sequences are tuples; a document only changes by wholesale replacement
- Paragraph.text is stored, not derived: after free edits it may no longer
  tokenize into Paragraph.words (the paragraph is then "dirty")
- A clean paragraph satisfies text.split() == [w.text for w in words]
  and start == words[0].start
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence, Tuple, Union

from transcript_editor.config import UNKNOWN_SPEAKER
from transcript_editor.core.timecode import short_timecode

WordId = Union[int, str]


@dataclass(frozen=True)
class Word:
    """A single word with the timing inherited from the STT source.

    RULES:
    - start <= end (both seconds)
    - id is unique within a document; ints for STT words, fresh ints
      for words created by re-alignment
    """

    id: WordId
    start: float
    end: float
    text: str

    def to_dict(self) -> dict:
        return {"id": self.id, "start": self.start, "end": self.end, "text": self.text}


@dataclass(frozen=True)
class Paragraph:
    """A speaker turn owning its own subsequence of words.

    WHY: Paragraphs are the unit users edit. Their text can be changed
    freely, so text and words are stored side by side and compared by
    ``is_clean`` to decide whether re-alignment is needed.
    """

    speaker: str
    start: float
    words: Tuple[Word, ...] = ()
    text: str = ""

    @classmethod
    def from_words(
        cls,
        speaker: Optional[str],
        words: Iterable[Word],
        start: Optional[float] = None,
    ) -> "Paragraph":
        """Build a clean paragraph whose text is the words joined by spaces.

        ``start`` defaults to the first word's start (0.0 when there are
        no words). A missing speaker becomes UNKNOWN_SPEAKER.
        """
        words = tuple(words)
        if start is None:
            start = words[0].start if words else 0.0
        return cls(
            speaker=speaker or UNKNOWN_SPEAKER,
            start=start,
            words=words,
            text=join_words(words),
        )

    @property
    def start_timecode(self) -> str:
        return short_timecode(self.start)

    @property
    def end(self) -> float:
        """End of the last word, or the paragraph start when empty."""
        return self.words[-1].end if self.words else self.start

    @property
    def is_clean(self) -> bool:
        tokens = self.text.split()
        if tokens != [w.text for w in self.words]:
            return False
        return not self.words or self.start == self.words[0].start

    def with_text(self, text: str) -> "Paragraph":
        return replace(self, text=text)

    def with_speaker(self, speaker: str) -> "Paragraph":
        return replace(self, speaker=speaker or UNKNOWN_SPEAKER)


@dataclass(frozen=True)
class Document:
    """Ordered paragraphs: the block representation of a transcript."""

    paragraphs: Tuple[Paragraph, ...] = ()

    def __len__(self) -> int:
        return len(self.paragraphs)

    def __getitem__(self, index: int) -> Paragraph:
        return self.paragraphs[index]

    @property
    def words(self) -> Tuple[Word, ...]:
        """Every paragraph's words concatenated in document order."""
        return tuple(w for p in self.paragraphs for w in p.words)

    @property
    def is_clean(self) -> bool:
        return all(p.is_clean for p in self.paragraphs)

    @property
    def speakers(self) -> Tuple[str, ...]:
        """Unique speaker labels in order of first appearance."""
        seen = []
        for p in self.paragraphs:
            if p.speaker not in seen:
                seen.append(p.speaker)
        return tuple(seen)

    def next_word_id(self) -> int:
        return next_word_id(self.words)

    def replace_paragraphs(
        self,
        index: int,
        count: int,
        new: Sequence[Paragraph],
    ) -> "Document":
        """Return a new document with ``count`` paragraphs at ``index`` replaced."""
        paragraphs = self.paragraphs[:index] + tuple(new) + self.paragraphs[index + count:]
        return Document(paragraphs=paragraphs)


@dataclass(frozen=True)
class FlatParagraph:
    """A paragraph boundary in the flat representation."""

    id: int
    start: float
    end: float
    speaker: Optional[str] = None


@dataclass(frozen=True)
class FlatTranscript:
    """Flat representation: one word array plus separate paragraph boundaries."""

    words: Tuple[Word, ...] = field(default_factory=tuple)
    paragraphs: Tuple[FlatParagraph, ...] = field(default_factory=tuple)


def join_words(words: Iterable[Word]) -> str:
    """Join word texts with single spaces."""
    return " ".join(w.text for w in words)


def next_word_id(words: Iterable[Word]) -> int:
    """Smallest int id greater than every int id in ``words`` (0 when none)."""
    int_ids = [w.id for w in words if isinstance(w.id, int) and not isinstance(w.id, bool)]
    return max(int_ids) + 1 if int_ids else 0
