"""Data models for the caption cue library.

WHY: The segmenter needs timed words that also say where the source
text imposes structure: a new paragraph must start a new cue, a new
sentence is a good place to start one. Cues are the segmenter's output
and the writers' input.

RULES:
- Word.text is never modified, paraphrased or reordered
- is_paragraph_start forces a cue boundary before the word
- is_segment_start marks a sentence start, a preferred cue boundary
- Timestamps are float seconds
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Word:
    """A single timed word fed to the segmenter.

    Attributes:
        text: The word text.
        start: Start time in seconds.
        end: End time in seconds.
        speaker: Speaker label of the paragraph the word came from.
        is_paragraph_start: True for the first word of a paragraph.
        is_segment_start: True for the first word of a sentence.
    """
    text: str
    start: float
    end: float
    speaker: Optional[str] = None
    is_paragraph_start: bool = False
    is_segment_start: bool = False


@dataclass
class Cue:
    """One timed caption entry.

    Attributes:
        index: 1-based position in the cue list.
        start: Display start in seconds.
        end: Display end in seconds.
        lines: Caption lines, top to bottom.
        speaker: Speaker of the cue's first word, if known.
    """
    index: int
    start: float
    end: float
    lines: List[str] = field(default_factory=list)
    speaker: Optional[str] = None

    @property
    def text(self) -> str:
        """The cue lines joined by newlines."""
        return "\n".join(self.lines)
