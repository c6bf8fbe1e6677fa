"""Shared test fixtures for the transcript_editor test suite.

WHY: Most test modules need the same small transcripts: the two-word
"hello world" paragraph used to pin split behaviour, and a two-speaker
interview with punctuation and a long pause for alignment, captions and
exports. Centralizing them keeps every module on identical data.

HOW: Plain module-level dicts in the flat JSON form, plus fixtures that
return fresh copies and the assembled Document.

RULES:
- Word ids are sequential ints starting at 0
- Timings are non-overlapping and in time order
- Fixtures return new objects; tests may mutate them freely
"""

import copy
from typing import Any, Dict

import pytest

from transcript_editor.core.assembler import load_transcript
from transcript_editor.core.ir import Document, Paragraph, Word

# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

HELLO_WORLD_FLAT: Dict[str, Any] = {
    "words": [
        {"id": 0, "start": 0.0, "end": 0.4, "text": "hello"},
        {"id": 1, "start": 0.5, "end": 0.9, "text": "world"},
    ],
    "paragraphs": [
        {"id": 0, "start": 0.0, "end": 1.0, "speaker": "A"},
    ],
}

INTERVIEW_FLAT: Dict[str, Any] = {
    "words": [
        {"id": 0, "start": 0.12, "end": 0.25, "text": "How"},
        {"id": 1, "start": 0.26, "end": 0.38, "text": "are"},
        {"id": 2, "start": 0.39, "end": 0.51, "text": "you"},
        {"id": 3, "start": 0.52, "end": 0.72, "text": "doing"},
        {"id": 4, "start": 0.73, "end": 0.94, "text": "today?"},
        {"id": 5, "start": 1.20, "end": 1.26, "text": "I"},
        {"id": 6, "start": 1.27, "end": 1.38, "text": "am"},
        {"id": 7, "start": 1.39, "end": 1.80, "text": "fantastic,"},
        {"id": 8, "start": 1.81, "end": 1.95, "text": "thank"},
        {"id": 9, "start": 1.96, "end": 2.12, "text": "you."},
        {"id": 10, "start": 62.00, "end": 62.30, "text": "Much"},
        {"id": 11, "start": 62.31, "end": 62.60, "text": "later"},
        {"id": 12, "start": 62.61, "end": 63.00, "text": "now."},
    ],
    "paragraphs": [
        {"id": 0, "start": 0.0, "end": 1.0, "speaker": "Alice"},
        {"id": 1, "start": 1.0, "end": 61.0, "speaker": "Bob"},
        {"id": 2, "start": 61.0, "end": 64.0, "speaker": "Alice"},
    ],
}


def _make_words(*texts: str, start: float = 0.0, step: float = 0.5) -> tuple:
    """Words with ids 0..n-1, each ``step`` long, back to back."""
    return tuple(
        Word(id=i, start=start + i * step, end=start + (i + 1) * step - 0.05, text=t)
        for i, t in enumerate(texts)
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hello_world_flat() -> Dict[str, Any]:
    return copy.deepcopy(HELLO_WORLD_FLAT)


@pytest.fixture
def hello_world_doc() -> Document:
    return load_transcript(copy.deepcopy(HELLO_WORLD_FLAT))


@pytest.fixture
def interview_flat() -> Dict[str, Any]:
    return copy.deepcopy(INTERVIEW_FLAT)


@pytest.fixture
def interview_doc() -> Document:
    """Three paragraphs: Alice (5 words), Bob (5 words), Alice at 62s (3 words)."""
    return load_transcript(copy.deepcopy(INTERVIEW_FLAT))


@pytest.fixture
def two_paragraph_doc() -> Document:
    """Paragraphs "hello" and "world" from different speakers."""
    words = _make_words("hello", "world")
    return Document(paragraphs=(
        Paragraph.from_words("A", words[:1]),
        Paragraph.from_words("B", words[1:]),
    ))
