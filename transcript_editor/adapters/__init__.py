"""Adapter modules for converting the document IR to external library inputs.

WHY: The editor's Document (paragraphs owning timed words) and the
caption library's input (a flat stream of flagged caption words) are
different models. Adapters bridge them so each side can evolve on its own.

RULES:
- Adapters are pure data transformations: no I/O, no side effects
- Adapters never modify the source IR objects
"""

from transcript_editor.adapters.caption_adapter import transcript_to_caption_words

__all__ = ["transcript_to_caption_words"]
