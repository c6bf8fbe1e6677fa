"""Caption formatter: every caption kind through the caption_cues library.

WHY: All caption output goes through the caption_cues segmenter so that
cue boundaries, line breaks and display timing follow one set of rules
whatever the container. This formatter is the bridge between the
Document and that library.

HOW: The caption adapter flattens the document into caption Words with
repaired timing and paragraph/sentence flags; render_captions() then
segments them with the chosen preset and writes the requested kind.

RULES:
- Never modifies the Document
- An empty document produces the kind's empty container
- Suffix and media type depend on the kind (CAPTION_FILE_TYPES)
"""

from __future__ import annotations

from typing import Dict, Tuple

from caption_cues import render_captions
from transcript_editor.adapters.caption_adapter import transcript_to_caption_words
from transcript_editor.core.ir import Document
from transcript_editor.formatters.base import BaseFormatter, ExportOutput

# kind -> (suffix, media type)
CAPTION_FILE_TYPES: Dict[str, Tuple[str, str]] = {
    "srt": (".srt", "application/x-subrip"),
    "vtt": (".vtt", "text/vtt"),
    "ttml": (".ttml", "application/ttml+xml"),
    "premiere-ttml": (".premiere.xml", "application/ttml+xml"),
    "itt": (".itt", "application/ttml+xml"),
    "csv": (".csv", "text/csv"),
    "pre-segment-txt": (".segments.txt", "text/plain"),
    "json": (".captions.json", "application/json"),
}


class CaptionFormatter(BaseFormatter):
    """Formatter that produces one caption file of the requested kind."""

    @property
    def name(self) -> str:
        return "Captions ({})".format(self.options.kind)

    def format(self, document: Document) -> ExportOutput:
        words = transcript_to_caption_words(document)
        content = render_captions(
            words,
            self.options.kind,
            preset=self.options.preset,
            speakers=self.options.speakers,
        )
        suffix, media_type = CAPTION_FILE_TYPES[self.options.kind]
        return ExportOutput(content=content, suffix=suffix, media_type=media_type)
