"""Plain text transcript formatter.

WHY: Editors want a readable transcript for review, archival and quick
reference. Optional speaker and timecode headers make it usable as a
log; the atlas layout puts each paragraph on one tab-separated line for
spreadsheet-style tools.

HOW: Renders each paragraph's display text. With ``speakers`` and/or
``timecodes`` a header line ``[HH:MM:SS]<TAB>SPEAKER`` goes above the
text. With ``atlas_format`` the enabled fields and the text share one
line: ``HH:MM:SS<TAB>SPEAKER:<TAB>text``.

RULES:
- Paragraphs are joined by PARAGRAPH_BREAK ("\\n\\n")
- Speaker labels are uppercased
- Paragraphs with blank text are skipped
- Output ends with exactly one newline (empty output stays empty)
- No trailing whitespace on any line
- Output suffix: ".txt"; media type "text/plain"
"""

from __future__ import annotations

from typing import List

from transcript_editor.config import PARAGRAPH_BREAK
from transcript_editor.core.ir import Document, Paragraph
from transcript_editor.formatters.base import BaseFormatter, ExportOutput


def _clean(text: str) -> str:
    """Collapse internal whitespace runs to single spaces."""
    return " ".join(text.split())


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces plain text paragraphs."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def _standard_block(self, paragraph: Paragraph) -> str:
        header = []
        if self.options.timecodes:
            header.append("[{}]".format(paragraph.start_timecode))
        if self.options.speakers:
            header.append(paragraph.speaker.upper())
        text = _clean(paragraph.text)
        if header:
            return "{}\n{}".format("\t".join(header), text)
        return text

    def _atlas_line(self, paragraph: Paragraph) -> str:
        fields = []
        if self.options.timecodes:
            fields.append(paragraph.start_timecode)
        if self.options.speakers:
            fields.append("{}:".format(paragraph.speaker.upper()))
        fields.append(_clean(paragraph.text))
        return "\t".join(fields)

    def format(self, document: Document) -> ExportOutput:
        render = self._atlas_line if self.options.atlas_format else self._standard_block
        blocks: List[str] = [
            render(p) for p in document.paragraphs if p.text.strip()
        ]
        content = PARAGRAPH_BREAK.join(blocks)
        if content:
            content += "\n"
        return ExportOutput(content=content, suffix=".txt", media_type="text/plain")
