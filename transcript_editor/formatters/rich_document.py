"""Markdown rich-document formatter.

WHY: A rich document is what gets shared with people who never open the
editor: a title, speaker names set off from the text, and timecodes to
find the passage in the recording. Some archive tools (oral-history
indexes in the OHMS style) want those timecodes embedded in the running
text instead of as a separate field.

HOW: Emits a ``# title`` block unless ``hide_title``. Each paragraph gets
a header line with the speaker in bold and, when ``timecodes`` is on,
the start time as a ``[HH:MM:SS]`` code span. With ``inline_timecodes``
the header carries no time; instead ``[HH:MM:SS]`` codes are written
into the paragraph text at its start and before the first word of every
INLINE_TIMECODE_INTERVAL_S window the paragraph enters.

RULES:
- Blocks are separated by one blank line; output ends with a newline
- Inline codes need word timing: a paragraph whose text no longer
  matches its words only gets the code at its start
- Speaker names are upper-cased and bold; Markdown control
  characters in them are escaped
- Output suffix: ".md"; media type "text/markdown"
"""

from __future__ import annotations

import re
from typing import List

from transcript_editor.config import INLINE_TIMECODE_INTERVAL_S
from transcript_editor.core.ir import Document, Paragraph
from transcript_editor.core.timecode import short_timecode
from transcript_editor.formatters.base import BaseFormatter, ExportOutput

_MD_SPECIAL_RE = re.compile(r"([\\`*_\[\]#])")


def _escape(text: str) -> str:
    return _MD_SPECIAL_RE.sub(r"\\\1", text)


def inline_timecoded_text(paragraph: Paragraph, interval: float) -> str:
    """Paragraph text with ``[HH:MM:SS]`` codes at interval crossings."""
    text = " ".join(paragraph.text.split())
    if not paragraph.is_clean or interval <= 0:
        return "[{}] {}".format(paragraph.start_timecode, text).rstrip()

    parts = ["[{}]".format(paragraph.start_timecode)]
    window = int(paragraph.start // interval)
    for word in paragraph.words:
        word_window = int(word.start // interval)
        if word_window > window:
            window = word_window
            parts.append("[{}]".format(short_timecode(word.start)))
        parts.append(word.text)
    return " ".join(parts)


class RichDocumentFormatter(BaseFormatter):
    """Formatter that produces a Markdown transcript document."""

    @property
    def name(self) -> str:
        return "Markdown Document"

    def _header(self, paragraph: Paragraph) -> str:
        fields = []
        if self.options.speakers:
            fields.append("**{}**".format(_escape(paragraph.speaker.upper())))
        if self.options.timecodes and not self.options.inline_timecodes:
            fields.append("`[{}]`".format(paragraph.start_timecode))
        return " ".join(fields)

    def format(self, document: Document) -> ExportOutput:
        blocks: List[str] = []
        if not self.options.hide_title:
            blocks.append("# {}".format(self.options.title))

        for paragraph in document.paragraphs:
            if not paragraph.text.strip():
                continue
            header = self._header(paragraph)
            if self.options.inline_timecodes:
                body = inline_timecoded_text(paragraph, INLINE_TIMECODE_INTERVAL_S)
            else:
                body = " ".join(paragraph.text.split())
            blocks.append("{}\n{}".format(header, body) if header else body)

        content = "\n\n".join(blocks)
        if content:
            content += "\n"
        return ExportOutput(content=content, suffix=".md", media_type="text/markdown")
