"""Output formatter registry.

WHY: The export engine needs a single lookup from an export variant's
family to the formatter that renders it. A central dict keeps adding a
format to one new module plus one line here.

HOW: FORMATTERS maps family keys to formatter *classes*. The export
engine instantiates one with the validated options:
``FORMATTERS[options.family](options).format(document)``.

RULES:
- Keys match the ``family`` of the variants in transcript_editor.export
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from transcript_editor.formatters.captions import CaptionFormatter
from transcript_editor.formatters.interchange import JsonBlockFormatter, JsonFlatFormatter
from transcript_editor.formatters.plain_text import PlainTextFormatter
from transcript_editor.formatters.rich_document import RichDocumentFormatter

if TYPE_CHECKING:
    from transcript_editor.formatters.base import BaseFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "text": PlainTextFormatter,
    "caption": CaptionFormatter,
    "rich-document": RichDocumentFormatter,
    "json-block": JsonBlockFormatter,
    "json-flat": JsonFlatFormatter,
}
