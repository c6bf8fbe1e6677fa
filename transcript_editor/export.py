"""Export engine: validated export variants and the pure render step.

WHY: Each output format has its own option set (speakers and atlas
layout for text, kind and preset for captions, title handling for rich
documents). Validating those options once, when the export request is
built, means render() never has to second-guess them, and a misspelt
format name becomes an UnsupportedExportFormat value instead of a crash
halfway through an export.

HOW: A closed family of frozen dataclasses, one per output family:
  TextExport, CaptionExport, RichDocumentExport, JsonBlockExport,
  JsonFlatExport
parse_export_format() maps a format name (including the historical
tags ``word``, ``json-slate`` and ``json-digitalpaperedit``) plus loose
options to a variant. render() looks up the family's formatter and runs
it. Re-alignment before export is the session's job, guided by
requires_timestamps().

RULES:
- render() is pure: same document and variant -> byte-identical output
- Unknown names return UnsupportedExportFormat; they never raise
- Options that do not apply to the chosen family are ignored
- Constructing a variant directly with invalid options raises ValueError
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Tuple, Union

from caption_cues import CAPTION_KINDS, PRESETS
from transcript_editor.config import DEFAULT_CAPTION_PRESET, DEFAULT_TITLE
from transcript_editor.core.ir import Document
from transcript_editor.core.results import UnsupportedExportFormat
from transcript_editor.formatters import FORMATTERS
from transcript_editor.formatters.base import ExportOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextExport:
    """Plain text; optional speaker/timecode headers or atlas layout."""

    speakers: bool = False
    timecodes: bool = False
    atlas_format: bool = False

    family: ClassVar[str] = "text"

    @property
    def name(self) -> str:
        return "text"

    @property
    def requires_timestamps(self) -> bool:
        return self.timecodes


@dataclass(frozen=True)
class CaptionExport:
    """One caption file of ``kind``, segmented with ``preset``."""

    kind: str = "srt"
    preset: str = DEFAULT_CAPTION_PRESET
    speakers: bool = False

    family: ClassVar[str] = "caption"

    def __post_init__(self) -> None:
        if self.kind not in CAPTION_KINDS:
            raise ValueError("Unknown caption kind: {!r}".format(self.kind))
        if self.preset not in PRESETS:
            raise ValueError("Unknown caption preset: {!r}".format(self.preset))

    @property
    def name(self) -> str:
        return self.kind

    @property
    def requires_timestamps(self) -> bool:
        return True


@dataclass(frozen=True)
class RichDocumentExport:
    """Markdown document with title, speaker and timecode decoration."""

    speakers: bool = True
    timecodes: bool = True
    inline_timecodes: bool = False
    hide_title: bool = False
    title: str = DEFAULT_TITLE

    family: ClassVar[str] = "rich-document"

    @property
    def name(self) -> str:
        return "rich-document"

    @property
    def requires_timestamps(self) -> bool:
        return self.timecodes or self.inline_timecodes


@dataclass(frozen=True)
class JsonBlockExport:
    """The block representation as JSON."""

    family: ClassVar[str] = "json-block"

    @property
    def name(self) -> str:
        return "json-block"

    @property
    def requires_timestamps(self) -> bool:
        return True


@dataclass(frozen=True)
class JsonFlatExport:
    """The flat (words + paragraph boundaries) representation as JSON."""

    family: ClassVar[str] = "json-flat"

    @property
    def name(self) -> str:
        return "json-flat"

    @property
    def requires_timestamps(self) -> bool:
        return True


ExportFormat = Union[TextExport, CaptionExport, RichDocumentExport, JsonBlockExport, JsonFlatExport]

# name -> (variant class, description)
_NAMED_FORMATS: Dict[str, Tuple[type, str]] = {
    "text": (TextExport, "Plain text paragraphs"),
    "rich-document": (RichDocumentExport, "Markdown document with title, speakers and timecodes"),
    "markdown": (RichDocumentExport, "Alias for rich-document"),
    "word": (RichDocumentExport, "Alias for rich-document"),
    "json-block": (JsonBlockExport, "Block JSON: paragraphs owning their words"),
    "json-slate": (JsonBlockExport, "Alias for json-block"),
    "json-flat": (JsonFlatExport, "Flat JSON: words plus paragraph boundaries"),
    "json-digitalpaperedit": (JsonFlatExport, "Alias for json-flat"),
}

_CAPTION_DESCRIPTIONS: Dict[str, str] = {
    "srt": "SubRip captions",
    "vtt": "WebVTT captions",
    "ttml": "TTML captions",
    "premiere-ttml": "TTML captions for Adobe Premiere Pro",
    "itt": "iTunes Timed Text captions",
    "csv": "Caption cues as CSV",
    "pre-segment-txt": "Caption cue text without timing",
    "json": "Caption cues as JSON",
}


def available_formats() -> List[Dict[str, str]]:
    """All accepted format names with a short description, names sorted."""
    entries = [
        {"name": name, "description": description}
        for name, (_, description) in _NAMED_FORMATS.items()
    ]
    entries.extend(
        {"name": kind, "description": _CAPTION_DESCRIPTIONS.get(kind, "Captions")}
        for kind in CAPTION_KINDS
    )
    return sorted(entries, key=lambda e: e["name"])


def format_names() -> Tuple[str, ...]:
    return tuple(e["name"] for e in available_formats())


def parse_export_format(
    name: str,
    **options: Any,
) -> Union[ExportFormat, UnsupportedExportFormat]:
    """Build the export variant for a format name.

    Args:
        name: A format name from available_formats() (case-insensitive).
        **options: speakers, timecodes, atlas_format, inline_timecodes,
            hide_title, title, preset. None values and options the
            family does not take are ignored.

    Returns:
        The validated variant, or UnsupportedExportFormat for an unknown
        name or caption preset.
    """
    key = name.strip().lower()
    if key in CAPTION_KINDS:
        cls = CaptionExport
        options = dict(options, kind=key)
    elif key in _NAMED_FORMATS:
        cls = _NAMED_FORMATS[key][0]
    else:
        return UnsupportedExportFormat(
            message="Unsupported export format: {!r}".format(name),
            requested=name,
            available=format_names(),
        )

    accepted = {f.name for f in dataclasses.fields(cls)}
    kwargs = {k: v for k, v in options.items() if k in accepted and v is not None}

    if cls is CaptionExport and kwargs.get("preset", DEFAULT_CAPTION_PRESET) not in PRESETS:
        return UnsupportedExportFormat(
            message="Unknown caption preset: {!r}".format(kwargs["preset"]),
            requested=kwargs["preset"],
            available=tuple(PRESETS),
        )
    return cls(**kwargs)


def requires_timestamps(export_format: ExportFormat) -> bool:
    """True when the export needs word timing that matches the text."""
    return export_format.requires_timestamps


def render(document: Document, export_format: ExportFormat) -> ExportOutput:
    """Render ``document`` in ``export_format``. Pure; never modifies the document."""
    formatter = FORMATTERS[export_format.family](export_format)
    output = formatter.format(document)
    logger.debug(
        "Rendered %s: %d paragraphs -> %d chars",
        formatter.name, len(document), len(output.content),
    )
    return output
