"""Pydantic request/response models for the editing API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and the OpenAPI docs at /docs. Transcript
payloads themselves are validated by the JSON schemas in the assembler;
these models describe the envelope around them.

HOW: One model per request body and one per response shape. Every field
carries a Field(description=...) so the docs read without the source.

RULES:
- Paragraph indices are 0-based and must be >= 0
- Response models never expose Document internals; paragraphs go out in
  the block JSON shape
- Python 3.9+ compatible (Optional/List from typing)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    """Open a session on a flat or block transcript.

    RULES:
    - transcript is a flat object ({"words", "paragraphs"}) or a block
      list; the shape is detected automatically
    """

    transcript: Any = Field(
        description="Flat transcript object or block paragraph list.",
    )
    title: Optional[str] = Field(
        default=None,
        description="Document title used by rich-document exports.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "title": "Interview",
                "transcript": {
                    "words": [
                        {"id": 0, "start": 0.0, "end": 0.4, "text": "Hello"},
                        {"id": 1, "start": 0.5, "end": 0.9, "text": "world."},
                    ],
                    "paragraphs": [
                        {"id": 0, "start": 0.0, "end": 1.0, "speaker": "Alice"},
                    ],
                },
            }
        ]
    }}


class CursorRequest(BaseModel):
    """A collapsed cursor position, used by split and merge."""

    paragraph_index: int = Field(ge=0, description="0-based paragraph index.")
    offset: int = Field(ge=0, description="Character offset into the paragraph text.")


class SplitRequest(CursorRequest):
    """Split at a cursor, or at a selection when focus_* are given.

    RULES:
    - Without focus_* the selection is collapsed at the cursor
    - A non-collapsed selection is rejected by the editing core (422)
    """

    focus_paragraph_index: Optional[int] = Field(
        default=None, ge=0, description="Selection focus paragraph (defaults to the cursor).",
    )
    focus_offset: Optional[int] = Field(
        default=None, ge=0, description="Selection focus offset (defaults to the cursor).",
    )


class TextRequest(BaseModel):
    text: str = Field(description="Replacement paragraph text.")


class InsertTextRequest(BaseModel):
    offset: int = Field(ge=0, description="Character offset to insert at.")
    text: str = Field(description="Text to insert, e.g. '[INAUDIBLE]'.")


class SpeakerRequest(BaseModel):
    speaker: str = Field(min_length=1, description="New speaker label.")


class ReplaceRequest(BaseModel):
    text: str = Field(
        description=(
            "Complete corrected transcript. Blank lines separate paragraphs; "
            "timing is restored from the words captured when the session opened."
        ),
    )


class ExportRequest(BaseModel):
    """Export request. Options that do not apply to the format are ignored."""

    format: str = Field(
        description="Export format name (see GET /formats).",
        json_schema_extra={"example": "srt"},
    )
    speakers: Optional[bool] = Field(default=None, description="Include speaker labels.")
    timecodes: Optional[bool] = Field(default=None, description="Include paragraph timecodes.")
    atlas_format: Optional[bool] = Field(
        default=None, description="Text only: one tab-separated line per paragraph.",
    )
    inline_timecodes: Optional[bool] = Field(
        default=None, description="Rich document only: embed timecodes in the text.",
    )
    hide_title: Optional[bool] = Field(
        default=None, description="Rich document only: omit the title heading.",
    )
    title: Optional[str] = Field(
        default=None, description="Rich document title (defaults to the session title).",
    )
    preset: Optional[str] = Field(
        default=None, description="Caption segmentation preset.",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SelectionInfo(BaseModel):
    paragraph_index: int = Field(description="Cursor paragraph after the edit.")
    offset: int = Field(description="Cursor offset after the edit.")


class WarningInfo(BaseModel):
    code: str = Field(description="Outcome code, e.g. 'alignment-best-effort'.")
    message: str = Field(description="Human-readable warning.")


class SessionResponse(BaseModel):
    """Current state of an editing session.

    RULES:
    - paragraphs use the block JSON shape
    - selection is only set right after an edit that moves the cursor
    - warnings carry alignment best-effort notices from the last operation
    """

    id: str = Field(description="Session identifier.")
    title: str = Field(description="Document title.")
    modified: bool = Field(description="True when some paragraph text no longer matches its word timing.")
    saved: bool = Field(description="False once the document changed since the last save.")
    processing: bool = Field(description="True while a re-alignment or export is running.")
    can_undo: bool = Field(description="An operation can be undone.")
    can_redo: bool = Field(description="An undone operation can be redone.")
    paragraphs: List[Dict[str, Any]] = Field(description="Paragraphs in block JSON shape.")
    selection: Optional[SelectionInfo] = Field(
        default=None, description="Cursor position after the last edit.",
    )
    warnings: List[WarningInfo] = Field(
        default_factory=list, description="Alignment warnings from the last operation.",
    )


class FormatInfo(BaseModel):
    """Description of an accepted export format name."""

    name: str = Field(description="Format name used in export requests.")
    description: str = Field(description="What the format produces.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    sessions: int = Field(description="Number of open sessions.", json_schema_extra={"example": 2})
