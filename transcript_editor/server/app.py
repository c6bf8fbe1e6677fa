"""FastAPI application exposing editor sessions over HTTP.

WHY: A browser editor (or any other client) needs the split/merge,
re-alignment and export operations without linking Python. FastAPI gives
request validation and OpenAPI docs for free, and its async endpoints
fit the session's coroutine-based re-alignment and export.

HOW: One FastAPI app with a module-level SessionStore. POST /sessions
loads a transcript and returns a session id; every edit endpoint looks
the session up, runs one EditorSession operation and returns the new
session state. Export streams the rendered content back with the
format's media type. A lifespan task expires idle sessions.

RULES:
- Unknown session -> 404; invalid transcript or export format -> 400;
  concurrent operation -> 409; rejected edit -> 422; too many sessions -> 429;
  unexpected export failure -> 500 (logged with traceback)
- Outcome values from the core are mapped here; the core never raises
  for them
- Every endpoint has an OpenAPI summary; error responses use ErrorResponse
"""

from __future__ import annotations

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Path
from fastapi.responses import Response

from transcript_editor import __version__
from transcript_editor.config import SERVER_HOST, SERVER_PORT
from transcript_editor.core.editing import Cursor, Selection
from transcript_editor.core.results import (
    ConcurrentOperationRejected,
    EditOutcome,
    OperationError,
    UnsupportedExportFormat,
)
from transcript_editor.core.session import EditorSession
from transcript_editor.export import available_formats, parse_export_format
from transcript_editor.server.models import (
    CreateSessionRequest,
    CursorRequest,
    ErrorResponse,
    ExportRequest,
    FormatInfo,
    HealthResponse,
    InsertTextRequest,
    ReplaceRequest,
    SelectionInfo,
    SessionResponse,
    SpeakerRequest,
    SplitRequest,
    TextRequest,
    WarningInfo,
)
from transcript_editor.server.sessions import SessionRecord, SessionStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()

CLEANUP_INTERVAL_SECONDS = 300


async def _periodic_cleanup() -> None:
    """Expire idle sessions every few minutes."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Timed Transcript Editor API",
    description=(
        "Edit word-timed transcripts: split and merge paragraphs, correct "
        "text, restore word timing by re-alignment, and export to text, "
        "Markdown, captions or JSON."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_SESSION_ERRORS = {404: {"model": ErrorResponse, "description": "Session not found."}}
_EDIT_ERRORS = {
    **_SESSION_ERRORS,
    409: {"model": ErrorResponse, "description": "A re-alignment or export is in progress."},
    422: {"model": ErrorResponse, "description": "The edit was rejected at this cursor."},
}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_record(session_id: str) -> SessionRecord:
    record = session_store.get_session(session_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Session {} not found".format(session_id))
    return record


def _raise_for_error(error: OperationError) -> None:
    if isinstance(error, ConcurrentOperationRejected):
        raise HTTPException(status_code=409, detail=error.message)
    if isinstance(error, UnsupportedExportFormat):
        raise HTTPException(status_code=400, detail=error.message)
    raise HTTPException(status_code=422, detail=error.message)


def _session_to_response(record: SessionRecord, outcome: Optional[EditOutcome] = None) -> SessionResponse:
    """Convert a stored session (and the outcome that produced it) to JSON."""
    session = record.session
    selection = None
    warnings: List[WarningInfo] = []
    if outcome is not None:
        if outcome.selection is not None:
            focus = outcome.selection.focus
            selection = SelectionInfo(paragraph_index=focus.paragraph_index, offset=focus.offset)
        warnings = [WarningInfo(code=w.code, message=w.message) for w in outcome.warnings]
    return SessionResponse(
        id=record.id,
        title=session.title,
        modified=session.modified,
        saved=session.saved,
        processing=session.processing,
        can_undo=session.history.can_undo,
        can_redo=session.history.can_redo,
        paragraphs=session.to_blocks(),
        selection=selection,
        warnings=warnings,
    )


def _respond(record: SessionRecord, outcome: EditOutcome) -> SessionResponse:
    if not outcome.ok:
        _raise_for_error(outcome.error)
    return _session_to_response(record, outcome)


def _download_name(title: str, suffix: str) -> str:
    stem = re.sub(r"[^\w.-]+", "_", title).strip("_") or "transcript"
    return "{}{}".format(stem, suffix)


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    tags=["sessions"],
    summary="Open an editing session",
    description=(
        "Load a flat or block transcript. Its words become the timing "
        "reference for later whole-text replacement."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid transcript."},
        429: {"model": ErrorResponse, "description": "Too many open sessions."},
    },
)
async def create_session(request: CreateSessionRequest) -> SessionResponse:
    try:
        session = EditorSession.from_json(request.transcript, title=request.title)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        record = session_store.create_session(session)
    except ValueError as e:
        raise HTTPException(status_code=429, detail=str(e))
    return _session_to_response(record)


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session state",
    responses=_SESSION_ERRORS,
)
async def get_session(
    session_id: str = Path(description="Session identifier."),
) -> SessionResponse:
    return _session_to_response(_get_record(session_id))


@app.post(
    "/sessions/{session_id}/save",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Mark the session as saved",
    responses=_SESSION_ERRORS,
)
async def save_session(
    session_id: str = Path(description="Session identifier."),
) -> SessionResponse:
    """Record that the client has persisted the current document.

    The flag clears again on the next edit that changes the document.
    """
    record = _get_record(session_id)
    record.session.mark_saved()
    return _session_to_response(record)


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Close a session",
    responses=_SESSION_ERRORS,
)
async def delete_session(
    session_id: str = Path(description="Session identifier."),
) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session {} not found".format(session_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Structural edits
# ---------------------------------------------------------------------------


@app.post(
    "/sessions/{session_id}/split",
    response_model=SessionResponse,
    tags=["edits"],
    summary="Split a paragraph at the cursor",
    description="Enter key: split a paragraph at a word boundary.",
    responses=_EDIT_ERRORS,
)
async def split_paragraph(request: SplitRequest, session_id: str) -> SessionResponse:
    record = _get_record(session_id)
    anchor = Cursor(request.paragraph_index, request.offset)
    focus = Cursor(
        request.paragraph_index if request.focus_paragraph_index is None else request.focus_paragraph_index,
        request.offset if request.focus_offset is None else request.focus_offset,
    )
    outcome = record.session.split_selection(Selection(anchor=anchor, focus=focus))
    return _respond(record, outcome)


@app.post(
    "/sessions/{session_id}/merge",
    response_model=SessionResponse,
    tags=["edits"],
    summary="Backspace at the cursor",
    description=(
        "At offset 0, merge the paragraph into the previous one. "
        "Otherwise delete the character before the cursor."
    ),
    responses=_EDIT_ERRORS,
)
async def merge_paragraph(request: CursorRequest, session_id: str) -> SessionResponse:
    record = _get_record(session_id)
    outcome = record.session.merge(request.paragraph_index, request.offset)
    return _respond(record, outcome)


@app.put(
    "/sessions/{session_id}/paragraphs/{index}/text",
    response_model=SessionResponse,
    tags=["edits"],
    summary="Replace a paragraph's text",
    responses=_EDIT_ERRORS,
)
async def set_paragraph_text(
    request: TextRequest,
    session_id: str,
    index: int = Path(ge=0, description="0-based paragraph index."),
) -> SessionResponse:
    record = _get_record(session_id)
    return _respond(record, record.session.set_text(index, request.text))


@app.post(
    "/sessions/{session_id}/paragraphs/{index}/insert",
    response_model=SessionResponse,
    tags=["edits"],
    summary="Insert text at an offset",
    description="Insert a marker such as [INAUDIBLE] into a paragraph.",
    responses=_EDIT_ERRORS,
)
async def insert_paragraph_text(
    request: InsertTextRequest,
    session_id: str,
    index: int = Path(ge=0, description="0-based paragraph index."),
) -> SessionResponse:
    record = _get_record(session_id)
    return _respond(record, record.session.insert_text(index, request.offset, request.text))


@app.put(
    "/sessions/{session_id}/paragraphs/{index}/speaker",
    response_model=SessionResponse,
    tags=["edits"],
    summary="Change a paragraph's speaker",
    responses=_EDIT_ERRORS,
)
async def set_paragraph_speaker(
    request: SpeakerRequest,
    session_id: str,
    index: int = Path(ge=0, description="0-based paragraph index."),
) -> SessionResponse:
    record = _get_record(session_id)
    return _respond(record, record.session.set_speaker(index, request.speaker))


@app.post(
    "/sessions/{session_id}/paragraphs/{index}/commit",
    response_model=SessionResponse,
    tags=["edits"],
    summary="Re-align one edited paragraph",
    description="Restore word timing for a paragraph after its text was edited.",
    responses=_EDIT_ERRORS,
)
async def commit_paragraph(
    session_id: str,
    index: int = Path(ge=0, description="0-based paragraph index."),
) -> SessionResponse:
    record = _get_record(session_id)
    return _respond(record, record.session.commit_edit(index))


# ---------------------------------------------------------------------------
# Endpoints: Re-alignment and history
# ---------------------------------------------------------------------------


@app.post(
    "/sessions/{session_id}/realign",
    response_model=SessionResponse,
    tags=["alignment"],
    summary="Re-align every edited paragraph",
    responses=_EDIT_ERRORS,
)
async def realign_session(session_id: str) -> SessionResponse:
    record = _get_record(session_id)
    return _respond(record, await record.session.realign())


@app.post(
    "/sessions/{session_id}/replace",
    response_model=SessionResponse,
    tags=["alignment"],
    summary="Replace the whole transcript text",
    description=(
        "Align a corrected transcript against the words loaded at session "
        "start, carrying their timing over to the new text."
    ),
    responses=_EDIT_ERRORS,
)
async def replace_text(request: ReplaceRequest, session_id: str) -> SessionResponse:
    record = _get_record(session_id)
    return _respond(record, await record.session.replace_text(request.text))


@app.post(
    "/sessions/{session_id}/undo",
    response_model=SessionResponse,
    tags=["history"],
    summary="Undo the last operation",
    responses=_EDIT_ERRORS,
)
async def undo(session_id: str) -> SessionResponse:
    record = _get_record(session_id)
    return _respond(record, record.session.undo())


@app.post(
    "/sessions/{session_id}/redo",
    response_model=SessionResponse,
    tags=["history"],
    summary="Redo the last undone operation",
    responses=_EDIT_ERRORS,
)
async def redo(session_id: str) -> SessionResponse:
    record = _get_record(session_id)
    return _respond(record, record.session.redo())


# ---------------------------------------------------------------------------
# Endpoints: Export
# ---------------------------------------------------------------------------


@app.post(
    "/sessions/{session_id}/export",
    tags=["export"],
    summary="Export the document",
    description=(
        "Render the document in the requested format. Timestamp-dependent "
        "formats re-align edited paragraphs first."
    ),
    responses={
        200: {"description": "Rendered file content."},
        400: {"model": ErrorResponse, "description": "Unsupported export format."},
        404: {"model": ErrorResponse, "description": "Session not found."},
        409: {"model": ErrorResponse, "description": "A re-alignment or export is in progress."},
    },
)
async def export_session(request: ExportRequest, session_id: str) -> Response:
    record = _get_record(session_id)
    session = record.session
    options = request.model_dump(exclude={"format"})
    if options.get("title") is None:
        options["title"] = session.title
    export_format = parse_export_format(request.format, **options)
    if isinstance(export_format, UnsupportedExportFormat):
        _raise_for_error(export_format)

    try:
        result = await session.export(export_format)
    except Exception as exc:
        logger.exception("Export to %s failed for session %s", export_format.name, record.id)
        raise HTTPException(status_code=500, detail="Export failed: {}".format(exc))
    if not result.ok:
        _raise_for_error(result.error)
    for warning in result.warnings:
        logger.warning("Session %s export: %s", record.id, warning.message)

    output = result.output
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={
            "Content-Disposition": 'attachment; filename="{}"'.format(
                _download_name(session.title, output.suffix)
            ),
            "X-Realigned": "true" if result.realigned else "false",
        },
    )


# ---------------------------------------------------------------------------
# Endpoints: Formats and health
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List export formats",
    description="All accepted export format names, including aliases.",
)
async def list_formats() -> List[FormatInfo]:
    return [FormatInfo(**entry) for entry in available_formats()]


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, sessions=len(session_store))


def run_api() -> None:
    """Run the API with uvicorn on the configured host and port."""
    import uvicorn
    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)
