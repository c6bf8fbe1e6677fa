"""Editor session: the explicit state value every operation runs against.

WHY: An editor needs more than the document: the STT words captured at
load (the reference for whole-text replacement), whether the document
holds edits whose timing is untrusted (modified), whether a long
re-alignment or export is running (processing), whether the work is
saved, and the undo history. Keeping all of it in one value passed to
each operation means there is no hidden global state to get out of step.

HOW: EditorSession wraps the pure functions in ``core.editing`` and
``core.alignment``. Each mutating method checks the processing flag,
runs the pure edit, and on success records an Operation in the
EditHistory and swaps in the new document. realign(), replace_text()
and export() are coroutines that run the CPU-bound alignment in a worker
thread via ``asyncio.to_thread`` with the processing flag held.

RULES:
- The processing flag is checked and set before the first ``await``; a
  second long operation (or any edit) while it is set is refused with
  ConcurrentOperationRejected, never interleaved
- The document is replaced wholesale on success, untouched on failure
- modified is set by text and structural edits and cleared only by
  re-alignment (commit of the last dirty paragraph, realign,
  replace_text, or the realignment export runs first)
- Any applied change clears ``saved``; mark_saved() sets it
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from transcript_editor.config import DEFAULT_TITLE
from transcript_editor.core import editing
from transcript_editor.core.alignment import realign_document, replace_document_text
from transcript_editor.core.assembler import (
    blocks_to_flat,
    document_to_blocks,
    load_transcript,
    transcript_to_dict,
)
from transcript_editor.core.editing import Cursor, Selection
from transcript_editor.core.history import EditHistory, Operation
from transcript_editor.core.ir import Document, Word
from transcript_editor.core.results import (
    AlignmentBestEffort,
    ConcurrentOperationRejected,
    EditOutcome,
    OperationError,
)
from transcript_editor.export import ExportFormat, render, requires_timestamps
from transcript_editor.formatters.base import ExportOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """Outcome of EditorSession.export().

    Attributes:
        output: The rendered export, None when the request was refused.
        error: ConcurrentOperationRejected when another long operation
            was in flight.
        realigned: True when the document was re-aligned first.
        warnings: AlignmentBestEffort values from that re-alignment.
    """

    output: Optional[ExportOutput] = None
    error: Optional[OperationError] = None
    realigned: bool = False
    warnings: Tuple[AlignmentBestEffort, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class EditorSession:
    """Mutable session state around an immutable Document."""

    document: Document
    original_words: Tuple[Word, ...]
    title: str = DEFAULT_TITLE
    modified: bool = False
    processing: bool = False
    saved: bool = True
    selection: Optional[Selection] = None
    history: EditHistory = field(default_factory=EditHistory)

    @classmethod
    def from_document(cls, document: Document, title: Optional[str] = None) -> "EditorSession":
        """Start a session; the document's words become the STT reference."""
        return cls(
            document=document,
            original_words=document.words,
            title=title or DEFAULT_TITLE,
            modified=not document.is_clean,
        )

    @classmethod
    def from_json(cls, data: Any, title: Optional[str] = None) -> "EditorSession":
        """Start a session from flat or block JSON.

        Raises:
            ValueError: If ``data`` is not a valid transcript.
        """
        return cls.from_document(load_transcript(data), title=title)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _busy(self, operation: str) -> Optional[ConcurrentOperationRejected]:
        if not self.processing:
            return None
        return ConcurrentOperationRejected(
            message="Cannot {} while a re-alignment or export is in progress".format(
                operation.replace("_", " ")
            ),
            operation=operation,
        )

    def _refused(self, operation: str) -> Optional[EditOutcome]:
        error = self._busy(operation)
        if error is None:
            return None
        return EditOutcome(document=self.document, error=error)

    def _commit(
        self,
        kind: str,
        params: Dict[str, Any],
        outcome: EditOutcome,
        modified_after: bool,
    ) -> EditOutcome:
        """Apply a successful outcome and log it; no-op edits are not logged."""
        if not outcome.ok:
            return outcome
        before = self.document
        if outcome.selection is not None:
            self.selection = outcome.selection
        if outcome.document == before and modified_after == self.modified:
            return outcome
        self.history.record(Operation(
            kind=kind,
            params=params,
            before=before,
            after=outcome.document,
            modified_before=self.modified,
            modified_after=modified_after,
        ))
        self.document = outcome.document
        self.modified = modified_after
        self.saved = False
        return outcome

    def _modified_after_realign(self, document: Document) -> bool:
        return self.modified and not document.is_clean

    # ------------------------------------------------------------------
    # edits
    # ------------------------------------------------------------------

    def split(self, paragraph_index: int, offset: int) -> EditOutcome:
        """Split a paragraph at a collapsed cursor (Enter)."""
        return self.split_selection(Selection.at(paragraph_index, offset))

    def split_selection(self, selection: Selection) -> EditOutcome:
        refused = self._refused("split")
        if refused is not None:
            return refused
        outcome = editing.split_paragraph(self.document, selection)
        params = {
            "anchor": [selection.anchor.paragraph_index, selection.anchor.offset],
            "focus": [selection.focus.paragraph_index, selection.focus.offset],
        }
        return self._commit("split", params, outcome, self.modified or outcome.marks_modified)

    def merge(self, paragraph_index: int, offset: int = 0) -> EditOutcome:
        """Backspace at a cursor: merge at offset 0, delete a character otherwise."""
        refused = self._refused("merge")
        if refused is not None:
            return refused
        outcome = editing.merge_paragraph(self.document, Cursor(paragraph_index, offset))
        params = {"paragraph_index": paragraph_index, "offset": offset}
        return self._commit("merge", params, outcome, self.modified or outcome.marks_modified)

    def set_text(self, paragraph_index: int, text: str) -> EditOutcome:
        refused = self._refused("set_text")
        if refused is not None:
            return refused
        outcome = editing.set_paragraph_text(self.document, paragraph_index, text)
        params = {"paragraph_index": paragraph_index, "text": text}
        return self._commit("set_text", params, outcome, self.modified or outcome.marks_modified)

    def insert_text(self, paragraph_index: int, offset: int, text: str) -> EditOutcome:
        refused = self._refused("insert_text")
        if refused is not None:
            return refused
        outcome = editing.insert_text(self.document, Cursor(paragraph_index, offset), text)
        params = {"paragraph_index": paragraph_index, "offset": offset, "text": text}
        return self._commit("insert_text", params, outcome, self.modified or outcome.marks_modified)

    def set_speaker(self, paragraph_index: int, speaker: str) -> EditOutcome:
        refused = self._refused("set_speaker")
        if refused is not None:
            return refused
        outcome = editing.set_paragraph_speaker(self.document, paragraph_index, speaker)
        params = {"paragraph_index": paragraph_index, "speaker": speaker}
        return self._commit("set_speaker", params, outcome, self.modified)

    def commit_edit(self, paragraph_index: int) -> EditOutcome:
        """Realign one paragraph (the user left it after typing)."""
        refused = self._refused("commit_edit")
        if refused is not None:
            return refused
        outcome = editing.commit_paragraph(self.document, paragraph_index)
        params = {"paragraph_index": paragraph_index}
        return self._commit(
            "realign", params, outcome, self._modified_after_realign(outcome.document)
        )

    # ------------------------------------------------------------------
    # history
    # ------------------------------------------------------------------

    def undo(self) -> EditOutcome:
        refused = self._refused("undo")
        if refused is not None:
            return refused
        operation = self.history.undo()
        if operation is not None:
            self.document = operation.before
            self.modified = operation.modified_before
            self.saved = False
            self.selection = None
        return EditOutcome(document=self.document)

    def redo(self) -> EditOutcome:
        refused = self._refused("redo")
        if refused is not None:
            return refused
        operation = self.history.redo()
        if operation is not None:
            self.document = operation.after
            self.modified = operation.modified_after
            self.saved = False
            self.selection = None
        return EditOutcome(document=self.document)

    # ------------------------------------------------------------------
    # long-running operations
    # ------------------------------------------------------------------

    async def realign(self) -> EditOutcome:
        """Realign every dirty paragraph and clear the modified flag."""
        refused = self._refused("realign")
        if refused is not None:
            return refused
        self.processing = True
        try:
            document, results = await asyncio.to_thread(realign_document, self.document)
        finally:
            self.processing = False
        outcome = EditOutcome(document=document, warnings=_collect_warnings(results))
        return self._commit("realign", {"scope": "document"}, outcome, False)

    async def replace_text(self, text: str) -> EditOutcome:
        """Replace the whole text, restoring timing from the STT words."""
        refused = self._refused("replace_text")
        if refused is not None:
            return refused
        self.processing = True
        try:
            document, result = await asyncio.to_thread(
                replace_document_text, self.original_words, text, self.document
            )
        finally:
            self.processing = False
        logger.info(
            "Replaced document text: %d paragraphs, %d words",
            len(document), len(document.words),
        )
        outcome = EditOutcome(document=document, warnings=_collect_warnings([result]))
        return self._commit("replace_text", {"text": text}, outcome, False)

    async def export(self, export_format: ExportFormat) -> ExportResult:
        """Render the document, re-aligning first when timing is stale."""
        error = self._busy("export")
        if error is not None:
            return ExportResult(error=error)
        self.processing = True
        realigned = False
        warnings: Tuple[AlignmentBestEffort, ...] = ()
        try:
            document = self.document
            if self.modified and requires_timestamps(export_format):
                document, results = await asyncio.to_thread(realign_document, document)
                warnings = _collect_warnings(results)
                realigned = True
            output = await asyncio.to_thread(render, document, export_format)
        finally:
            self.processing = False

        if realigned:
            self._commit("realign", {"scope": "export"}, EditOutcome(document=document), False)
        return ExportResult(output=output, realigned=realigned, warnings=warnings)

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------

    def mark_saved(self) -> None:
        self.saved = True

    def to_flat(self) -> Dict[str, Any]:
        return transcript_to_dict(blocks_to_flat(self.document))

    def to_blocks(self) -> List[Dict[str, Any]]:
        return document_to_blocks(self.document)


def _collect_warnings(results: List[Any]) -> Tuple[AlignmentBestEffort, ...]:
    return tuple(r.warning for r in results if r.warning is not None)
