"""Recoverable outcome values returned by editing, alignment and export.

WHY: None of the failure modes in the editing core are faults: a split
at a bad cursor position, a rough alignment, an unknown export format or
a request that collides with a running export are all ordinary events a
caller must be able to react to. Returning them as values (instead of
raising) keeps the document state untouched and makes the caller decide.

HOW: Every outcome is a frozen dataclass deriving from OperationError,
with a stable ``code`` string the HTTP and CLI layers can switch on.
EditOutcome bundles the (possibly unchanged) document with the error, if
any, so structural edits are replace-wholesale-or-not-at-all.

RULES:
- These classes are never raised
- ``ok`` is True exactly when ``error`` is None
- On failure, EditOutcome.document is the caller's original document
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from transcript_editor.core.editing import Selection
    from transcript_editor.core.ir import Document


@dataclass(frozen=True)
class OperationError:
    """Base for all recoverable outcomes."""

    message: str

    @property
    def code(self) -> str:
        return _CODES[type(self).__name__]


@dataclass(frozen=True)
class StructuralEditRejected(OperationError):
    """Split/merge attempted at an invalid cursor state.

    RULES:
    - reason is one of: not-at-word-boundary, selection-not-collapsed,
      different-paragraphs, paragraph-start, paragraph-end,
      document-start, no-such-paragraph
    """

    reason: str = ""


@dataclass(frozen=True)
class AlignmentBestEffort(OperationError):
    """Reference and edited token counts differ a lot; result still used."""

    reference_count: int = 0
    hypothesis_count: int = 0


@dataclass(frozen=True)
class UnsupportedExportFormat(OperationError):
    """The requested export format is not one the engine knows."""

    requested: str = ""
    available: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ConcurrentOperationRejected(OperationError):
    """A realignment/export is already in flight for this document."""

    operation: str = ""


_CODES = {
    "OperationError": "operation-error",
    "StructuralEditRejected": "structural-edit-rejected",
    "AlignmentBestEffort": "alignment-best-effort",
    "UnsupportedExportFormat": "unsupported-export-format",
    "ConcurrentOperationRejected": "concurrent-operation-rejected",
}

# Reason codes for StructuralEditRejected
NOT_AT_WORD_BOUNDARY = "not-at-word-boundary"
SELECTION_NOT_COLLAPSED = "selection-not-collapsed"
DIFFERENT_PARAGRAPHS = "different-paragraphs"
PARAGRAPH_START = "paragraph-start"
PARAGRAPH_END = "paragraph-end"
DOCUMENT_START = "document-start"
NO_SUCH_PARAGRAPH = "no-such-paragraph"


@dataclass(frozen=True)
class EditOutcome:
    """Result of a structural or text edit.

    Attributes:
        document: The new document on success, the original on failure.
        selection: Where the cursor should go after the edit (None when
            the edit does not move it).
        error: StructuralEditRejected (or ConcurrentOperationRejected at
            the session level) when the edit was refused.
        marks_modified: True when the edit may have broken the
            word/text correspondence of some paragraph.
        warnings: AlignmentBestEffort values from any re-alignment the
            operation ran. They never make the outcome fail.
    """

    document: "Document"
    selection: Optional["Selection"] = None
    error: Optional[OperationError] = None
    marks_modified: bool = False
    warnings: Tuple[AlignmentBestEffort, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None


def rejected(document: "Document", reason: str, message: str) -> EditOutcome:
    """Build a failed EditOutcome that leaves ``document`` untouched."""
    return EditOutcome(
        document=document,
        error=StructuralEditRejected(message=message, reason=reason),
    )
