"""Undo/redo as an explicit log of reversible operations.

WHY: Undo and redo must not depend on a mutable editor object keeping
its own snapshots. Recording each applied operation as a value (what was
done, with which parameters, and the document before and after) makes
undo/redo a pointer move over the log and gives a serialisable edit
history for free.

HOW: EditHistory keeps a list of Operation entries and a position. Undo
steps the position back and returns the entry whose ``before`` state
should be restored; redo steps forward and returns the entry whose
``after`` state should be restored. Because documents are immutable,
storing both states is cheap (paragraph tuples are shared).

RULES:
- Kinds: split, merge, set_text, insert_text, set_speaker, realign,
  replace_text
- Recording after an undo discards the redo tail
- undo()/redo() return None when there is nothing to step over
- The log is bounded by max_entries; the oldest entries drop first
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from transcript_editor.core.ir import Document

OPERATION_KINDS = frozenset({
    "split",
    "merge",
    "set_text",
    "insert_text",
    "set_speaker",
    "realign",
    "replace_text",
})

DEFAULT_MAX_ENTRIES = 500


@dataclass(frozen=True)
class Operation:
    """One applied, reversible edit.

    Attributes:
        kind: One of OPERATION_KINDS.
        params: JSON-serialisable arguments the edit was called with.
        before: Document state before the edit.
        after: Document state after the edit.
        modified_before: Session modified flag before the edit.
        modified_after: Session modified flag after the edit.
    """

    kind: str
    params: Dict[str, Any]
    before: Document
    after: Document
    modified_before: bool = False
    modified_after: bool = False

    def __post_init__(self) -> None:
        if self.kind not in OPERATION_KINDS:
            raise ValueError("Unknown operation kind: {!r}".format(self.kind))

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "params": dict(self.params)}


@dataclass
class EditHistory:
    """Linear undo/redo log."""

    max_entries: int = DEFAULT_MAX_ENTRIES
    _entries: List[Operation] = field(default_factory=list)
    _position: int = 0

    def record(self, operation: Operation) -> None:
        del self._entries[self._position:]
        self._entries.append(operation)
        if len(self._entries) > self.max_entries:
            del self._entries[:len(self._entries) - self.max_entries]
        self._position = len(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._position > 0

    @property
    def can_redo(self) -> bool:
        return self._position < len(self._entries)

    def undo(self) -> Optional[Operation]:
        """Step back; the caller restores ``operation.before``."""
        if not self.can_undo:
            return None
        self._position -= 1
        return self._entries[self._position]

    def redo(self) -> Optional[Operation]:
        """Step forward; the caller restores ``operation.after``."""
        if not self.can_redo:
            return None
        operation = self._entries[self._position]
        self._position += 1
        return operation

    def __len__(self) -> int:
        return len(self._entries)

    def applied(self) -> List[Operation]:
        """Entries currently in effect (excludes the undone tail)."""
        return list(self._entries[:self._position])

    def to_list(self) -> List[Dict[str, Any]]:
        """Kinds and params of the applied entries, oldest first."""
        return [op.to_dict() for op in self.applied()]
