"""Abstract base formatter and output container.

WHY: Every export consumes the same Document but produces different file
content. A common base keeps the CLI, session and HTTP layers generic
over the output format.

HOW: BaseFormatter is an ABC built from its validated export options,
with a ``name`` property and a ``format(document)`` method. ExportOutput
bundles the content with a file suffix and MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- Formatters are pure: they never modify the Document
- ``suffix`` includes the leading dot, e.g. ``".srt"``
- The caller is responsible for prepending the output file stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from transcript_editor.core.ir import Document


@dataclass(frozen=True)
class ExportOutput:
    """One rendered export.

    Attributes:
        content: The file content (text for every current format).
        suffix: File suffix, e.g. ``".vtt"``.
        media_type: MIME type for the content, e.g. ``"text/vtt"``.
    """

    content: str
    suffix: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all export formatters.

    To add a new output format:
    1. Add an export variant in transcript_editor/export.py
    2. Create a formatter module here and subclass BaseFormatter
    3. Register it in FORMATTERS in formatters/__init__.py
    """

    def __init__(self, options: Any) -> None:
        self.options = options

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Plain Text'."""

    @abstractmethod
    def format(self, document: Document) -> ExportOutput:
        """Render the document.

        Args:
            document: The document to export. Formats that need timing
                expect it to be clean (re-aligned).

        Returns:
            The rendered ExportOutput.
        """
