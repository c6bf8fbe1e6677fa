"""Timed Transcript Editor: paragraph editing over word-timed transcripts.

WHY: Speech-to-text output is a flat list of timed words. People correct
it as paragraphs of free text, which quietly breaks the link between the
text and the timing that captions and timecoded documents depend on.
This package keeps that link: structural edits partition words exactly,
text edits are re-aligned against the recognised words, and exports only
run on timing that matches the text.

HOW: Four layers:
  core        IR, split/merge engine, assembler, re-alignment, session
  formatters  text, Markdown, caption and JSON renderers
  export      validated export variants and the pure render step
  cli/server  argparse CLI and FastAPI HTTP API over EditorSession

RULES:
- The Document is immutable; every edit returns a new one
- Recoverable failures are returned as values (core.results), not raised
- Adding an export family = one formatter module plus one variant
"""

__version__ = "0.1.0"
