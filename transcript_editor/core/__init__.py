"""Editing core: IR, structural edits, alignment and session state.

WHY: Everything an editor does to a transcript (split, merge, retype,
re-align, undo) lives here, independent of how it is presented. The CLI
and the HTTP API are thin shells over EditorSession.

HOW: ir.py defines the immutable data, offsets.py maps character offsets
to words, editing.py holds the pure split/merge/text edits, alignment.py
restores word timing, assembler.py converts to and from the interchange
JSON, history.py and session.py hold the mutable session state.

RULES:
- Only session.py holds mutable state
- Pure modules never import session.py
"""
