"""Interchange JSON formatters: block and flat representations.

WHY: Other tools (and a later session of this editor) need the document
back in machine-readable form, either as paragraphs owning their words
(block) or as one word array plus paragraph boundaries (flat, the shape
STT services produce).

HOW: Both serialize through the assembler's dict helpers, validate the
result against the bundled JSON schema, and pretty-print it.

RULES:
- Output is validated before returning; jsonschema.ValidationError is a
  programming error and propagates
- indent=2, ensure_ascii=False
- Output suffixes: ".blocks.json" and ".flat.json"
"""

from __future__ import annotations

import json

import jsonschema

from transcript_editor.core.assembler import (
    BLOCK_SCHEMA,
    FLAT_SCHEMA,
    blocks_to_flat,
    document_to_blocks,
    get_schema,
    transcript_to_dict,
)
from transcript_editor.core.ir import Document
from transcript_editor.formatters.base import BaseFormatter, ExportOutput


class JsonBlockFormatter(BaseFormatter):
    """Formatter that produces the block JSON array."""

    @property
    def name(self) -> str:
        return "JSON (blocks)"

    def format(self, document: Document) -> ExportOutput:
        output = document_to_blocks(document)
        jsonschema.validate(instance=output, schema=get_schema(BLOCK_SCHEMA))
        return ExportOutput(
            content=json.dumps(output, indent=2, ensure_ascii=False),
            suffix=".blocks.json",
            media_type="application/json",
        )


class JsonFlatFormatter(BaseFormatter):
    """Formatter that produces the flat words + paragraphs JSON object."""

    @property
    def name(self) -> str:
        return "JSON (flat)"

    def format(self, document: Document) -> ExportOutput:
        output = transcript_to_dict(blocks_to_flat(document))
        jsonschema.validate(instance=output, schema=get_schema(FLAT_SCHEMA))
        return ExportOutput(
            content=json.dumps(output, indent=2, ensure_ascii=False),
            suffix=".flat.json",
            media_type="application/json",
        )
