"""Configuration constants and .env loading.

WHY: Centralizes every tunable value (speaker sentinel, paragraph break,
alignment thresholds, caption preset, session limits) so that both the
library code and the CLI/HTTP layers read the same settings, and so they
can be overridden per deployment without touching code.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read from ``TRANSCRIPT_EDITOR_*`` environment
variables with sensible defaults. Parsing helpers fail loudly on garbage
so a typo in .env does not silently fall back.

RULES:
- UNKNOWN_SPEAKER is the sentinel substituted for missing speakers
- PARAGRAPH_BREAK separates paragraphs in text exports
- All defaults can be overridden via environment variables
- No function in this module has side effects beyond reading os.environ
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the working directory (where the CLI/server is started)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    """Read a float environment variable, raising ValueError on bad input."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(
            "Environment variable {} must be a number, got {!r}".format(name, raw)
        )


def _env_int(name: str, default: int) -> int:
    """Read an int environment variable, raising ValueError on bad input."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            "Environment variable {} must be an integer, got {!r}".format(name, raw)
        )


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------

UNKNOWN_SPEAKER = os.getenv("TRANSCRIPT_EDITOR_UNKNOWN_SPEAKER", "U_UKN")
"""Speaker label used when the source transcript has no speaker."""

PARAGRAPH_BREAK = "\n\n"
"""Separator between paragraphs in plain-text output."""

# ---------------------------------------------------------------------------
# Re-alignment
# ---------------------------------------------------------------------------

ALIGNMENT_MISMATCH_RATIO = _env_float("TRANSCRIPT_EDITOR_ALIGNMENT_MISMATCH_RATIO", 0.5)
"""Token-count difference (fraction of the larger side) that flags a
best-effort alignment."""

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

DEFAULT_CAPTION_PRESET = os.getenv("TRANSCRIPT_EDITOR_CAPTION_PRESET", "standard")
INLINE_TIMECODE_INTERVAL_S = _env_float("TRANSCRIPT_EDITOR_INLINE_TIMECODE_INTERVAL", 60.0)
DEFAULT_TITLE = os.getenv("TRANSCRIPT_EDITOR_DEFAULT_TITLE", "Transcript")

# ---------------------------------------------------------------------------
# HTTP server / sessions
# ---------------------------------------------------------------------------

SESSION_TTL_SECONDS = _env_int("TRANSCRIPT_EDITOR_SESSION_TTL", 3600)
MAX_SESSIONS = _env_int("TRANSCRIPT_EDITOR_MAX_SESSIONS", 100)
SERVER_HOST = os.getenv("TRANSCRIPT_EDITOR_HOST", "127.0.0.1")
SERVER_PORT = _env_int("TRANSCRIPT_EDITOR_PORT", 8000)

LOG_LEVEL = os.getenv("TRANSCRIPT_EDITOR_LOG_LEVEL", "WARNING").upper()
