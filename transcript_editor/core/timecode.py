"""Seconds to display-string conversion.

WHY: Paragraph headers, text exports and the session API show start
times as short ``HH:MM:SS`` codes. Keeping the conversion in one leaf
module means every formatter renders a paragraph start identically.
Caption files need millisecond timings; those live with the cue writers
in ``caption_cues.writers``.

RULES:
- short_timecode truncates fractional seconds; negative input clamps to 0
- Hours are zero-padded to two digits but may grow beyond 99
"""

from __future__ import annotations


def short_timecode(seconds: float) -> str:
    """Format seconds as zero-padded ``HH:MM:SS`` without fractions."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    return "{:02d}:{:02d}:{:02d}".format(hours, minutes, secs)
