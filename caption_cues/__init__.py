"""Caption cue library: segment timed words into cues and write caption files.

WHY: Caption exports need readable cues (sensible line lengths, breaks on
sentence and clause boundaries, bounded duration) rather than one cue per
paragraph. This package owns those segmentation rules so the transcript
editor only has to hand over well-ordered timed words.

HOW: segment_cues(words, preset) resolves the preset to a config dict,
runs the DP segmentation and the display-timing pass, and returns Cue
objects. render_captions(words, kind, ...) adds the writer for one of
CAPTION_KINDS on top.

RULES:
- Preset names: "standard" (default), "broadcast" (alias), "social"
- A custom ``config`` dict replaces the preset entirely
- Preset constants are never mutated; each call works on a deep copy
- Input words must have non-decreasing, non-overlapping timings
"""

import copy
from typing import List, Optional

from .core import build_cues, segment_words
from .models import Cue, Word
from .presets import PRESET_SOCIAL, PRESET_STANDARD, PRESETS, WEAK_END_WORDS
from .writers import WRITERS

__all__ = [
    "segment_cues",
    "render_captions",
    "resolve_preset",
    "Cue",
    "Word",
    "CAPTION_KINDS",
    "PRESETS",
    "PRESET_STANDARD",
    "PRESET_SOCIAL",
    "WEAK_END_WORDS",
]

CAPTION_KINDS = tuple(WRITERS)


def resolve_preset(preset: str = "standard", config: Optional[dict] = None) -> dict:
    """Return a private copy of the config to segment with.

    Raises:
        ValueError: If ``preset`` is unknown and no config is given.
    """
    if config is not None:
        return copy.deepcopy(config)
    if preset not in PRESETS:
        raise ValueError(
            "Unknown preset '{}'. Available: {}".format(preset, ", ".join(PRESETS))
        )
    return copy.deepcopy(PRESETS[preset])


def segment_cues(
    words: List[Word],
    preset: str = "standard",
    config: Optional[dict] = None,
) -> List[Cue]:
    """Segment timed words into numbered cues.

    Args:
        words: Timed words in order, with paragraph/sentence flags.
        preset: Preset name. Default: "standard".
        config: Optional custom config dict; overrides ``preset``.

    Returns:
        List of Cue objects (empty when there are no words).
    """
    cfg = resolve_preset(preset, config)
    if not words:
        return []
    return build_cues(segment_words(words, cfg), cfg)


def render_captions(
    words: List[Word],
    kind: str,
    preset: str = "standard",
    speakers: bool = False,
    config: Optional[dict] = None,
) -> str:
    """Segment ``words`` and write them as a ``kind`` caption file.

    Raises:
        ValueError: If ``kind`` or ``preset`` is unknown.
    """
    writer = WRITERS.get(kind)
    if writer is None:
        raise ValueError(
            "Unknown caption kind '{}'. Available: {}".format(kind, ", ".join(CAPTION_KINDS))
        )
    return writer(segment_cues(words, preset, config), speakers=speakers)
